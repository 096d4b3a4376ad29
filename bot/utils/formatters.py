"""
Formatters
Utility functions for rendering the recovery session as chat text
"""

from app.models.enums import RecoveryField, RecoveryStep, ValidationState
from app.models.recovery_session import RecoverySession
from bot.utils.constants import PROMPTS


def escape_md(text: str | None) -> str:
    """
    Escape Markdown special characters for Telegram.

    Args:
        text: Raw text

    Returns:
        Text safe to embed in a Markdown message
    """
    if not text:
        return ""
    for char in ("\\", "_", "*", "`", "["):
        text = text.replace(char, f"\\{char}")
    return text


def format_field_error(session: RecoverySession, recovery_field: RecoveryField) -> str | None:
    """
    Render a field validation error, if one is shown.

    Args:
        session: Recovery session
        recovery_field: Field to render

    Returns:
        "⚠️ <error>" or None when the field has no error
    """
    validation = session.validation[recovery_field]
    if validation.state != ValidationState.INVALID or not validation.error:
        return None
    return f"⚠️ {escape_md(validation.error)}"


def format_step_header(session: RecoverySession) -> str:
    """Bold step title followed by its description."""
    return f"*{escape_md(session.title)}*\n{escape_md(session.description)}"


def format_notices(session: RecoverySession) -> str:
    """Render current success and error notices, success first."""
    lines = []
    if session.success_notice:
        lines.append(f"✅ {escape_md(session.success_notice.message)}")
    if session.error_notice:
        lines.append(f"❌ {escape_md(session.error_notice.message)}")
    return "\n".join(lines)


def prompt_for(step: RecoveryStep, awaiting_confirmation: bool = False) -> str | None:
    if step == RecoveryStep.REQUEST_CODE:
        return PROMPTS["EMAIL"]
    if step == RecoveryStep.VERIFY_CODE:
        return PROMPTS["CODE"]
    if step == RecoveryStep.RESET_PASSWORD:
        return PROMPTS["CONFIRMATION"] if awaiting_confirmation else PROMPTS["PASSWORD"]
    return None
