"""
Security logging utility.

Provides standardized security event logging with [SECURITY] prefix.
Secrets (passwords, reset tokens, codes) must never be passed here.
"""

from typing import Any

from loguru import logger


def mask_email(email: str | None) -> str:
    """
    Mask an email address for logs.

    Args:
        email: Email address

    Returns:
        Masked email (e.g., "u***@test.com")
    """
    if not email:
        return "<empty>"
    local, sep, domain = email.partition("@")
    if not sep:
        return f"{email[:1]}***"
    return f"{local[:1]}***@{domain}"


def log_security_event(event_type: str, details: dict[str, Any]) -> None:
    """
    Log security event with standardized format.

    Args:
        event_type: Type of security event (e.g., "Session integrity violated")
        details: Dictionary with context (email, step, violations, etc.)
    """
    logger.warning(f"[SECURITY] {event_type}", extra=details)
