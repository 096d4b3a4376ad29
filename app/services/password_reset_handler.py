"""
Password reset handler.

Final step: set the new password using the reset token.
"""

from loguru import logger

from app.config.constants import (
    ERROR_MESSAGES,
    EXPIRED_TOKEN,
    PASSWORD_TOKEN,
    SUCCESS_MESSAGES,
)
from app.exceptions import FieldValidationError, ServerError
from app.models.enums import (
    FlowEvent,
    RecoveryActionKind,
    RecoveryField,
    RecoveryStep,
    StepOutcome,
)
from app.models.recovery_session import RecoverySession
from app.services.error_classifier import RecoveryAction
from app.services.step_handler import StepHandler


class PasswordResetHandler(StepHandler):
    """Handles resetPasswordWithCode for the RESET_PASSWORD step."""

    step = RecoveryStep.RESET_PASSWORD
    success_event = FlowEvent.PASSWORD_RESET
    success_message = SUCCESS_MESSAGES["PASSWORD_RESET"]

    def integrity_violations(self, session: RecoverySession) -> list[str]:
        violations = []
        if not session.email_persisted:
            violations.append("password reset requires a persisted email")
        if not session.reset_token:
            violations.append("password reset requires a reset token")
        return violations

    def validate(self, session: RecoverySession) -> None:
        if not session.is_field_valid(RecoveryField.NEW_PASSWORD):
            raise FieldValidationError(
                RecoveryField.NEW_PASSWORD, ERROR_MESSAGES["COMPLETE_ALL_FIELDS"]
            )
        if not session.passwords_match:
            raise FieldValidationError(
                RecoveryField.CONFIRM_PASSWORD, ERROR_MESSAGES["COMPLETE_ALL_FIELDS"]
            )

    async def call_backend(self, session: RecoverySession) -> None:
        await self.backend.reset_password(session.reset_token, session.new_password)

    def on_success(self, session: RecoverySession, result: None) -> StepOutcome:
        self.advance(session)
        session.should_navigate_to_entry = True
        return StepOutcome.ADVANCED

    def on_failure(
        self,
        session: RecoverySession,
        error: Exception,
        action: RecoveryAction,
    ) -> StepOutcome:
        if isinstance(error, ServerError) and action.kind == RecoveryActionKind.LOCAL:
            if error.message_contains(EXPIRED_TOKEN):
                logger.info("Reset token expired, restarting flow")
                return self.full_reset(session, ERROR_MESSAGES["SESSION_EXPIRED"])
            if error.message_contains(PASSWORD_TOKEN):
                # Backend rejected the password itself; token stays usable
                action.apply(session)
                session.clear_field(RecoveryField.NEW_PASSWORD)
                session.clear_field(RecoveryField.CONFIRM_PASSWORD)
                return StepOutcome.STAYED

        action.apply(session)
        return StepOutcome.FAILED
