"""
Email recovery handler.

First step: ask the backend to send a reset code to the user's email.
"""

from loguru import logger

from app.config.constants import ERROR_MESSAGES, SUCCESS_MESSAGES
from app.exceptions import FieldValidationError, ServerError
from app.models.enums import FlowEvent, RecoveryField, RecoveryStep, StepOutcome
from app.models.recovery_session import RecoverySession
from app.services.error_classifier import RecoveryAction
from app.services.step_handler import StepHandler


class EmailRecoveryHandler(StepHandler):
    """Handles requestPasswordReset for the REQUEST_CODE step."""

    step = RecoveryStep.REQUEST_CODE
    success_event = FlowEvent.CODE_REQUESTED
    success_message = SUCCESS_MESSAGES["CODE_SENT"]

    def validate(self, session: RecoverySession) -> None:
        if not session.is_field_valid(RecoveryField.EMAIL):
            raise FieldValidationError(
                RecoveryField.EMAIL, ERROR_MESSAGES["ENTER_VALID_EMAIL"]
            )

    async def call_backend(self, session: RecoverySession) -> str:
        email = session.email
        await self.backend.request_reset(email)
        return email

    def on_success(self, session: RecoverySession, result: str) -> StepOutcome:
        # Pin the address the code was actually sent to
        session.persist_email(result)
        self.advance(session)
        return StepOutcome.ADVANCED

    def on_failure(
        self,
        session: RecoverySession,
        error: Exception,
        action: RecoveryAction,
    ) -> StepOutcome:
        action.apply(session)

        if isinstance(error, ServerError) and error.status == 404:
            # Unknown email: force the user to correct it
            logger.info("Reset requested for unknown email, clearing field")
            session.clear_field(RecoveryField.EMAIL)
            return StepOutcome.STAYED

        return StepOutcome.FAILED
