"""
Code verification handler.

Second step: exchange the emailed code for a reset token.
"""

from loguru import logger

from app.config.constants import (
    ATTEMPTS_TOKEN,
    ERROR_MESSAGES,
    EXPIRED_TOKEN,
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
from app.services.recovery_backend import VerifyCodeResult
from app.services.step_handler import StepHandler


class CodeVerificationHandler(StepHandler):
    """Handles verifyResetCode for the VERIFY_CODE step."""

    step = RecoveryStep.VERIFY_CODE
    success_event = FlowEvent.CODE_VERIFIED
    success_message = SUCCESS_MESSAGES["CODE_VERIFIED"]

    def __init__(self, *args, code_length: int = 6, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.code_length = code_length

    def integrity_violations(self, session: RecoverySession) -> list[str]:
        if not session.email_persisted or not session.email:
            return ["code verification requires a persisted email"]
        return []

    def validate(self, session: RecoverySession) -> None:
        if not session.is_field_valid(RecoveryField.CODE):
            raise FieldValidationError(
                RecoveryField.CODE,
                ERROR_MESSAGES["ENTER_VALID_CODE"].format(length=self.code_length),
            )

    async def call_backend(self, session: RecoverySession) -> VerifyCodeResult:
        return await self.backend.verify_code(session.email, session.verification_code)

    def on_success(
        self, session: RecoverySession, result: VerifyCodeResult
    ) -> StepOutcome:
        if not result.valid:
            logger.info("Reset code rejected by backend")
            session.show_error(ERROR_MESSAGES["CODE_INCORRECT"])
            session.clear_field(RecoveryField.CODE)
            return StepOutcome.STAYED

        if not result.reset_token:
            logger.error("Backend accepted the code but returned no reset token")
            session.show_error(ERROR_MESSAGES["UNEXPECTED_ERROR"])
            return StepOutcome.FAILED

        session.reset_token = result.reset_token
        self.advance(session)
        return StepOutcome.ADVANCED

    def on_failure(
        self,
        session: RecoverySession,
        error: Exception,
        action: RecoveryAction,
    ) -> StepOutcome:
        if isinstance(error, ServerError) and action.kind == RecoveryActionKind.LOCAL:
            if error.message_contains(EXPIRED_TOKEN):
                logger.info("Reset code expired, restarting flow")
                return self.full_reset(session, ERROR_MESSAGES["CODE_EXPIRED"])
            if error.message_contains(ATTEMPTS_TOKEN):
                logger.warning("Maximum code attempts exceeded, restarting flow")
                return self.full_reset(session, ERROR_MESSAGES["MAX_ATTEMPTS"])

            action.apply(session)
            session.clear_field(RecoveryField.CODE)
            return StepOutcome.STAYED

        action.apply(session)
        return StepOutcome.FAILED
