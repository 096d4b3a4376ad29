"""
Step handler base.

Common lifecycle of one recovery step submission:
precondition checks, loading bracket, backend call, stale-result
guard, success transition, failure classification.
"""

from typing import Any

from loguru import logger

from app.config.constants import ERROR_MESSAGES
from app.exceptions import FieldValidationError, SessionIntegrityError
from app.models.enums import FlowEvent, RecoveryStep, StepOutcome
from app.models.recovery_session import RecoverySession
from app.services.error_classifier import ErrorClassifier, RecoveryAction
from app.services.recovery_backend import RecoveryBackend
from app.services.transitions import apply_transition
from app.utils.security_logging import log_security_event, mask_email


class StepHandler:
    """
    Base class for the three step handlers.

    A handler receives the session for the duration of one execute()
    call and keeps no reference to it afterwards.
    """

    step: RecoveryStep
    success_event: FlowEvent
    success_message: str

    def __init__(
        self,
        backend: RecoveryBackend,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        """
        Initialize handler.

        Args:
            backend: Recovery backend collaborator
            classifier: Shared failure classifier
        """
        self.backend = backend
        self.classifier = classifier or ErrorClassifier()

    async def execute(self, session: RecoverySession) -> StepOutcome:
        """
        Run this step against the session.

        Raises:
            SessionIntegrityError: If the session cannot be in this step
        """
        if session.is_loading:
            # The in-flight request owns the notices
            logger.warning(f"Rejected {self.step.value} submission: request in flight")
            return StepOutcome.REJECTED
        if session.step != self.step:
            logger.warning(
                f"Rejected {self.step.value} submission",
                extra={"current_step": session.step.value},
            )
            session.show_error(ERROR_MESSAGES["CANNOT_PROCEED"])
            return StepOutcome.REJECTED

        violations = self.integrity_violations(session) or session.integrity_violations()
        if violations:
            log_security_event(
                "Session integrity violated",
                {"step": self.step.value, "violations": violations},
            )
            raise SessionIntegrityError(violations)

        try:
            self.validate(session)
        except FieldValidationError as e:
            logger.debug(f"Rejected {self.step.value} submission: invalid {e.field}")
            session.show_error(e.message)
            return StepOutcome.REJECTED

        generation = session.generation
        session.is_loading = True
        session.clear_error()
        logger.info(
            f"Recovery step {self.step.value} started",
            extra={"email": mask_email(session.email)},
        )

        try:
            result = await self.call_backend(session)
        except Exception as error:
            if session.generation != generation:
                logger.info(f"Dropping stale {self.step.value} failure: session was reset")
                return StepOutcome.STALE
            session.is_loading = False
            action = self.classifier.classify(error, self.step)
            logger.warning(
                f"Recovery step {self.step.value} failed: {type(error).__name__}",
                extra={"action": action.kind.value, "status": action.status},
            )
            return self.on_failure(session, error, action)

        if session.generation != generation:
            logger.info(f"Dropping stale {self.step.value} result: session was reset")
            return StepOutcome.STALE

        session.is_loading = False
        return self.on_success(session, result)

    # ==================== HOOKS ====================

    def integrity_violations(self, session: RecoverySession) -> list[str]:
        """Return fatal inconsistencies that forbid this step."""
        return []

    def validate(self, session: RecoverySession) -> None:
        """
        Check that the step's fields are ready for submission.

        Raises:
            FieldValidationError: If a field is empty or invalid
        """

    async def call_backend(self, session: RecoverySession) -> Any:
        raise NotImplementedError

    def on_success(self, session: RecoverySession, result: Any) -> StepOutcome:
        self.advance(session)
        return StepOutcome.ADVANCED

    def on_failure(
        self,
        session: RecoverySession,
        error: Exception,
        action: RecoveryAction,
    ) -> StepOutcome:
        action.apply(session)
        return StepOutcome.FAILED

    # ==================== HELPERS ====================

    def advance(self, session: RecoverySession) -> None:
        """Show the success notice and move to the next step."""
        session.show_success(self.success_message)
        apply_transition(session, self.success_event)
        logger.info(f"Recovery step {self.step.value} succeeded")

    @staticmethod
    def full_reset(session: RecoverySession, message: str) -> StepOutcome:
        """Send the flow back to the first step with an explanation."""
        apply_transition(session, FlowEvent.RESET)
        session.show_error(message)
        return StepOutcome.RESET
