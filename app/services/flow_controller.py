"""
Flow controller.

Owns the recovery session, wires debounced validation into it,
dispatches commands to the step handlers and exposes guarded
navigation queries to the UI layer.
"""

import asyncio
import uuid
from collections.abc import Callable
from functools import partial

from loguru import logger

from app.config.constants import ERROR_MESSAGES
from app.config.settings import Settings, settings as default_settings
from app.exceptions import SessionIntegrityError
from app.models.enums import RecoveryField, RecoveryStep, StepOutcome, ValidationState
from app.models.recovery_session import FieldValidation, RecoverySession
from app.services.code_verification_handler import CodeVerificationHandler
from app.services.email_recovery_handler import EmailRecoveryHandler
from app.services.error_classifier import ErrorClassifier
from app.services.password_reset_handler import PasswordResetHandler
from app.services.recovery_backend import RecoveryBackend
from app.services.step_handler import StepHandler
from app.services.validation_scheduler import ValidationScheduler
from app.utils.security_logging import log_security_event
from app.utils.validation import FieldValidator, ValidationResult

STEP_FIELDS: dict[RecoveryStep, tuple[RecoveryField, ...]] = {
    RecoveryStep.REQUEST_CODE: (RecoveryField.EMAIL,),
    RecoveryStep.VERIFY_CODE: (RecoveryField.CODE,),
    RecoveryStep.RESET_PASSWORD: (
        RecoveryField.NEW_PASSWORD,
        RecoveryField.CONFIRM_PASSWORD,
    ),
    RecoveryStep.COMPLETED: (),
}


class FlowController:
    """
    Password recovery flow controller.

    All methods must be called from the event loop that runs the flow;
    the session needs no lock because nothing else touches it.
    """

    def __init__(
        self,
        backend: RecoveryBackend,
        config: Settings | None = None,
    ) -> None:
        """
        Initialize controller.

        Args:
            backend: Recovery backend collaborator
            config: Settings, defaults to the global settings
        """
        self.config = config or default_settings
        self.flow_id = uuid.uuid4().hex[:8]
        self._session = RecoverySession()
        self._timers: set[asyncio.Task] = set()

        self.validator = FieldValidator.from_settings(self.config)
        self.scheduler = ValidationScheduler(
            self.validator,
            sink=self._apply_validation,
            values_provider=self._field_values,
            debounce=self.config.validation_debounce,
        )

        classifier = ErrorClassifier()
        self._handlers: dict[RecoveryStep, StepHandler] = {
            RecoveryStep.REQUEST_CODE: EmailRecoveryHandler(backend, classifier),
            RecoveryStep.VERIFY_CODE: CodeVerificationHandler(
                backend, classifier, code_length=self.config.verification_code_length
            ),
            RecoveryStep.RESET_PASSWORD: PasswordResetHandler(backend, classifier),
        }

    @property
    def session(self) -> RecoverySession:
        """Session for read-only observation by the UI layer."""
        return self._session

    # ==================== INPUT ====================

    def update_field(self, recovery_field: RecoveryField, value: str) -> None:
        """Store raw input and schedule its debounced validation."""
        if self._session.is_loading:
            # The in-flight request was built from the current values
            logger.debug(
                f"Ignoring {recovery_field.value} edit while a request is in flight"
            )
            return
        if recovery_field == RecoveryField.EMAIL and self._session.email_persisted:
            # The code was sent to this address; changing it needs a reset
            logger.debug("Ignoring email edit after the reset code was requested")
            return
        self._session.set_value(recovery_field, value)
        self.scheduler.on_input(recovery_field)

    def _apply_validation(
        self, recovery_field: RecoveryField, result: ValidationResult
    ) -> None:
        self._session.validation[recovery_field] = FieldValidation(
            state=result.state, error=result.error
        )

    def _field_values(self) -> dict[RecoveryField, str]:
        return {f: self._session.get_value(f) for f in RecoveryField}

    # ==================== COMMANDS ====================

    async def submit_request_code(self) -> StepOutcome:
        return await self._dispatch(RecoveryStep.REQUEST_CODE)

    async def submit_verify_code(self) -> StepOutcome:
        return await self._dispatch(RecoveryStep.VERIFY_CODE)

    async def submit_reset_password(self) -> StepOutcome:
        return await self._dispatch(RecoveryStep.RESET_PASSWORD)

    async def retry_current_operation(self) -> StepOutcome | None:
        """
        Re-issue the last failed operation.

        Returns:
            Outcome of the re-dispatched step, None if retry is not offered
        """
        if not self._session.can_retry:
            logger.debug("Retry requested but no retry is offered")
            return None

        step = self._session.retry.step
        self._session.disable_retry()
        self._session.clear_error()
        logger.info(f"Retrying recovery step {step.value}")
        return await self._dispatch(step)

    retry = retry_current_operation

    def reset_flow(self) -> None:
        """Full reset back to the first step."""
        self.scheduler.cancel_all()
        self._cancel_timers()
        self._session.reset()
        logger.info(f"Recovery flow {self.flow_id} reset")

    def cancel_flow(self) -> bool:
        """
        Abandon the flow and signal navigation to the entry point.

        Returns:
            False if a request is in flight and cancellation was refused
        """
        if self._session.is_loading:
            logger.warning("Cancel refused: recovery request in flight")
            return False

        self.reset_flow()
        self._session.should_navigate_to_entry = True
        return True

    cancel = cancel_flow

    def dismiss_error(self) -> None:
        self._session.clear_error()

    async def close(self) -> None:
        """Cancel timers and pending validations."""
        self.scheduler.cancel_all()
        self._cancel_timers()

    # ==================== QUERIES ====================

    def can_proceed_from_current_step(self) -> bool:
        """Whether the current step may be submitted right now."""
        session = self._session
        if session.is_loading or session.step == RecoveryStep.COMPLETED:
            return False
        if session.integrity_violations():
            return False

        for recovery_field in STEP_FIELDS[session.step]:
            if self.scheduler.has_pending(recovery_field):
                return False
            validation = session.validation[recovery_field]
            if validation.state == ValidationState.CHECKING or not validation.is_valid:
                return False
        return True

    def can_navigate_to_step(self, target: RecoveryStep) -> bool:
        """Forward-only navigation, gated on the target's requirements."""
        session = self._session
        if session.is_loading:
            return False

        if target == RecoveryStep.REQUEST_CODE:
            return True
        if target == RecoveryStep.VERIFY_CODE:
            return session.step == RecoveryStep.REQUEST_CODE and session.email_persisted
        if target == RecoveryStep.RESET_PASSWORD:
            return (
                session.step == RecoveryStep.VERIFY_CODE
                and session.email_persisted
                and session.reset_token is not None
            )
        return (
            session.step == RecoveryStep.RESET_PASSWORD
            and session.reset_token is not None
        )

    def handle_edge_cases(self) -> bool:
        """
        Check session integrity on step view entry.

        Returns:
            True if consistent, False if a forced reset happened
        """
        violations = self._session.integrity_violations()
        if not violations:
            return True

        self._force_reset(ERROR_MESSAGES["INVALID_SESSION"], violations)
        return False

    # ==================== INTERNALS ====================

    async def _dispatch(self, step: RecoveryStep) -> StepOutcome:
        handler = self._handlers.get(step)
        if handler is None:
            self._session.show_error(ERROR_MESSAGES["CANNOT_PROCEED"])
            return StepOutcome.REJECTED
        if self._session.is_loading:
            logger.warning(f"Rejected {step.value} submission: request in flight")
            return StepOutcome.REJECTED

        # Pending debounced input must settle before it can gate submission
        self.scheduler.flush()

        with logger.contextualize(flow_id=self.flow_id):
            try:
                outcome = await handler.execute(self._session)
            except SessionIntegrityError as e:
                self._force_reset(ERROR_MESSAGES["SESSION_ERROR"], e.violations)
                return StepOutcome.RESET

            self._after_outcome(outcome)
            return outcome

    def _after_outcome(self, outcome: StepOutcome) -> None:
        if outcome == StepOutcome.RESET:
            self.scheduler.cancel_all()

        notice = self._session.success_notice
        if notice is not None:
            self._schedule(
                self.config.notice_duration,
                partial(self._session.dismiss_success, notice.seq),
            )

        if outcome == StepOutcome.ADVANCED and self._session.step == RecoveryStep.COMPLETED:
            self._schedule(
                self.config.completion_reset_delay,
                partial(self._complete_cleanup, self._session.generation),
            )

    def _force_reset(self, message: str, violations: list[str]) -> None:
        log_security_event(
            "Recovery session reset after integrity violation",
            {"flow_id": self.flow_id, "step": self._session.step.value, "violations": violations},
        )
        self.reset_flow()
        self._session.show_error(message)

    def _complete_cleanup(self, generation: int) -> None:
        if self._session.generation != generation:
            return
        if self._session.step != RecoveryStep.COMPLETED:
            return
        logger.info(f"Recovery flow {self.flow_id} completed, cleaning up")
        self.reset_flow()
        self._session.should_navigate_to_entry = True

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        task = asyncio.create_task(self._run_later(delay, callback))
        self._timers.add(task)
        task.add_done_callback(self._on_timer_done)

    @staticmethod
    async def _run_later(delay: float, callback: Callable[[], None]) -> None:
        await asyncio.sleep(delay)
        callback()

    def _on_timer_done(self, task: asyncio.Task) -> None:
        """Log exceptions from timer tasks."""
        self._timers.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"Recovery timer failed: {exc}")

    def _cancel_timers(self) -> None:
        current = asyncio.current_task() if self._has_running_loop() else None
        for task in list(self._timers):
            if task is not current:
                task.cancel()
        self._timers = {t for t in self._timers if t is current}

    @staticmethod
    def _has_running_loop() -> bool:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return False
        return True
