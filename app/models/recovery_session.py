"""
RecoverySession model.

In-memory state of one password recovery attempt.
"""

from dataclasses import dataclass, field

from app.config.constants import STEP_DESCRIPTIONS, STEP_TITLES
from app.models.enums import RecoveryField, RecoveryStep, ValidationState


@dataclass
class FieldValidation:
    """Validation result currently displayed for one field."""

    state: ValidationState = ValidationState.NONE
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.state == ValidationState.VALID


@dataclass
class RetryInfo:
    """Which step may be re-issued without re-entering data."""

    step: RecoveryStep | None = None
    enabled: bool = False


@dataclass
class Notice:
    """Transient message shown to the user."""

    message: str
    seq: int


def _initial_validation() -> dict[RecoveryField, FieldValidation]:
    return {f: FieldValidation() for f in RecoveryField}


@dataclass
class RecoverySession:
    """
    RecoverySession entity.

    One live instance per flow, exclusively owned by FlowController.

    Invariants:
    - step in (VERIFY_CODE, RESET_PASSWORD, COMPLETED) => email_persisted
    - step in (RESET_PASSWORD, COMPLETED) => reset_token is set
    - is_loading => back navigation and resubmission are blocked

    Attributes:
        step: Current flow step
        email: Raw email input
        verification_code: Raw code input
        new_password: Raw password input
        confirm_password: Raw confirmation input
        email_persisted: Set once the reset code was requested
        reset_token: Opaque token issued by code verification
        validation: Per-field validation state
        is_loading: A backend call is in flight
        retry: Retry affordance
        error_notice: Latest error shown to the user
        success_notice: Latest success message (auto-dismissed)
        should_navigate_to_entry: UI should leave the flow
        generation: Bumped on every reset to invalidate in-flight results
    """

    step: RecoveryStep = RecoveryStep.REQUEST_CODE
    email: str = ""
    verification_code: str = ""
    new_password: str = ""
    confirm_password: str = ""
    email_persisted: bool = False
    reset_token: str | None = None
    validation: dict[RecoveryField, FieldValidation] = field(
        default_factory=_initial_validation
    )
    is_loading: bool = False
    retry: RetryInfo = field(default_factory=RetryInfo)
    error_notice: Notice | None = None
    success_notice: Notice | None = None
    should_navigate_to_entry: bool = False
    generation: int = 0
    _notice_seq: int = field(default=0, repr=False)

    # ==================== FIELDS ====================

    def get_value(self, recovery_field: RecoveryField) -> str:
        return getattr(self, recovery_field.value)

    def set_value(self, recovery_field: RecoveryField, value: str) -> None:
        setattr(self, recovery_field.value, value)

    def is_field_valid(self, recovery_field: RecoveryField) -> bool:
        return self.validation[recovery_field].is_valid

    @property
    def passwords_match(self) -> bool:
        return self.is_field_valid(RecoveryField.CONFIRM_PASSWORD)

    def clear_field(self, recovery_field: RecoveryField) -> None:
        """Empty a field and forget its validation result."""
        self.set_value(recovery_field, "")
        self.validation[recovery_field] = FieldValidation()

    def persist_email(self, email: str) -> None:
        """Record the address the reset code was sent to."""
        if not email:
            return
        self.email = email
        self.email_persisted = True

    # ==================== NOTICES ====================

    def _next_seq(self) -> int:
        self._notice_seq += 1
        return self._notice_seq

    def show_error(self, message: str) -> Notice:
        """Show an error, replacing any previous one."""
        self.error_notice = Notice(message=message, seq=self._next_seq())
        return self.error_notice

    def clear_error(self) -> None:
        self.error_notice = None

    def show_success(self, message: str) -> Notice:
        self.success_notice = Notice(message=message, seq=self._next_seq())
        return self.success_notice

    def dismiss_success(self, seq: int | None = None) -> None:
        """Dismiss the success notice, only if it is still the one given."""
        if self.success_notice is None:
            return
        if seq is None or self.success_notice.seq == seq:
            self.success_notice = None

    # ==================== RETRY ====================

    def enable_retry(self, step: RecoveryStep) -> None:
        self.retry = RetryInfo(step=step, enabled=True)

    def disable_retry(self) -> None:
        self.retry = RetryInfo()

    @property
    def can_retry(self) -> bool:
        return self.retry.enabled and self.retry.step is not None

    # ==================== NAVIGATION ====================

    @property
    def can_navigate_back(self) -> bool:
        return not self.is_loading

    @property
    def title(self) -> str:
        return STEP_TITLES[self.step]

    @property
    def description(self) -> str:
        return STEP_DESCRIPTIONS[self.step]

    def integrity_violations(self) -> list[str]:
        """Return broken invariants, empty when the session is consistent."""
        violations = []
        if self.step != RecoveryStep.REQUEST_CODE:
            if not self.email_persisted:
                violations.append(f"step {self.step} requires a persisted email")
            elif not self.email:
                violations.append(f"step {self.step} lost the persisted email")
        if self.step in (RecoveryStep.RESET_PASSWORD, RecoveryStep.COMPLETED):
            if not self.reset_token:
                violations.append(f"step {self.step} requires a reset token")
        return violations

    # ==================== RESET ====================

    def reset(self) -> None:
        """Return every attribute to its initial value."""
        generation = self.generation + 1
        notice_seq = self._notice_seq
        initial = RecoverySession()
        self.__dict__.update(initial.__dict__)
        self.generation = generation
        # Keep notice numbering monotonic so stale dismiss timers stay no-ops
        self._notice_seq = notice_seq
