"""
Recovery enums.

Centralized enums used across the password recovery flow.
"""

from enum import StrEnum


class RecoveryStep(StrEnum):
    """Password recovery flow steps."""

    REQUEST_CODE = "request_code"
    VERIFY_CODE = "verify_code"
    RESET_PASSWORD = "reset_password"
    COMPLETED = "completed"  # Terminal, auto-resets after a delay


class ValidationState(StrEnum):
    """Per-field validation state shown next to an input."""

    NONE = "none"  # Untouched or empty field, no error shown
    VALID = "valid"
    INVALID = "invalid"
    CHECKING = "checking"  # Remote check in progress (unused by this flow)


class RecoveryField(StrEnum):
    """Form fields owned by the recovery session."""

    EMAIL = "email"
    CODE = "verification_code"
    NEW_PASSWORD = "new_password"
    CONFIRM_PASSWORD = "confirm_password"


class RecoveryActionKind(StrEnum):
    """What the flow does in response to a classified failure."""

    ENABLE_RETRY = "enable_retry"
    LOCAL = "local"  # Owning step handler decides
    RATE_LIMITED = "rate_limited"
    SURFACE = "surface"


class StepOutcome(StrEnum):
    """Result of one step handler invocation."""

    ADVANCED = "advanced"
    STAYED = "stayed"  # Business failure, user corrects and resubmits
    REJECTED = "rejected"  # Preconditions not met, no network call
    FAILED = "failed"
    RESET = "reset"  # Flow sent back to the first step
    STALE = "stale"  # Result dropped, session was reset meanwhile


class FlowEvent(StrEnum):
    """Events driving the step transition table."""

    CODE_REQUESTED = "code_requested"
    CODE_VERIFIED = "code_verified"
    PASSWORD_RESET = "password_reset"
    RESET = "reset"
