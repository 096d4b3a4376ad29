"""
Recovery exceptions.

Error taxonomy of the password recovery flow:
- FieldValidationError: local, raised before anything reaches the backend
- TransportError: the backend could not be reached
- ServerError: the backend answered with an error status
- SessionIntegrityError: step/email/token relationship is inconsistent
"""


class RecoveryError(Exception):
    """Base class for password recovery errors."""


class FieldValidationError(RecoveryError):
    """Input failed local format validation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class TransportError(RecoveryError):
    """Network failure talking to the recovery backend."""


class ServerError(RecoveryError):
    """Backend responded with an error status."""

    def __init__(self, status: int, message: str | None = None) -> None:
        super().__init__(
            f"Server error {status}: {message}" if message else f"Server error {status}"
        )
        self.status = status
        self.message = message

    @property
    def is_rate_limited(self) -> bool:
        return self.status == 429

    @property
    def is_server_side(self) -> bool:
        return self.status >= 500

    def message_contains(self, token: str) -> bool:
        """Case-insensitive substring check on the server message."""
        if not self.message:
            return False
        return token.lower() in self.message.lower()


class SessionIntegrityError(RecoveryError):
    """
    Recovery session invariants are broken.

    Fatal: the only safe recovery is a full session reset.
    """

    def __init__(self, violations: list[str]) -> None:
        super().__init__("; ".join(violations) or "session integrity violated")
        self.violations = violations
