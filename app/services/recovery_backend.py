"""
Recovery backend interface.

The backend issuing and validating reset codes is an external collaborator.
Implementations raise TransportError / ServerError (app.exceptions) on
failure; any other exception is treated as an unclassified failure.
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class VerifyCodeResult:
    """Backend answer to a code verification."""

    valid: bool
    reset_token: str | None = None


class RecoveryBackend(Protocol):
    """Async operations consumed by the step handlers."""

    async def request_reset(self, email: str) -> None:
        """Ask the backend to send a reset code to the email."""

    async def verify_code(self, email: str, code: str) -> VerifyCodeResult:
        """Check a reset code; a valid code yields a reset token."""

    async def reset_password(self, token: str, new_password: str) -> None:
        """Set the new password, authorized by the reset token."""
