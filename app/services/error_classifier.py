"""
Error classifier.

Maps a backend failure onto one recovery action. Retry is offered only
for transient failures; 4xx business failures resolve through local
correction or a directed reset, never a blind retry of the same input.
"""

from dataclasses import dataclass

from loguru import logger

from app.config.constants import ERROR_MESSAGES
from app.exceptions import ServerError, TransportError
from app.models.enums import RecoveryActionKind, RecoveryStep
from app.models.recovery_session import RecoverySession
from app.utils.error_messages import parse_server_message


@dataclass(frozen=True)
class RecoveryAction:
    """Classified reaction to a failure."""

    kind: RecoveryActionKind
    message: str
    step: RecoveryStep
    status: int | None = None
    server_message: str | None = None

    def apply(self, session: RecoverySession) -> None:
        """Apply the structural part of the action and surface the message."""
        session.show_error(self.message)
        if self.kind == RecoveryActionKind.ENABLE_RETRY:
            session.enable_retry(self.step)


class ErrorClassifier:
    """
    Shared failure classification for all step handlers.

    | Failure                 | Action                           |
    |-------------------------|----------------------------------|
    | TransportError          | ENABLE_RETRY for current step    |
    | ServerError 400         | LOCAL, owning handler decides    |
    | ServerError 429         | RATE_LIMITED, no retry, no reset |
    | ServerError >= 500      | ENABLE_RETRY for current step    |
    | anything else           | SURFACE generic message          |
    """

    def classify(self, error: BaseException, step: RecoveryStep) -> RecoveryAction:
        if isinstance(error, TransportError):
            action = RecoveryAction(
                kind=RecoveryActionKind.ENABLE_RETRY,
                message=ERROR_MESSAGES["CONNECTION_ERROR"],
                step=step,
            )
        elif isinstance(error, ServerError):
            action = self._classify_server_error(error, step)
        else:
            # Internal exception text stays in the log
            logger.error(f"Unclassified failure on {step.value}: {error!r}")
            action = RecoveryAction(
                kind=RecoveryActionKind.SURFACE,
                message=ERROR_MESSAGES["UNEXPECTED_ERROR"],
                step=step,
            )

        logger.debug(
            f"Classified {type(error).__name__} on {step.value} as {action.kind.value}"
        )
        return action

    @staticmethod
    def _classify_server_error(error: ServerError, step: RecoveryStep) -> RecoveryAction:
        server_message = parse_server_message(error.message)

        if error.is_rate_limited:
            kind = RecoveryActionKind.RATE_LIMITED
            message = ERROR_MESSAGES["RATE_LIMITED"]
        elif error.is_server_side:
            kind = RecoveryActionKind.ENABLE_RETRY
            message = ERROR_MESSAGES["SERVER_ERROR"].format(status=error.status)
        else:
            kind = (
                RecoveryActionKind.LOCAL
                if error.status == 400
                else RecoveryActionKind.SURFACE
            )
            if server_message:
                message = ERROR_MESSAGES["SERVER_ERROR_WITH_MESSAGE"].format(
                    status=error.status, message=server_message
                )
            else:
                message = ERROR_MESSAGES["SERVER_ERROR"].format(status=error.status)

        return RecoveryAction(
            kind=kind,
            message=message,
            step=step,
            status=error.status,
            server_message=server_message,
        )
