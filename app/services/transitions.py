"""
Step transition table.

Explicit (step, event) -> step mapping executed synchronously once a
backend call resolves. Transitions not listed here are integrity errors.
"""

from loguru import logger

from app.exceptions import SessionIntegrityError
from app.models.enums import FlowEvent, RecoveryStep
from app.models.recovery_session import RecoverySession

TRANSITIONS: dict[tuple[RecoveryStep, FlowEvent], RecoveryStep] = {
    (RecoveryStep.REQUEST_CODE, FlowEvent.CODE_REQUESTED): RecoveryStep.VERIFY_CODE,
    (RecoveryStep.VERIFY_CODE, FlowEvent.CODE_VERIFIED): RecoveryStep.RESET_PASSWORD,
    (RecoveryStep.RESET_PASSWORD, FlowEvent.PASSWORD_RESET): RecoveryStep.COMPLETED,
}


def next_step(step: RecoveryStep, event: FlowEvent) -> RecoveryStep:
    """
    Resolve the target step for an event.

    Raises:
        SessionIntegrityError: If the event is not allowed from this step
    """
    if event == FlowEvent.RESET:
        return RecoveryStep.REQUEST_CODE
    try:
        return TRANSITIONS[(step, event)]
    except KeyError:
        raise SessionIntegrityError(
            [f"event {event.value} is not allowed from step {step.value}"]
        ) from None


def apply_transition(session: RecoverySession, event: FlowEvent) -> RecoveryStep:
    """
    Move the session to the next step and check invariants.

    Reset events perform a full session reset.

    Raises:
        SessionIntegrityError: On a forbidden transition or if the new
            step's invariants do not hold
    """
    previous = session.step
    target = next_step(previous, event)

    if event == FlowEvent.RESET:
        session.reset()
    else:
        session.step = target
        violations = session.integrity_violations()
        if violations:
            session.step = previous
            raise SessionIntegrityError(violations)

    logger.info(
        f"Recovery step {previous.value} -> {target.value} ({event.value})"
    )
    return target
