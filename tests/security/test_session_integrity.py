"""
Tests for recovery session integrity.

A session that claims a later step without the email or token that
step depends on must never reach the backend. Results that arrive
after a reset must never resurrect the old flow.
"""

import asyncio
import random

import pytest

from app.config.constants import ERROR_MESSAGES
from app.exceptions import ServerError, TransportError
from app.models.enums import RecoveryField, RecoveryStep, StepOutcome, ValidationState
from app.utils.security_logging import mask_email
from tests.helpers.flow import (
    TEST_EMAIL,
    advance_to_reset,
    advance_to_verify,
    enter,
    enter_passwords,
)


def _assert_invariants(session) -> None:
    if session.step != RecoveryStep.REQUEST_CODE:
        assert session.email_persisted
        assert session.email
    if session.step in (RecoveryStep.RESET_PASSWORD, RecoveryStep.COMPLETED):
        assert session.reset_token


@pytest.mark.security
@pytest.mark.asyncio
async def test_verify_without_persisted_email_forces_reset(controller, backend):
    """
    Test that a corrupted verify step never calls the backend.

    Scenario:
    1. Reach VERIFY_CODE
    2. Persisted-email flag is lost
    3. Submitting a code forces a full reset with a session error
    """
    await advance_to_verify(controller)
    enter(controller, RecoveryField.CODE, "123456")
    controller.session.email_persisted = False

    outcome = await controller.submit_verify_code()

    assert outcome == StepOutcome.RESET
    assert controller.session.step == RecoveryStep.REQUEST_CODE
    assert controller.session.error_notice.message == ERROR_MESSAGES["SESSION_ERROR"]
    assert backend.call_names == ["request_reset"]


@pytest.mark.security
@pytest.mark.asyncio
async def test_reset_without_token_forces_reset(controller, backend):
    await advance_to_reset(controller)
    enter_passwords(controller)
    controller.session.reset_token = None

    outcome = await controller.submit_reset_password()

    assert outcome == StepOutcome.RESET
    assert controller.session.step == RecoveryStep.REQUEST_CODE
    assert "reset_password" not in backend.call_names


@pytest.mark.security
@pytest.mark.asyncio
async def test_result_after_reset_is_dropped(controller, backend):
    """
    Test that a late backend answer cannot revive a reset flow.

    Scenario:
    1. Submit the email, backend call in flight
    2. Flow is reset
    3. Backend answers: session stays on the first step, untouched
    """
    enter(controller, RecoveryField.EMAIL, TEST_EMAIL)
    gate = backend.hold()
    task = asyncio.create_task(controller.submit_request_code())
    await backend.started.wait()

    controller.reset_flow()
    gate.set()

    assert await task == StepOutcome.STALE
    session = controller.session
    assert session.step == RecoveryStep.REQUEST_CODE
    assert not session.email_persisted
    assert session.success_notice is None
    assert not session.is_loading


@pytest.mark.security
@pytest.mark.asyncio
async def test_failure_after_reset_is_dropped(controller, backend):
    enter(controller, RecoveryField.EMAIL, TEST_EMAIL)
    backend.errors["request_reset"] = TransportError("offline")
    gate = backend.hold()
    task = asyncio.create_task(controller.submit_request_code())
    await backend.started.wait()

    controller.reset_flow()
    gate.set()

    assert await task == StepOutcome.STALE
    assert not controller.session.can_retry
    assert controller.session.error_notice is None


@pytest.mark.security
@pytest.mark.asyncio
async def test_email_edit_during_request_is_ignored(controller, backend):
    """
    Test that the email cannot be swapped while the code is being sent.

    Scenario:
    1. Submit user@test.com, backend call in flight
    2. Another address is typed before the backend answers
    3. Later steps use the address the code was sent to
    """
    enter(controller, RecoveryField.EMAIL, TEST_EMAIL)
    gate = backend.hold()
    task = asyncio.create_task(controller.submit_request_code())
    await backend.started.wait()

    enter(controller, RecoveryField.EMAIL, "attacker@evil.com")
    gate.set()

    assert await task == StepOutcome.ADVANCED
    session = controller.session
    assert session.email == TEST_EMAIL
    assert session.email_persisted
    assert backend.calls == [("request_reset", (TEST_EMAIL,))]

    enter(controller, RecoveryField.CODE, "123456")
    await controller.submit_verify_code()
    assert backend.calls[-1] == ("verify_code", (TEST_EMAIL, "123456"))


@pytest.mark.security
@pytest.mark.asyncio
async def test_checking_state_never_observed(controller, backend):
    """
    Test that no field ever shows the CHECKING state during a full flow.
    """
    observed = set()

    def snapshot():
        observed.update(v.state for v in controller.session.validation.values())

    enter(controller, RecoveryField.EMAIL, TEST_EMAIL)
    snapshot()
    await controller.submit_request_code()
    snapshot()
    enter(controller, RecoveryField.CODE, "123456")
    snapshot()
    await controller.submit_verify_code()
    snapshot()
    enter_passwords(controller)
    snapshot()
    await controller.submit_reset_password()
    snapshot()

    assert ValidationState.CHECKING not in observed


@pytest.mark.security
@pytest.mark.asyncio
async def test_random_operations_preserve_invariants(controller, backend):
    """
    Test step invariants under a random sequence of user actions and
    backend outcomes. Now and then the session is corrupted directly;
    the next view or submit must then restart the flow.
    """
    rng = random.Random(1234)
    failures = [
        None,
        None,
        TransportError("offline"),
        ServerError(500),
        ServerError(429),
        ServerError(400, "code expired"),
        ServerError(400, "too many attempts"),
        ServerError(400, "password too weak"),
        ServerError(404, "not found"),
    ]
    inputs = {
        RecoveryField.EMAIL: [TEST_EMAIL, "user@", ""],
        RecoveryField.CODE: ["123456", "12", "abcdef"],
        RecoveryField.NEW_PASSWORD: ["new-secret-1", "abc"],
        RecoveryField.CONFIRM_PASSWORD: ["new-secret-1", "other-secret"],
    }
    actions = [
        "type",
        "submit_request_code",
        "submit_verify_code",
        "submit_reset_password",
        "retry",
        "cancel",
        "reset",
        "corrupt",
    ]
    corruptions = {
        "email_persisted": False,
        "reset_token": None,
        "email": "",
    }
    submits = {
        RecoveryStep.REQUEST_CODE: controller.submit_request_code,
        RecoveryStep.VERIFY_CODE: controller.submit_verify_code,
        RecoveryStep.RESET_PASSWORD: controller.submit_reset_password,
    }

    for _ in range(300):
        for name in ("request_reset", "verify_code", "reset_password"):
            backend.errors[name] = rng.choice(failures)

        action = rng.choice(actions)
        if action == "type":
            recovery_field = rng.choice(list(inputs))
            enter(controller, recovery_field, rng.choice(inputs[recovery_field]))
        elif action == "retry":
            await controller.retry_current_operation()
        elif action == "cancel":
            controller.cancel_flow()
        elif action == "reset":
            controller.reset_flow()
        elif action == "corrupt":
            attribute = rng.choice(list(corruptions))
            setattr(controller.session, attribute, corruptions[attribute])
            if controller.session.integrity_violations():
                submit = submits.get(controller.session.step)
                if submit is None or rng.random() < 0.5:
                    assert not controller.handle_edge_cases()
                else:
                    assert await submit() == StepOutcome.RESET
                assert controller.session.step == RecoveryStep.REQUEST_CODE
                assert controller.session.error_notice is not None
        else:
            await getattr(controller, action)()

        _assert_invariants(controller.session)
        assert not controller.session.is_loading


@pytest.mark.security
def test_masked_email_hides_local_part():
    assert mask_email("user@test.com") == "u***@test.com"
    assert "user" not in mask_email("user@test.com")
