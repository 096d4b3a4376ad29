"""
Unit tests for FlowController.

Covers navigation guards, retry, cancel, edge case handling and the
notice/completion timers.
"""

import asyncio

import pytest

from app.config.constants import ERROR_MESSAGES, SUCCESS_MESSAGES
from app.exceptions import ServerError, TransportError
from app.models.enums import RecoveryField, RecoveryStep, StepOutcome, ValidationState
from app.services.flow_controller import FlowController
from tests.helpers.flow import (
    TEST_EMAIL,
    advance_to_reset,
    advance_to_verify,
    enter,
    enter_passwords,
)


class TestFieldInput:
    """Test debounced input handling."""

    @pytest.mark.asyncio
    async def test_update_field_stores_value_immediately(self, controller):
        controller.update_field(RecoveryField.EMAIL, "user@")

        assert controller.session.email == "user@"
        assert controller.session.validation[RecoveryField.EMAIL].state == ValidationState.NONE

    @pytest.mark.asyncio
    async def test_validation_applied_after_debounce(self, controller):
        controller.update_field(RecoveryField.EMAIL, "user@test")
        await asyncio.sleep(controller.scheduler.debounce * 5)

        validation = controller.session.validation[RecoveryField.EMAIL]
        assert validation.state == ValidationState.INVALID
        assert validation.error == ERROR_MESSAGES["EMAIL_MISSING_DOMAIN"]

    @pytest.mark.asyncio
    async def test_submit_flushes_pending_validation(self, controller, backend):
        controller.update_field(RecoveryField.EMAIL, TEST_EMAIL)

        outcome = await controller.submit_request_code()

        assert outcome == StepOutcome.ADVANCED
        assert backend.call_names == ["request_reset"]


    @pytest.mark.asyncio
    async def test_email_locked_after_code_requested(self, controller):
        await advance_to_verify(controller)

        controller.update_field(RecoveryField.EMAIL, "other@test.com")

        assert controller.session.email == TEST_EMAIL
        assert not controller.scheduler.has_pending(RecoveryField.EMAIL)


class TestNavigationGuards:
    """Test can_proceed / can_navigate queries."""

    @pytest.mark.asyncio
    async def test_cannot_proceed_with_invalid_email(self, controller):
        enter(controller, RecoveryField.EMAIL, "user@")
        assert not controller.can_proceed_from_current_step()

    @pytest.mark.asyncio
    async def test_cannot_proceed_while_validation_pending(self, controller):
        controller.update_field(RecoveryField.EMAIL, TEST_EMAIL)
        assert not controller.can_proceed_from_current_step()

        controller.scheduler.flush()
        assert controller.can_proceed_from_current_step()

    @pytest.mark.asyncio
    async def test_reset_step_requires_matching_passwords(self, controller):
        await advance_to_reset(controller)

        enter_passwords(controller, confirm="different-1")
        assert not controller.can_proceed_from_current_step()

        enter(controller, RecoveryField.CONFIRM_PASSWORD, "new-secret-1")
        assert controller.can_proceed_from_current_step()

    @pytest.mark.asyncio
    async def test_navigation_is_forward_only(self, controller):
        assert controller.can_navigate_to_step(RecoveryStep.REQUEST_CODE)
        assert not controller.can_navigate_to_step(RecoveryStep.VERIFY_CODE)

        await advance_to_verify(controller)

        assert controller.can_navigate_to_step(RecoveryStep.REQUEST_CODE)
        assert not controller.can_navigate_to_step(RecoveryStep.VERIFY_CODE)
        assert not controller.can_navigate_to_step(RecoveryStep.RESET_PASSWORD)

    @pytest.mark.asyncio
    async def test_loading_blocks_navigation_and_submission(self, controller, backend):
        enter(controller, RecoveryField.EMAIL, TEST_EMAIL)
        gate = backend.hold()
        task = asyncio.create_task(controller.submit_request_code())
        await backend.started.wait()

        assert controller.session.is_loading
        assert not controller.can_navigate_to_step(RecoveryStep.REQUEST_CODE)
        assert not controller.can_proceed_from_current_step()
        assert not controller.session.can_navigate_back

        assert await controller.submit_request_code() == StepOutcome.REJECTED
        assert backend.call_names == ["request_reset"]

        gate.set()
        assert await task == StepOutcome.ADVANCED
        assert not controller.session.is_loading

    @pytest.mark.asyncio
    async def test_submit_while_loading_leaves_notices_alone(self, controller, backend):
        enter(controller, RecoveryField.EMAIL, TEST_EMAIL)
        gate = backend.hold()
        task = asyncio.create_task(controller.submit_request_code())
        await backend.started.wait()

        assert await controller.submit_verify_code() == StepOutcome.REJECTED
        assert controller.session.error_notice is None

        gate.set()
        assert await task == StepOutcome.ADVANCED
        assert controller.session.error_notice is None

    @pytest.mark.asyncio
    async def test_field_edits_ignored_while_loading(self, controller, backend):
        enter(controller, RecoveryField.EMAIL, TEST_EMAIL)
        gate = backend.hold()
        task = asyncio.create_task(controller.submit_request_code())
        await backend.started.wait()

        controller.update_field(RecoveryField.EMAIL, "other@test.com")
        controller.update_field(RecoveryField.CODE, "654321")

        assert controller.session.email == TEST_EMAIL
        assert controller.session.verification_code == ""
        assert not controller.scheduler.has_pending(RecoveryField.EMAIL)

        gate.set()
        await task

    @pytest.mark.asyncio
    async def test_completed_step_cannot_be_submitted(self, controller):
        await advance_to_reset(controller)
        enter_passwords(controller)
        await controller.submit_reset_password()

        assert controller.session.step == RecoveryStep.COMPLETED
        assert not controller.can_proceed_from_current_step()


class TestRetry:
    """Test retry of failed operations."""

    @pytest.mark.asyncio
    async def test_retry_without_offer_is_noop(self, controller, backend):
        enter(controller, RecoveryField.EMAIL, TEST_EMAIL)

        assert await controller.retry_current_operation() is None
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_retry_reissues_failed_step(self, controller, backend):
        backend.errors["request_reset"] = TransportError("offline")
        await advance_to_verify(controller)
        assert controller.session.can_retry

        backend.errors["request_reset"] = None
        outcome = await controller.retry()

        assert outcome == StepOutcome.ADVANCED
        assert backend.call_names == ["request_reset", "request_reset"]
        assert not controller.session.can_retry
        assert controller.session.error_notice is None

    @pytest.mark.asyncio
    async def test_repeated_failure_reoffers_retry(self, controller, backend):
        backend.errors["request_reset"] = ServerError(500)
        await advance_to_verify(controller)

        outcome = await controller.retry_current_operation()

        assert outcome == StepOutcome.FAILED
        assert controller.session.can_retry


class TestCancelAndReset:
    """Test cancel_flow and reset_flow."""

    @pytest.mark.asyncio
    async def test_cancel_resets_and_navigates(self, controller):
        await advance_to_verify(controller)

        assert controller.cancel_flow() is True

        assert controller.session.step == RecoveryStep.REQUEST_CODE
        assert controller.session.email == ""
        assert controller.session.should_navigate_to_entry

    @pytest.mark.asyncio
    async def test_cancel_refused_while_loading(self, controller, backend):
        enter(controller, RecoveryField.EMAIL, TEST_EMAIL)
        gate = backend.hold()
        task = asyncio.create_task(controller.submit_request_code())
        await backend.started.wait()

        assert controller.cancel() is False
        assert controller.session.is_loading

        gate.set()
        await task
        assert controller.session.step == RecoveryStep.VERIFY_CODE

    @pytest.mark.asyncio
    async def test_reset_flow_cancels_pending_validation(self, controller):
        controller.update_field(RecoveryField.EMAIL, TEST_EMAIL)

        controller.reset_flow()
        await asyncio.sleep(controller.scheduler.debounce * 5)

        assert controller.session.validation[RecoveryField.EMAIL].state == ValidationState.NONE

    @pytest.mark.asyncio
    async def test_dismiss_error(self, controller):
        await controller.submit_request_code()
        assert controller.session.error_notice is not None

        controller.dismiss_error()
        assert controller.session.error_notice is None


class TestEdgeCases:
    """Test handle_edge_cases on step view entry."""

    @pytest.mark.asyncio
    async def test_consistent_session_passes(self, controller):
        await advance_to_verify(controller)
        assert controller.handle_edge_cases() is True
        assert controller.session.step == RecoveryStep.VERIFY_CODE

    @pytest.mark.asyncio
    async def test_corrupted_session_is_reset(self, controller):
        await advance_to_verify(controller)
        controller.session.email = ""

        assert controller.handle_edge_cases() is False
        assert controller.session.step == RecoveryStep.REQUEST_CODE
        assert controller.session.error_notice.message == ERROR_MESSAGES["INVALID_SESSION"]


class TestTimers:
    """Test auto-dismiss and completion cleanup."""

    @pytest.mark.asyncio
    async def test_success_notice_auto_dismissed(self, backend, fast_settings):
        flow = FlowController(backend, fast_settings)
        await advance_to_verify(flow)
        assert flow.session.success_notice.message == SUCCESS_MESSAGES["CODE_SENT"]

        await asyncio.sleep(0.01)

        assert flow.session.success_notice is None
        assert flow.session.step == RecoveryStep.VERIFY_CODE
        await flow.close()

    @pytest.mark.asyncio
    async def test_completed_flow_resets_after_delay(self, backend, fast_settings):
        flow = FlowController(backend, fast_settings)
        await advance_to_reset(flow)
        enter_passwords(flow)
        await flow.submit_reset_password()
        assert flow.session.step == RecoveryStep.COMPLETED

        await asyncio.sleep(0.01)

        assert flow.session.step == RecoveryStep.REQUEST_CODE
        assert flow.session.reset_token is None
        assert flow.session.email == ""
        assert flow.session.should_navigate_to_entry
        await flow.close()

    @pytest.mark.asyncio
    async def test_close_cancels_pending_timers(self, controller):
        await advance_to_verify(controller)
        assert controller.session.success_notice is not None

        await controller.close()
        await asyncio.sleep(0)

        assert controller.session.success_notice is not None
