"""
Password recovery handler.

Chat front-end for the recovery flow controller: every text message is
the final value of the field the current step waits for.
"""

from typing import Any

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State
from aiogram.types import Message
from loguru import logger

from app.models.enums import RecoveryField, RecoveryStep, StepOutcome
from app.services.flow_controller import FlowController
from bot.keyboards.reply import entry_keyboard, recovery_keyboard
from bot.states.password_recovery import PasswordRecoveryStates
from bot.utils.constants import (
    BUTTON_LABELS,
    CANCEL_REFUSED,
    FLOW_CANCELLED,
    NO_ACTIVE_FLOW,
    NOTHING_TO_RETRY,
)
from bot.utils.formatters import (
    format_field_error,
    format_notices,
    format_step_header,
    prompt_for,
)
from bot.utils.recovery_registry import RecoveryRegistry

router = Router()

STEP_FIELDS_SHOWN = {
    RecoveryStep.REQUEST_CODE: (RecoveryField.EMAIL,),
    RecoveryStep.VERIFY_CODE: (RecoveryField.CODE,),
    RecoveryStep.RESET_PASSWORD: (
        RecoveryField.NEW_PASSWORD,
        RecoveryField.CONFIRM_PASSWORD,
    ),
}


def _state_for(controller: FlowController) -> State | None:
    """FSM state matching what the controller waits for."""
    session = controller.session
    if session.step == RecoveryStep.REQUEST_CODE:
        return PasswordRecoveryStates.waiting_for_email
    if session.step == RecoveryStep.VERIFY_CODE:
        return PasswordRecoveryStates.waiting_for_code
    if session.step == RecoveryStep.RESET_PASSWORD:
        if session.is_field_valid(RecoveryField.NEW_PASSWORD):
            return PasswordRecoveryStates.waiting_for_confirmation
        return PasswordRecoveryStates.waiting_for_password
    return None


async def _hide_secret(message: Message) -> None:
    """Delete a message carrying a password from the chat."""
    try:
        await message.delete()
    except Exception as e:
        logger.warning(f"Could not delete password message: {e}")


async def _render(
    message: Message,
    state: FSMContext,
    registry: RecoveryRegistry,
    controller: FlowController,
    step_before: RecoveryStep | None = None,
) -> None:
    """
    Show the current step view and sync the FSM state.

    Args:
        message: Telegram message to answer
        state: FSM state
        registry: Recovery registry
        controller: User's flow controller
        step_before: Step shown before the command, None for a fresh view
    """
    controller.handle_edge_cases()
    session = controller.session
    parts = []

    notices = format_notices(session)
    if notices:
        parts.append(notices)

    if session.step == RecoveryStep.COMPLETED:
        parts.append(format_step_header(session))
        await state.clear()
        await registry.discard(message.from_user.id)
        await message.answer(
            "\n\n".join(parts),
            parse_mode="Markdown",
            reply_markup=entry_keyboard(),
        )
        return

    for recovery_field in STEP_FIELDS_SHOWN[session.step]:
        field_error = format_field_error(session, recovery_field)
        if field_error:
            parts.append(field_error)

    if step_before != session.step:
        parts.append(format_step_header(session))

    target_state = _state_for(controller)
    prompt = prompt_for(
        session.step,
        awaiting_confirmation=target_state == PasswordRecoveryStates.waiting_for_confirmation,
    )
    if prompt:
        parts.append(prompt)

    await state.set_state(target_state)
    await message.answer(
        "\n\n".join(parts),
        parse_mode="Markdown",
        reply_markup=recovery_keyboard(can_retry=session.can_retry),
    )


@router.message(Command("recover"))
@router.message(F.text == BUTTON_LABELS["RECOVER"])
async def start_password_recovery(
    message: Message,
    state: FSMContext,
    recovery_registry: RecoveryRegistry,
    **data: Any,
) -> None:
    """
    Start password recovery.

    Args:
        message: Telegram message
        state: FSM state
        recovery_registry: Recovery registry
        **data: Handler data
    """
    controller = recovery_registry.get_or_create(message.from_user.id)
    if controller.session.is_loading:
        await message.answer(CANCEL_REFUSED)
        return

    controller.reset_flow()
    await _render(message, state, recovery_registry, controller)


@router.message(PasswordRecoveryStates, F.text == BUTTON_LABELS["CANCEL"])
async def cancel_password_recovery(
    message: Message,
    state: FSMContext,
    recovery_registry: RecoveryRegistry,
    **data: Any,
) -> None:
    """Cancel the flow, refused while a request is in flight."""
    controller = recovery_registry.get(message.from_user.id)
    if controller is not None and not controller.cancel_flow():
        await message.answer(CANCEL_REFUSED)
        return

    await recovery_registry.discard(message.from_user.id)
    await state.clear()
    await message.answer(FLOW_CANCELLED, reply_markup=entry_keyboard())


@router.message(Command("reset"))
@router.message(PasswordRecoveryStates, F.text == BUTTON_LABELS["RESTART"])
async def restart_password_recovery(
    message: Message,
    state: FSMContext,
    recovery_registry: RecoveryRegistry,
    **data: Any,
) -> None:
    """Reset the flow back to the email step."""
    controller = recovery_registry.get(message.from_user.id)
    if controller is None:
        await message.answer(NO_ACTIVE_FLOW, reply_markup=entry_keyboard())
        return

    controller.reset_flow()
    await _render(message, state, recovery_registry, controller)


@router.message(PasswordRecoveryStates, F.text == BUTTON_LABELS["RETRY"])
async def retry_password_recovery(
    message: Message,
    state: FSMContext,
    recovery_registry: RecoveryRegistry,
    **data: Any,
) -> None:
    """Re-issue the last failed request."""
    controller = recovery_registry.get(message.from_user.id)
    if controller is None:
        await state.clear()
        await message.answer(NO_ACTIVE_FLOW, reply_markup=entry_keyboard())
        return

    step_before = controller.session.step
    outcome = await controller.retry()
    if outcome is None:
        await message.answer(NOTHING_TO_RETRY)
        return

    await _render(message, state, recovery_registry, controller, step_before)


async def _submit(
    message: Message,
    state: FSMContext,
    registry: RecoveryRegistry,
    recovery_field: RecoveryField,
) -> StepOutcome | None:
    controller = registry.get(message.from_user.id)
    if controller is None:
        # FSM state outlived the in-memory flow (e.g. after a restart)
        await state.clear()
        await message.answer(NO_ACTIVE_FLOW, reply_markup=entry_keyboard())
        return None

    step_before = controller.session.step
    value = message.text or ""
    if recovery_field in (RecoveryField.EMAIL, RecoveryField.CODE):
        value = value.strip()
    controller.update_field(recovery_field, value)

    if recovery_field == RecoveryField.EMAIL:
        outcome = await controller.submit_request_code()
    elif recovery_field == RecoveryField.CODE:
        outcome = await controller.submit_verify_code()
    else:
        outcome = await controller.submit_reset_password()

    await _render(message, state, registry, controller, step_before)
    return outcome


@router.message(PasswordRecoveryStates.waiting_for_email, F.text)
async def process_email(
    message: Message,
    state: FSMContext,
    recovery_registry: RecoveryRegistry,
    **data: Any,
) -> None:
    """Process email input and request a reset code."""
    await _submit(message, state, recovery_registry, RecoveryField.EMAIL)


@router.message(PasswordRecoveryStates.waiting_for_code, F.text)
async def process_code(
    message: Message,
    state: FSMContext,
    recovery_registry: RecoveryRegistry,
    **data: Any,
) -> None:
    """Process verification code input."""
    await _submit(message, state, recovery_registry, RecoveryField.CODE)


@router.message(PasswordRecoveryStates.waiting_for_password, F.text)
async def process_new_password(
    message: Message,
    state: FSMContext,
    recovery_registry: RecoveryRegistry,
    **data: Any,
) -> None:
    """Process new password input, then ask for confirmation."""
    await _hide_secret(message)

    controller = recovery_registry.get(message.from_user.id)
    if controller is None:
        await state.clear()
        await message.answer(NO_ACTIVE_FLOW, reply_markup=entry_keyboard())
        return

    controller.update_field(RecoveryField.NEW_PASSWORD, message.text or "")
    controller.scheduler.flush()
    await _render(message, state, recovery_registry, controller, controller.session.step)


@router.message(PasswordRecoveryStates.waiting_for_confirmation, F.text)
async def process_password_confirmation(
    message: Message,
    state: FSMContext,
    recovery_registry: RecoveryRegistry,
    **data: Any,
) -> None:
    """Process password confirmation and reset the password."""
    await _hide_secret(message)
    await _submit(message, state, recovery_registry, RecoveryField.CONFIRM_PASSWORD)
