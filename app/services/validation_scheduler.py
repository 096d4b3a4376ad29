"""
Validation scheduler.

Turns field input events into debounced validation results.
One pending task per field; a newer input cancels only that field's
pending validation. Per-field generation counters guarantee that a
superseded validation never overwrites the result of a newer input.
"""

import asyncio
from collections.abc import Callable
from functools import partial

from loguru import logger

from app.models.enums import RecoveryField
from app.utils.validation import FieldValidator, ValidationResult

ValidationSink = Callable[[RecoveryField, ValidationResult], None]
ValuesProvider = Callable[[], dict[RecoveryField, str]]


class ValidationScheduler:
    """Per-field cooperative debounce-and-cancel scheduler (asyncio)."""

    def __init__(
        self,
        validator: FieldValidator,
        sink: ValidationSink,
        values_provider: ValuesProvider,
        debounce: float = 0.3,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            validator: Format checks to run
            sink: Receives (field, result) for every applied validation
            values_provider: Returns the current raw value of every field
            debounce: Quiet period in seconds before validating
        """
        self.validator = validator
        self.debounce = debounce
        self._sink = sink
        self._values = values_provider
        self._tasks: dict[RecoveryField, asyncio.Task] = {}
        self._generations: dict[RecoveryField, int] = {f: 0 for f in RecoveryField}

    def on_input(self, recovery_field: RecoveryField) -> None:
        """
        Restart the debounce timer for a field whose value just changed.

        Must be called from the event loop thread.
        """
        self._schedule(recovery_field)
        # Confirmation validity depends on the password
        if (
            recovery_field == RecoveryField.NEW_PASSWORD
            and self._values().get(RecoveryField.CONFIRM_PASSWORD)
        ):
            self._schedule(RecoveryField.CONFIRM_PASSWORD)

    def has_pending(self, recovery_field: RecoveryField | None = None) -> bool:
        if recovery_field is None:
            return bool(self._tasks)
        return recovery_field in self._tasks

    def flush(self, recovery_field: RecoveryField | None = None) -> None:
        """Run pending validations now instead of waiting for the timer."""
        fields = [recovery_field] if recovery_field else list(self._tasks)
        for pending in fields:
            task = self._tasks.pop(pending, None)
            if task is None:
                continue
            task.cancel()
            self._apply(pending, self._generations[pending])

    def cancel_all(self) -> None:
        """Drop every pending validation; late timers become no-ops."""
        for recovery_field, task in list(self._tasks.items()):
            task.cancel()
            self._generations[recovery_field] += 1
        self._tasks.clear()

    def _schedule(self, recovery_field: RecoveryField) -> None:
        previous = self._tasks.pop(recovery_field, None)
        if previous is not None:
            previous.cancel()

        self._generations[recovery_field] += 1
        generation = self._generations[recovery_field]

        task = asyncio.create_task(
            self._validate_after_delay(recovery_field, generation),
            name=f"validate-{recovery_field.value}-{generation}",
        )
        task.add_done_callback(partial(self._on_task_done, recovery_field))
        self._tasks[recovery_field] = task

    async def _validate_after_delay(
        self, recovery_field: RecoveryField, generation: int
    ) -> None:
        await asyncio.sleep(self.debounce)
        if self._tasks.get(recovery_field) is asyncio.current_task():
            del self._tasks[recovery_field]
        self._apply(recovery_field, generation)

    def _apply(self, recovery_field: RecoveryField, generation: int) -> bool:
        if generation != self._generations[recovery_field]:
            logger.debug(
                f"Dropping stale validation for {recovery_field.value} "
                f"(generation {generation} < {self._generations[recovery_field]})"
            )
            return False

        result = self.validator.validate_field(recovery_field, self._values())
        self._sink(recovery_field, result)
        return True

    def _on_task_done(self, recovery_field: RecoveryField, task: asyncio.Task) -> None:
        """Log exceptions from validation tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(
                f"Validation task for {recovery_field.value} failed: {exc}"
            )
