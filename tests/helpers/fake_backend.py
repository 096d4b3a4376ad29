"""
Fake recovery backend for flow tests.

Records every call and lets a test decide per operation whether the
backend succeeds, fails, or blocks until released.
"""

import asyncio

from app.services.recovery_backend import VerifyCodeResult


class FakeRecoveryBackend:
    """
    In-memory RecoveryBackend.

    Usage:
        backend = FakeRecoveryBackend()
        backend.errors["verify_code"] = ServerError(400, "code expired")
        await controller.submit_verify_code()
        assert backend.call_names == ["request_reset", "verify_code"]
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.errors: dict[str, BaseException | None] = {}
        self.verify_result = VerifyCodeResult(valid=True, reset_token="reset-token-1")
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()

    @property
    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def hold(self) -> asyncio.Event:
        """Make the next calls block until the returned event is set."""
        self.gate = asyncio.Event()
        self.started = asyncio.Event()
        return self.gate

    async def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        error = self.errors.get(name)
        if error is not None:
            raise error

    async def request_reset(self, email: str) -> None:
        await self._record("request_reset", email)

    async def verify_code(self, email: str, code: str) -> VerifyCodeResult:
        await self._record("verify_code", email, code)
        return self.verify_result

    async def reset_password(self, reset_token: str, new_password: str) -> None:
        await self._record("reset_password", reset_token, new_password)
