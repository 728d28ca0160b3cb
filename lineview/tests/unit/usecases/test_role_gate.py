from __future__ import annotations

import asyncio

from lineview.adapters.api_errors import ApiClientError
from lineview.usecases.role_gate import RoleGate


class FakeRoleCheck:
    def __init__(self, result=True, error=None, delay: bool = False) -> None:
        self.calls = 0
        self.result = result
        self.error = error
        self.release = asyncio.Event() if delay else None

    async def __call__(self) -> bool:
        self.calls += 1
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.result


def test_resolve_is_memoized_across_concurrent_callers() -> None:
    async def scenario():
        check = FakeRoleCheck(result=True, delay=True)
        resolved = []
        gate = RoleGate(check, on_resolved=resolved.append)

        waiters = [asyncio.create_task(gate.resolve()) for _ in range(3)]
        await asyncio.sleep(0)
        assert gate.is_elevated is False
        check.release.set()
        results = await asyncio.gather(*waiters)

        assert results == [True, True, True]
        assert await gate.resolve() is True
        assert check.calls == 1
        assert resolved == [True]
        assert gate.is_elevated and gate.resolved

    asyncio.run(scenario())


def test_resolve_fails_closed_on_error() -> None:
    async def scenario():
        check = FakeRoleCheck(error=ApiClientError("forbidden", status=403))
        gate = RoleGate(check)

        assert await gate.resolve() is False
        assert await gate.resolve() is False

        assert gate.is_elevated is False
        assert gate.error.code == "AUTH_FAILED"
        assert check.calls == 1

    asyncio.run(scenario())


def test_non_boolean_truthy_response_is_not_elevated() -> None:
    async def scenario():
        gate = RoleGate(FakeRoleCheck(result="yes"))
        assert await gate.resolve() is False

    asyncio.run(scenario())
