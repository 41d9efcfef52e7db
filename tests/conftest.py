import asyncio

import pytest


class FakeStore:
    """Resource that refuses overlapping saves, the kind SaveQueuing sits in front of.

    Saves finish after a short sleep unless held with `hold()`; a held save
    finishes when `release()` is called for its label.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._gates: dict[str, asyncio.Future[None]] = {}

    def hold(self, label: str) -> None:
        self._gates[label] = asyncio.get_running_loop().create_future()

    def release(self, label: str, error: Exception | None = None) -> None:
        gate = self._gates[label]
        if error is None:
            gate.set_result(None)
        else:
            gate.set_exception(error)

    async def save(self, label: str, fail: Exception | None = None) -> str:
        if self.in_flight:
            raise RuntimeError("concurrent save")
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.calls.append(label)
        try:
            if label in self._gates:
                await self._gates[label]
            else:
                await asyncio.sleep(0.01)
            if fail is not None:
                raise fail
            return f"saved_{label}"
        finally:
            self.in_flight -= 1


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
