"""Shared fixtures for llmgrep tests."""

from __future__ import annotations

from typing import Callable, Iterable, List, Tuple, Union

import pytest

Reply = Union[str, BaseException]


class FakeOracle:
    """Oracle double replaying canned replies and recording every call."""

    def __init__(self, replies: Union[Iterable[Reply], Callable[[str, str], Reply]] = ()) -> None:
        if callable(replies):
            self._responder = replies
            self._queue: List[Reply] = []
        else:
            self._responder = None
            self._queue = list(replies)
        self.calls: List[Tuple[str, str]] = []
        self.checked = False
        self.closed = False

    async def generate(self, system: str, prompt: str, *, json_format: bool = True) -> str:
        self.calls.append((system, prompt))
        if self._responder is not None:
            reply = self._responder(system, prompt)
        elif self._queue:
            reply = self._queue.pop(0)
        else:
            reply = "{}"
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def check_model(self) -> None:
        self.checked = True

    async def __aenter__(self) -> "FakeOracle":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.closed = True


@pytest.fixture
def fake_oracle_factory() -> Callable[..., FakeOracle]:
    return FakeOracle
