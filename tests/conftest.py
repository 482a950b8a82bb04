"""Shared fixtures: a scripted AI backend double and wired-up services."""

import asyncio
import inspect
from typing import Any, Optional

import pytest

from scholarai.config import AILimits, Settings, load_library
from scholarai.controller import ViewController
from scholarai.database.repository import PaperRepository
from scholarai.services.ai_backend import AIBackend
from scholarai.services.ai_gateway import AIGateway


class FakeBackend(AIBackend):
    """Records every request and replays scripted replies.

    Each queued reply may be a string, an exception instance (raised), or a
    callable taking the request contents (sync or async).  When the queue is
    empty ``default`` is returned.  Setting ``gate`` to an unset
    ``asyncio.Event`` holds every request until the event is set.
    """

    def __init__(self, *replies: Any, default: str = "ok"):
        self.replies = list(replies)
        self.default = default
        self.calls: list[dict[str, Any]] = []
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    def queue(self, *replies: Any) -> None:
        self.replies.extend(replies)

    @property
    def last(self) -> dict[str, Any]:
        return self.calls[-1]

    async def generate(self, contents, *, system_instruction=None, temperature=None, response_schema=None):
        self.calls.append({
            "contents": contents,
            "system_instruction": system_instruction,
            "temperature": temperature,
            "response_schema": response_schema,
        })
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            reply = reply(contents)
            if inspect.isawaitable(reply):
                reply = await reply
        return reply

    async def aclose(self) -> None:
        self.closed = True


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run up to their next real suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def reset_settings():
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def limits():
    return AILimits(request_timeout=1.0)


@pytest.fixture
def gateway(backend, limits):
    return AIGateway(backend, limits)


@pytest.fixture
def library():
    return load_library()


@pytest.fixture
def current_user(library):
    return library[0]


@pytest.fixture
def repo(library):
    return PaperRepository(library[1])


@pytest.fixture
def controller(repo, gateway, current_user):
    return ViewController(repo, gateway, current_user)
