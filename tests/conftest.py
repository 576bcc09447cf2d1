"""
Shared test configuration and fixtures for fedinfo tests.

Provides a controllable clock for cache expiry tests and helpers that build
mocked aiohttp client sessions serving canned responses per URL.
"""

import asyncio
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientResponse, ClientSession

from social.graze.fedinfo.resolve.cache import SoftwareCache


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(
    payload: Any = None, status: int = 200, json_error: Optional[Exception] = None
) -> AsyncMock:
    """Create a mocked ClientResponse returning payload from json()."""
    response = AsyncMock(spec=ClientResponse)
    response.status = status
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def make_session(routes: Dict[str, Any], yield_on_enter: bool = False) -> AsyncMock:
    """
    Create a mocked ClientSession.

    Args:
        routes: Maps URLs to either a mocked response or an exception raised when
            the request context is entered
        yield_on_enter: Suspend once when entering a request, so concurrent
            resolutions interleave the way real network calls would
    """
    session = AsyncMock(spec=ClientSession)

    def get(url, *args, **kwargs):
        outcome = routes[url]
        context = MagicMock()

        async def enter(*_):
            if yield_on_enter:
                await asyncio.sleep(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome

        context.__aenter__.side_effect = enter
        return context

    session.get.side_effect = get
    return session


def requested_urls(session: AsyncMock):
    return [c.args[0] for c in session.get.call_args_list]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> SoftwareCache:
    return SoftwareCache(ttl=60.0, clock=clock)
