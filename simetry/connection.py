"""Connecting to whichever supported sim is running."""

from __future__ import annotations

import asyncio
import inspect
import mmap
import sys
from collections.abc import Coroutine
from dataclasses import dataclass, replace
from typing import Any

from . import dirt_rally_2, generic_http
from .assetto_corsa import sim as assetto_corsa
from .assetto_corsa.layout import PageFileGraphics, PageFilePhysics, PageFileStatic
from .moment import Simetry

DIRT_RALLY_2_DEFAULT_URI = "127.0.0.1:20777"
GENERIC_HTTP_DEFAULT_URI = "http://localhost:25055/"
DEFAULT_RETRY_DELAY = 5.0


def _open_assetto_corsa_memories() -> tuple[Any, Any, Any] | None:
    """Open the named Assetto Corsa pages; only available on Windows."""
    if sys.platform != "win32":
        return None
    return (
        mmap.mmap(-1, PageFileStatic.SIZE, tagname="Local\\acpmf_static"),
        mmap.mmap(-1, PageFilePhysics.SIZE, tagname="Local\\acpmf_physics"),
        mmap.mmap(-1, PageFileGraphics.SIZE, tagname="Local\\acpmf_graphics"),
    )


async def _dispose(client: Any) -> None:
    for method in ("aclose", "close"):
        closer = getattr(client, method, None)
        if closer is not None:
            result = closer()
            if inspect.isawaitable(result):
                await result
            return


@dataclass(frozen=True)
class SimetryConnectionBuilder:
    """Settings for connecting to any supported sim.

    The generic HTTP client is only tried when a URI has been given for it.
    """

    dirt_rally_2_uri: str = DIRT_RALLY_2_DEFAULT_URI
    generic_http_uri: str | None = None
    retry_delay: float = DEFAULT_RETRY_DELAY

    def with_dirt_rally_2_uri(self, uri: str) -> SimetryConnectionBuilder:
        return replace(self, dirt_rally_2_uri=uri)

    def with_generic_http_uri(self, uri: str) -> SimetryConnectionBuilder:
        return replace(self, generic_http_uri=uri)

    def with_retry_delay(self, delay: float) -> SimetryConnectionBuilder:
        return replace(self, retry_delay=delay)

    def _attempts(self) -> list[Coroutine[Any, Any, Simetry]]:
        attempts: list[Coroutine[Any, Any, Simetry]] = []
        memories = _open_assetto_corsa_memories()
        if memories is not None:
            attempts.append(assetto_corsa.Client.connect(*memories, self.retry_delay))
        attempts.append(dirt_rally_2.Client.connect(self.dirt_rally_2_uri, self.retry_delay))
        if self.generic_http_uri is not None:
            attempts.append(
                generic_http.GenericHttpClient.connect(self.generic_http_uri, self.retry_delay)
            )
        return attempts

    async def connect(self) -> Simetry:
        """Try every sim at once and return the first connection made."""
        pending = {asyncio.ensure_future(attempt) for attempt in self._attempts()}
        errors: list[BaseException] = []
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                winners = []
                for task in done:
                    error = task.exception()
                    if error is None:
                        winners.append(task.result())
                    else:
                        errors.append(error)
                if winners:
                    for extra in winners[1:]:
                        await _dispose(extra)
                    return winners[0]
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
        raise errors[0]


async def connect() -> Simetry:
    """Connect to any running supported sim with default settings."""
    return await SimetryConnectionBuilder().connect()