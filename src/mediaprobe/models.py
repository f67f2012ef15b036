# SPDX-License-Identifier: MIT
"""Metadata record and probe cache entry types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import anyio
from pydantic import BaseModel

from .exceptions import ProbeError


class Metadata(BaseModel, frozen=True):
    """Normalized metadata for one audio/video resource.

    Every field is optional; ffprobe reports different subsets depending on
    container, codec and whether the resource is local or streamed.
    """

    codec: str | None = None
    format: str | None = None
    size: int | None = None
    bit_rate: int | None = None
    sample_rate: int | None = None
    bit_depth: int | None = None
    channels: int | None = None
    duration: int | None = None
    title: str | None = None
    album: str | None = None
    artist: str | None = None
    year: int | None = None
    genre: str | None = None


# ------------------------------------------------------------------
# Cache entries
# ------------------------------------------------------------------


@dataclass(frozen=True)
class Resolved:
    """A successfully extracted metadata record."""

    metadata: Metadata

    def unwrap(self) -> Metadata:
        return self.metadata


@dataclass(frozen=True)
class Failed:
    """A captured probe failure, replayed without re-running ffprobe.

    Every requester receives the same exception instance. Raising it again
    from inside an ``except`` block overwrites its shared ``__context__``, so
    callers should not rely on that attribute.
    """

    error: ProbeError

    def unwrap(self) -> Metadata:
        # Drop the previous traceback so replays don't keep extending it
        raise self.error.with_traceback(None)


Outcome = Union[Resolved, Failed]


class Pending:
    """An in-flight probe that concurrent requesters attach to.

    Must be created inside a running event loop.
    """

    def __init__(self) -> None:
        self._done = anyio.Event()
        self._outcome: Outcome | None = None

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def settle(self, outcome: Outcome) -> None:
        """Publish *outcome* to every attached requester."""
        self._outcome = outcome
        self._done.set()

    def abandon(self) -> None:
        """Release attached requesters without an outcome (leader was cancelled)."""
        self._done.set()

    async def wait(self) -> Outcome | None:
        """Wait for the probe to finish.

        Returns:
            The shared outcome, or ``None`` if the probe was abandoned.
        """
        await self._done.wait()
        return self._outcome


CacheEntry = Union[Pending, Resolved, Failed]


@dataclass(frozen=True)
class CacheInfo:
    """Snapshot of probe cache contents."""

    pending: int
    resolved: int
    failed: int
    invocations: int

    @property
    def size(self) -> int:
        return self.pending + self.resolved + self.failed
