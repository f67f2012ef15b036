# SPDX-License-Identifier: MIT
"""In-memory probe cache with request coalescing and a global periodic clear.

Each resource identifier maps to one of three entries:

- :class:`~mediaprobe.models.Pending` while an async probe is running;
  concurrent requesters attach to it instead of starting another probe.
- :class:`~mediaprobe.models.Resolved` once metadata was extracted.
- :class:`~mediaprobe.models.Failed` once the probe failed; the error is
  raised again for every requester without re-running ffprobe.

The whole map is swapped for an empty one every ``clear_interval`` seconds,
regardless of how old individual entries are.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from ..config import logger
from ..exceptions import ProbeError
from ..extraction import extract
from ..models import CacheEntry, CacheInfo, Failed, Metadata, Outcome, Pending, Resolved
from .ffprobe import ProbeRunner


class ProbeCache:
    """Coalescing metadata cache serving both async and blocking callers.

    Args:
        runner: Invocation adapter used on cache misses.
        default_timeout: Probe timeout in seconds when a caller passes none.
        clear_interval: Seconds between global cache clears.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        runner: ProbeRunner,
        default_timeout: float,
        clear_interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if clear_interval <= 0:
            raise ValueError(f"clear_interval must be positive, got {clear_interval}")
        self.runner = runner
        self.default_timeout = default_timeout
        self.clear_interval = clear_interval
        self._clock = clock
        self._epoch = clock()
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._invocations = 0

    # ------------------------------------------------------------------
    # Expiry
    # ------------------------------------------------------------------

    def _expire(self) -> None:
        """Swap in an empty map if one or more clear periods have elapsed. Caller holds the lock."""
        elapsed = self._clock() - self._epoch
        if elapsed < self.clear_interval:
            return
        # Epochs stay on a fixed schedule, independent of when the cache is accessed
        self._epoch += (elapsed // self.clear_interval) * self.clear_interval
        if self._entries:
            logger.debug("Clearing probe cache (%d entries)", len(self._entries))
        self._entries = {}

    def clear(self) -> None:
        """Discard every entry now. In-flight probes still complete for their requesters."""
        with self._lock:
            logger.debug("Clearing probe cache (%d entries)", len(self._entries))
            self._entries = {}

    def info(self) -> CacheInfo:
        """Get a snapshot of the cache contents."""
        with self._lock:
            self._expire()
            entries = list(self._entries.values())
            invocations = self._invocations
        return CacheInfo(
            pending=sum(isinstance(e, Pending) for e in entries),
            resolved=sum(isinstance(e, Resolved) for e in entries),
            failed=sum(isinstance(e, Failed) for e in entries),
            invocations=invocations,
        )

    # ------------------------------------------------------------------
    # Entry transitions
    # ------------------------------------------------------------------

    def _claim(self, identifier: str) -> tuple[CacheEntry, bool]:
        """Return the current entry, inserting a new Pending on a miss.

        Returns:
            (entry, is_leader) where *is_leader* means the caller must run the probe.
        """
        with self._lock:
            self._expire()
            entry = self._entries.get(identifier)
            if entry is not None:
                return entry, False
            pending = Pending()
            self._entries[identifier] = pending
            self._invocations += 1
            return pending, True

    def _settle(self, identifier: str, pending: Pending, outcome: Outcome) -> None:
        with self._lock:
            # Leave the map alone if a clear or a blocking probe replaced our entry
            if self._entries.get(identifier) is pending:
                self._entries[identifier] = outcome
        pending.settle(outcome)

    def _abandon(self, identifier: str, pending: Pending) -> None:
        with self._lock:
            if self._entries.get(identifier) is pending:
                del self._entries[identifier]
        pending.abandon()

    def _failed(self, error: ProbeError) -> Failed:
        logger.warning("Probe failed for %s: %s", error.identifier, error)
        return Failed(error)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def _probe(self, identifier: str, timeout: float) -> Outcome:
        try:
            raw = await self.runner.invoke(identifier, timeout)
            return Resolved(extract(identifier, raw))
        except ProbeError as e:
            return self._failed(e)

    async def get(self, identifier: str, timeout: float | None = None) -> Metadata:
        """Get metadata for *identifier*, probing on a miss.

        Concurrent calls for the same identifier share one ffprobe run and
        receive the same result object. Failures are cached and raised again
        until the next clear.

        Args:
            identifier: Path, URL or device to probe.
            timeout: Probe timeout in seconds; defaults to ``default_timeout``.

        Returns:
            Metadata: The cached or freshly extracted record.

        Raises:
            InvocationError: If ffprobe failed, now or on an earlier request.
            ExtractionError: If ffprobe output was unusable, now or on an earlier request.
        """
        timeout = self.default_timeout if timeout is None else timeout

        while True:
            entry, is_leader = self._claim(identifier)

            if isinstance(entry, Pending):
                if not is_leader:
                    outcome = await entry.wait()
                    if outcome is None:
                        # The leading request was cancelled; try again
                        continue
                    return outcome.unwrap()

                try:
                    outcome = await self._probe(identifier, timeout)
                except BaseException:
                    self._abandon(identifier, entry)
                    raise
                self._settle(identifier, entry, outcome)
                return outcome.unwrap()

            return entry.unwrap()

    def get_sync(self, identifier: str, timeout: float | None = None) -> Metadata:
        """Blocking variant of :meth:`get`.

        A Pending entry is not waited on: this runs its own blocking probe and
        overwrites the entry with the result, even while an async probe for the
        same identifier is still in flight. If the entry was settled by someone
        else before the blocking probe finished, that entry wins and is returned.

        Args:
            identifier: Path, URL or device to probe.
            timeout: Probe timeout in seconds; defaults to ``default_timeout``.

        Returns:
            Metadata: The cached or freshly extracted record.

        Raises:
            InvocationError: If ffprobe failed, now or on an earlier request.
            ExtractionError: If ffprobe output was unusable, now or on an earlier request.
        """
        timeout = self.default_timeout if timeout is None else timeout

        with self._lock:
            self._expire()
            entry = self._entries.get(identifier)
            if entry is None or isinstance(entry, Pending):
                self._invocations += 1

        if isinstance(entry, (Resolved, Failed)):
            return entry.unwrap()

        outcome: Outcome
        try:
            raw = self.runner.invoke_sync(identifier, timeout)
            outcome = Resolved(extract(identifier, raw))
        except ProbeError as e:
            outcome = self._failed(e)

        with self._lock:
            self._expire()
            current = self._entries.get(identifier)
            if current is None or isinstance(current, Pending):
                self._entries[identifier] = outcome
            else:
                # Settled by another caller while this probe ran; settled entries are never replaced
                outcome = current
        return outcome.unwrap()
