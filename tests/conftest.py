# SPDX-License-Identifier: MIT
"""Shared pytest fixtures for mediaprobe tests."""

import json
import pathlib
import stat
import threading
from collections.abc import Callable

import anyio
import pytest

from mediaprobe.infrastructure import ProbeCache

SAMPLE_PROBE_RESULT = {
    "streams": [
        {
            "index": 0,
            "codec_name": "aac",
            "codec_type": "audio",
            "sample_rate": "44100",
            "channels": 2,
            "duration": "183.459",
        }
    ],
    "format": {
        "filename": "http://radio.example.com/live.m3u8",
        "format_name": "hls,applehttp",
        "size": "1024",
        "bit_rate": "128000",
        "tags": {"Artist": "X", "Date": "2001-05-01", "TITLE": "Live Set"},
    },
}


class FakeRunner:
    """ProbeRunner double that records calls and returns canned output.

    Set ``gate`` to an :class:`anyio.Event` to hold async invocations open
    until the test releases them; ``started`` is set when one begins.
    ``sync_gate`` is a :class:`threading.Event` doing the same for blocking
    invocations run on a worker thread.
    """

    def __init__(self, output: str = "", error: Exception | None = None) -> None:
        self.output = output
        self.error = error
        self.calls: list[tuple[str, float]] = []
        self.sync_calls: list[tuple[str, float]] = []
        self.gate: anyio.Event | None = None
        self.started: anyio.Event | None = None
        self.sync_gate: threading.Event | None = None
        self.sync_started = threading.Event()

    async def invoke(self, identifier: str, timeout: float) -> str:
        self.calls.append((identifier, timeout))
        if self.started is not None:
            self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        else:
            await anyio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.output

    def invoke_sync(self, identifier: str, timeout: float) -> str:
        self.sync_calls.append((identifier, timeout))
        self.sync_started.set()
        if self.sync_gate is not None:
            self.sync_gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.output


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sample_output() -> str:
    """ffprobe JSON for an HLS stream with one AAC audio stream."""
    return json.dumps(SAMPLE_PROBE_RESULT)


@pytest.fixture
def fake_runner(sample_output: str) -> FakeRunner:
    return FakeRunner(output=sample_output)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(fake_runner: FakeRunner, clock: FakeClock) -> ProbeCache:
    """ProbeCache wired to the fake runner and clock (0.1s timeout, 60s clear)."""
    return ProbeCache(fake_runner, default_timeout=0.1, clear_interval=60.0, clock=clock)


@pytest.fixture
def make_fake_ffprobe(tmp_path: pathlib.Path) -> Callable[[str], str]:
    """Factory writing an executable shell script that stands in for ffprobe.

    Returns the script path; *body* is the shell code run after the shebang.
    """

    def _make(body: str, name: str = "ffprobe") -> str:
        script = tmp_path / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


@pytest.fixture
def make_cache(clock: FakeClock) -> Callable[..., ProbeCache]:
    """Factory for a ProbeCache around a fresh FakeRunner.

    Returns ``(cache, runner)`` so tests can inspect recorded calls.
    """

    def _make(output: str = "", error: Exception | None = None, clear_interval: float = 60.0):
        runner = FakeRunner(output=output, error=error)
        return ProbeCache(runner, default_timeout=0.1, clear_interval=clear_interval, clock=clock), runner

    return _make
