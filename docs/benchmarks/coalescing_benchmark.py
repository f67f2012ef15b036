#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Benchmark script showing what request coalescing saves.

Simulates ffprobe with a runner that sleeps for a fixed latency, then
measures:
- Concurrent requests for one identifier (coalesced into one probe)
- Concurrent requests for distinct identifiers (one probe each)
- Repeat requests served from the cache

Run with: python docs/benchmarks/coalescing_benchmark.py
"""

import json
import time
from typing import Any

import anyio

from mediaprobe.infrastructure import ProbeCache

PROBE_LATENCY = 0.2

PROBE_OUTPUT = json.dumps(
    {
        "streams": [{"codec_name": "aac", "sample_rate": "44100", "channels": 2}],
        "format": {"format_name": "hls,applehttp", "size": "1024"},
    }
)


class SleepingRunner:
    """Stands in for ffprobe: every invocation takes PROBE_LATENCY seconds."""

    def __init__(self) -> None:
        self.invocations = 0

    async def invoke(self, identifier: str, timeout: float) -> str:
        self.invocations += 1
        await anyio.sleep(PROBE_LATENCY)
        return PROBE_OUTPUT

    def invoke_sync(self, identifier: str, timeout: float) -> str:
        self.invocations += 1
        time.sleep(PROBE_LATENCY)
        return PROBE_OUTPUT


async def _run_concurrently(cache: ProbeCache, identifiers: list[str]) -> float:
    start = time.perf_counter()
    async with anyio.create_task_group() as tg:
        for identifier in identifiers:
            tg.start_soon(cache.get, identifier)
    return time.perf_counter() - start


async def benchmark_same_identifier(num_requests: int = 50) -> dict[str, Any]:
    """Many concurrent requests for one stream share a single probe."""
    runner = SleepingRunner()
    cache = ProbeCache(runner, default_timeout=5.0, clear_interval=60.0)

    total_time = await _run_concurrently(cache, ["http://radio.example.com/live.m3u8"] * num_requests)

    return {
        "test": "Concurrent Requests, Same Identifier",
        "requests": num_requests,
        "invocations": runner.invocations,
        "total_time": total_time,
    }


async def benchmark_distinct_identifiers(num_requests: int = 50) -> dict[str, Any]:
    """Concurrent requests for different files each need their own probe."""
    runner = SleepingRunner()
    cache = ProbeCache(runner, default_timeout=5.0, clear_interval=60.0)

    total_time = await _run_concurrently(cache, [f"/music/track_{i:02d}.flac" for i in range(num_requests)])

    return {
        "test": "Concurrent Requests, Distinct Identifiers",
        "requests": num_requests,
        "invocations": runner.invocations,
        "total_time": total_time,
    }


async def benchmark_warm_cache(num_requests: int = 1000) -> dict[str, Any]:
    """Repeat requests after the first are served without probing."""
    runner = SleepingRunner()
    cache = ProbeCache(runner, default_timeout=5.0, clear_interval=60.0)
    await cache.get("/music/track.flac")

    start = time.perf_counter()
    for _ in range(num_requests):
        await cache.get("/music/track.flac")
        cache.get_sync("/music/track.flac")
    total_time = time.perf_counter() - start

    return {
        "test": "Warm Cache (async + sync lookups)",
        "requests": num_requests * 2,
        "invocations": runner.invocations,
        "total_time": total_time,
    }


def print_results(result: dict[str, Any]) -> None:
    """Pretty print benchmark results."""
    print(f"\n{'=' * 70}")
    print(f"TEST: {result['test']}")
    print(f"{'=' * 70}")
    print(f"  Requests:          {result['requests']}")
    print(f"  ffprobe runs:      {result['invocations']}")
    print(f"  Total Time:        {result['total_time']:.3f}s")
    print(f"  Uncached Time:     {result['requests'] * PROBE_LATENCY:.3f}s")
    print("    (one sequential probe per request)")


async def main():
    """Run all benchmarks."""
    print("\n" + "=" * 70)
    print("PROBE CACHE BENCHMARK")
    print("=" * 70)
    print(f"\nSimulated ffprobe latency: {PROBE_LATENCY}s per run")

    print_results(await benchmark_same_identifier())
    print_results(await benchmark_distinct_identifiers())
    print_results(await benchmark_warm_cache())

    print("\n" + "=" * 70 + "\n")


if __name__ == "__main__":
    anyio.run(main)
