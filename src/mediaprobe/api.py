# SPDX-License-Identifier: MIT
"""Public probe entry points backed by a process-wide cache.

Usage::

    from mediaprobe import probe

    meta = await probe("/music/track.flac")
    meta = probe.sync("http://radio.example.com/stream.m3u8", timeout=2.0)
"""

from __future__ import annotations

from functools import lru_cache

from .config import get_settings
from .infrastructure import FFprobeRunner, ProbeCache
from .models import Metadata


@lru_cache(maxsize=1)
def get_cache() -> ProbeCache:
    """Return the process-wide :class:`ProbeCache` (cached singleton).

    Built from :func:`~mediaprobe.config.get_settings` on first use.
    """
    settings = get_settings()
    return ProbeCache(
        FFprobeRunner(settings.ffprobe_path),
        default_timeout=settings.timeout,
        clear_interval=settings.clear_interval,
    )


async def probe(identifier: str, timeout: float | None = None) -> Metadata:
    """Get metadata for a local file, remote URL or device.

    Args:
        identifier: Resource to probe.
        timeout: Seconds before ffprobe is treated as failed (default ``MEDIAPROBE_TIMEOUT``).

    Returns:
        Metadata: Extracted metadata, possibly from cache.

    Raises:
        InvocationError: If ffprobe failed or timed out.
        ExtractionError: If ffprobe output was unusable.
    """
    return await get_cache().get(identifier, timeout)


def probe_sync(identifier: str, timeout: float | None = None) -> Metadata:
    """Blocking variant of :func:`probe`; also available as ``probe.sync``."""
    return get_cache().get_sync(identifier, timeout)


probe.sync = probe_sync  # type: ignore[attr-defined]
