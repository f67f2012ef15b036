# SPDX-License-Identifier: MIT
"""Cached ffprobe metadata extraction for audio/video resources."""

from .api import get_cache, probe, probe_sync
from .exceptions import ExtractionError, InvocationError, ProbeError
from .infrastructure import FFprobeRunner, ProbeCache, ProbeRunner
from .models import CacheInfo, Metadata

__all__ = [
    "CacheInfo",
    "ExtractionError",
    "FFprobeRunner",
    "InvocationError",
    "Metadata",
    "ProbeCache",
    "ProbeError",
    "ProbeRunner",
    "get_cache",
    "probe",
    "probe_sync",
]
