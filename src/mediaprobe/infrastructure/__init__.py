# SPDX-License-Identifier: MIT
"""Infrastructure layer: ffprobe invocation and the probe cache."""

from .cache import ProbeCache
from .ffprobe import PROBE_ARGS, FFprobeRunner, ProbeRunner, limit_diagnostic

__all__ = ["PROBE_ARGS", "FFprobeRunner", "ProbeCache", "ProbeRunner", "limit_diagnostic"]
