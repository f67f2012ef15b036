# SPDX-License-Identifier: MIT
"""Configuration management for mediaprobe.

This module handles:
- Logging setup
- Environment variable validation for probe settings
"""

import logging
import os
import sys
from functools import lru_cache

from pydantic import BaseModel

# ---------- Logging configuration ----------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,  # Log to stderr to avoid interfering with stdio MCP transport
)
logger = logging.getLogger("mediaprobe")


# ---------- Probe defaults ----------
DEFAULT_FFPROBE_PATH = "ffprobe"
DEFAULT_TIMEOUT_SECONDS = 0.1
DEFAULT_CLEAR_INTERVAL_SECONDS = 60.0
DIAGNOSTIC_LIMIT = 500


class ProbeSettings(BaseModel, frozen=True):
    """Validated probe settings read from the environment."""

    ffprobe_path: str = DEFAULT_FFPROBE_PATH
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    clear_interval: float = DEFAULT_CLEAR_INTERVAL_SECONDS


def _positive_float(env_var: str, default: float) -> float:
    """Read a positive float from *env_var*, falling back to *default* when unset.

    Raises:
        RuntimeError: If the variable is set but not a positive number
    """
    raw = os.getenv(env_var)
    if raw is None or not raw.strip():
        return default

    try:
        value = float(raw.strip())
    except ValueError as e:
        raise RuntimeError(f"{env_var} must be a number of seconds, got {raw!r}") from e

    if value <= 0:
        raise RuntimeError(f"{env_var} must be greater than zero, got {raw!r}")
    return value


@lru_cache(maxsize=1)
def get_settings() -> ProbeSettings:
    """Get and validate probe settings from environment.

    Reads ``FFPROBE_PATH``, ``MEDIAPROBE_TIMEOUT`` and ``MEDIAPROBE_CLEAR_INTERVAL``.
    The result is cached; call ``get_settings.cache_clear()`` after changing
    the environment.

    Returns:
        Validated settings

    Raises:
        RuntimeError: If a numeric variable is malformed or not positive
    """
    ffprobe_path = os.getenv("FFPROBE_PATH", "").strip() or DEFAULT_FFPROBE_PATH

    return ProbeSettings(
        ffprobe_path=ffprobe_path,
        timeout=_positive_float("MEDIAPROBE_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
        clear_interval=_positive_float("MEDIAPROBE_CLEAR_INTERVAL", DEFAULT_CLEAR_INTERVAL_SECONDS),
    )
