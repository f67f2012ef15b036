# SPDX-License-Identifier: MIT
"""Tool descriptions for MCP server. Optimized for token efficiency."""

# ==================== PROBE TOOL DESCRIPTIONS ====================

PROBE_MEDIA = """Read audio metadata (codec, format, size, bit_rate, sample_rate, bit_depth, channels, duration, title, album, artist, year, genre) from a local path, URL or device via ffprobe.

Params: identifier (path|url|device), timeout (seconds, optional)

Results and failures are cached for up to 60s; a failed identifier keeps failing until the cache clears.

Example: probe_media("/music/track.flac", timeout=2.0)"""

PROBE_CACHE_INFO = """Show probe cache contents.

Returns: pending, resolved, failed (entry counts), invocations (ffprobe runs started)"""
