# SPDX-License-Identifier: MIT
"""Projection of raw ffprobe JSON into :class:`Metadata`.

ffprobe is not consistent about key casing (tags in particular come back as
``ARTIST``, ``Artist`` or ``artist`` depending on the container), so every
mapping is lower-cased before lookup and each target field tries an ordered
tuple of candidate keys.
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any

from .exceptions import ExtractionError
from .models import Metadata

# Candidate keys per field, tried in order
STREAM_FIELDS: dict[str, tuple[str, ...]] = {
    "sample_rate": ("sample_rate",),
    "bit_depth": ("bits_per_raw_sample", "bits_per_sample"),
    "channels": ("channels",),
}

FORMAT_FIELDS: dict[str, tuple[str, ...]] = {
    "size": ("size",),
    "bit_rate": ("bit_rate",),
}

TAG_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("title", "name"),
    "album": ("album",),
    "artist": ("artist", "albumartist", "album_artist", "composer"),
    "genre": ("genre",),
}

YEAR_TAGS: tuple[str, ...] = ("year", "date")

_LEADING_INT_RE = re.compile(r"^\s*[+-]?\d+")

_DATE_FORMATS: tuple[str, ...] = (
    "%Y",
    "%Y-%m",
    "%Y/%m/%d",
    "%Y/%m",
    "%d.%m.%Y",
    "%m/%d/%Y",
    "%d %b %Y",
    "%b %d, %Y",
    "%B %d, %Y",
)


def _keys_to_lower(mapping: Any) -> dict[str, Any]:
    if not isinstance(mapping, dict):
        return {}
    return {str(key).lower(): value for key, value in mapping.items()}


def _to_int(value: Any) -> int | None:
    """Parse the leading integer of *value*; ``None`` when absent, unparseable or zero."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = int(value)
        except (ValueError, OverflowError):  # NaN / inf
            return None
    else:
        match = _LEADING_INT_RE.match(str(value))
        if not match:
            return None
        number = int(match.group())
    return number or None


def _lower(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value).lower()


def _first(mapping: dict[str, Any], candidates: tuple[str, ...]) -> Any:
    for key in candidates:
        value = mapping.get(key)
        if value not in (None, ""):
            return value
    return None


def _first_int(mapping: dict[str, Any], candidates: tuple[str, ...]) -> int | None:
    for key in candidates:
        number = _to_int(mapping.get(key))
        if number is not None:
            return number
    return None


def parse_year(value: Any) -> int | None:
    """Parse a tag date such as ``2001-05-01`` or ``2001`` and return its year.

    Returns:
        The year, or ``None`` if *value* is not a recognizable date.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).year
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).year
        except ValueError:
            continue
    return None


def _format_name(value: Any) -> str | None:
    # e.g. HLS streams report format_name="hls,applehttp"
    name = _lower(value)
    if name is None:
        return None
    return name.split(",")[0].strip() or None


def _project(stream: dict[str, Any], fmt: dict[str, Any]) -> Metadata:
    # Tags usually live on the container; Ogg/FLAC put them on the stream
    tags = {**_keys_to_lower(stream.get("tags")), **_keys_to_lower(fmt.get("tags"))}

    values: dict[str, Any] = {
        "codec": _lower(stream.get("codec_name")),
        "format": _format_name(fmt.get("format_name")),
        "duration": _first_int(stream, ("duration",)) or _first_int(fmt, ("duration",)),
        "year": parse_year(_first(tags, YEAR_TAGS)),
    }
    for field, candidates in STREAM_FIELDS.items():
        values[field] = _first_int(stream, candidates)
    for field, candidates in FORMAT_FIELDS.items():
        values[field] = _first_int(fmt, candidates)
    for field, candidates in TAG_FIELDS.items():
        tag = _first(tags, candidates)
        values[field] = str(tag) if tag is not None else None

    return Metadata(**values)


def extract(identifier: str, raw: str | bytes) -> Metadata:
    """Validate raw ffprobe output and project it into a :class:`Metadata` record.

    Args:
        identifier: Resource that was probed, used in error messages.
        raw: ffprobe stdout in JSON format.

    Returns:
        Metadata: The normalized record.

    Raises:
        ExtractionError: If the output is not JSON, lacks a non-empty
            ``streams`` list or a ``format`` block, or projection fails.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw

    try:
        info = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ExtractionError("ffprobe returned unexpected output", identifier, raw=text) from e

    if not isinstance(info, dict):
        raise ExtractionError("ffprobe returned unexpected output", identifier, raw=text)

    streams = info.get("streams")
    fmt = info.get("format")
    if not isinstance(streams, list) or not streams or not isinstance(streams[0], dict) or not isinstance(fmt, dict):
        raise ExtractionError("ffprobe didn't return all requested data", identifier, raw=text)

    try:
        return _project(_keys_to_lower(streams[0]), _keys_to_lower(fmt))
    except Exception as e:
        raise ExtractionError(f"Failed while extracting info from ffprobe result: {e}", identifier, raw=text) from e
