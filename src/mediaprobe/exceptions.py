# SPDX-License-Identifier: MIT
"""Exceptions raised while probing media resources.

Both concrete kinds are cached against the resource identifier and raised
again for every later request until the cache is cleared.
"""


class ProbeError(Exception):
    """Base exception for all probe failures."""

    def __init__(self, message: str, identifier: str):
        self.message = message
        self.identifier = identifier
        super().__init__(f"{message} [{identifier}]")


class InvocationError(ProbeError):
    """ffprobe could not be started, timed out, or exited non-zero."""

    def __init__(self, message: str, identifier: str, diagnostic: str | None = None):
        self.diagnostic = diagnostic
        super().__init__(message, identifier)

    def __str__(self) -> str:
        base = super().__str__()
        if self.diagnostic:
            return f"{base}\nSTDERR:\n{self.diagnostic}"
        return base


class ExtractionError(ProbeError):
    """ffprobe ran but its output was unparseable or incomplete."""

    def __init__(self, message: str, identifier: str, raw: str | None = None):
        self.raw = raw
        super().__init__(message, identifier)
