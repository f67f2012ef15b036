# SPDX-License-Identifier: MIT
"""ffprobe invocation, in non-blocking (anyio) and blocking (subprocess) flavours."""

from __future__ import annotations

import subprocess
from typing import Protocol, runtime_checkable

import anyio
from anyio.abc import ByteReceiveStream

from ..config import DEFAULT_FFPROBE_PATH, DIAGNOSTIC_LIMIT
from ..exceptions import InvocationError

PROBE_ARGS: tuple[str, ...] = (
    "-v",
    "error",
    "-select_streams",
    "a:0",
    "-show_streams",
    "-show_format",
    "-of",
    "json",
)
"""Fixed ffprobe flags: errors only, first audio stream, stream + format details as JSON."""


@runtime_checkable
class ProbeRunner(Protocol):
    """Anything that can run the probe tool against a resource identifier.

    Both methods return the tool's raw stdout and raise
    :class:`~mediaprobe.exceptions.InvocationError` on failure.
    """

    async def invoke(self, identifier: str, timeout: float) -> str:
        """Run the probe without blocking the event loop."""
        ...

    def invoke_sync(self, identifier: str, timeout: float) -> str:
        """Run the probe, blocking the calling thread."""
        ...


def limit_diagnostic(text: str | bytes | None, limit: int = DIAGNOSTIC_LIMIT) -> str | None:
    """Decode and truncate captured stderr to at most *limit* characters."""
    if text is None:
        return None
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    text = text.strip()
    if not text:
        return None
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


async def _drain(stream: ByteReceiveStream | None, buffer: bytearray) -> None:
    if stream is None:
        return
    async for chunk in stream:
        buffer.extend(chunk)


class FFprobeRunner:
    """Runs ffprobe with :data:`PROBE_ARGS` against a path, URL or device.

    Args:
        executable: ffprobe binary name or path.
    """

    def __init__(self, executable: str = DEFAULT_FFPROBE_PATH) -> None:
        self.executable = executable

    def command(self, identifier: str) -> list[str]:
        return [self.executable, *PROBE_ARGS, identifier]

    async def invoke(self, identifier: str, timeout: float) -> str:
        """Run ffprobe as a child process, suspending the calling task until it exits.

        The process is killed if *timeout* expires or the caller is cancelled.

        Args:
            identifier: Resource to probe.
            timeout: Seconds before the invocation is treated as failed.

        Returns:
            str: ffprobe stdout.

        Raises:
            InvocationError: On timeout, non-zero exit, or if ffprobe can't be started.
        """
        stdout = bytearray()
        stderr = bytearray()

        try:
            async with await anyio.open_process(self.command(identifier), stdin=subprocess.DEVNULL) as process:
                try:
                    with anyio.fail_after(timeout):
                        async with anyio.create_task_group() as tg:
                            tg.start_soon(_drain, process.stdout, stdout)
                            tg.start_soon(_drain, process.stderr, stderr)
                        returncode = await process.wait()
                except BaseException:
                    if process.returncode is None:
                        process.kill()
                    raise
        except TimeoutError as e:
            raise InvocationError(
                f"ffprobe timed out after {timeout}s", identifier, diagnostic=limit_diagnostic(bytes(stderr))
            ) from e
        except OSError as e:
            raise InvocationError(f"Could not start {self.executable}: {e}", identifier) from e

        if returncode != 0:
            raise InvocationError(
                f"ffprobe exited with code {returncode}", identifier, diagnostic=limit_diagnostic(bytes(stderr))
            )
        return stdout.decode("utf-8", errors="replace")

    def invoke_sync(self, identifier: str, timeout: float) -> str:
        """Run ffprobe and block the calling thread until it exits.

        Args:
            identifier: Resource to probe.
            timeout: Seconds before the invocation is treated as failed.

        Returns:
            str: ffprobe stdout.

        Raises:
            InvocationError: On timeout, non-zero exit, or if ffprobe can't be started.
        """
        try:
            result = subprocess.run(
                self.command(identifier),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise InvocationError(
                f"ffprobe timed out after {timeout}s", identifier, diagnostic=limit_diagnostic(e.stderr)
            ) from e
        except OSError as e:
            raise InvocationError(f"Could not start {self.executable}: {e}", identifier) from e

        if result.returncode != 0:
            raise InvocationError(
                f"ffprobe exited with code {result.returncode}", identifier, diagnostic=limit_diagnostic(result.stderr)
            )
        return result.stdout.decode("utf-8", errors="replace")
