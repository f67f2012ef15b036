# SPDX-License-Identifier: MIT
"""Integration tests running FFprobeRunner against real child processes."""

import json
import shutil
import sys
import wave

import pytest

from mediaprobe.exceptions import InvocationError
from mediaprobe.infrastructure import FFprobeRunner, ProbeCache

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="fake ffprobe is a POSIX shell script")

PROBE_JSON = json.dumps(
    {
        "streams": [{"codec_name": "mp3", "sample_rate": "44100", "channels": 2}],
        "format": {"format_name": "mp3", "size": "4096", "tags": {"artist": "Fake"}},
    }
)


@pytest.mark.integration
class TestFakeFFprobe:
    """Run both invocation modes against a shell script standing in for ffprobe."""

    async def test_async_success(self, make_fake_ffprobe):
        runner = FFprobeRunner(make_fake_ffprobe(f"echo '{PROBE_JSON}'"))

        output = await runner.invoke("a.mp3", 5.0)
        assert json.loads(output)["format"]["size"] == "4096"

    def test_sync_success(self, make_fake_ffprobe):
        runner = FFprobeRunner(make_fake_ffprobe(f"echo '{PROBE_JSON}'"))

        output = runner.invoke_sync("a.mp3", 5.0)
        assert json.loads(output)["streams"][0]["codec_name"] == "mp3"

    async def test_receives_identifier_last(self, make_fake_ffprobe):
        runner = FFprobeRunner(make_fake_ffprobe('for last; do :; done; echo "$last"'))

        output = await runner.invoke("http://host/stream.m3u8", 5.0)
        assert output.strip() == "http://host/stream.m3u8"

    async def test_async_non_zero_exit(self, make_fake_ffprobe):
        runner = FFprobeRunner(make_fake_ffprobe('echo "$9: No such file or directory" >&2; exit 1'))

        with pytest.raises(InvocationError, match="exited with code 1") as exc_info:
            await runner.invoke("missing.mp3", 5.0)
        assert exc_info.value.diagnostic == "missing.mp3: No such file or directory"

    @pytest.mark.parametrize("mode", ["async", "sync"])
    async def test_non_utf8_stderr_is_replaced(self, make_fake_ffprobe, mode):
        runner = FFprobeRunner(make_fake_ffprobe("printf 'caf\\351.mp3: No such file\\n' >&2; exit 1"))

        with pytest.raises(InvocationError, match="exited with code 1") as exc_info:
            if mode == "async":
                await runner.invoke("café.mp3", 5.0)
            else:
                runner.invoke_sync("café.mp3", 5.0)
        assert exc_info.value.diagnostic == "caf\ufffd.mp3: No such file"

    def test_non_utf8_failure_is_cached_by_sync_path(self, make_fake_ffprobe):
        runner = FFprobeRunner(make_fake_ffprobe("printf 'caf\\351.mp3: No such file\\n' >&2; exit 1"))
        cache = ProbeCache(runner, default_timeout=5.0, clear_interval=60.0)

        with pytest.raises(InvocationError) as first:
            cache.get_sync("café.mp3")
        with pytest.raises(InvocationError) as second:
            cache.get_sync("café.mp3")

        assert second.value is first.value
        assert cache.info().failed == 1

    async def test_async_timeout_keeps_truncated_stderr(self, make_fake_ffprobe):
        runner = FFprobeRunner(make_fake_ffprobe("printf '%0800d' 0 >&2; exec sleep 5"))

        with pytest.raises(InvocationError, match="timed out") as exc_info:
            await runner.invoke("slow.m3u8", 0.5)
        assert exc_info.value.diagnostic is not None
        assert len(exc_info.value.diagnostic) == 500

    def test_sync_timeout_keeps_truncated_stderr(self, make_fake_ffprobe):
        runner = FFprobeRunner(make_fake_ffprobe("printf '%0800d' 0 >&2; exec sleep 5"))

        with pytest.raises(InvocationError, match="timed out") as exc_info:
            runner.invoke_sync("slow.m3u8", 0.5)
        assert len(exc_info.value.diagnostic) <= 500

    async def test_async_missing_executable(self, tmp_path):
        runner = FFprobeRunner(str(tmp_path / "no-such-ffprobe"))

        with pytest.raises(InvocationError, match="Could not start"):
            await runner.invoke("a.mp3", 5.0)

    async def test_timeout_failure_is_cached(self, make_fake_ffprobe, tmp_path):
        counter = tmp_path / "runs"
        runner = FFprobeRunner(make_fake_ffprobe(f"echo run >> {counter}; exec sleep 5"))
        cache = ProbeCache(runner, default_timeout=0.3, clear_interval=60.0)

        with pytest.raises(InvocationError) as first:
            await cache.get("slow.m3u8")
        with pytest.raises(InvocationError) as second:
            await cache.get("slow.m3u8")

        assert second.value is first.value
        assert counter.read_text().count("run") == 1


@pytest.mark.integration
@pytest.mark.skipif(shutil.which("ffprobe") is None, reason="ffprobe not installed")
class TestRealFFprobe:
    """Probe a generated WAV file with the installed ffprobe."""

    @pytest.fixture
    def wav_file(self, tmp_path):
        path = tmp_path / "tone.wav"
        with wave.open(str(path), "wb") as wav:
            wav.setnchannels(1)
            wav.setsampwidth(2)
            wav.setframerate(8000)
            wav.writeframes(b"\x00\x00" * 8000 * 2)
        return path

    async def test_probe_wav(self, wav_file):
        cache = ProbeCache(FFprobeRunner(), default_timeout=10.0, clear_interval=60.0)

        meta = await cache.get(str(wav_file))

        assert meta.codec == "pcm_s16le"
        assert meta.format == "wav"
        assert meta.sample_rate == 8000
        assert meta.channels == 1
        assert meta.duration == 2

    def test_probe_wav_sync(self, wav_file):
        cache = ProbeCache(FFprobeRunner(), default_timeout=10.0, clear_interval=60.0)

        meta = cache.get_sync(str(wav_file))
        assert meta.size == wav_file.stat().st_size
