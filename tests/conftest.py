"""Shared test fixtures: fake connections, scripted runners, stand-in encoders."""

import json
import stat
import tempfile
from pathlib import Path

import pytest

from convconv.config import Settings
from convconv.models.ffmpeg import EncodeResult, ProgressSample
from convconv.models.test_source import AudioChannel, AudioType, TestPattern, TestSourceOptions

SAMPLE_STDERR = """\
Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'uploads/a.mov':
  Duration: 00:00:10.00, start: 0.000000, bitrate: 1205 kb/s
  Stream #0:0(und): Video: h264 (High) (avc1 / 0x31637661), yuv420p, 1280x720, 30 fps
frame=1
fps=0.00
bitrate=N/A
out_time_ms=1000000
speed=N/A
progress=continue
frame=  150 fps= 30 q=28.0 size=     256kB time=00:00:05.00 bitrate= 419.4kbits/s speed=1.02x
frame=300
fps=30.00
bitrate= 400.1kbits/s
out_time_ms=10000000
speed=1.01x
progress=end
"""


class FakeConnection:
    """In-memory stand-in for a WebSocket subscriber."""

    def __init__(self, is_open: bool = True, fail: bool = False):
        self.is_open = is_open
        self.fail = fail
        self.messages: list[str] = []

    async def send(self, message: str) -> None:
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.messages.append(message)

    @property
    def events(self) -> list[dict]:
        return [json.loads(m) for m in self.messages]

    def events_of(self, event_type: str) -> list[dict]:
        return [e for e in self.events if e["type"] == event_type]


class ScriptedRunner:
    """Runner double that replays fixed samples and returns a fixed result."""

    def __init__(
        self,
        samples: list[ProgressSample] | None = None,
        result: EncodeResult | None = None,
    ):
        self.samples = samples or []
        self.result = result or EncodeResult(success=True, output_path="out", duration=9.0)
        self.calls: list[tuple] = []

    async def convert(self, input_path, output_path, options=None, on_progress=None):
        self.calls.append(("convert", input_path, output_path, options))
        return await self._replay(on_progress)

    async def generate(self, options, output_path, on_progress=None):
        self.calls.append(("generate", options, output_path))
        return await self._replay(on_progress)

    async def _replay(self, on_progress):
        for sample in self.samples:
            if on_progress:
                await on_progress(sample)
        return self.result


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def settings(tmp_dir):
    return Settings(
        upload_dir=tmp_dir / "uploads",
        output_dir=tmp_dir / "outputs",
        ffmpeg_binary_path=str(tmp_dir / "missing-ffmpeg"),
    )


@pytest.fixture
def fake_encoder(tmp_dir):
    """Factory for shell scripts that behave like a tiny ffmpeg.

    The script writes ``stderr`` to its diagnostic stream, optionally sleeps,
    touches its last argument (the output path) on success and exits with
    ``exit_code``.
    """
    counter = iter(range(1000))

    def make(stderr: str | bytes = SAMPLE_STDERR, exit_code: int = 0, sleep: float = 0) -> str:
        n = next(counter)
        stderr_file = tmp_dir / f"encoder_{n}.stderr"
        stderr_file.write_bytes(stderr if isinstance(stderr, bytes) else stderr.encode())
        script = tmp_dir / f"encoder_{n}.sh"
        touch = 'for last; do :; done\n[ -n "$last" ] && touch "$last"\n' if exit_code == 0 else ""
        script.write_text(
            "#!/bin/sh\n"
            f'cat "{stderr_file}" >&2\n'
            f"sleep {sleep} 2>/dev/null\n"
            f"{touch}"
            f"exit {exit_code}\n"
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return make


@pytest.fixture
def sample_test_source_options():
    return TestSourceOptions(
        pattern=TestPattern.SMPTE,
        resolution="1280x720",
        duration=10,
        frame_rate=30,
        audio_type=AudioType.SINE,
        audio_frequency=440,
        audio_channel=AudioChannel.STEREO,
        sample_rate=48000,
        bit_depth=16,
        format="mp4",
    )
