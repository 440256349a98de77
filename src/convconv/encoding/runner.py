"""FFmpeg process runner. Spawns the encoder and streams its progress."""

import asyncio
import codecs
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from convconv.encoding.ffmpeg_builder import FFmpegCommandBuilder, render_command
from convconv.encoding.progress import ProgressParser
from convconv.models.ffmpeg import ConversionOptions, EncodeResult, ProgressSample
from convconv.models.test_source import TestSourceOptions

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressSample], Awaitable[None]]

READ_CHUNK_SIZE = 4096
TERMINATE_GRACE_SECONDS = 5.0


class FFmpegRunner:
    """Runs one encoder process per call; holds no per-run state."""

    def __init__(self, binary_path: str = "ffmpeg", builder: FFmpegCommandBuilder | None = None):
        self.binary_path = binary_path
        self.builder = builder or FFmpegCommandBuilder()

    def build_command(
        self,
        input_path: str,
        output_path: str,
        options: ConversionOptions | None = None,
    ) -> list[str]:
        """Full command (binary first) for a conversion."""
        args = self.builder.build_conversion_args(input_path, output_path, options)
        return [self.binary_path, *args]

    def preview(
        self,
        input_path: str,
        output_path: str,
        options: ConversionOptions | None = None,
    ) -> str:
        """The exact command ``convert`` would run, rendered as one string."""
        return render_command(self.build_command(input_path, output_path, options))

    async def convert(
        self,
        input_path: str,
        output_path: str,
        options: ConversionOptions | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> EncodeResult:
        cmd = self.build_command(input_path, output_path, options)
        return await self.run(cmd, output_path, on_progress)

    async def generate(
        self,
        options: TestSourceOptions,
        output_path: str,
        on_progress: ProgressCallback | None = None,
    ) -> EncodeResult:
        """Synthesize a test clip; its duration is known up front."""
        cmd = [self.binary_path, *self.builder.build_test_source_args(options, output_path)]
        return await self.run(cmd, output_path, on_progress, expected_duration=options.duration)

    async def run(
        self,
        cmd: list[str],
        output_path: str,
        on_progress: ProgressCallback | None = None,
        expected_duration: float | None = None,
    ) -> EncodeResult:
        """Execute ``cmd`` and resolve to a terminal result.

        Spawn failures and nonzero exits are reported in the result, never
        raised. If the caller is cancelled (or ``on_progress`` raises) the
        child is terminated before the exception propagates.
        """
        logger.info("Running encoder: %s", render_command(cmd))
        try:
            Path(output_path).parent.mkdir(parents=True, exist_ok=True)
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Failed to start encoder %s: %s", cmd[0], e)
            return EncodeResult(success=False, error=str(e) or type(e).__name__)

        parser = ProgressParser(duration=expected_duration)
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        stderr_parts: list[str] = []

        try:
            while True:
                chunk = await process.stderr.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                text = decoder.decode(chunk)
                stderr_parts.append(text)
                for sample in parser.feed(text):
                    if on_progress:
                        await on_progress(sample)

            tail = decoder.decode(b"", final=True)
            stderr_parts.append(tail)
            for sample in parser.feed(tail) + parser.flush():
                if on_progress:
                    await on_progress(sample)

            returncode = await process.wait()
        except BaseException:
            await self._terminate(process)
            raise

        stderr_text = "".join(stderr_parts)
        if returncode != 0:
            logger.error("Encoder exited with code %d for %s", returncode, output_path)
            return EncodeResult(
                success=False,
                error=f"FFmpeg exited with code {returncode}\n{stderr_text}",
            )

        return EncodeResult(success=True, output_path=str(output_path), duration=parser.duration)

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """Stop a child we are abandoning and reap it."""
        if process.returncode is not None:
            return
        logger.warning("Terminating encoder process %d", process.pid)
        try:
            process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(asyncio.shield(process.wait()), TERMINATE_GRACE_SECONDS)
        except TimeoutError:
            process.kill()
            await process.wait()
