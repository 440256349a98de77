"""FFmpeg progress parsing.

FFmpeg's diagnostic stream interleaves two things when run with
``-progress pipe:2``: the human-readable log (``Duration: ...`` banner and
``frame=.. time=.. bitrate=.. speed=..`` status lines) and the structured
``key=value`` progress block. ``ProgressParser`` understands both and reduces
them to the same ``ProgressSample`` so callers never care which one fired.
"""

import logging
import math
import re
import time
from collections.abc import Callable

from convconv.models.ffmpeg import ProgressSample

logger = logging.getLogger(__name__)

DURATION_RE = re.compile(r"Duration:\s*(\d+):(\d{2}):(\d{2}(?:\.\d+)?)")
STATS_RE = re.compile(
    r"time=\s*(\d+):(\d{2}):(\d{2}(?:\.\d+)?).*?bitrate=\s*(\S+).*?speed=\s*(\S+)"
)
KEY_VALUE_RE = re.compile(r"^(\w+)=\s*(\S*)$")
LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def parse_timestamp(hours: str, minutes: str, seconds: str) -> float:
    """Convert captured HH, MM, SS(.ff) groups to seconds."""
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def format_timestamp(seconds: float) -> str:
    """Format seconds as ``HH:MM:SS``, truncating fractions."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def compute_percent(current_seconds: float, total_seconds: float) -> int:
    """Percent of ``total_seconds`` reached, rounded half-up, clamped to [0, 100]."""
    if total_seconds <= 0:
        return 0
    percent = math.floor(current_seconds / total_seconds * 100 + 0.5)
    return max(0, min(100, percent))


class ProgressParser:
    """Stateful parser for one encoder invocation.

    State (discovered duration, last structured fields, an unterminated
    trailing line) lives for the life of the process being watched; build a
    fresh parser per run.
    """

    def __init__(self, duration: float | None = None):
        self.duration = duration if duration and duration > 0 else 0.0
        self._duration_known = self.duration > 0
        self._buffer = ""
        self._fields: dict[str, str] = {}
        self.latest: ProgressSample | None = None

    def feed(self, chunk: str) -> list[ProgressSample]:
        """Parse every complete line in ``chunk``; keep the tail for later."""
        lines = LINE_BREAK_RE.split(self._buffer + chunk)
        self._buffer = lines.pop()
        samples = []
        for line in lines:
            sample = self.parse_line(line)
            if sample is not None:
                samples.append(sample)
        return samples

    def flush(self) -> list[ProgressSample]:
        """Parse whatever is left once the stream has ended."""
        tail, self._buffer = self._buffer, ""
        sample = self.parse_line(tail)
        return [sample] if sample is not None else []

    def parse_line(self, line: str) -> ProgressSample | None:
        line = line.strip()
        if not line:
            return None

        if not self._duration_known:
            self._discover_duration(line)

        key_value = KEY_VALUE_RE.match(line)
        if key_value:
            sample = self._parse_structured(key_value.group(1), key_value.group(2))
        else:
            sample = self._parse_stats(line)

        if sample is not None:
            self.latest = sample
        return sample

    def _discover_duration(self, line: str) -> None:
        match = DURATION_RE.search(line)
        if match:
            self.duration = parse_timestamp(*match.groups())
            self._duration_known = True

    def _parse_stats(self, line: str) -> ProgressSample | None:
        """Human-readable ``frame=.. time=.. bitrate=.. speed=..`` status line."""
        match = STATS_RE.search(line)
        if not match:
            return None
        current = parse_timestamp(match.group(1), match.group(2), match.group(3))
        return ProgressSample(
            percent=compute_percent(current, self.duration),
            time=format_timestamp(current),
            bitrate=match.group(4),
            speed=match.group(5),
        )

    def _parse_structured(self, key: str, value: str) -> ProgressSample | None:
        """One line of the ``-progress`` key=value block."""
        if key in ("bitrate", "speed"):
            self._fields[key] = value
            return None
        if key != "out_time_ms":
            return None

        # out_time_ms is reported in microseconds despite its name
        try:
            micros = int(value)
        except ValueError:
            logger.debug("Skipping malformed out_time_ms value: %r", value)
            return None
        if micros < 0:
            logger.debug("Skipping negative out_time_ms value: %d", micros)
            return None

        current = micros / 1_000_000
        return ProgressSample(
            percent=compute_percent(current, self.duration),
            time=format_timestamp(current),
            bitrate=self._fields.get("bitrate", ""),
            speed=self._fields.get("speed", ""),
        )


class ProgressThrottle:
    """Decides which samples are worth forwarding to subscribers.

    A sample passes when its percent differs from the last one passed, or
    when ``interval_ms`` has elapsed since then.
    """

    def __init__(self, interval_ms: int = 500, clock: Callable[[], float] = time.monotonic):
        self.interval_ms = interval_ms
        self._clock = clock
        self._last_percent: int | None = None
        self._last_at = 0.0

    def accept(self, sample: ProgressSample) -> bool:
        now = self._clock()
        if (
            self._last_percent is not None
            and sample.percent == self._last_percent
            and (now - self._last_at) * 1000 < self.interval_ms
        ):
            return False
        self._last_percent = sample.percent
        self._last_at = now
        return True
