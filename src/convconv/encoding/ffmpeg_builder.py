"""FFmpeg argument vector construction."""

import re
from pathlib import PurePath

from convconv.models.ffmpeg import ConversionOptions
from convconv.models.test_source import AudioChannel, AudioType, TestPattern, TestSourceOptions

SCALE_RE = re.compile(r"^(\d+)x(\d+)$")

# Codec arguments forced when the user did not pick a codec, keyed by output extension
EXTENSION_CODECS: dict[str, list[str]] = {
    "mp4": ["-c:v", "libx264", "-c:a", "aac"],
    "mov": ["-c:v", "libx264", "-c:a", "aac"],
    "webm": ["-c:v", "libvpx-vp9", "-c:a", "libopus"],
    "mp3": ["-c:a", "libmp3lame", "-q:a", "2"],
    "aac": ["-c:a", "aac", "-b:a", "192k"],
    "wav": ["-c:a", "pcm_s16le"],
    "flac": ["-c:a", "flac"],
}

TEST_SOURCE_VIDEO_CODECS = {
    "mp4": "libx264",
    "mov": "libx264",
    "mkv": "libx264",
    "webm": "libvpx-vp9",
    "avi": "mpeg4",
    "mxf": "mpeg2video",
}

TEST_SOURCE_AUDIO_CODECS = {
    "mp4": "aac",
    "mov": "aac",
    "mkv": "aac",
    "webm": "libopus",
    "avi": "mp3",
    "mxf": "pcm_s16le",
}

OVERLAY_STYLE = "fontsize=24:fontcolor=white:box=1:boxcolor=black@0.5"


def quote_arg(arg: str) -> str:
    """Wrap an argument in double quotes when it contains whitespace."""
    if not arg or any(ch.isspace() for ch in arg):
        escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return arg


def render_command(cmd: list[str]) -> str:
    """Render an argument vector as a single copy-pasteable command line."""
    return " ".join(quote_arg(arg) for arg in cmd)


class FFmpegCommandBuilder:
    """Builds FFmpeg argument vectors (without the binary itself)."""

    def build_conversion_args(
        self,
        input_path: str,
        output_path: str,
        options: ConversionOptions | None = None,
    ) -> list[str]:
        """Arguments for converting ``input_path`` into ``output_path``.

        Order is fixed: input, progress pipe, overwrite, scale filter, codecs,
        video bitrate, forced format, custom args, output.
        """
        options = options or ConversionOptions()
        args = ["-i", str(input_path), "-progress", "pipe:2", "-y"]

        if options.scale:
            match = SCALE_RE.match(options.scale)
            if match:
                args.extend(["-vf", f"scale={match.group(1)}:{match.group(2)}"])

        if options.codec:
            args.extend(["-c", options.codec])
        else:
            args.extend(self.codec_args_for(output_path))

        if options.bitrate:
            args.extend(["-b:v", options.bitrate])
        if options.format:
            args.extend(["-f", options.format])
        args.extend(options.custom_args)

        args.append(str(output_path))
        return args

    def codec_args_for(self, output_path: str) -> list[str]:
        """Default codec arguments for the output's extension, if any."""
        ext = PurePath(str(output_path)).suffix.lstrip(".").lower()
        return list(EXTENSION_CODECS.get(ext, []))

    def build_test_source_args(self, options: TestSourceOptions, output_path: str) -> list[str]:
        """Arguments that synthesize a test clip from lavfi sources."""
        fmt = options.format.lower()
        args = ["-hide_banner"]
        args.extend(["-f", "lavfi", "-i", self.video_source(options)])
        args.extend(["-f", "lavfi", "-i", self.audio_source(options)])
        args.extend(["-t", _number(options.duration)])

        if options.frame_rate:
            args.extend(["-r", _number(options.frame_rate)])

        video_codec = options.codec or TEST_SOURCE_VIDEO_CODECS.get(fmt)
        if video_codec:
            args.extend(["-c:v", video_codec])

        args.extend(["-c:a", TEST_SOURCE_AUDIO_CODECS.get(fmt, "aac")])
        args.extend(["-ar", str(options.sample_rate)])
        args.extend(["-ac", "2" if options.audio_channel == AudioChannel.STEREO else "1"])

        overlay = self.overlay_filter(options)
        if overlay:
            args.extend(["-vf", overlay])

        args.extend(["-progress", "pipe:2", "-y", str(output_path)])
        return args

    def video_source(self, options: TestSourceOptions) -> str:
        size = options.resolution
        sources = {
            TestPattern.SMPTE: f"smptebars=size={size}",
            TestPattern.EBU: f"smptebars=size={size}",
            TestPattern.HD: f"smptehdbars=size={size}",
            TestPattern.GRAYSCALE: f"color=gray:size={size}",
            TestPattern.RESOLUTION: f"testsrc=size={size}",
            TestPattern.SOLID: f"color=white:size={size}",
            TestPattern.GRADIENT: f"gradients=size={size}",
            TestPattern.CHECKERBOARD: f"testsrc2=size={size}",
            TestPattern.NOISE: f"color=black:size={size},noise=alls=100:allf=t+u",
        }
        return sources.get(options.pattern, f"testsrc=size={size}")

    def audio_source(self, options: TestSourceOptions) -> str:
        rate = options.sample_rate
        if options.audio_type == AudioType.SINE:
            frequency = _number(options.audio_frequency or 1000)
            return f"sine=frequency={frequency}:sample_rate={rate}"
        if options.audio_type == AudioType.WHITE_NOISE:
            return f"anoisesrc=color=white:sample_rate={rate}"
        if options.audio_type == AudioType.PINK_NOISE:
            return f"anoisesrc=color=pink:sample_rate={rate}"
        return f"anullsrc=sample_rate={rate}"

    def overlay_filter(self, options: TestSourceOptions) -> str:
        """Stack of drawtext filters, one line per enabled overlay."""
        texts = []
        if options.show_timecode:
            texts.append("%{pts\\:hms}")
        if options.show_frame_counter:
            texts.append("Frame\\: %{n}")
        if options.show_metadata:
            texts.append(f"{options.resolution} @ {_number(options.frame_rate or 25)}fps")
        if options.custom_text:
            texts.append(options.custom_text.replace("'", "\\'"))

        filters = []
        for i, text in enumerate(texts):
            y = 10 + i * 40
            filters.append(f"drawtext=text='{text}':x=10:y={y}:{OVERLAY_STYLE}")
        return ",".join(filters)


def _number(value: float) -> str:
    """Render 30.0 as "30" and 29.97 as "29.97"."""
    return str(int(value)) if float(value).is_integer() else str(value)
