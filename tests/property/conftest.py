"""Hypothesis strategies for property-based testing."""

from hypothesis import strategies as st

from convconv.models.ffmpeg import ConversionOptions, ProgressSample

SAFE_PATH_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789_- ."


@st.composite
def generate_conversion_options(draw):
    """Generate random ConversionOptions, including malformed scales."""
    scale = draw(
        st.one_of(
            st.none(),
            st.builds(
                lambda w, h: f"{w}x{h}",
                st.integers(min_value=1, max_value=7680),
                st.integers(min_value=1, max_value=4320),
            ),
            st.text(alphabet="0123456789x:", max_size=10),
        )
    )
    custom_args = draw(
        st.lists(st.text(alphabet="abcdefghijklmnopqrstuvwxyz:-= 0123456789", max_size=12), max_size=4)
    )
    return ConversionOptions(
        codec=draw(st.one_of(st.none(), st.sampled_from(["copy", "libx265", "prores_ks"]))),
        bitrate=draw(st.one_of(st.none(), st.sampled_from(["500k", "2M", "8M"]))),
        format=draw(st.one_of(st.none(), st.sampled_from(["mp4", "matroska", "mov"]))),
        scale=scale,
        custom_args=custom_args,
    )


@st.composite
def generate_media_path(draw, extensions=("mp4", "mov", "webm", "mp3", "aac", "wav", "flac", "mkv", "MP4")):
    """Generate a relative media path, possibly with spaces."""
    stem = draw(st.text(alphabet=SAFE_PATH_CHARS, min_size=1, max_size=20).filter(lambda s: s.strip()))
    ext = draw(st.sampled_from(extensions))
    return f"outputs/{stem.strip()}.{ext}"


@st.composite
def generate_progress_sample(draw):
    """Generate a valid ProgressSample."""
    return ProgressSample(
        percent=draw(st.integers(min_value=0, max_value=100)),
        time=draw(st.sampled_from(["00:00:00", "00:00:05", "00:01:30", "01:00:00"])),
        bitrate=draw(st.sampled_from(["", "N/A", "1205.3kbits/s"])),
        speed=draw(st.sampled_from(["", "1.02x", "0.5x"])),
    )


# One job lifecycle call; the registry decides whether it is legal
TRANSITIONS = ("start", "complete", "fail", "cancel", "progress")


@st.composite
def generate_transition_sequence(draw):
    return draw(
        st.lists(
            st.tuples(st.sampled_from(TRANSITIONS), st.integers(min_value=-10, max_value=120)),
            max_size=12,
        )
    )
