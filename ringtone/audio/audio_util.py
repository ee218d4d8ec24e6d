"""Audio utility functions."""

import io
import numpy as np
from pathlib import Path
from typing import Union, TYPE_CHECKING

from ..util import require_package, RingtoneError
from .audio_buffer import AudioBuffer

if TYPE_CHECKING:
    from pydub import AudioSegment

DEFAULT_SAMPLE_RATE = 44100

AudioSource = Union[
    str, Path, bytes, np.ndarray, tuple, AudioBuffer, "AudioSegment"
]


class MediaDecodeError(RingtoneError):
    """The source could not be decoded as audio."""


def load_audio(source: AudioSource, *, sample_rate: int | None = None) -> AudioBuffer:
    """
    Decode an audio source into an `AudioBuffer`.

    Args:
        source: One of:
            - str or Path: File path to an audio (or video) file
            - bytes: Raw file bytes
            - tuple: Already decoded ``(samples, sample_rate)``
            - np.ndarray: Samples, at ``sample_rate`` (default 44100 Hz)
            - AudioSegment or AudioBuffer
        sample_rate: Sample rate for bare numpy arrays

    Returns:
        The decoded buffer

    Raises:
        FileNotFoundError: If a file path doesn't exist
        MediaDecodeError: If the file can't be decoded
        TypeError: If the source type is not supported

    Examples:
        >>> buf = load_audio("song.mp3")  # doctest: +SKIP
        >>> buf = load_audio(Path("clip.wav"))  # doctest: +SKIP
        >>> buf = load_audio((samples, 22050))  # doctest: +SKIP
    """
    AudioSegment = require_package("pydub").AudioSegment

    if isinstance(source, AudioBuffer):
        return source
    elif isinstance(source, AudioSegment):
        return AudioBuffer.from_segment(source)
    elif isinstance(source, tuple) and len(source) == 2:
        samples, sr = source
        if not isinstance(samples, np.ndarray) or not isinstance(
            sr, (int, np.integer)
        ):
            raise TypeError(
                f"Invalid (samples, sr) tuple: expected (ndarray, int), "
                f"got ({type(samples).__name__}, {type(sr).__name__})"
            )
        return AudioBuffer(samples, int(sr))
    elif isinstance(source, np.ndarray):
        return AudioBuffer(source, sample_rate or DEFAULT_SAMPLE_RATE)
    elif isinstance(source, (str, Path)):
        path = Path(source).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")
        return _decode(AudioSegment.from_file, str(path), label=str(path))
    elif isinstance(source, (bytes, bytearray)):
        # pydub reads WAV natively, everything else needs a hint or ffmpeg's probe
        fmt = "wav" if source[:4] == b"RIFF" and source[8:12] == b"WAVE" else None
        return _decode(
            AudioSegment.from_file, io.BytesIO(source), label="<bytes>", format=fmt
        )
    else:
        raise TypeError(
            f"Unsupported audio source type: {type(source).__name__}. "
            f"Expected str, Path, bytes, ndarray, (samples, sr) tuple, "
            f"AudioSegment or AudioBuffer."
        )


def _decode(reader, src, *, label: str, **reader_kwargs) -> AudioBuffer:
    try:
        segment = reader(src, **reader_kwargs)
    except Exception as e:
        # pydub surfaces ffmpeg failures as CouldntDecodeError or plain OSErrors
        raise MediaDecodeError(
            f"Could not decode {label}. Make sure it is a valid audio or video file."
        ) from e
    buffer = AudioBuffer.from_segment(segment)
    if buffer.length == 0:
        raise MediaDecodeError(f"{label} contains no audio")
    return buffer


def get_audio_info(source: AudioSource) -> dict:
    """
    Get audio properties (duration, sample rate, channels).

    Args:
        source: Anything `load_audio` accepts

    Returns:
        Dictionary with audio properties

    Examples:
        >>> info = get_audio_info("audio.mp3")  # doctest: +SKIP
        >>> info['duration_seconds']  # doctest: +SKIP
        120.5
    """
    buffer = load_audio(source)
    return {
        "duration_seconds": buffer.duration,
        "duration_ms": int(round(buffer.duration * 1000)),
        "sample_rate": buffer.sample_rate,
        "channels": buffer.n_channels,
        "frame_count": buffer.length,
    }
