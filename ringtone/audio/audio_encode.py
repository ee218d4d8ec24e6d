"""
Encoding rendered audio to ringtone files.

WAV is packed by hand: a canonical 44-byte RIFF header followed by
interleaved little-endian samples, either 16-bit PCM (format tag 1) or 32-bit
IEEE float (format tag 3). MP3 goes through pydub, which drives ffmpeg.

Examples:
    >>> data = encode_wav(buffer)  # doctest: +SKIP
    >>> read_wav_header(data)["bits_per_sample"]  # doctest: +SKIP
    16
    >>> export_ringtone(buffer, "holiday_ringtone", fmt="mp3")  # doctest: +SKIP
    PosixPath('holiday_ringtone.mp3')
"""

import io
import struct
from pathlib import Path
import numpy as np

from ..util import RingtoneError, non_colliding_path
from .audio_buffer import AudioBuffer

WAV_HEADER_SIZE = 44
WAVE_FORMAT_PCM = 1
WAVE_FORMAT_IEEE_FLOAT = 3
MP3_BITRATE = "192k"
EXPORT_FORMATS = ("wav", "mp3")

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


class UnsupportedFormatError(RingtoneError, ValueError):
    """The requested export format is not one of `EXPORT_FORMATS`."""


class ExportError(RingtoneError):
    """Encoding or writing the ringtone failed."""


def interleave(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    """
    Interleave two channels into ``L0 R0 L1 R1 ...``.

    >>> interleave(np.array([1., 2.]), np.array([10., 20.])).tolist()
    [1.0, 10.0, 2.0, 20.0]
    """
    out = np.empty(len(left) + len(right), dtype=np.float32)
    out[0::2] = left
    out[1::2] = right
    return out


def float_to_16bit_pcm(samples: np.ndarray) -> np.ndarray:
    """
    Clamp to [-1, 1] and scale negatives by 0x8000, positives by 0x7FFF.

    >>> float_to_16bit_pcm(np.array([-1.0, 0.0, 1.0, 2.0])).tolist()
    [-32768, 0, 32767, 32767]
    """
    s = np.clip(samples.astype(np.float64), -1.0, 1.0)
    scaled = np.where(s < 0, s * 0x8000, s * 0x7FFF)
    return np.trunc(scaled).astype("<i2")


def _wav_header(
    n_data_bytes: int, fmt_tag: int, sample_rate: int, n_channels: int, bit_depth: int
) -> bytes:
    block_align = n_channels * bit_depth // 8
    return _HEADER.pack(
        b"RIFF",
        36 + n_data_bytes,
        b"WAVE",
        b"fmt ",
        16,
        fmt_tag,
        n_channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        bit_depth,
        b"data",
        n_data_bytes,
    )


def encode_wav(buffer: AudioBuffer, *, float32: bool = False) -> bytes:
    """
    Encode a buffer as WAV file bytes.

    Args:
        buffer: Mono or stereo audio
        float32: Write 32-bit float samples instead of 16-bit PCM

    Returns:
        The complete file contents
    """
    if buffer.n_channels == 2:
        interleaved = interleave(buffer.channel_data(0), buffer.channel_data(1))
    else:
        interleaved = buffer.channel_data(0)

    if float32:
        fmt_tag, bit_depth = WAVE_FORMAT_IEEE_FLOAT, 32
        payload = interleaved.astype("<f4").tobytes()
    else:
        fmt_tag, bit_depth = WAVE_FORMAT_PCM, 16
        payload = float_to_16bit_pcm(interleaved).tobytes()

    header = _wav_header(
        len(payload), fmt_tag, buffer.sample_rate, buffer.n_channels, bit_depth
    )
    return header + payload


def read_wav_header(data: bytes) -> dict:
    """
    Parse the fields of a canonical 44-byte WAV header.

    Raises:
        ValueError: If the bytes don't start with a canonical RIFF/WAVE header
    """
    if len(data) < WAV_HEADER_SIZE:
        raise ValueError(
            f"WAV data too short: {len(data)} bytes, need {WAV_HEADER_SIZE}"
        )
    (
        riff,
        riff_size,
        wave,
        fmt_id,
        fmt_size,
        fmt_tag,
        n_channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        data_id,
        data_size,
    ) = _HEADER.unpack_from(data)
    if riff != b"RIFF" or wave != b"WAVE" or fmt_id != b"fmt " or data_id != b"data":
        raise ValueError("Not a canonical RIFF/WAVE header")
    return {
        "riff_size": riff_size,
        "fmt_size": fmt_size,
        "format": fmt_tag,
        "channels": n_channels,
        "sample_rate": sample_rate,
        "byte_rate": byte_rate,
        "block_align": block_align,
        "bits_per_sample": bits_per_sample,
        "data_size": data_size,
    }


def encode_mp3(buffer: AudioBuffer, *, bitrate: str = MP3_BITRATE) -> bytes:
    """Encode a buffer as MP3 bytes (needs ffmpeg with libmp3lame)."""
    out = io.BytesIO()
    buffer.to_segment().export(out, format="mp3", bitrate=bitrate)
    return out.getvalue()


def encode(buffer: AudioBuffer, fmt: str = "wav", **kwargs) -> bytes:
    """Encode ``buffer`` in one of `EXPORT_FORMATS`."""
    fmt = fmt.lower().lstrip(".")
    if fmt == "wav":
        return encode_wav(buffer, **kwargs)
    elif fmt == "mp3":
        return encode_mp3(buffer, **kwargs)
    raise UnsupportedFormatError(
        f"Unsupported export format: {fmt!r}. Choose one of {EXPORT_FORMATS}."
    )


def export_ringtone(
    buffer: AudioBuffer,
    file_name: str,
    *,
    fmt: str = "wav",
    output_dir: str | Path = ".",
    overwrite: bool = False,
    **encode_kwargs,
) -> Path:
    """
    Encode ``buffer`` and write it as ``<output_dir>/<file_name>.<fmt>``.

    Args:
        buffer: Rendered ringtone
        file_name: Name of the file without extension
        fmt: 'wav' or 'mp3'
        output_dir: Target directory, created if missing
        overwrite: If False, an existing file is kept and a free name is used
        **encode_kwargs: Passed on to the encoder (``float32``, ``bitrate``)

    Returns:
        Path of the written file

    Raises:
        UnsupportedFormatError: If ``fmt`` is not one of `EXPORT_FORMATS`
        ExportError: If encoding or writing the file fails
    """
    from config2py import process_path

    fmt = fmt.lower().lstrip(".")
    if fmt not in EXPORT_FORMATS:
        raise UnsupportedFormatError(
            f"Unsupported export format: {fmt!r}. Choose one of {EXPORT_FORMATS}."
        )

    directory = Path(process_path(str(output_dir), ensure_dir_exists=True))
    output_path = directory / f"{file_name}.{fmt}"
    if not overwrite:
        output_path = non_colliding_path(output_path)

    try:
        data = encode(buffer, fmt, **encode_kwargs)
    except Exception as e:
        hint = " Try exporting as WAV instead." if fmt == "mp3" else ""
        raise ExportError(f"Could not encode ringtone as {fmt}.{hint}") from e

    try:
        output_path.write_bytes(data)
    except OSError as e:
        raise ExportError(f"Could not write ringtone to {output_path}: {e}") from e
    print(f"Saved ringtone to: {output_path}")
    return output_path
