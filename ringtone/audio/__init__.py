"""Audio rendering and encoding for ringtones.

Main exports:
- AudioBuffer: Float sample buffer, mono or stereo
- load_audio: Decode files, bytes and arrays into an AudioBuffer
- Region, default_region: The selected time window
- EffectSettings, render_region, Renderer: The offline effect chain
- encode_wav, encode_mp3, export_ringtone: Ringtone file output
- compute_peaks: Waveform summary for display

Examples:
    >>> from ringtone.audio import load_audio, Region, EffectSettings, render_region  # doctest: +SKIP
    >>> buf = load_audio("song.mp3")  # doctest: +SKIP
    >>> out = render_region(buf, Region(10, 30), EffectSettings(fade_out=3))  # doctest: +SKIP
    >>> export_ringtone(out, "song_ringtone")  # doctest: +SKIP
"""

from .audio_buffer import AudioBuffer
from .audio_util import load_audio, get_audio_info, MediaDecodeError
from .audio_region import (
    Region,
    default_region,
    MIN_REGION_SPAN,
    MAX_RINGTONE_SECONDS,
)
from .audio_render import (
    EffectSettings,
    DEFAULT_SETTINGS,
    InvalidSettingsError,
    render_region,
    Renderer,
)
from .audio_encode import (
    encode_wav,
    encode_mp3,
    encode,
    read_wav_header,
    export_ringtone,
    EXPORT_FORMATS,
    UnsupportedFormatError,
    ExportError,
)
from .waveform import compute_peaks, peaks_for_width, format_time

__all__ = [
    "AudioBuffer",
    "load_audio",
    "get_audio_info",
    "MediaDecodeError",
    "Region",
    "default_region",
    "MIN_REGION_SPAN",
    "MAX_RINGTONE_SECONDS",
    "EffectSettings",
    "DEFAULT_SETTINGS",
    "InvalidSettingsError",
    "render_region",
    "Renderer",
    "encode_wav",
    "encode_mp3",
    "encode",
    "read_wav_header",
    "export_ringtone",
    "EXPORT_FORMATS",
    "UnsupportedFormatError",
    "ExportError",
    "compute_peaks",
    "peaks_for_width",
    "format_time",
]
