"""
Offline rendering of a ringtone from a source buffer.

The signal chain is fixed:

    region extract -> reverse -> playback rate -> bass -> treble
        -> reverb -> gain envelope (volume, fade in, fade out)

`render_region` runs it once. `Renderer` keeps the last result and only
renders again when the region or the settings change, which is what an editor
previewing on every slider move needs.

Examples:
    >>> buf = load_audio("song.mp3")  # doctest: +SKIP
    >>> settings = EffectSettings(fade_in=2.0, speed=1.2, reverb=0.3)
    >>> out = render_region(buf, Region(10, 40), settings)  # doctest: +SKIP
    >>> round(out.duration, 2)  # doctest: +SKIP
    25.0
"""

from dataclasses import dataclass, fields, asdict, replace as dc_replace
from numbers import Real
from typing import Optional

from ..util import RingtoneError
from .audio_buffer import AudioBuffer
from .audio_region import Region
from .audio_effects import (
    playback_rate,
    apply_playback_rate,
    apply_reverse,
    apply_low_shelf,
    apply_high_shelf,
    apply_reverb,
    gain_envelope,
    apply_gain_envelope,
)


class InvalidSettingsError(RingtoneError, ValueError):
    """An effect parameter is outside its allowed range."""


# name -> (min, max)
SETTING_RANGES = {
    "volume": (0.0, 2.0),
    "fade_in": (0.0, 5.0),
    "fade_out": (0.0, 5.0),
    "speed": (0.5, 2.0),
    "pitch": (-12.0, 12.0),
    "bass_db": (-12.0, 12.0),
    "treble_db": (-12.0, 12.0),
    "reverb": (0.0, 1.0),
}


@dataclass(frozen=True)
class EffectSettings:
    """
    Parameters of the ringtone signal chain.

    Args:
        volume: Linear output gain (1.0 = unchanged)
        fade_in: Fade-in length in seconds of rendered output
        fade_out: Fade-out length in seconds of rendered output
        speed: Playback speed multiplier; pitch follows speed
        pitch: Extra detune in semitones, on top of speed
        bass_db: Low-shelf gain in dB
        treble_db: High-shelf gain in dB
        reverb: Wet/dry reverb mix, 0 (dry) to 1 (wet)
        reverse: Play the region backwards
    """

    volume: float = 1.0
    fade_in: float = 1.0
    fade_out: float = 1.0
    speed: float = 1.0
    pitch: float = 0.0
    bass_db: float = 0.0
    treble_db: float = 0.0
    reverb: float = 0.0
    reverse: bool = False

    def validate(self) -> "EffectSettings":
        """Raise `InvalidSettingsError` if any value is out of range."""
        for name, (low, high) in SETTING_RANGES.items():
            value = getattr(self, name)
            if not isinstance(value, Real) or isinstance(value, bool):
                raise InvalidSettingsError(
                    f"{name} must be a number, got {type(value).__name__}"
                )
            if not low <= value <= high:
                raise InvalidSettingsError(
                    f"{name}={value} is out of range [{low}, {high}]"
                )
        if not isinstance(self.reverse, bool):
            raise InvalidSettingsError(
                f"reverse must be a bool, got {type(self.reverse).__name__}"
            )
        return self

    @property
    def rate(self) -> float:
        """Effective playback rate from speed and pitch."""
        return playback_rate(self.speed, self.pitch)

    def replace(self, **changes) -> "EffectSettings":
        return dc_replace(self, **changes)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "EffectSettings":
        """Build settings from a dict, ignoring keys that aren't settings."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in names})


DEFAULT_SETTINGS = EffectSettings()


def output_length(region: Region, settings: EffectSettings, sample_rate: int) -> int:
    """Number of frames the rendered region will have."""
    return int(region.duration / settings.rate * sample_rate)


def render_region(
    buffer: AudioBuffer,
    region: Region,
    settings: EffectSettings = DEFAULT_SETTINGS,
) -> Optional[AudioBuffer]:
    """
    Render ``region`` of ``buffer`` through the effect chain.

    Args:
        buffer: Source audio
        region: Time window of the source to render
        settings: Effect parameters

    Returns:
        The rendered buffer, with the source's sample rate and channel count,
        or None when the region is empty.

    The region is first cut to the extent of ``buffer``, so a region running
    past the end renders only the audio that exists.
    """
    region = Region(max(region.start, 0.0), min(region.end, buffer.duration))
    if region.duration <= 0:
        return None
    settings.validate()

    sr = buffer.sample_rate
    samples = buffer.slice_seconds(region.start, region.end).samples

    if settings.reverse:
        samples = apply_reverse(samples)

    n_out = output_length(region, settings, sr)
    samples = apply_playback_rate(samples, settings.rate, n_out)
    samples = apply_low_shelf(samples, sr, settings.bass_db)
    samples = apply_high_shelf(samples, sr, settings.treble_db)
    samples = apply_reverb(samples, sr, settings.reverb)

    envelope = gain_envelope(
        n_out,
        sr,
        volume=settings.volume,
        fade_in=settings.fade_in,
        fade_out=settings.fade_out,
    )
    samples = apply_gain_envelope(samples, envelope)

    return AudioBuffer(samples, sr)


class Renderer:
    """
    Renders a source buffer, re-using the last result while nothing changed.

    The cached result is shared between calls, so its samples are read-only.
    Take a ``copy()`` to modify them.

    Examples:
        >>> renderer = Renderer(buffer)  # doctest: +SKIP
        >>> out = renderer.render(Region(0, 20), EffectSettings(speed=1.5))  # doctest: +SKIP
        >>> out is renderer.render(Region(0, 20), EffectSettings(speed=1.5))  # doctest: +SKIP
        True
    """

    def __init__(self, buffer: AudioBuffer):
        self.buffer = buffer
        self.render_count = 0
        self._key = None
        self._result = None

    def render(
        self, region: Region, settings: EffectSettings = DEFAULT_SETTINGS
    ) -> Optional[AudioBuffer]:
        key = (region, settings)
        if key != self._key:
            result = render_region(self.buffer, region, settings)
            if result is not None:
                result.samples.setflags(write=False)
            self._result = result
            self._key = key
            self.render_count += 1
        return self._result

    def invalidate(self) -> None:
        """Forget the cached result."""
        self._key = None
        self._result = None
