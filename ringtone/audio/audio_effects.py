"""
The audio effects of the ringtone signal chain.

All functions take and return float32 arrays shaped ``(n_frames, n_channels)``
and never modify their input. A neutral setting (0 dB, zero mix, rate 1)
returns the input unchanged.

Supported effects:
  - Playback rate (speed and pitch, by resampling)
  - Gain envelope (volume with linear fade in / fade out)
  - Bass and treble (low-shelf / high-shelf biquads)
  - Reverb (convolution with a synthetic impulse response)
  - Reverse
"""

import numpy as np
from scipy.signal import lfilter, fftconvolve

BASS_SHELF_HZ = 200.0
TREBLE_SHELF_HZ = 3000.0
REVERB_SECONDS = 2.0
REVERB_DECAY = 2.0


# ── Playback rate ──────────────────────────────────────────────


def playback_rate(speed: float, pitch: float = 0.0) -> float:
    """
    Effective rate of a source played at ``speed`` and detuned by ``pitch``
    semitones.

    >>> playback_rate(2.0)
    2.0
    >>> playback_rate(1.0, 12)
    2.0
    >>> playback_rate(1.0, -12)
    0.5
    """
    return speed * 2.0 ** (pitch / 12.0)


def apply_playback_rate(samples: np.ndarray, rate: float, n_out: int) -> np.ndarray:
    """
    Read ``samples`` at ``rate`` source frames per output frame.

    Output frame ``k`` is the source linearly interpolated at ``k * rate``.
    Frames read past the end of the source are silent.
    """
    n_in, n_channels = samples.shape
    if n_out <= 0:
        return np.zeros((0, n_channels), dtype=np.float32)
    if n_in == 0:
        return np.zeros((n_out, n_channels), dtype=np.float32)
    if rate == 1.0 and n_out <= n_in:
        return samples[:n_out].copy()

    positions = np.arange(n_out, dtype=np.float64) * rate
    source_idx = np.arange(n_in, dtype=np.float64)
    out = np.empty((n_out, n_channels), dtype=np.float32)
    for ch in range(n_channels):
        out[:, ch] = np.interp(positions, source_idx, samples[:, ch], right=0.0)
    return out


# ── Gain envelope ──────────────────────────────────────────────


def gain_envelope(
    n_frames: int,
    sample_rate: int,
    *,
    volume: float = 1.0,
    fade_in: float = 0.0,
    fade_out: float = 0.0,
) -> np.ndarray:
    """
    Per-frame gain: ramp up, hold at ``volume``, ramp down.

    Each fade is a linear ramp capped at half of the output duration, so the
    two ramps never overlap. A zero fade starts (or ends) at full volume.
    """
    duration = n_frames / sample_rate
    t = np.arange(n_frames, dtype=np.float64) / sample_rate
    env = np.full(n_frames, volume, dtype=np.float64)

    if fade_in > 0:
        fade_in = min(fade_in, duration / 2)
        if fade_in > 0:
            ramp = t < fade_in
            env[ramp] = volume * t[ramp] / fade_in

    if fade_out > 0:
        fade_out = min(fade_out, duration / 2)
        if fade_out > 0:
            fade_out_start = duration - fade_out
            ramp = t >= fade_out_start
            env[ramp] = volume * (duration - t[ramp]) / fade_out

    return env.astype(np.float32)


def apply_gain_envelope(samples: np.ndarray, envelope: np.ndarray) -> np.ndarray:
    return (samples * envelope[:, np.newaxis]).astype(np.float32)


# ── Bass / treble ──────────────────────────────────────────────


def _shelf_coefficients(
    kind: str, sample_rate: int, freq: float, gain_db: float
) -> tuple[np.ndarray, np.ndarray]:
    """Shelving biquad (Audio EQ Cookbook, shelf slope 1)."""
    A = 10.0 ** (gain_db / 40.0)
    w0 = 2.0 * np.pi * freq / sample_rate
    cos_w0 = np.cos(w0)
    alpha = np.sin(w0) / 2.0 * np.sqrt(2.0)
    two_sqrt_a_alpha = 2.0 * np.sqrt(A) * alpha

    if kind == "lowshelf":
        b0 = A * ((A + 1) - (A - 1) * cos_w0 + two_sqrt_a_alpha)
        b1 = 2 * A * ((A - 1) - (A + 1) * cos_w0)
        b2 = A * ((A + 1) - (A - 1) * cos_w0 - two_sqrt_a_alpha)
        a0 = (A + 1) + (A - 1) * cos_w0 + two_sqrt_a_alpha
        a1 = -2 * ((A - 1) + (A + 1) * cos_w0)
        a2 = (A + 1) + (A - 1) * cos_w0 - two_sqrt_a_alpha
    elif kind == "highshelf":
        b0 = A * ((A + 1) + (A - 1) * cos_w0 + two_sqrt_a_alpha)
        b1 = -2 * A * ((A - 1) + (A + 1) * cos_w0)
        b2 = A * ((A + 1) + (A - 1) * cos_w0 - two_sqrt_a_alpha)
        a0 = (A + 1) - (A - 1) * cos_w0 + two_sqrt_a_alpha
        a1 = 2 * ((A - 1) - (A + 1) * cos_w0)
        a2 = (A + 1) - (A - 1) * cos_w0 - two_sqrt_a_alpha
    else:
        raise ValueError(f"Unknown shelf type: {kind}")

    b = np.array([b0, b1, b2], dtype=np.float64) / a0
    a = np.array([1.0, a1 / a0, a2 / a0], dtype=np.float64)
    return b, a


def _apply_shelf(
    samples: np.ndarray, sample_rate: int, gain_db: float, freq: float, kind: str
) -> np.ndarray:
    if gain_db == 0 or samples.shape[0] == 0:
        return samples
    if freq >= sample_rate / 2:
        return samples
    b, a = _shelf_coefficients(kind, sample_rate, freq, gain_db)
    return lfilter(b, a, samples, axis=0).astype(np.float32)


def apply_low_shelf(
    samples: np.ndarray, sample_rate: int, gain_db: float, freq: float = BASS_SHELF_HZ
) -> np.ndarray:
    """Boost or cut everything below ``freq`` by ``gain_db`` (bass)."""
    return _apply_shelf(samples, sample_rate, gain_db, freq, "lowshelf")


def apply_high_shelf(
    samples: np.ndarray,
    sample_rate: int,
    gain_db: float,
    freq: float = TREBLE_SHELF_HZ,
) -> np.ndarray:
    """Boost or cut everything above ``freq`` by ``gain_db`` (treble)."""
    return _apply_shelf(samples, sample_rate, gain_db, freq, "highshelf")


# ── Reverb ─────────────────────────────────────────────────────


def make_impulse_response(
    sample_rate: int,
    n_channels: int = 2,
    *,
    seconds: float = REVERB_SECONDS,
    decay: float = REVERB_DECAY,
    seed: int = 0,
) -> np.ndarray:
    """
    Synthetic room impulse: white noise under a ``(1 - t/T) ** decay`` envelope.

    Each channel gets its own noise so stereo sources keep some width. The
    result is scaled to unit energy per channel.
    """
    n = max(1, int(seconds * sample_rate))
    rng = np.random.default_rng(seed)
    noise = rng.uniform(-1.0, 1.0, size=(n, n_channels))
    envelope = (1.0 - np.arange(n) / n) ** decay
    ir = noise * envelope[:, np.newaxis]
    energy = np.sqrt(np.sum(ir**2, axis=0, keepdims=True))
    return (ir / np.where(energy > 0, energy, 1.0)).astype(np.float32)


def apply_reverb(
    samples: np.ndarray,
    sample_rate: int,
    mix: float,
    *,
    impulse: np.ndarray | None = None,
) -> np.ndarray:
    """
    Convolution reverb, mixed ``mix`` wet and ``1 - mix`` dry.

    The tail is cut at the input length so the output duration is unchanged.
    """
    if mix <= 0 or samples.shape[0] == 0:
        return samples
    n_frames, n_channels = samples.shape
    if impulse is None:
        impulse = make_impulse_response(sample_rate, n_channels)
    wet = fftconvolve(samples, impulse, mode="full", axes=0)[:n_frames]
    out = (1.0 - mix) * samples + mix * wet
    return out.astype(np.float32)


# ── Reverse ────────────────────────────────────────────────────


def apply_reverse(samples: np.ndarray) -> np.ndarray:
    """Reverse audio in time."""
    return samples[::-1].copy()
