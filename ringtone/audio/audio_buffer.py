"""
In-memory audio buffer.

`AudioBuffer` is the unit of exchange of the package: media loaders produce
one, the renderer consumes one and produces another, and the encoders turn one
into file bytes.

Samples are float32, shaped ``(n_frames, n_channels)``, nominally in [-1, 1].
Only mono and stereo are supported.

Examples:
    >>> import numpy as np
    >>> buf = AudioBuffer(np.zeros(44100), 44100)
    >>> buf.n_channels, buf.length, buf.duration
    (1, 44100, 1.0)
    >>> buf.slice_seconds(0.25, 0.75).duration
    0.5
"""

from typing import TYPE_CHECKING
import numpy as np

from ..util import require_package, clamp

if TYPE_CHECKING:
    from pydub import AudioSegment

SUPPORTED_CHANNELS = (1, 2)


class AudioBuffer:
    """
    A block of PCM audio held as normalized float samples.

    Args:
        samples: Array of shape (n_frames,) or (n_frames, n_channels)
        sample_rate: Sample rate in Hz
    """

    def __init__(self, samples: np.ndarray, sample_rate: int):
        samples = np.asarray(samples, dtype=np.float32)
        if samples.ndim == 1:
            samples = samples[:, np.newaxis]
        if samples.ndim != 2:
            raise ValueError(
                f"Samples must be 1-D or 2-D, got {samples.ndim} dimensions"
            )
        if samples.shape[1] not in SUPPORTED_CHANNELS:
            raise ValueError(
                f"Only mono or stereo audio is supported, "
                f"got {samples.shape[1]} channels"
            )
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")

        self.samples = samples
        self.sample_rate = int(sample_rate)

    @property
    def n_channels(self) -> int:
        """Number of audio channels."""
        return self.samples.shape[1]

    @property
    def length(self) -> int:
        """Number of sample frames."""
        return self.samples.shape[0]

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.length / self.sample_rate

    def channel_data(self, channel: int) -> np.ndarray:
        """Samples of a single channel as a 1-D array."""
        if not 0 <= channel < self.n_channels:
            raise IndexError(
                f"Channel {channel} out of range [0, {self.n_channels})"
            )
        return self.samples[:, channel]

    def slice_seconds(self, start: float, end: float) -> "AudioBuffer":
        """
        Copy the frames between ``start`` and ``end`` seconds.

        Both bounds are clamped to the buffer, so the result may be empty.
        """
        start_idx = int(round(clamp(start, 0.0, self.duration) * self.sample_rate))
        end_idx = int(round(clamp(end, 0.0, self.duration) * self.sample_rate))
        end_idx = max(start_idx, end_idx)
        return AudioBuffer(self.samples[start_idx:end_idx].copy(), self.sample_rate)

    def to_int16(self) -> np.ndarray:
        """Interleaved 16-bit samples, clamped, scaled by 32767.5."""
        clipped = np.clip(self.samples, -1.0, 1.0)
        return (clipped * 32767.5).astype(np.int16).reshape(-1)

    def to_segment(self) -> "AudioSegment":
        """Convert to a 16-bit pydub ``AudioSegment``."""
        AudioSegment = require_package("pydub").AudioSegment
        return AudioSegment(
            self.to_int16().tobytes(),
            frame_rate=self.sample_rate,
            sample_width=2,
            channels=self.n_channels,
        )

    @classmethod
    def from_segment(cls, segment: "AudioSegment") -> "AudioBuffer":
        """Build a buffer from a pydub ``AudioSegment`` of any sample width."""
        raw = np.array(segment.get_array_of_samples())
        scale = float(2 ** (8 * segment.sample_width - 1))
        samples = raw.astype(np.float32) / scale
        samples = samples.reshape((-1, segment.channels))
        if segment.channels > 2:
            # Surround layouts put front left/right first
            samples = samples[:, :2]
        return cls(samples, segment.frame_rate)

    @classmethod
    def silence(
        cls, duration: float, sample_rate: int = 44100, n_channels: int = 1
    ) -> "AudioBuffer":
        """A buffer of zeros."""
        n_frames = int(duration * sample_rate)
        return cls(np.zeros((n_frames, n_channels), dtype=np.float32), sample_rate)

    def copy(self) -> "AudioBuffer":
        return AudioBuffer(self.samples.copy(), self.sample_rate)

    def __len__(self) -> int:
        return self.length

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AudioBuffer):
            return NotImplemented
        return (
            self.sample_rate == other.sample_rate
            and self.samples.shape == other.samples.shape
            and bool(np.array_equal(self.samples, other.samples))
        )

    def __repr__(self) -> str:
        return (
            f"AudioBuffer(channels={self.n_channels}, "
            f"sample_rate={self.sample_rate}, "
            f"duration={self.duration:.2f}s)"
        )
