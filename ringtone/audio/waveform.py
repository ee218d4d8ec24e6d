"""Waveform peaks for drawing an audio buffer."""

import numpy as np

from .audio_buffer import AudioBuffer


def compute_peaks(buffer: AudioBuffer, n_bins: int) -> np.ndarray:
    """
    Min and max of the mono mixdown over ``n_bins`` equal slices.

    Args:
        buffer: Audio to summarize
        n_bins: Number of horizontal bins (typically pixels)

    Returns:
        Array of shape (n_bins, 2) holding (min, max) per bin. Bins past the
        end of a short buffer are zero.

    Examples:
        >>> buf = AudioBuffer(np.array([0.25, -0.5, 0.125, 0.75]), 4)
        >>> compute_peaks(buf, 2).tolist()
        [[-0.5, 0.25], [0.125, 0.75]]
    """
    if n_bins <= 0:
        raise ValueError(f"n_bins must be positive, got {n_bins}")
    mono = buffer.samples.mean(axis=1)
    peaks = np.zeros((n_bins, 2), dtype=np.float32)
    if mono.size == 0:
        return peaks
    edges = np.linspace(0, mono.size, n_bins + 1).astype(int)
    for i in range(n_bins):
        chunk = mono[edges[i] : edges[i + 1]]
        if chunk.size:
            peaks[i] = chunk.min(), chunk.max()
    return peaks


def peaks_for_width(buffer: AudioBuffer, width: int, *, zoom: float = 0) -> np.ndarray:
    """
    Peaks for a view ``width`` pixels wide.

    Args:
        buffer: Audio to summarize
        width: Visible width in pixels
        zoom: Pixels per second; 0 fits the whole buffer into ``width``.
            When zoomed in, one bin per pixel of the full (scrollable) width.
    """
    if zoom > 0:
        n_bins = max(width, int(np.ceil(buffer.duration * zoom)))
    else:
        n_bins = width
    return compute_peaks(buffer, n_bins)


def format_time(seconds: float) -> str:
    """
    Time label ``mm:ss.s``.

    >>> format_time(75.3)
    '01:15.3'
    >>> format_time(5)
    '00:05.0'
    """
    seconds = max(0.0, seconds)
    minutes = int(seconds // 60)
    return f"{minutes:02d}:{seconds % 60:04.1f}"
