"""
Selection of the time region that becomes the ringtone.

A `Region` is an immutable ``[start, end]`` window, in seconds, over the
source audio. The editing operations mirror the three handles of a waveform
selection: drag the start, drag the end, or drag the whole box. Each returns a
new region clamped to the source duration and never narrower than
`MIN_REGION_SPAN`.

Examples:
    >>> r = default_region(95.0)
    >>> r
    Region(start=0.0, end=30.0)
    >>> r.move_end(40.0, total=95.0).duration
    40.0
    >>> r.shift(80.0, total=95.0)
    Region(start=65.0, end=95.0)
"""

from dataclasses import dataclass

from ..util import clamp

MIN_REGION_SPAN = 0.1
MAX_RINGTONE_SECONDS = 30.0


@dataclass(frozen=True)
class Region:
    """A time window over the source audio, in seconds."""

    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    def is_too_long(self, limit: float = MAX_RINGTONE_SECONDS) -> bool:
        """True when the region is longer than a typical ringtone."""
        return self.duration > limit

    def clamped(self, total: float) -> "Region":
        """
        Fit the region inside ``[0, total]``.

        The start is moved back if needed so the span stays at least
        `MIN_REGION_SPAN` (or the whole source, if that is shorter).
        """
        end = clamp(self.end, 0.0, total)
        start = clamp(self.start, 0.0, total)
        if end - start < MIN_REGION_SPAN:
            if start + MIN_REGION_SPAN <= total:
                end = start + MIN_REGION_SPAN
            else:
                end = total
                start = max(0.0, total - MIN_REGION_SPAN)
        return Region(start, end)

    def move_start(self, t: float, total: float) -> "Region":
        """Drag the start handle to ``t``."""
        start = clamp(t, 0.0, self.end - MIN_REGION_SPAN)
        return Region(max(0.0, start), self.end)

    def move_end(self, t: float, total: float) -> "Region":
        """Drag the end handle to ``t``."""
        end = clamp(t, self.start + MIN_REGION_SPAN, total)
        return Region(self.start, min(end, total))

    def shift(self, delta: float, total: float) -> "Region":
        """Drag the whole selection by ``delta`` seconds, keeping its span."""
        span = self.duration
        start = clamp(self.start + delta, 0.0, max(0.0, total - span))
        return Region(start, start + span)


def default_region(total: float) -> Region:
    """The initial selection: the first 30 seconds, or all of a shorter source."""
    return Region(0.0, min(total, MAX_RINGTONE_SECONDS))


def x_to_time(x: float, total: float, width: float) -> float:
    """
    Map a horizontal position in a waveform view to a time in seconds.

    >>> x_to_time(250, total=60.0, width=1000)
    15.0
    """
    if width <= 0:
        raise ValueError(f"View width must be positive, got {width}")
    return clamp(x / width * total, 0.0, total)


def time_to_x(t: float, total: float, width: float) -> float:
    """
    Map a time in seconds to a horizontal position in a waveform view.

    >>> time_to_x(15.0, total=60.0, width=1000)
    250.0
    """
    if total <= 0:
        return 0.0
    return clamp(t, 0.0, total) / total * width
