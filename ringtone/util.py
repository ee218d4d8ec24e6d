"""General utilities for making ringtones."""

from typing import Literal
from pathlib import Path
import importlib
import os

AudioTimeUnit = Literal["seconds", "samples", "milliseconds"]

RINGTONE_SUFFIX = "_ringtone"


class RingtoneError(Exception):
    """Base class for errors raised by the ringtone package."""


def require_package(package_name: str):
    """
    Import a package, raising an informative error if not installed.

    >>> math = require_package('math')  # doctest: +SKIP
    >>> math.pi  # doctest: +SKIP
    3.141592653589793
    """
    try:
        return importlib.import_module(package_name)
    except ImportError as e:
        raise ImportError(
            f"Package '{package_name}' is required for this functionality. "
            f"Please install it via 'pip install {package_name}'."
        ) from e


def to_seconds(value: float, *, unit: AudioTimeUnit, rate: float) -> float:
    """
    Convert time value to seconds based on unit.

    Args:
        value: Time value to convert
        unit: Unit of the value ('seconds', 'samples', 'milliseconds')
        rate: Sample rate (Hz) for 'samples'

    Returns:
        Time in seconds

    Examples:
        >>> to_seconds(10, unit="seconds", rate=44100)
        10
        >>> to_seconds(88200, unit="samples", rate=44100)
        2.0
        >>> to_seconds(1500, unit="milliseconds", rate=44100)
        1.5
    """
    if unit == "seconds":
        return value
    elif unit == "samples":
        return value / rate
    elif unit == "milliseconds":
        return value / 1000.0
    else:
        raise ValueError(f"Invalid time unit: {unit}")


def clamp(value: float, low: float, high: float) -> float:
    """
    Clamp value into the closed interval [low, high].

    >>> clamp(5, 0, 3)
    3
    >>> clamp(-1.5, 0, 3)
    0
    """
    return max(low, min(value, high))


def ringtone_stem(file_name: str) -> str:
    """
    Default output name for a ringtone made from ``file_name``.

    The last extension is dropped and the ringtone suffix appended.

    >>> ringtone_stem("holiday.mp4")
    'holiday_ringtone'
    >>> ringtone_stem("my.song.mp3")
    'my.song_ringtone'
    >>> ringtone_stem("no_extension")
    'no_extension_ringtone'
    """
    name = Path(file_name).name
    stem, ext = os.path.splitext(name)
    if not stem:
        # Dotfiles like ".wav" have no stem, keep them whole
        stem = name
    return f"{stem}{RINGTONE_SUFFIX}"


def non_colliding_path(path: str | Path) -> Path:
    """
    Return ``path`` if it is free, otherwise a sibling name that is.

    The replacement name is chosen by ``dol.non_colliding_key`` among the
    files already present in the target directory.

    >>> non_colliding_path("/nonexistent/dir/tone.wav")  # doctest: +SKIP
    PosixPath('/nonexistent/dir/tone.wav')
    """
    from dol import non_colliding_key

    path = Path(path)
    directory = path.parent
    try:
        existing_files = set(os.listdir(directory))
    except OSError:
        existing_files = set()

    if path.name in existing_files:
        return directory / non_colliding_key(path.name, existing_files)
    return path
