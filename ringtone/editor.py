"""
A ringtone editing session.

`RingtoneEditor` ties the pieces together the way an editor screen uses them:
open a media file, adjust the selection and the effects, preview, export.

Examples:
    >>> editor = RingtoneEditor.open("holiday.mp4")  # doctest: +SKIP
    >>> editor.select(12.5, 38.0)  # doctest: +SKIP
    >>> editor.update(fade_in=2.0, reverb=0.25, bass_db=4)  # doctest: +SKIP
    >>> editor.export("~/Ringtones", fmt="mp3")  # doctest: +SKIP
    PosixPath('/home/me/Ringtones/holiday_ringtone.mp3')
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
import warnings

from .util import RingtoneError, ringtone_stem
from .audio.audio_buffer import AudioBuffer
from .audio.audio_region import Region, default_region, MAX_RINGTONE_SECONDS
from .audio.audio_render import EffectSettings, DEFAULT_SETTINGS, Renderer
from .audio.audio_encode import export_ringtone, EXPORT_FORMATS, UnsupportedFormatError
from .video.video_audio import LoadedMedia, load_media


class EditorStep(str, Enum):
    UPLOAD = "UPLOAD"
    EDIT = "EDIT"
    DOWNLOAD = "DOWNLOAD"


@dataclass
class SessionStats:
    """Counters for the current session only; nothing is persisted."""

    loads: int = 0
    downloads: int = 0


class RingtoneEditor:
    """
    Editing state for one media file.

    Args:
        media: Loaded media, or None to start in the upload step
        export_format: 'wav' or 'mp3'
    """

    def __init__(
        self, media: Optional[LoadedMedia] = None, *, export_format: str = "wav"
    ):
        self.stats = SessionStats()
        self.export_format = export_format
        self.step = EditorStep.UPLOAD
        self.media = None
        self.region = None
        self.settings = DEFAULT_SETTINGS
        self.file_name = ""
        self._renderer = None
        if media is not None:
            self.load(media)

    @classmethod
    def open(cls, src: str | Path, **kwargs) -> "RingtoneEditor":
        """Start a session on a video or audio file."""
        return cls(load_media(src), **kwargs)

    # -- media ---------------------------------------------------------------

    def load(self, media: LoadedMedia) -> "RingtoneEditor":
        """Start editing ``media``: default selection, default effects."""
        self.media = media
        self.region = default_region(media.buffer.duration)
        self.settings = DEFAULT_SETTINGS
        self.file_name = ringtone_stem(media.file_name)
        self._renderer = Renderer(media.buffer)
        self.stats.loads += 1
        self.step = EditorStep.EDIT
        return self

    def reset(self) -> "RingtoneEditor":
        """Drop the loaded media and go back to the upload step."""
        self.media = None
        self.region = None
        self.settings = DEFAULT_SETTINGS
        self.file_name = ""
        self._renderer = None
        self.step = EditorStep.UPLOAD
        return self

    @property
    def buffer(self) -> AudioBuffer:
        self._require_media()
        return self.media.buffer

    @property
    def total_duration(self) -> float:
        return self.buffer.duration

    @property
    def thumbnail(self) -> Optional[str]:
        return self.media.thumbnail if self.media is not None else None

    def _require_media(self) -> None:
        if self.media is None:
            raise RingtoneError("No media loaded. Open a video or audio file first.")

    # -- selection -----------------------------------------------------------

    def select(self, start: float, end: float) -> Region:
        """Set the selection, fitted inside the source."""
        self._require_media()
        self.region = Region(start, end).clamped(self.total_duration)
        self._warn_if_long()
        return self.region

    def move_start(self, t: float) -> Region:
        self._require_media()
        self.region = self.region.move_start(t, self.total_duration)
        self._warn_if_long()
        return self.region

    def move_end(self, t: float) -> Region:
        self._require_media()
        self.region = self.region.move_end(t, self.total_duration)
        self._warn_if_long()
        return self.region

    def shift_region(self, delta: float) -> Region:
        self._require_media()
        self.region = self.region.shift(delta, self.total_duration)
        return self.region

    def _warn_if_long(self) -> None:
        if self.region.is_too_long():
            warnings.warn(
                f"Selection is {self.region.duration:.1f}s long; ringtones are "
                f"usually at most {MAX_RINGTONE_SECONDS:.0f}s"
            )

    # -- effects -------------------------------------------------------------

    def update(self, **changes) -> EffectSettings:
        """Change some effect settings; invalid values leave them untouched."""
        self.settings = self.settings.replace(**changes).validate()
        return self.settings

    def reset_effects(self) -> EffectSettings:
        self.settings = DEFAULT_SETTINGS
        return self.settings

    def set_export_format(self, fmt: str) -> None:
        fmt = fmt.lower().lstrip(".")
        if fmt not in EXPORT_FORMATS:
            raise UnsupportedFormatError(
                f"Unsupported export format: {fmt!r}. Choose one of {EXPORT_FORMATS}."
            )
        self.export_format = fmt

    # -- output --------------------------------------------------------------

    def preview(self) -> Optional[AudioBuffer]:
        """Render the current selection with the current settings."""
        self._require_media()
        return self._renderer.render(self.region, self.settings)

    @property
    def render_count(self) -> int:
        return self._renderer.render_count if self._renderer is not None else 0

    def export(
        self, output_dir: str | Path = ".", *, fmt: Optional[str] = None, **kwargs
    ) -> Optional[Path]:
        """
        Render and write the ringtone.

        Returns:
            Path of the written file, or None if the selection is empty
        """
        rendered = self.preview()
        if rendered is None:
            return None
        if fmt is not None:
            self.set_export_format(fmt)
        path = export_ringtone(
            rendered,
            self.file_name,
            fmt=self.export_format,
            output_dir=output_dir,
            **kwargs,
        )
        self.stats.downloads += 1
        self.step = EditorStep.DOWNLOAD
        return path

    def __repr__(self) -> str:
        if self.media is None:
            return "RingtoneEditor(step=UPLOAD)"
        return (
            f"RingtoneEditor('{self.media.file_name}', step={self.step.value}, "
            f"{self.region!r}, format='{self.export_format}')"
        )
