"""
Getting ringtone material out of video files.

This module provides:
- `is_video_file()`: Tell videos from audio files by MIME type
- `extract_audio()`: Decode the audio track of a video with moviepy
- `video_thumbnail()`: A JPEG data URL of an early frame, via cv2
- `load_media()`: One entry point for both audio and video sources

Examples:
    >>> media = load_media("holiday.mp4")  # doctest: +SKIP
    >>> media.buffer  # doctest: +SKIP
    AudioBuffer(channels=2, sample_rate=44100, duration=93.12s)
    >>> media.thumbnail[:23]  # doctest: +SKIP
    'data:image/jpeg;base64,'
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import base64
import mimetypes
import warnings

import cv2
import moviepy as mp

from ..util import RingtoneError
from ..audio.audio_buffer import AudioBuffer
from ..audio.audio_util import load_audio, MediaDecodeError, DEFAULT_SAMPLE_RATE

THUMBNAIL_AT = 1.0
THUMBNAIL_QUALITY = 70


class NoAudioTrackError(RingtoneError):
    """The video has no audio to make a ringtone from."""


@dataclass
class LoadedMedia:
    """Decoded audio of a media file plus what the editor shows about it."""

    buffer: AudioBuffer
    file_name: str
    thumbnail: Optional[str] = None

    @property
    def is_video(self) -> bool:
        return self.thumbnail is not None or is_video_file(self.file_name)


def is_video_file(path: str | Path) -> bool:
    """
    Whether ``path`` names a video, judging by its MIME type.

    >>> is_video_file("clip.mp4")
    True
    >>> is_video_file("song.mp3")
    False
    """
    mime_type, _ = mimetypes.guess_type(str(path))
    return bool(mime_type) and mime_type.startswith("video/")


def extract_audio(
    video_src: str | Path, *, sample_rate: int = DEFAULT_SAMPLE_RATE
) -> AudioBuffer:
    """
    Decode the audio track of a video.

    Args:
        video_src: Path to the video file
        sample_rate: Rate to decode the audio at

    Returns:
        The audio track, mono or stereo

    Raises:
        NoAudioTrackError: If the video is silent
        MediaDecodeError: If moviepy can't read the file
    """
    video_src = str(Path(video_src).expanduser())
    if not Path(video_src).exists():
        raise FileNotFoundError(f"Video file not found: {video_src}")

    try:
        clip = mp.VideoFileClip(video_src)
    except (OSError, KeyError) as e:
        raise MediaDecodeError(f"Could not read video {video_src}") from e

    with clip:
        if clip.audio is None:
            raise NoAudioTrackError(f"{video_src} has no audio track")
        samples = clip.audio.to_soundarray(fps=sample_rate)

    if samples.ndim == 2 and samples.shape[1] > 2:
        samples = samples[:, :2]
    return AudioBuffer(samples, sample_rate)


def video_thumbnail(
    video_src: str | Path,
    *,
    at: float = THUMBNAIL_AT,
    quality: int = THUMBNAIL_QUALITY,
) -> str:
    """
    Grab a frame of a video as a base64 JPEG data URL.

    The frame is taken at ``at`` seconds, or at the start of videos shorter
    than that.

    Args:
        video_src: Path to the video file
        at: Time of the frame in seconds
        quality: JPEG quality, 0-100

    Returns:
        ``data:image/jpeg;base64,...`` string
    """
    cap = cv2.VideoCapture(str(video_src))
    try:
        if not cap.isOpened():
            raise MediaDecodeError(f"Could not open video: {video_src}")

        fps = cap.get(cv2.CAP_PROP_FPS) or 0
        frame_count = cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0
        duration = frame_count / fps if fps > 0 else 0.0
        if duration < at:
            at = 0.0

        cap.set(cv2.CAP_PROP_POS_MSEC, at * 1000)
        ret, frame = cap.read()
        if not ret and at > 0:
            cap.set(cv2.CAP_PROP_POS_MSEC, 0)
            ret, frame = cap.read()
        if not ret:
            raise MediaDecodeError(f"Could not read a frame from {video_src}")
    finally:
        cap.release()

    ok, encoded = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise MediaDecodeError(f"Could not encode thumbnail of {video_src}")
    b64 = base64.b64encode(encoded.tobytes()).decode("utf-8")
    return f"data:image/jpeg;base64,{b64}"


def load_media(src: str | Path, *, sample_rate: int = DEFAULT_SAMPLE_RATE) -> LoadedMedia:
    """
    Load a video or audio file for ringtone editing.

    Videos get their audio extracted and a thumbnail taken; a failing
    thumbnail only warns. Audio files are decoded directly.

    Args:
        src: Path to a video or audio file
        sample_rate: Decoding rate for video audio tracks

    Returns:
        `LoadedMedia` with the buffer, the file name and, for videos, the
        thumbnail
    """
    path = Path(src).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Media file not found: {path}")

    thumbnail = None
    if is_video_file(path):
        try:
            thumbnail = video_thumbnail(path)
        except MediaDecodeError as e:
            warnings.warn(f"Could not generate thumbnail: {e}")
        buffer = extract_audio(path, sample_rate=sample_rate)
    else:
        buffer = load_audio(path)

    print(f"Loaded {path.name}: {buffer.duration:.2f}s, {buffer.n_channels} channel(s)")
    return LoadedMedia(buffer, path.name, thumbnail)
