"""
Tests for video input.

These tests verify:
- is_video_file: MIME type detection
- extract_audio: Audio track decoding with moviepy
- video_thumbnail: JPEG data URL of an early frame
- load_media: One entry point for videos and audio files
"""

import base64
import os
import tempfile

import pytest
import numpy as np


def _write_video(duration, *, with_audio):
    try:
        from moviepy.video.VideoClip import ColorClip
        from moviepy.audio.AudioClip import AudioArrayClip
    except ImportError:
        pytest.skip("moviepy not installed")

    clip = ColorClip(size=(160, 120), color=(0, 128, 255), duration=duration)
    clip = clip.with_fps(24)
    if with_audio:
        sr = 44100
        t = np.arange(int(duration * sr)) / sr
        tone = 0.3 * np.sin(2 * np.pi * 440 * t)
        clip = clip.with_audio(AudioArrayClip(np.column_stack([tone, tone]), fps=sr))

    with tempfile.NamedTemporaryFile(suffix='.mp4', delete=False) as f:
        temp_path = f.name

    clip.write_videofile(
        temp_path,
        codec='libx264',
        audio_codec='aac',
        audio=with_audio,
        logger=None,
    )
    clip.close()
    return temp_path


@pytest.fixture
def video_with_audio():
    """A 2 second video with a 440 Hz stereo tone."""
    path = _write_video(2.0, with_audio=True)
    yield path
    if os.path.exists(path):
        os.unlink(path)


@pytest.fixture
def silent_video():
    """A 1 second video without an audio track."""
    path = _write_video(1.0, with_audio=False)
    yield path
    if os.path.exists(path):
        os.unlink(path)


class TestIsVideoFile:
    @pytest.mark.parametrize('name', ['clip.mp4', 'CLIP.MOV', 'a/b/c.avi', 'x.mpeg'])
    def test_videos(self, name):
        from ringtone.video import is_video_file

        assert is_video_file(name)

    @pytest.mark.parametrize('name', ['song.mp3', 'tone.wav', 'notes.txt', 'noext'])
    def test_not_videos(self, name):
        from ringtone.video import is_video_file

        assert not is_video_file(name)


class TestExtractAudio:
    """Test extract_audio."""

    def test_extract(self, video_with_audio):
        from ringtone.video import extract_audio

        buf = extract_audio(video_with_audio)

        assert buf.sample_rate == 44100
        assert buf.n_channels == 2
        assert abs(buf.duration - 2.0) < 0.15
        # The tone survives AAC encoding
        assert np.max(np.abs(buf.samples)) > 0.1

    def test_custom_sample_rate(self, video_with_audio):
        from ringtone.video import extract_audio

        buf = extract_audio(video_with_audio, sample_rate=22050)

        assert buf.sample_rate == 22050
        assert abs(buf.duration - 2.0) < 0.15

    def test_silent_video(self, silent_video):
        from ringtone.video import extract_audio, NoAudioTrackError

        with pytest.raises(NoAudioTrackError):
            extract_audio(silent_video)

    def test_missing_file(self):
        from ringtone.video import extract_audio

        with pytest.raises(FileNotFoundError):
            extract_audio('/nonexistent_xyz123/clip.mp4')


class TestVideoThumbnail:
    """Test video_thumbnail."""

    def test_jpeg_data_url(self, video_with_audio):
        from ringtone.video import video_thumbnail

        url = video_thumbnail(video_with_audio)
        prefix = 'data:image/jpeg;base64,'

        assert url.startswith(prefix)
        jpeg = base64.b64decode(url[len(prefix):])
        assert jpeg[:2] == b'\xff\xd8'

    def test_short_video_uses_first_frame(self, silent_video):
        from ringtone.video import video_thumbnail

        url = video_thumbnail(silent_video, at=5.0)
        assert url.startswith('data:image/jpeg;base64,')

    def test_unreadable_video(self, tmp_path):
        from ringtone.video import video_thumbnail
        from ringtone.audio import MediaDecodeError

        path = tmp_path / 'broken.mp4'
        path.write_bytes(b'not a video')

        with pytest.raises(MediaDecodeError):
            video_thumbnail(path)


class TestLoadMedia:
    """Test load_media."""

    def test_video(self, video_with_audio):
        from ringtone.video import load_media

        media = load_media(video_with_audio)

        assert media.file_name == os.path.basename(video_with_audio)
        assert media.thumbnail is not None
        assert media.is_video
        assert abs(media.buffer.duration - 2.0) < 0.15

    def test_audio_file(self, tmp_path):
        pytest.importorskip('pydub')
        from ringtone.audio import AudioBuffer, encode_wav
        from ringtone.video import load_media

        path = tmp_path / 'tone.wav'
        path.write_bytes(encode_wav(AudioBuffer(np.zeros(8000) + 0.1, 8000)))

        media = load_media(path)

        assert media.file_name == 'tone.wav'
        assert media.thumbnail is None
        assert not media.is_video
        assert media.buffer.sample_rate == 8000

    def test_missing(self):
        from ringtone.video import load_media

        with pytest.raises(FileNotFoundError):
            load_media('/nonexistent_xyz123/clip.mp4')
