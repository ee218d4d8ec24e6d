"""
Tests for ringtone encoding and export.

These tests verify:
- WAV header fields for PCM and float output, mono and stereo
- 16-bit conversion: clamping, asymmetric scaling, truncation
- Channel interleaving
- export_ringtone naming, collision avoidance and error handling
- MP3 export (when ffmpeg is available)
"""

import shutil
import struct

import pytest
import numpy as np


requires_ffmpeg = pytest.mark.skipif(
    shutil.which('ffmpeg') is None, reason='ffmpeg not installed'
)


@pytest.fixture
def stereo_buffer():
    from ringtone.audio import AudioBuffer

    sr = 22050
    t = np.arange(sr // 2) / sr
    left = 0.5 * np.sin(2 * np.pi * 440 * t)
    right = -0.5 * np.sin(2 * np.pi * 440 * t)
    return AudioBuffer(np.column_stack([left, right]), sr)


class TestWavHeader:
    """Test the 44-byte header written by encode_wav."""

    def test_pcm_stereo_header(self, stereo_buffer):
        from ringtone.audio import encode_wav, read_wav_header

        data = encode_wav(stereo_buffer)
        header = read_wav_header(data)
        n = stereo_buffer.length

        assert data[:4] == b'RIFF'
        assert data[8:16] == b'WAVEfmt '
        assert data[36:40] == b'data'
        assert header['format'] == 1
        assert header['fmt_size'] == 16
        assert header['channels'] == 2
        assert header['sample_rate'] == 22050
        assert header['bits_per_sample'] == 16
        assert header['block_align'] == 4
        assert header['byte_rate'] == 22050 * 4
        assert header['data_size'] == n * 4
        assert header['riff_size'] == 36 + n * 4
        assert len(data) == 44 + n * 4

    def test_float_mono_header(self):
        from ringtone.audio import AudioBuffer, encode_wav, read_wav_header

        buf = AudioBuffer(np.zeros(1000), 8000)
        data = encode_wav(buf, float32=True)
        header = read_wav_header(data)

        assert header['format'] == 3
        assert header['channels'] == 1
        assert header['bits_per_sample'] == 32
        assert header['block_align'] == 4
        assert header['byte_rate'] == 32000
        assert header['data_size'] == 4000
        assert len(data) == 4044

    def test_empty_buffer(self):
        from ringtone.audio import AudioBuffer, encode_wav, read_wav_header

        data = encode_wav(AudioBuffer(np.zeros((0, 2)), 44100))

        assert len(data) == 44
        assert read_wav_header(data)['riff_size'] == 36

    def test_read_header_rejects_garbage(self):
        from ringtone.audio import read_wav_header

        with pytest.raises(ValueError):
            read_wav_header(b'short')
        with pytest.raises(ValueError):
            read_wav_header(b'X' * 44)


class TestWavSamples:
    """Test the sample payload."""

    def test_pcm_conversion(self):
        from ringtone.audio import AudioBuffer, encode_wav

        buf = AudioBuffer(np.array([-1.0, -0.5, 0.0, 0.5, 1.0, 1.7, -3.0]), 8000)
        pcm = np.frombuffer(encode_wav(buf)[44:], dtype='<i2')

        assert pcm.tolist() == [-32768, -16384, 0, 16383, 32767, 32767, -32768]

    def test_stereo_interleaved(self):
        from ringtone.audio import AudioBuffer, encode_wav

        buf = AudioBuffer(np.array([[0.5, -0.5], [1.0, 0.0]]), 8000)
        pcm = np.frombuffer(encode_wav(buf)[44:], dtype='<i2')

        assert pcm.tolist() == [16383, -16384, 32767, 0]

    def test_float_payload_not_clamped(self):
        from ringtone.audio import AudioBuffer, encode_wav

        buf = AudioBuffer(np.array([0.25, -1.5]), 8000)
        payload = encode_wav(buf, float32=True)[44:]

        assert struct.unpack('<2f', payload) == (0.25, -1.5)

    def test_interleave(self):
        from ringtone.audio.audio_encode import interleave

        out = interleave(np.array([1.0, 2.0, 3.0]), np.array([-1.0, -2.0, -3.0]))
        assert out.tolist() == [1.0, -1.0, 2.0, -2.0, 3.0, -3.0]


class TestExportRingtone:
    """Test export_ringtone."""

    def test_export_wav(self, stereo_buffer, tmp_path):
        from ringtone.audio import export_ringtone, encode_wav

        path = export_ringtone(stereo_buffer, 'beach_ringtone', output_dir=tmp_path)

        assert path.name == 'beach_ringtone.wav'
        assert path.parent.resolve() == tmp_path.resolve()
        assert path.read_bytes() == encode_wav(stereo_buffer)

    def test_creates_output_dir(self, stereo_buffer, tmp_path):
        from ringtone.audio import export_ringtone

        target = tmp_path / 'nested' / 'ringtones'
        path = export_ringtone(stereo_buffer, 'tone', output_dir=target)

        assert path.parent.resolve() == target.resolve()
        assert path.exists()

    def test_never_overwrites(self, stereo_buffer, tmp_path):
        from ringtone.audio import export_ringtone

        existing = tmp_path / 'tone.wav'
        existing.write_bytes(b'keep me')

        path = export_ringtone(stereo_buffer, 'tone', output_dir=tmp_path)

        assert path.name != 'tone.wav'
        assert existing.read_bytes() == b'keep me'
        assert path.exists()

    def test_overwrite(self, stereo_buffer, tmp_path):
        from ringtone.audio import export_ringtone

        existing = tmp_path / 'tone.wav'
        existing.write_bytes(b'replace me')

        path = export_ringtone(stereo_buffer, 'tone', output_dir=tmp_path, overwrite=True)

        assert path.resolve() == existing.resolve()
        assert existing.read_bytes()[:4] == b'RIFF'

    def test_unsupported_format(self, stereo_buffer, tmp_path):
        from ringtone.audio import export_ringtone, UnsupportedFormatError

        with pytest.raises(UnsupportedFormatError):
            export_ringtone(stereo_buffer, 'tone', fmt='ogg', output_dir=tmp_path)
        assert not any(tmp_path.iterdir())

    def test_encode_dispatch(self, stereo_buffer):
        from ringtone.audio import encode, encode_wav, UnsupportedFormatError

        assert encode(stereo_buffer, '.WAV') == encode_wav(stereo_buffer)
        with pytest.raises(UnsupportedFormatError):
            encode(stereo_buffer, 'flac')

    def test_encoder_failure_wrapped(self, stereo_buffer, tmp_path, monkeypatch):
        from ringtone.audio import export_ringtone, ExportError
        from ringtone.audio import audio_encode

        def broken(*args, **kwargs):
            raise RuntimeError('encoder missing')

        monkeypatch.setattr(audio_encode, 'encode_mp3', broken)

        with pytest.raises(ExportError, match='WAV'):
            export_ringtone(stereo_buffer, 'tone', fmt='mp3', output_dir=tmp_path)
        assert not (tmp_path / 'tone.mp3').exists()

    def test_write_failure_wrapped(self, stereo_buffer, tmp_path):
        from ringtone.audio import export_ringtone, ExportError

        # A directory where the file should go
        (tmp_path / 'tone.wav').mkdir()

        with pytest.raises(ExportError, match='Could not write') as exc_info:
            export_ringtone(stereo_buffer, 'tone', output_dir=tmp_path, overwrite=True)
        assert isinstance(exc_info.value.__cause__, OSError)


@requires_ffmpeg
class TestMp3:
    """MP3 output through pydub."""

    def test_encode_mp3(self, stereo_buffer):
        pytest.importorskip('pydub')
        from ringtone.audio import encode_mp3

        data = encode_mp3(stereo_buffer)

        assert len(data) > 0
        # Either an ID3 tag or an MPEG frame sync
        assert data[:3] == b'ID3' or (data[0] == 0xFF and data[1] & 0xE0 == 0xE0)

    def test_export_mp3_decodes(self, stereo_buffer, tmp_path):
        pytest.importorskip('pydub')
        from ringtone.audio import export_ringtone, load_audio

        path = export_ringtone(stereo_buffer, 'tone', fmt='mp3', output_dir=tmp_path)
        decoded = load_audio(path)

        assert path.suffix == '.mp3'
        assert decoded.n_channels == 2
        assert abs(decoded.duration - stereo_buffer.duration) < 0.1
