"""
Make ringtones from video and audio files.
"""

from ringtone.util import RingtoneError, ringtone_stem
from ringtone.audio import (
    AudioBuffer,  # Float sample buffer
    load_audio,
    Region,
    EffectSettings,
    render_region,
    encode_wav,
    export_ringtone,
)
from ringtone.video import load_media, extract_audio, video_thumbnail
from ringtone.editor import RingtoneEditor, EditorStep
