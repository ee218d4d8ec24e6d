"""Video input: audio track extraction and thumbnails."""

from ringtone.video.video_audio import (
    LoadedMedia,
    NoAudioTrackError,
    is_video_file,
    extract_audio,
    video_thumbnail,
    load_media,
)
