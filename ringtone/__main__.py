"""
Command line interface.

    python -m ringtone make holiday.mp4 --start 12 --end 40 --fade-out 3
    python -m ringtone make memo.m4a --start 1500 --end 9500 --unit milliseconds
    python -m ringtone info holiday.mp4
"""

from ringtone.util import ringtone_stem, to_seconds
from ringtone.audio.audio_region import Region, default_region
from ringtone.audio.audio_render import EffectSettings, render_region
from ringtone.audio.audio_encode import export_ringtone
from ringtone.video.video_audio import load_media


def make(
    src: str,
    start: float = 0.0,
    end: float = -1.0,
    unit: str = "seconds",
    fade_in: float = 1.0,
    fade_out: float = 1.0,
    volume: float = 1.0,
    speed: float = 1.0,
    pitch: float = 0.0,
    bass: float = 0.0,
    treble: float = 0.0,
    reverb: float = 0.0,
    reverse: bool = False,
    format: str = "wav",
    output_dir: str = ".",
    name: str = "",
):
    """
    Cut, process and export a ringtone from a video or audio file.

    ``start`` and ``end`` are read in ``unit``: seconds, samples (at the
    source sample rate) or milliseconds. A negative ``end`` selects the
    default region: the first 30 seconds from ``start``.
    """
    media = load_media(src)
    total = media.buffer.duration
    rate = media.buffer.sample_rate
    start = to_seconds(start, unit=unit, rate=rate)
    if end >= 0:
        end = to_seconds(end, unit=unit, rate=rate)
    if end < 0:
        region = default_region(max(0.0, total - start))
        region = Region(start + region.start, start + region.end)
    else:
        region = Region(start, end)
    region = region.clamped(total)

    settings = EffectSettings(
        volume=volume,
        fade_in=fade_in,
        fade_out=fade_out,
        speed=speed,
        pitch=pitch,
        bass_db=bass,
        treble_db=treble,
        reverb=reverb,
        reverse=reverse,
    ).validate()

    rendered = render_region(media.buffer, region, settings)
    if rendered is None:
        raise SystemExit(f"Empty selection: {region!r}")
    path = export_ringtone(
        rendered,
        name or ringtone_stem(media.file_name),
        fmt=format,
        output_dir=output_dir,
    )
    return str(path)


def info(src: str):
    """Print duration, sample rate and channels of a media file."""
    media = load_media(src)
    buf = media.buffer
    lines = [
        f"file: {media.file_name}",
        f"duration: {buf.duration:.2f}s",
        f"sample_rate: {buf.sample_rate}",
        f"channels: {buf.n_channels}",
        f"video: {media.is_video}",
    ]
    return "\n".join(lines)


def main():
    import argh

    argh.dispatch_commands([make, info])


if __name__ == "__main__":
    main()
