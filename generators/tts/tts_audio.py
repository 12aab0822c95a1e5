import re
import struct

DEFAULT_PCM_MIME = "audio/L16;rate=24000"

_RATE_PARAM = re.compile(r"rate=(\d+)", re.IGNORECASE)
_BITS_MAIN_TYPE = re.compile(r"^audio/l(\d+)", re.IGNORECASE)


def parse_pcm_mime_type(mime_type: str | None) -> tuple[int, int]:
    """Return ``(bits_per_sample, sample_rate)`` for raw ``audio/L16;rate=...`` payloads."""
    value = (mime_type or "").strip()
    bits_match = _BITS_MAIN_TYPE.match(value)
    rate_match = _RATE_PARAM.search(value)
    bits_per_sample = int(bits_match.group(1)) if bits_match else 16
    sample_rate = int(rate_match.group(1)) if rate_match else 24000
    return bits_per_sample, sample_rate


def pcm_to_wav(audio_data: bytes, mime_type: str | None) -> bytes:
    bits_per_sample, sample_rate = parse_pcm_mime_type(mime_type)
    num_channels = 1
    block_align = num_channels * (bits_per_sample // 8)
    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + len(audio_data),
        b"WAVE",
        b"fmt ",
        16,
        1,
        num_channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        bits_per_sample,
        b"data",
        len(audio_data),
    )
    return header + audio_data


def sniff_audio_mime(audio_bytes: bytes, default: str = "audio/mpeg") -> str:
    if audio_bytes[:4] == b"RIFF" and audio_bytes[8:12] == b"WAVE":
        return "audio/wav"
    if audio_bytes[:3] == b"ID3" or audio_bytes[:2] in (b"\xff\xfb", b"\xff\xf3", b"\xff\xf2"):
        return "audio/mpeg"
    if audio_bytes[:4] == b"OggS":
        return "audio/ogg"
    return default


def to_playable_audio(audio_bytes: bytes, mime_type: str | None) -> tuple[bytes, str]:
    """Wrap raw PCM into WAV; container formats pass through untouched."""
    normalized = (mime_type or "").lower()
    if normalized.startswith("audio/l") or "pcm" in normalized or not normalized:
        return pcm_to_wav(audio_bytes, mime_type or DEFAULT_PCM_MIME), "audio/wav"
    return audio_bytes, normalized
