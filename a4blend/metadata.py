# a4blend/metadata.py
"""
Cover art extraction.

Covers are pulled out of the embedded tags with mutagen and handed to the
rest of the app as self-contained ``data:`` URIs, so a catalog entry never
has to reopen the audio file to show its picture.
"""
import asyncio
import base64
import binascii
import io
import mimetypes
import struct
from dataclasses import dataclass
from pathlib import Path

from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.flac import Picture
from mutagen.mp4 import MP4Cover, MP4Tags

from .logging_config import MetadataError, get_logger

logger = get_logger("metadata")

COVER_FRONT = 3

_MAGIC = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_mime(data):
    for magic, mime in _MAGIC:
        if data.startswith(magic):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def to_data_uri(mime, data):
    mime = (mime or "").strip().lower()
    if "/" not in mime:
        # some taggers write just "jpg" or "PNG"
        mime = sniff_mime(data)
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def _vorbis_pictures(values):
    pictures = []
    for value in values:
        try:
            pictures.append(Picture(base64.b64decode(value)))
        except (binascii.Error, MutagenError, ValueError, struct.error) as e:
            logger.debug(f"Skipping malformed metadata_block_picture: {e}")
    return pictures


def _pictures(audio):
    """Return ``(mime, picture_type, data)`` for every embedded picture."""
    tags = audio.tags
    if tags is not None and hasattr(tags, "getall"):
        return [(f.mime, int(f.type), bytes(f.data)) for f in tags.getall("APIC")]
    if getattr(audio, "pictures", None):
        return [(p.mime, int(p.type), bytes(p.data)) for p in audio.pictures]
    if isinstance(tags, MP4Tags):
        covers = []
        for cover in tags.get("covr", []):
            mime = "image/png" if cover.imageformat == MP4Cover.FORMAT_PNG else "image/jpeg"
            covers.append((mime, COVER_FRONT, bytes(cover)))
        return covers
    if tags is not None and hasattr(tags, "get"):
        values = tags.get("metadata_block_picture") or []
        return [(p.mime, int(p.type), bytes(p.data)) for p in _vorbis_pictures(values)]
    return []


def select_picture(pictures):
    """Front cover first, otherwise whatever comes first."""
    pictures = [p for p in pictures if p[2]]
    if not pictures:
        return None
    for picture in pictures:
        if picture[1] == COVER_FRONT:
            return picture
    return pictures[0]


def _fetch(source_ref):
    return Path(source_ref).read_bytes()


def _parse_picture(raw):
    try:
        audio = MutagenFile(io.BytesIO(raw))
    except MutagenError as e:
        raise MetadataError(f"Unreadable tags: {e}") from e
    if audio is None:
        raise MetadataError("Unrecognised audio format")
    return select_picture(_pictures(audio))


async def extract_cover(source_ref):
    """Return the embedded cover of ``source_ref`` as a data URI, or None.

    Never raises: missing files, unknown formats and broken tags all read
    as "no cover" and the caller substitutes its placeholder.
    """
    try:
        raw = await asyncio.to_thread(_fetch, source_ref)
        picture = await asyncio.to_thread(_parse_picture, raw)
    except Exception as e:
        logger.warning(f"Error extracting cover art from {source_ref}: {e}")
        return None
    if picture is None:
        logger.debug(f"No cover art found in {source_ref}")
        return None
    mime, _, data = picture
    logger.debug(f"Cover art found in {source_ref}: {mime}, {len(data)} bytes")
    return to_data_uri(mime, data)


@dataclass(frozen=True)
class CoverImage:
    mime: str
    data: bytes
    origin: str  # embedded | file | fallback | builtin

    def describe(self):
        if self.origin == "builtin":
            return "no cover"
        return f"{self.mime}, {len(self.data) / 1024:.1f} KB ({self.origin})"


BUILTIN_COVER = CoverImage(mime="image/png", data=b"", origin="builtin")


def decode_data_uri(uri):
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise MetadataError("Not a base64 data URI")
    mime = header[len("data:"):-len(";base64")]
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise MetadataError(f"Bad base64 payload: {e}") from e
    if not data:
        raise MetadataError("Empty image")
    return mime, data


def _load_image_file(path):
    data = Path(path).read_bytes()
    if not data:
        raise MetadataError(f"Empty image file {path}")
    mime = mimetypes.guess_type(str(path))[0] or sniff_mime(data)
    return mime, data


def resolve_cover(image_ref, fallback_path=None):
    """Load a cover for display, falling back twice before giving up."""
    if image_ref:
        try:
            if str(image_ref).startswith("data:"):
                mime, data = decode_data_uri(image_ref)
                return CoverImage(mime, data, "embedded")
            mime, data = _load_image_file(image_ref)
            return CoverImage(mime, data, "file")
        except (OSError, MetadataError) as e:
            logger.error(f"Error loading cover art {str(image_ref)[:64]}: {e}")
    if fallback_path:
        try:
            mime, data = _load_image_file(fallback_path)
            return CoverImage(mime, data, "fallback")
        except (OSError, MetadataError) as e:
            logger.error(f"Error loading fallback cover {fallback_path}: {e}")
    return BUILTIN_COVER
