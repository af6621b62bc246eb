import base64
from types import SimpleNamespace

import pytest
from mutagen import MutagenError
from mutagen.flac import Picture
from mutagen.id3 import APIC, ID3
from mutagen.mp4 import MP4Cover, MP4Tags

from a4blend import metadata
from a4blend.logging_config import MetadataError
from a4blend.metadata import (
    BUILTIN_COVER,
    decode_data_uri,
    extract_cover,
    resolve_cover,
    select_picture,
    sniff_mime,
    to_data_uri,
)

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 16


def flac_picture(data, mime, kind=3):
    picture = Picture()
    picture.type = kind
    picture.mime = mime
    picture.data = data
    return picture


def id3_audio(*frames):
    tags = ID3()
    for frame in frames:
        tags.add(frame)
    return SimpleNamespace(tags=tags)


class TestPictureSelection:
    """Tests for picking the embedded picture out of the tags."""

    def test_id3_apic(self):
        audio = id3_audio(APIC(encoding=3, mime="image/png", type=3, desc="Cover", data=PNG))
        assert metadata._pictures(audio) == [("image/png", 3, PNG)]

    def test_flac_pictures(self):
        audio = SimpleNamespace(tags=None, pictures=[flac_picture(JPEG, "image/jpeg")])
        assert metadata._pictures(audio) == [("image/jpeg", 3, JPEG)]

    def test_mp4_covr(self):
        tags = MP4Tags()
        tags["covr"] = [MP4Cover(PNG, imageformat=MP4Cover.FORMAT_PNG)]
        audio = SimpleNamespace(tags=tags)
        assert metadata._pictures(audio) == [("image/png", 3, PNG)]

    def test_vorbis_block_picture(self):
        encoded = base64.b64encode(flac_picture(JPEG, "image/jpeg").write()).decode("ascii")
        audio = SimpleNamespace(tags={"metadata_block_picture": [encoded, "%%%not base64"]})
        assert metadata._pictures(audio) == [("image/jpeg", 3, JPEG)]

    def test_no_tags(self):
        assert metadata._pictures(SimpleNamespace(tags=None)) == []

    def test_front_cover_preferred(self):
        back = ("image/png", 4, PNG)
        front = ("image/jpeg", 3, JPEG)
        assert select_picture([back, front]) == front

    def test_first_picture_without_front_cover(self):
        artist = ("image/png", 8, PNG)
        other = ("image/jpeg", 0, JPEG)
        assert select_picture([artist, other]) == artist

    def test_empty_pictures_skipped(self):
        assert select_picture([("image/png", 3, b"")]) is None
        assert select_picture([]) is None


class TestDataUri:

    def test_encodes_declared_mime(self):
        assert to_data_uri("image/png", b"abc") == "data:image/png;base64,YWJj"

    def test_sniffs_bad_mime(self):
        assert to_data_uri("PNG", PNG).startswith("data:image/png;base64,")
        assert to_data_uri("", JPEG).startswith("data:image/jpeg;base64,")

    def test_sniff_defaults_to_jpeg(self):
        assert sniff_mime(b"????") == "image/jpeg"
        assert sniff_mime(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"

    def test_decode_round_trip(self):
        assert decode_data_uri(to_data_uri("image/png", PNG)) == ("image/png", PNG)

    def test_decode_rejects_garbage(self):
        with pytest.raises(MetadataError):
            decode_data_uri("/assets/default.jpg")
        with pytest.raises(MetadataError):
            decode_data_uri("data:image/png;base64,!!!")


class TestExtractCover:
    """Tests for the never-raising cover extractor."""

    @pytest.mark.asyncio
    async def test_embedded_cover(self, tmp_path, monkeypatch):
        song = tmp_path / "song.mp3"
        song.write_bytes(b"ID3 payload")
        audio = id3_audio(APIC(encoding=3, mime="image/png", type=3, desc="", data=PNG))
        monkeypatch.setattr(metadata, "MutagenFile", lambda fileobj: audio)
        assert await extract_cover(str(song)) == to_data_uri("image/png", PNG)

    @pytest.mark.asyncio
    async def test_no_picture(self, tmp_path, monkeypatch):
        song = tmp_path / "song.mp3"
        song.write_bytes(b"ID3 payload")
        monkeypatch.setattr(metadata, "MutagenFile", lambda fileobj: id3_audio())
        assert await extract_cover(str(song)) is None

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        assert await extract_cover(str(tmp_path / "missing.mp3")) is None

    @pytest.mark.asyncio
    async def test_unrecognised_bytes(self, tmp_path):
        song = tmp_path / "song.mp3"
        song.write_bytes(b"definitely not an audio file")
        assert await extract_cover(str(song)) is None

    @pytest.mark.asyncio
    async def test_parse_error(self, tmp_path, monkeypatch):
        song = tmp_path / "song.mp3"
        song.write_bytes(b"ID3 payload")

        def broken(fileobj):
            raise MutagenError("bad frame")

        monkeypatch.setattr(metadata, "MutagenFile", broken)
        assert await extract_cover(str(song)) is None


class TestResolveCover:
    """Tests for display-time cover loading with fallbacks."""

    def test_embedded(self):
        cover = resolve_cover(to_data_uri("image/png", PNG))
        assert cover.origin == "embedded"
        assert cover.data == PNG

    def test_file(self, tmp_path):
        path = tmp_path / "default.jpg"
        path.write_bytes(JPEG)
        cover = resolve_cover(str(path))
        assert (cover.mime, cover.origin) == ("image/jpeg", "file")

    def test_broken_ref_uses_fallback(self, tmp_path):
        fallback = tmp_path / "default.png"
        fallback.write_bytes(PNG)
        cover = resolve_cover(str(tmp_path / "missing.jpg"), str(fallback))
        assert cover.origin == "fallback"
        assert cover.mime == "image/png"

    def test_everything_missing_gives_builtin(self, tmp_path):
        cover = resolve_cover("data:image/png;base64,", str(tmp_path / "missing.png"))
        assert cover is BUILTIN_COVER
        assert cover.describe() == "no cover"

    def test_describe(self):
        cover = resolve_cover(to_data_uri("image/png", b"x" * 2048))
        assert cover.describe() == "image/png, 2.0 KB (embedded)"
