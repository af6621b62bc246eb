from dataclasses import replace

import pytest

from a4blend.playlist import CatalogEntry
from a4blend.state import CatalogLoaded, PlaybackState, transition


def make_catalog(titles):
    return tuple(
        CatalogEntry(title=t, source_ref=f"/music/{t}.mp3", cover_image="assets/default.jpg")
        for t in titles
    )


def loaded_state(titles, playing=False):
    """State right after a catalog of ``titles`` was delivered."""
    state, _ = transition(PlaybackState(), CatalogLoaded(make_catalog(titles)))
    if playing:
        state = replace(state, is_playing=True)
    return state


class FakeSink:
    """Records every command the controller sends."""

    def __init__(self):
        self.calls = []

    def set_source(self, locator, load_id):
        self.calls.append(("set_source", locator, load_id))

    def play(self):
        self.calls.append(("play",))

    def pause(self):
        self.calls.append(("pause",))

    def seek_to(self, seconds):
        self.calls.append(("seek_to", seconds))

    def set_volume(self, volume):
        self.calls.append(("set_volume", volume))


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def music_dir(tmp_path):
    """A music folder with a few audio files and some noise."""
    root = tmp_path / "songs"
    (root / "b_album").mkdir(parents=True)
    (root / "a_album").mkdir()
    (root / "intro.mp3").write_bytes(b"not really audio")
    (root / "track-two.flac").write_bytes(b"not really audio")
    (root / "notes.txt").write_text("skip me")
    (root / "a_album" / "song.OGG").write_bytes(b"not really audio")
    (root / "b_album" / "other.m4a").write_bytes(b"not really audio")
    return root
