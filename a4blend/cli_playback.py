# a4blend/cli_playback.py
import asyncio
from pathlib import Path

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Footer, Header, Input, Label, ListItem, ListView, ProgressBar, Static

from .config import load_config, sanitize_config, save_config
from .controller import PlaybackController
from .dialogs import FolderDialog
from .logging_config import ConfigurationError, get_logger, setup_logging
from .metadata import resolve_cover
from .player import VLCMusic
from .playlist import CatalogLoader
from .search import matching_entries
from .state import (
    CatalogLoaded,
    Ended,
    Next,
    Previous,
    QueryChanged,
    Seek,
    SelectFromSearch,
    SetVolume,
    SinkError,
    TogglePlayPause,
    ToggleMute,
)

logger = get_logger("app")

SEEK_STEP = 5.0     # percent of the track
VOLUME_STEP = 0.1


class ResultItem(ListItem):
    def __init__(self, position: int, catalog_index: int, title: str):
        super().__init__(Label(title))
        self.position = position
        self.catalog_index = catalog_index


class A4Blend(App):

    CSS_PATH = "a4blend.tcss"
    TITLE = "A4 Blend"
    SUB_TITLE = "Interactive Music Player"
    BINDINGS = [
        ("space", "play_pause", "Play/Pause"),
        ("n", "next", "Next"),
        ("p", "prev", "Previous"),
        ("m", "mute", "Mute"),
        ("left_square_bracket", "seek(-1)", "Back"),
        ("right_square_bracket", "seek(1)", "Forward"),
        ("minus", "volume(-1)", "Vol-"),
        ("plus", "volume(1)", "Vol+"),
        ("slash", "focus_search", "Search"),
        ("g", "change_music_folder", "Change Folder"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, music_dir=None, cfg=None):
        super().__init__()
        self.cfg = cfg if cfg is not None else sanitize_config(load_config())
        self.music_dir = music_dir or self.cfg.get("music_dir")
        self.player = VLCMusic()
        self.controller = PlaybackController(self.player)
        self.loader = CatalogLoader(self.cfg["extensions"], self.cfg["placeholder_cover"])
        self.loading = True
        self._rendered = None
        self._cover_for = None
        self._loop = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal():
            # left playlist
            with Vertical(id="playlist_panel"):
                self.search = Input(placeholder="Search songs...", id="search")
                yield self.search
                with VerticalScroll():
                    self.list_view = ListView()
                    yield self.list_view
            # center now playing and controls
            with Vertical(id="now_panel"):
                self.lbl_cover = Label("", id="cover")
                yield self.lbl_cover
                self.lbl_title = Label("Loading songs...", id="title")
                yield self.lbl_title
                self.progress = ProgressBar(total=100, show_eta=False, show_percentage=False)
                yield self.progress
                with Horizontal(id="times"):
                    self.lbl_pos = Label("00:00")
                    yield self.lbl_pos
                    yield Static("")  # spacer
                    self.lbl_len = Label("00:00")
                    yield self.lbl_len
                with Horizontal(id="controls"):
                    self.btn_prev = Button("⏮", id="prev")
                    yield self.btn_prev
                    self.btn_play = Button("▶", id="play")
                    yield self.btn_play
                    self.btn_next = Button("⏭", id="next")
                    yield self.btn_next
                    self.btn_mute = Button("🔊", id="mute")
                    yield self.btn_mute
                self.lbl_volume = Label("", id="volume")
                yield self.lbl_volume
        yield Footer()

    async def on_mount(self):
        self._loop = asyncio.get_running_loop()
        self.player.on_end(lambda load_id: self._from_sink(Ended(load_id)))
        self.player.on_error(lambda load_id: self._from_sink(SinkError(load_id, "playback error")))
        self.controller.subscribe(self._update_ui)
        self.controller.dispatch(SetVolume(self.cfg["volume"]))
        self.set_interval(float(self.cfg["poll_interval"]), self._poll_sink)
        self.run_worker(self._load(self.music_dir), group="catalog")

    def _from_sink(self, event):
        # VLC calls this from its own thread, and libvlc must not be re-entered there
        self._loop.call_soon_threadsafe(self.controller.dispatch, event)

    def _poll_sink(self):
        if self.controller.state.is_empty:
            return
        update = self.player.poll()
        if update is not None:
            self.controller.dispatch(update)

    async def _load(self, folder):
        self.loading = True
        self.lbl_title.update("Loading songs...")
        catalog = await self.loader.load(folder)
        if catalog is None:
            return  # superseded by a newer folder
        self.loading = False
        self.controller.dispatch(CatalogLoaded(catalog))

    # ---------------- rendering ----------------
    def _update_ui(self, state):
        key = (state.catalog, state.search_index)
        if key != self._rendered:
            self._rendered = key
            self._render_playlist(state)
        self._highlight_current(state)

        entry = state.current_entry
        if entry is None:
            self.lbl_title.update("Loading songs..." if self.loading else "No songs found")
            self.lbl_cover.update("")
        else:
            self.lbl_title.update(entry.title)
            if self._cover_for != entry.source_ref:
                self._cover_for = entry.source_ref
                cover = resolve_cover(entry.cover_image, self.cfg["fallback_cover"])
                self.lbl_cover.update(f"Cover: {cover.describe()}")

        self.btn_play.label = "⏸" if state.is_playing else "▶"
        self.btn_mute.label = "🔊" if state.volume > 0 else "🔇"
        self.lbl_volume.update(f"Vol {round(state.volume * 100)}%")
        self.lbl_pos.update(state.elapsed_display)
        self.lbl_len.update(state.total_display)
        self.progress.update(progress=state.progress)

    def _render_playlist(self, state):
        self.list_view.clear()
        self.list_view.extend(
            ResultItem(pos, catalog_index, entry.title)
            for pos, (catalog_index, entry) in enumerate(matching_entries(state.catalog, state.search_index))
        )

    def _highlight_current(self, state):
        for item in self.list_view.query(ResultItem):
            item.set_class(item.catalog_index == state.current_index, "current")

    # ---------------- input ----------------
    async def on_input_changed(self, message: Input.Changed) -> None:
        if message.input.id == "search":
            self.controller.dispatch(QueryChanged(message.value))

    async def on_list_view_selected(self, message: ListView.Selected):
        if isinstance(message.item, ResultItem):
            self.controller.dispatch(SelectFromSearch(message.item.position))

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        id = event.button.id
        if id == "play":
            await self.action_play_pause()
        elif id == "next":
            await self.action_next()
        elif id == "prev":
            await self.action_prev()
        elif id == "mute":
            await self.action_mute()

    async def action_play_pause(self):
        self.controller.dispatch(TogglePlayPause())

    async def action_next(self):
        self.controller.dispatch(Next())

    async def action_prev(self):
        self.controller.dispatch(Previous())

    async def action_mute(self):
        self.controller.dispatch(ToggleMute())

    async def action_seek(self, direction: int):
        percent = self.controller.state.progress + direction * SEEK_STEP
        self.controller.dispatch(Seek(percent / 100))

    async def action_volume(self, direction: int):
        self.controller.dispatch(SetVolume(self.controller.state.volume + direction * VOLUME_STEP))

    async def action_focus_search(self):
        self.call_after_refresh(self.set_focus, self.search)

    async def action_change_music_folder(self):
        self.run_worker(self._choose_folder(), exclusive=True)

    async def _choose_folder(self):
        dialog = FolderDialog(self.music_dir)
        new_path = await self.push_screen(dialog, wait_for_dismiss=True)
        await self.apply_folder(new_path)

    async def apply_folder(self, path):
        if not path:
            return
        self.music_dir = path
        try:
            save_config({"music_dir": self.music_dir})
        except ConfigurationError as e:
            logger.error(str(e))
        await self._load(self.music_dir)

    async def action_quit(self):
        self.player.stop()
        self.exit()


def run_tui(music_dir=None):
    cfg = sanitize_config(load_config())
    log_file = cfg["log_file"]
    setup_logging(cfg["log_level"], Path(log_file) if log_file else None)
    app = A4Blend(music_dir, cfg)
    app.run()
