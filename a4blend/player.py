# a4blend/player.py
import math

import vlc

from .common import clamp
from .logging_config import SinkCommandError, get_logger
from .state import TimeUpdate

logger = get_logger("player")


class VLCMusic:
    """VLC media sink.

    Commands come from ``PlaybackController``; end-of-track and error
    reports go to the callbacks registered with ``on_end``/``on_error``,
    tagged with the load id of the source they belong to. Those callbacks
    run on a VLC thread and must not call back into libvlc directly.
    """
    def __init__(self, volume=1.0):
        self.instance = vlc.Instance('--no-xlib', '--no-video')  # no video
        self.player = self.instance.media_player_new()
        self.current_media = None
        self.load_id = 0
        self._end_callback = None
        self._error_callback = None
        self.player.audio_set_volume(int(clamp(volume) * 100))

    def set_source(self, locator, load_id):
        media = self.instance.media_new(str(locator))
        # end/error are reported per media, tagged with the load that created it
        media.event_manager().event_attach(vlc.EventType.MediaStateChanged, self._on_media_state, load_id)
        self.player.set_media(media)
        self.current_media = media
        self.load_id = load_id
        logger.debug(f"Loaded {locator} as load {load_id}")

    def play(self):
        if self.player.play() == -1:
            raise SinkCommandError("VLC refused to play")

    def pause(self):
        self.player.set_pause(1)

    def seek_to(self, seconds):
        if self.current_media is None:
            return
        self.player.set_time(int(seconds * 1000))

    def set_volume(self, v):
        """v: 0.0 - 1.0"""
        if self.player.audio_set_volume(int(clamp(v) * 100)) == -1:
            raise SinkCommandError(f"VLC rejected volume {v}")

    def poll(self):
        """Current position as a ``TimeUpdate``; duration is NaN until VLC knows it."""
        if self.current_media is None:
            return None
        t = self.player.get_time()
        length = self.player.get_length()
        elapsed = t / 1000.0 if t and t > 0 else 0.0
        total = length / 1000.0 if length and length > 0 else math.nan
        return TimeUpdate(self.load_id, elapsed, total)

    def on_end(self, callback):
        self._end_callback = callback

    def on_error(self, callback):
        self._error_callback = callback

    def _on_media_state(self, event, load_id):
        state = event.u.new_state
        if vlc.State.Ended == state:
            self._raise(self._end_callback, load_id)
        elif vlc.State.Error == state:
            self._raise(self._error_callback, load_id)

    def _raise(self, callback, load_id):
        if callable(callback):
            callback(load_id)

    def stop(self):
        self.player.stop()
