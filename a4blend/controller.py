# a4blend/controller.py
from typing import Callable, List, Optional, Protocol

from .logging_config import get_logger
from .state import (
    PauseCommand,
    PlaybackState,
    PlayCommand,
    SeekToCommand,
    SetSourceCommand,
    SetVolumeCommand,
    SinkError,
    transition,
)

logger = get_logger("controller")


class MediaSink(Protocol):
    def set_source(self, locator: str, load_id: int) -> None: ...
    def play(self) -> None: ...
    def pause(self) -> None: ...
    def seek_to(self, seconds: float) -> None: ...
    def set_volume(self, volume: float) -> None: ...


class PlaybackController:
    """Owns the playback state and keeps the media sink in step with it.

    Every user command and sink report goes through ``dispatch``. The state
    is updated first (the UI is optimistic) and then the resulting commands
    are sent to the sink; if the sink raises, the failure is fed back as a
    ``SinkError`` event so ``is_playing`` stops claiming playback.
    """

    def __init__(self, sink: MediaSink, state: Optional[PlaybackState] = None):
        self.sink = sink
        self.state = state or PlaybackState()
        self._listeners: List[Callable[[PlaybackState], None]] = []

    def subscribe(self, listener):
        self._listeners.append(listener)

    def dispatch(self, event) -> PlaybackState:
        self.state, commands = transition(self.state, event)
        failure = self._run(commands)
        if failure is not None:
            self.state, _ = transition(self.state, SinkError(self.state.load_id, failure))
        for listener in self._listeners:
            listener(self.state)
        return self.state

    def _run(self, commands):
        """Send ``commands`` in order; returns the error text of the first failure."""
        for command in commands:
            try:
                self._send(command)
            except Exception as e:
                logger.error(f"Sink command {command} failed: {e}")
                return str(e) or type(e).__name__
        return None

    def _send(self, command):
        if isinstance(command, SetSourceCommand):
            self.sink.set_source(command.locator, command.load_id)
        elif isinstance(command, PlayCommand):
            self.sink.play()
        elif isinstance(command, PauseCommand):
            self.sink.pause()
        elif isinstance(command, SeekToCommand):
            self.sink.seek_to(command.seconds)
        elif isinstance(command, SetVolumeCommand):
            self.sink.set_volume(command.volume)
        else:
            raise TypeError(f"Unknown command: {command!r}")
