# a4blend/state.py
"""
Playback state machine.

The state is an immutable ``PlaybackState``; ``transition`` takes the
current state and one event (a user command or something the media sink
reported) and returns the next state plus the commands the sink has to
run, in order. Nothing in here touches VLC or the UI.
"""
import math
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union

from .common import clamp, format_time
from .logging_config import get_logger
from .search import compute_index

logger = get_logger("state")


# ---------- events ----------
@dataclass(frozen=True)
class CatalogLoaded:
    catalog: tuple


@dataclass(frozen=True)
class QueryChanged:
    query: str


@dataclass(frozen=True)
class TogglePlayPause:
    pass


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Previous:
    pass


@dataclass(frozen=True)
class SelectFromSearch:
    position: int


@dataclass(frozen=True)
class Seek:
    ratio: float


@dataclass(frozen=True)
class SetVolume:
    volume: float


@dataclass(frozen=True)
class ToggleMute:
    pass


@dataclass(frozen=True)
class TimeUpdate:
    load_id: int
    elapsed: float
    total: float


@dataclass(frozen=True)
class Ended:
    load_id: int


@dataclass(frozen=True)
class SinkError:
    load_id: int
    reason: str = ""


Event = Union[CatalogLoaded, QueryChanged, TogglePlayPause, Next, Previous, SelectFromSearch,
              Seek, SetVolume, ToggleMute, TimeUpdate, Ended, SinkError]


# ---------- sink commands ----------
@dataclass(frozen=True)
class SetSourceCommand:
    locator: str
    load_id: int


@dataclass(frozen=True)
class PlayCommand:
    pass


@dataclass(frozen=True)
class PauseCommand:
    pass


@dataclass(frozen=True)
class SeekToCommand:
    seconds: float


@dataclass(frozen=True)
class SetVolumeCommand:
    volume: float


Command = Union[SetSourceCommand, PlayCommand, PauseCommand, SeekToCommand, SetVolumeCommand]


@dataclass(frozen=True)
class PlaybackState:
    catalog: tuple = ()
    query: str = ""
    search_index: Tuple[int, ...] = ()
    current_index: Optional[int] = None
    is_playing: bool = False
    volume: float = 1.0
    elapsed_seconds: float = 0.0
    total_seconds: float = 0.0
    load_id: int = 0

    @property
    def is_empty(self):
        return self.current_index is None

    @property
    def current_entry(self):
        if self.current_index is None:
            return None
        return self.catalog[self.current_index]

    @property
    def progress(self):
        """Percent of the current track played, 0 while the duration is unknown."""
        if self.total_seconds <= 0:
            return 0.0
        return self.elapsed_seconds / self.total_seconds * 100

    @property
    def elapsed_display(self):
        return format_time(self.elapsed_seconds)

    @property
    def total_display(self):
        return format_time(self.total_seconds)


Transition = Tuple[PlaybackState, List[Command]]


def _seconds(value):
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def _enter(state, index, playing) -> Transition:
    """Point the sink at ``catalog[index]`` and start it if ``playing``."""
    load_id = state.load_id + 1
    new_state = replace(state, current_index=index, is_playing=playing,
                        elapsed_seconds=0.0, total_seconds=0.0, load_id=load_id)
    commands = [SetSourceCommand(state.catalog[index].source_ref, load_id)]
    if playing:
        commands.append(PlayCommand())
    return new_state, commands


def _step(state, delta) -> Transition:
    n = len(state.catalog)
    return _enter(state, (state.current_index + delta) % n, True)


def _on_catalog(state, event):
    catalog = tuple(event.catalog)
    was_playing = state.is_playing
    state = replace(state, catalog=catalog, search_index=compute_index(catalog, state.query))
    if not catalog:
        state = replace(state, current_index=None, is_playing=False,
                        elapsed_seconds=0.0, total_seconds=0.0, load_id=state.load_id + 1)
        return state, [PauseCommand()] if was_playing else []
    return _enter(state, 0, False)


def _on_time_update(state, event):
    if event.load_id != state.load_id:
        logger.debug(f"Discarding stale time update for load {event.load_id}")
        return state, []
    total = _seconds(event.total)
    elapsed = _seconds(event.elapsed)
    if total > 0:
        elapsed = min(elapsed, total)
    return replace(state, elapsed_seconds=elapsed, total_seconds=total), []


def _on_seek(state, event):
    if state.total_seconds <= 0:
        logger.debug("Ignoring seek while duration is unknown")
        return state, []
    return state, [SeekToCommand(clamp(event.ratio) * state.total_seconds)]


def _on_volume(state, volume):
    volume = clamp(volume)
    return replace(state, volume=volume), [SetVolumeCommand(volume)]


def transition(state: PlaybackState, event: Event) -> Transition:
    """Apply one event. Returns the next state and the sink commands to run."""
    if isinstance(event, CatalogLoaded):
        return _on_catalog(state, event)
    if isinstance(event, QueryChanged):
        return replace(state, query=event.query,
                       search_index=compute_index(state.catalog, event.query)), []
    if isinstance(event, SetVolume):
        return _on_volume(state, event.volume)
    if isinstance(event, ToggleMute):
        # no memory of the pre-mute level: muting and unmuting lands on full volume
        return _on_volume(state, 1.0 if state.volume == 0 else 0.0)

    if state.is_empty:
        return state, []

    if isinstance(event, TogglePlayPause):
        if state.is_playing:
            return replace(state, is_playing=False), [PauseCommand()]
        return replace(state, is_playing=True), [PlayCommand()]
    if isinstance(event, Next):
        return _step(state, 1)
    if isinstance(event, Previous):
        return _step(state, -1)
    if isinstance(event, SelectFromSearch):
        if not 0 <= event.position < len(state.search_index):
            logger.warning(f"Search result {event.position} out of range")
            return state, []
        return _enter(state, state.search_index[event.position], True)
    if isinstance(event, TimeUpdate):
        return _on_time_update(state, event)
    if isinstance(event, Ended):
        if event.load_id != state.load_id:
            logger.debug(f"Discarding stale end of load {event.load_id}")
            return state, []
        return _step(state, 1)
    if isinstance(event, Seek):
        return _on_seek(state, event)
    if isinstance(event, SinkError):
        if event.load_id != state.load_id:
            return state, []
        logger.warning(f"Sink reported failure, pausing: {event.reason}")
        return replace(state, is_playing=False), []
    raise TypeError(f"Unknown event: {event!r}")
