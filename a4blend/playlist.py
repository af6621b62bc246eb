# a4blend/playlist.py
"""
Catalog building: folder scan, per-file cover extraction and the ordered join.
"""
import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .logging_config import CatalogError, get_logger
from .metadata import extract_cover

logger = get_logger("playlist")

DEFAULT_EXTS = (".mp3", ".flac", ".wav", ".ogg", ".m4a")


@dataclass(frozen=True)
class CatalogEntry:
    title: str
    source_ref: str
    cover_image: Optional[str] = None


Catalog = Tuple[CatalogEntry, ...]


def scan_folder(folder, exts=None):
    """List the audio files under ``folder``, sorted by directory then name."""
    exts = tuple(e.lower() for e in (exts or DEFAULT_EXTS))
    if not folder or not isinstance(folder, (str, os.PathLike)):
        raise CatalogError(f"No usable music folder configured: {folder!r}")
    root_dir = Path(folder).expanduser()
    if not root_dir.is_dir():
        raise CatalogError(f"Music folder not found: {root_dir}")

    def _raise(err):
        raise CatalogError(f"Cannot read music folder: {err}") from err

    song_files = []
    for root, dirs, files in os.walk(root_dir, onerror=_raise):
        dirs.sort()
        for fn in sorted(files):
            if fn.lower().endswith(exts):
                song_files.append(str(Path(root, fn).resolve()))
    return song_files


def title_for(path):
    return Path(path).stem


def make_entry(path, cover, placeholder):
    return CatalogEntry(title=title_for(path), source_ref=str(path), cover_image=cover or placeholder)


async def _build_entry(path, placeholder, extractor):
    try:
        cover = await extractor(path)
        return make_entry(path, cover, placeholder)
    except Exception as e:
        logger.error(f"Error processing {path}: {e}")
        return make_entry(path, None, placeholder)


async def build_catalog(files, placeholder, extractor=extract_cover) -> Catalog:
    """Build one entry per file, concurrently, keeping the input order.

    ``asyncio.gather`` returns results in argument order, so the catalog is
    published only once every file is done and never reordered by latency.
    """
    entries = await asyncio.gather(*(_build_entry(p, placeholder, extractor) for p in files))
    return tuple(entries)


async def load_catalog(folder, exts, placeholder, extractor=extract_cover) -> Catalog:
    """Scan ``folder`` and build its catalog; a failed scan gives an empty one."""
    try:
        files = await asyncio.to_thread(scan_folder, folder, exts)
    except CatalogError as e:
        logger.error(f"Error loading playlist: {e}")
        return ()
    catalog = await build_catalog(files, placeholder, extractor)
    logger.info(f"Loaded {len(catalog)} songs from {folder}")
    return catalog


class CatalogLoader:
    """Runs catalog builds so that only the latest one is ever published.

    Starting a new load cancels the one in flight; a build that finishes
    after it has been superseded returns None instead of its catalog.
    """

    def __init__(self, exts, placeholder, extractor=extract_cover):
        self.exts = exts
        self.placeholder = placeholder
        self.extractor = extractor
        self.generation = 0
        self._task = None

    async def load(self, folder) -> Optional[Catalog]:
        self.generation += 1
        generation = self.generation
        if self._task is not None and not self._task.done():
            logger.info("Cancelling stale catalog build")
            self._task.cancel()
        task = asyncio.ensure_future(load_catalog(folder, self.exts, self.placeholder, self.extractor))
        self._task = task
        try:
            catalog = await task
        except asyncio.CancelledError:
            if generation != self.generation:
                return None
            raise
        if generation != self.generation:
            logger.info(f"Dropping stale catalog for {folder}")
            return None
        return catalog
