# a4blend/search.py
from typing import Tuple


def compute_index(catalog, query) -> Tuple[int, ...]:
    """Positions of the catalog entries whose title contains ``query``.

    Case-insensitive substring match, catalog order, no ranking. An empty
    query matches everything.
    """
    term = (query or "").lower()
    return tuple(i for i, entry in enumerate(catalog) if term in entry.title.lower())


def matching_entries(catalog, index):
    """Pair each position of ``index`` with its entry, for display."""
    return [(pos, catalog[pos]) for pos in index]
