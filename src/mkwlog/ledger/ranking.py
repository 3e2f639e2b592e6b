"""per-circuit placings derived from the ledger."""
import math
from typing import Dict, Iterable, List, Optional

from ..domain.models import EntryKey, TimeEntry
from ..utils.time_format import to_seconds

MEDALS = {
    1: "🥇",
    2: "🥈",
    3: "🥉",
}


def _sort_seconds(entry: TimeEntry) -> float:
    seconds = to_seconds(entry.time)
    return math.inf if math.isnan(seconds) else seconds


def compute_rankings(entries: Iterable[TimeEntry]) -> Dict[EntryKey, int]:
    """
    rank every entry within its circuit, 1 being the fastest.

    sorting is stable, so of two equal times the one recorded first places
    higher. when two entries share a key the first (better) rank is kept.
    """
    groups: Dict[str, List[TimeEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.circuit, []).append(entry)

    rankings: Dict[EntryKey, int] = {}
    for circuit_entries in groups.values():
        ordered = sorted(circuit_entries, key=_sort_seconds)
        for rank, entry in enumerate(ordered, start=1):
            rankings.setdefault(entry.key, rank)
    return rankings


def medal_for(rank: Optional[int]) -> Optional[str]:
    """medal emoji for the top three places."""
    if rank is None:
        return None
    return MEDALS.get(rank)


def podium(entries: Iterable[TimeEntry], circuit: str) -> List[TimeEntry]:
    """up to three fastest entries on a circuit, best first."""
    on_circuit = [e for e in entries if e.circuit == circuit]
    return sorted(on_circuit, key=_sort_seconds)[:3]
