import logging
import math
from typing import Callable, List, Optional, Tuple

from ..domain.errors import ValidationError
from ..domain.models import RECENT_CIRCUITS_LIMIT, TimeEntry
from ..profiles.registry import ProfileRegistry
from ..utils.dates import now_iso, sort_key
from ..utils.time_format import is_valid_strict, to_seconds

logger = logging.getLogger(__name__)


class TimeLedger:
    """
    ordered collection of recorded times.

    entries have no id of their own; they are addressed by position, and
    find_index relocates one by its (time, circuit, date, profile_id) key.
    """

    def __init__(self, registry: ProfileRegistry,
                 entries: Optional[List[TimeEntry]] = None,
                 recent_circuits: Optional[List[str]] = None,
                 on_change: Optional[Callable[[], None]] = None):
        self.registry = registry
        self._entries: List[TimeEntry] = list(entries or [])
        self._recent: List[str] = list(recent_circuits or [])[:RECENT_CIRCUITS_LIMIT]
        self._on_change = on_change
        # bumped on every mutation, lets callers cache derived views
        self.version = 0

    @property
    def entries(self) -> List[TimeEntry]:
        return list(self._entries)

    @property
    def recent_circuits(self) -> List[str]:
        return list(self._recent)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> TimeEntry:
        return self._entries[index]

    def add(self, time: str, circuit: str, profile_id: str) -> bool:
        """
        record a new time.

        args:
            time: race time, must match M:SS.mmm
            circuit: circuit name
            profile_id: profile the time was set with

        returns:
            True if the time beats every earlier time on the circuit

        raises:
            ValidationError: if the time is malformed or a field is empty
        """
        if not is_valid_strict(time):
            raise ValidationError(f"Invalid time '{time}', expected M:SS.mmm")
        if not circuit:
            raise ValidationError("Circuit cannot be empty")
        if not profile_id:
            raise ValidationError("Profile cannot be empty")

        previous = [to_seconds(e.time) for e in self._entries if e.circuit == circuit]
        best = min((s for s in previous if not math.isnan(s)), default=math.inf)
        is_personal_best = to_seconds(time) < best

        profile = self.registry.find(profile_id)
        entry = TimeEntry(
            time=time,
            circuit=circuit,
            profile_id=profile_id,
            date=now_iso(),
            vehicle=profile.vehicle if profile else "",
            character=profile.character if profile else "",
        )
        self._entries.append(entry)
        self._touch_circuit(circuit)

        logger.debug(f"added {time} on {circuit} (personal best: {is_personal_best})")
        self._changed()
        return is_personal_best

    def edit(self, index: int, time: str, circuit: str, character: str, vehicle: str) -> TimeEntry:
        """
        overwrite an entry in place.

        profile_id and date are kept, an edit never moves an entry in time.

        raises:
            ValidationError: if a field is empty, the time is malformed or
                the index doesn't exist
        """
        if not (time and circuit and character and vehicle):
            raise ValidationError("Time, circuit, character and vehicle are all required")
        if not is_valid_strict(time):
            raise ValidationError(f"Invalid time '{time}', expected M:SS.mmm")
        self._check_index(index)

        original = self._entries[index]
        updated = original.model_copy(update={
            "time": time,
            "circuit": circuit,
            "character": character,
            "vehicle": vehicle,
        })
        self._entries[index] = updated
        self._changed()
        return updated

    def remove(self, index: int) -> TimeEntry:
        """delete the entry at index."""
        self._check_index(index)
        removed = self._entries.pop(index)
        logger.debug(f"removed {removed.time} on {removed.circuit}")
        self._changed()
        return removed

    def find_index(self, entry: TimeEntry) -> int:
        """position of the first entry with the same key, -1 if none."""
        key = entry.key
        for i, candidate in enumerate(self._entries):
            if candidate.key == key:
                return i
        return -1

    def in_display_order(self) -> List[Tuple[int, TimeEntry]]:
        """(index, entry) pairs, newest first; the ledger itself is untouched."""
        indexed = list(enumerate(self._entries))
        return sorted(indexed, key=lambda pair: sort_key(pair[1].date), reverse=True)

    def filter(self, circuit: Optional[str] = None,
               profile_id: Optional[str] = None) -> List[Tuple[int, TimeEntry]]:
        """(index, entry) pairs in display order matching the given fields."""
        return [
            (i, e) for i, e in self.in_display_order()
            if (circuit is None or e.circuit == circuit)
            and (profile_id is None or e.profile_id == profile_id)
        ]

    def personal_best(self, circuit: str) -> Optional[TimeEntry]:
        """fastest entry on a circuit; the earliest one wins a tie."""
        best = None
        for entry in self._entries:
            if entry.circuit != circuit:
                continue
            seconds = to_seconds(entry.time)
            if math.isnan(seconds):
                continue
            if best is None or seconds < to_seconds(best.time):
                best = entry
        return best

    def circuits(self) -> List[str]:
        """circuits with at least one entry, in first-recorded order."""
        seen = {}
        for entry in self._entries:
            seen.setdefault(entry.circuit, None)
        return list(seen)

    def replace_all(self, entries: List[TimeEntry]) -> None:
        self._entries = list(entries)
        self._changed()

    def extend(self, entries: List[TimeEntry]) -> None:
        self._entries.extend(entries)
        self._changed()

    def reset(self) -> None:
        """drop every entry and the recent circuits without persisting."""
        self._entries = []
        self._recent = []
        self.version += 1

    def _touch_circuit(self, circuit: str) -> None:
        self._recent = [circuit] + [c for c in self._recent if c != circuit]
        del self._recent[RECENT_CIRCUITS_LIMIT:]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._entries):
            raise ValidationError(f"No time at position {index}")

    def _changed(self) -> None:
        self.version += 1
        if self._on_change is not None:
            self._on_change()
