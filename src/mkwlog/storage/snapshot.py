import json
import logging
from typing import Any, Callable, List

from pydantic import TypeAdapter

from ..domain.models import Profile, StoreSnapshot, TimeEntry
from .kv import KeyValueStore

logger = logging.getLogger(__name__)

TIMES_KEY = "mkw-times"
PROFILES_KEY = "mkw-profiles"
RECENT_CIRCUITS_KEY = "mkw-recent-circuits"
RELATIVE_DATES_KEY = "mkw-relative-dates"
CSV_BACKUP_KEY = "mkw-csv-backup"

ALL_KEYS = [TIMES_KEY, PROFILES_KEY, RECENT_CIRCUITS_KEY, RELATIVE_DATES_KEY, CSV_BACKUP_KEY]

_times_adapter = TypeAdapter(List[TimeEntry])
_profiles_adapter = TypeAdapter(List[Profile])
_circuits_adapter = TypeAdapter(List[str])
_flag_adapter = TypeAdapter(bool)


class PersistenceAdapter:
    """saves and loads the whole store as five separately keyed records."""

    def __init__(self, backend: KeyValueStore):
        self.backend = backend

    def save_snapshot(self, snapshot: StoreSnapshot) -> None:
        """overwrite every record with the snapshot's values."""
        self.backend.set(TIMES_KEY, json.dumps(
            [t.model_dump(exclude_none=True) for t in snapshot.times]))
        self.backend.set(PROFILES_KEY, json.dumps(
            [p.model_dump() for p in snapshot.profiles]))
        self.backend.set(RECENT_CIRCUITS_KEY, json.dumps(snapshot.recent_circuits))
        self.backend.set(RELATIVE_DATES_KEY, json.dumps(snapshot.relative_dates))
        self.backend.set(CSV_BACKUP_KEY, snapshot.csv_backup)
        logger.debug(f"saved {len(snapshot.times)} times, {len(snapshot.profiles)} profiles")

    def load_snapshot(self) -> StoreSnapshot:
        """
        load every record.

        a missing or corrupted record falls back to its default, the other
        records still load.
        """
        defaults = StoreSnapshot.empty()
        return StoreSnapshot(
            times=self._load_json(TIMES_KEY, _times_adapter.validate_python, defaults.times),
            profiles=self._load_json(PROFILES_KEY, _profiles_adapter.validate_python, defaults.profiles),
            recent_circuits=self._load_json(
                RECENT_CIRCUITS_KEY, _circuits_adapter.validate_python, defaults.recent_circuits),
            relative_dates=self._load_json(
                RELATIVE_DATES_KEY, _flag_adapter.validate_python, defaults.relative_dates),
            csv_backup=self.backend.get(CSV_BACKUP_KEY) or defaults.csv_backup,
        )

    def clear(self) -> None:
        """delete every record."""
        for key in ALL_KEYS:
            self.backend.delete(key)
        logger.info("cleared all stored records")

    def _load_json(self, key: str, validate: Callable[[Any], Any], default: Any) -> Any:
        raw = self.backend.get(key)
        if raw is None:
            return default

        try:
            return validate(json.loads(raw))
        except (json.JSONDecodeError, ValueError) as e:
            # corrupted record, use the default
            logger.warning(f"ignoring unreadable record '{key}': {e}")
            return default
