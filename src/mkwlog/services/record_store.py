import logging
from typing import Callable, Dict, List, Optional

from ..domain.errors import ValidationError
from ..domain.models import EntryKey, Profile, StoreSnapshot, TimeEntry
from ..ledger.ledger import TimeLedger
from ..ledger.ranking import compute_rankings
from ..profiles.registry import ProfileRegistry
from ..storage.snapshot import PersistenceAdapter
from ..sync import csv_codec
from ..sync.csv_codec import ImportMode, StagedImport

logger = logging.getLogger(__name__)

Listener = Callable[["RecordStore"], None]


class RecordStore:
    """
    profiles, times and preferences behind one object.

    every mutation is written through to the persistence adapter before the
    call returns, then subscribers are notified.
    """

    def __init__(self, persistence: PersistenceAdapter):
        self.persistence = persistence
        snapshot = persistence.load_snapshot()

        self.profiles = ProfileRegistry(snapshot.profiles, on_change=self._commit)
        self.ledger = TimeLedger(
            self.profiles,
            entries=snapshot.times,
            recent_circuits=snapshot.recent_circuits,
            on_change=self._commit,
        )
        self._relative_dates = snapshot.relative_dates
        self._listeners: List[Listener] = []
        self._rankings: Optional[Dict[EntryKey, int]] = None
        self._rankings_version = -1

    # subscriptions

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """call listener after every change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # preferences

    @property
    def relative_dates(self) -> bool:
        return self._relative_dates

    def set_relative_dates(self, enabled: bool) -> None:
        self._relative_dates = enabled
        self._commit()

    # times

    def add_time(self, time: str, circuit: str, profile_id: Optional[str] = None) -> bool:
        """record a time with the given or the active profile, returns the personal-best flag."""
        profile_id = profile_id or self.profiles.active_id
        if not profile_id:
            raise ValidationError("No profile selected")
        return self.ledger.add(time, circuit, profile_id)

    def rankings(self) -> Dict[EntryKey, int]:
        """per-circuit ranks, recomputed only after the ledger changed."""
        if self._rankings is None or self._rankings_version != self.ledger.version:
            self._rankings = compute_rankings(self.ledger.entries)
            self._rankings_version = self.ledger.version
        return self._rankings

    def rank_of(self, entry: TimeEntry) -> Optional[int]:
        return self.rankings().get(entry.key)

    # csv

    def export_csv(self) -> str:
        return csv_codec.encode(self.ledger.entries, self.profiles.find)

    def stage_import(self, text: str) -> StagedImport:
        """decode CSV text; nothing changes until commit_import."""
        return csv_codec.decode(text, self.profiles)

    def commit_import(self, staged: StagedImport, mode: ImportMode) -> int:
        """
        apply a staged import.

        args:
            staged: result of stage_import
            mode: replace the ledger, append to it, or cancel

        returns:
            number of entries written
        """
        if mode == ImportMode.CANCEL:
            logger.info("import cancelled")
            return 0

        # resolve again in case a matching profile was created meanwhile
        remap: Dict[str, str] = {}
        for profile in staged.new_profiles:
            existing = self.profiles.find_by_attributes(
                profile.character, profile.character_skin, profile.vehicle)
            if existing is not None:
                remap[profile.id] = existing.id
            else:
                self.profiles.register(profile)

        entries = [
            e.model_copy(update={"profile_id": remap[e.profile_id]}) if e.profile_id in remap else e
            for e in staged.entries
        ]
        if mode == ImportMode.REPLACE:
            self.ledger.replace_all(entries)
        else:
            self.ledger.extend(entries)

        logger.info(f"imported {len(entries)} times ({mode.value})")
        return len(entries)

    # lifecycle

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            times=self.ledger.entries,
            profiles=self.profiles.profiles,
            recent_circuits=self.ledger.recent_circuits,
            relative_dates=self._relative_dates,
            csv_backup=self.export_csv(),
        )

    def reset(self) -> None:
        """erase all profiles, times and preferences."""
        self.persistence.clear()
        self.profiles.replace_all([])
        self.profiles.active_id = None
        self.ledger.reset()
        self._relative_dates = StoreSnapshot.empty().relative_dates
        self._notify()

    def profile_for(self, entry: TimeEntry) -> Optional[Profile]:
        return self.profiles.find(entry.profile_id)

    def _commit(self) -> None:
        self.persistence.save_snapshot(self.snapshot())
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
