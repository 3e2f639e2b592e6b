from ..config import get_active_profile_id, get_data_dir
from ..services.record_store import RecordStore
from ..storage.kv import FileKeyValueStore
from ..storage.snapshot import PersistenceAdapter


def get_record_store() -> RecordStore:
    """open the record store in the configured data directory."""
    store = RecordStore(PersistenceAdapter(FileKeyValueStore(get_data_dir())))
    active = get_active_profile_id()
    if active and store.profiles.find(active) is not None:
        store.profiles.select(active)
    return store
