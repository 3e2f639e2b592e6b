from pydantic import BaseModel, Field
from typing import List, NamedTuple, Optional

# values the profile form shows before a real choice is made
CHARACTER_PLACEHOLDER = "Select a character"
SKIN_PLACEHOLDER = "Select an outfit"
VEHICLE_PLACEHOLDER = "Select a kart"
PLACEHOLDERS = frozenset({CHARACTER_PLACEHOLDER, SKIN_PLACEHOLDER, VEHICLE_PLACEHOLDER})

UNKNOWN = "Unknown"
RECENT_CIRCUITS_LIMIT = 8


class Profile(BaseModel):
    """a saved character + outfit + kart combination."""
    id: str
    name: str
    character: str
    character_skin: str
    vehicle: str
    created_at: str  # ISO format datetime


class EntryKey(NamedTuple):
    """composite key standing in for an entry id."""
    time: str
    circuit: str
    date: str
    profile_id: str


class TimeEntry(BaseModel):
    """one recorded race time."""
    time: str
    circuit: str
    profile_id: str
    date: str  # ISO format datetime
    # copies of the owning profile, absent on entries written by older versions
    vehicle: Optional[str] = None
    character: Optional[str] = None

    @property
    def key(self) -> EntryKey:
        return EntryKey(self.time, self.circuit, self.date, self.profile_id)

    def display_character(self, profile: Optional[Profile] = None) -> str:
        if self.character:
            return self.character
        if profile is not None:
            return profile.character
        return UNKNOWN

    def display_vehicle(self, profile: Optional[Profile] = None) -> str:
        if self.vehicle:
            return self.vehicle
        if profile is not None:
            return profile.vehicle
        return UNKNOWN


class StoreSnapshot(BaseModel):
    """the five independently persisted records."""
    times: List[TimeEntry] = Field(default_factory=list)
    profiles: List[Profile] = Field(default_factory=list)
    recent_circuits: List[str] = Field(default_factory=list)
    relative_dates: bool = True
    csv_backup: str = ""

    @classmethod
    def empty(cls) -> "StoreSnapshot":
        """create an empty snapshot."""
        return cls()
