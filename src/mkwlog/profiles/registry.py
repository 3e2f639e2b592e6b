import logging
from typing import Callable, List, Optional

from ..domain.errors import ValidationError
from ..domain.models import PLACEHOLDERS, Profile
from ..utils.dates import now_iso
from ..utils.ids import generate_id

logger = logging.getLogger(__name__)


class ProfileRegistry:
    """holds the character/vehicle profiles a user races as."""

    def __init__(self, profiles: Optional[List[Profile]] = None,
                 on_change: Optional[Callable[[], None]] = None):
        self._profiles: List[Profile] = list(profiles or [])
        self._on_change = on_change
        self.active_id: Optional[str] = None

    @property
    def profiles(self) -> List[Profile]:
        return list(self._profiles)

    @property
    def active(self) -> Optional[Profile]:
        if self.active_id is None:
            return None
        return self.find(self.active_id)

    def create(self, character: str, skin: str, vehicle: str) -> Profile:
        """
        create and register a new profile.

        args:
            character: character name
            skin: outfit of the character
            vehicle: kart, bike or ATV

        returns:
            the created profile

        raises:
            ValidationError: if a value is empty or still the form placeholder
        """
        for label, value in (("character", character), ("outfit", skin), ("vehicle", vehicle)):
            if not value or not value.strip():
                raise ValidationError(f"Profile {label} cannot be empty")
            if value in PLACEHOLDERS:
                raise ValidationError(f"Choose a {label} before saving the profile")

        profile = Profile(
            id=generate_id(),
            name=f"{character} + {vehicle}",
            character=character,
            character_skin=skin,
            vehicle=vehicle,
            created_at=now_iso(),
        )
        self._profiles.append(profile)
        logger.debug(f"created profile {profile.id} ({profile.name})")
        self._changed()
        return profile

    def register(self, profile: Profile) -> None:
        """add an already built profile, ignoring ids that are registered."""
        if self.find(profile.id) is not None:
            return
        self._profiles.append(profile)
        self._changed()

    def delete(self, profile_id: str) -> None:
        """remove a profile; time entries that reference it are kept."""
        remaining = [p for p in self._profiles if p.id != profile_id]
        if len(remaining) == len(self._profiles):
            return

        self._profiles = remaining
        if self.active_id == profile_id:
            self.active_id = None
        logger.debug(f"deleted profile {profile_id}")
        self._changed()

    def select(self, profile_id: Optional[str]) -> None:
        """set the active profile, None clears the selection."""
        if profile_id is not None and self.find(profile_id) is None:
            raise ValidationError(f"Profile '{profile_id}' not found")
        self.active_id = profile_id

    def find(self, profile_id: str) -> Optional[Profile]:
        return next((p for p in self._profiles if p.id == profile_id), None)

    def find_by_attributes(self, character: str, skin: str, vehicle: str) -> Optional[Profile]:
        """exact match on all three attributes."""
        for profile in self._profiles:
            if (profile.character == character
                    and profile.character_skin == skin
                    and profile.vehicle == vehicle):
                return profile
        return None

    def replace_all(self, profiles: List[Profile]) -> None:
        self._profiles = list(profiles)
        if self.active_id is not None and self.find(self.active_id) is None:
            self.active_id = None

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
