"""CSV exchange format for the time ledger."""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from ..domain.errors import FormatError, ImportRowError
from ..domain.models import Profile, TimeEntry
from ..profiles.registry import ProfileRegistry
from ..utils.dates import now_iso
from ..utils.ids import generate_id
from ..utils.time_format import is_valid_lenient

logger = logging.getLogger(__name__)

COLUMNS = ["time_of_entry", "track", "character", "outfit", "kart", "race_time"]

DEFAULT_CHARACTER = "Unknown Character"
DEFAULT_OUTFIT = "Default"
DEFAULT_KART = "Standard Kart"


class ImportMode(str, Enum):
    REPLACE = "replace"
    APPEND = "append"
    CANCEL = "cancel"


@dataclass
class StagedImport:
    """decoded rows waiting for the user to pick an import mode."""
    entries: List[TimeEntry] = field(default_factory=list)
    new_profiles: List[Profile] = field(default_factory=list)
    row_errors: List[ImportRowError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.row_errors)


def _quote(value: str) -> str:
    if any(ch in value for ch in (",", '"', "\n")):
        return '"' + value.replace('"', '""') + '"'
    return value


def encode(entries: List[TimeEntry], find_profile: Callable[[str], Optional[Profile]]) -> str:
    """
    encode the ledger as CSV text, header first, rows joined by newlines.

    args:
        entries: ledger entries in ledger order
        find_profile: lookup for the profile behind an entry's profile_id
    """
    rows = [",".join(COLUMNS)]
    for entry in entries:
        profile = find_profile(entry.profile_id)
        character = entry.character or (profile.character if profile else None) or DEFAULT_CHARACTER
        outfit = (profile.character_skin if profile else None) or DEFAULT_OUTFIT
        kart = entry.vehicle or (profile.vehicle if profile else None) or DEFAULT_KART
        fields = [entry.date, entry.circuit, character, outfit, kart, entry.time]
        rows.append(",".join(_quote(f) for f in fields))
    return "\n".join(rows)


def parse_line(line: str) -> List[str]:
    """split one CSV line on commas that are not inside quotes."""
    fields = []
    current = []
    in_quote = False
    i = 0

    while i < len(line):
        char = line[i]

        if char == '"':
            if in_quote and i + 1 < len(line) and line[i + 1] == '"':
                # escaped quote inside a quoted field
                current.append('"')
                i += 1
            else:
                in_quote = not in_quote
        elif char == "," and not in_quote:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

        i += 1

    fields.append("".join(current))
    return fields


def decode(text: str, registry: ProfileRegistry) -> StagedImport:
    """
    decode CSV text into entries without touching the ledger or registry.

    rows are matched to existing profiles by (character, outfit, kart);
    unmatched combinations get a new profile, staged alongside the entries.

    raises:
        FormatError: if there is no data row or a required column is missing
    """
    lines = [line.rstrip("\r") for line in text.split("\n")]
    lines = [line for line in lines if line.strip()]
    if len(lines) < 2:
        raise FormatError("CSV needs a header row and at least one data row")

    header = [name.strip() for name in parse_line(lines[0])]
    missing = [name for name in COLUMNS if name not in header]
    if missing:
        raise FormatError(
            f"CSV header is missing required columns: {', '.join(missing)}",
            missing=missing,
        )
    position = {name: header.index(name) for name in COLUMNS}

    staged = StagedImport()
    staged_profiles: Dict[Tuple[str, str, str], Profile] = {}

    for row_number, line in enumerate(lines[1:], start=2):
        values = parse_line(line)
        row = {name: values[idx].strip() for name, idx in position.items()} \
            if len(values) == len(header) else None

        error = _check_row(row, len(values), len(header))
        if error:
            row_error = ImportRowError(row_number, error)
            logger.debug(f"skipping CSV row: {row_error}")
            staged.row_errors.append(row_error)
            continue

        character = row["character"]
        outfit = row["outfit"] or DEFAULT_OUTFIT
        kart = row["kart"] or DEFAULT_KART
        triple = (character, outfit, kart)

        profile = registry.find_by_attributes(*triple) or staged_profiles.get(triple)
        if profile is None:
            profile = Profile(
                id=generate_id(),
                name=f"{character} ({outfit})",
                character=character,
                character_skin=outfit,
                vehicle=kart,
                created_at=now_iso(),
            )
            staged_profiles[triple] = profile
            staged.new_profiles.append(profile)

        staged.entries.append(TimeEntry(
            time=row["race_time"],
            circuit=row["track"],
            profile_id=profile.id,
            date=row["time_of_entry"] or now_iso(),
            vehicle=kart,
            character=character,
        ))

    logger.info(
        f"decoded {len(staged.entries)} rows, {staged.error_count} skipped, "
        f"{len(staged.new_profiles)} new profiles"
    )
    return staged


def _check_row(row: Optional[Dict[str, str]], field_count: int, header_count: int) -> Optional[str]:
    if row is None:
        return f"expected {header_count} fields, found {field_count}"
    for name in ("track", "character", "race_time"):
        if not row[name]:
            return f"'{name}' is empty"
    if not is_valid_lenient(row["race_time"]):
        return f"invalid race_time '{row['race_time']}'"
    return None


async def read_csv_file(path: Path) -> str:
    """read a CSV file off the event loop."""
    return await asyncio.to_thread(Path(path).read_text, encoding="utf-8-sig")
