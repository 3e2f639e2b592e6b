"""circuits available in time trials."""
from typing import List

CIRCUITS: List[str] = [
    "Mario Bros. Circuit",
    "Crown City",
    "Whistlestop Summit",
    "DK Spaceport",
    "Desert Hills",
    "Shy Guy Bazaar",
    "Wario Stadium",
    "Airship Fortress",
    "DK Pass",
    "Starview Peak",
    "Sky-High Sundae",
    "Wario Shipyard",
    "Koopa Troopa Beach",
    "Faraway Oasis",
    "Peach Stadium",
    "Peach Beach",
    "Salty Salty Speedway",
    "Dino Dino Jungle",
    "Great ? Block Ruins",
    "Cheep Cheep Falls",
    "Dandelion Depths",
    "Boo Cinema",
    "Dry Bones Burnout",
    "Moo Moo Meadows",
    "Choco Mountain",
    "Toad's Factory",
    "Bowser's Castle",
    "Acorn Heights",
    "Mario Circuit",
    "Rainbow Road",
]


def is_known_circuit(name: str) -> bool:
    return name in CIRCUITS
