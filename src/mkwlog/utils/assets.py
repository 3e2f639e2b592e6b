import re

ASSET_DIRS = {
    "character": "characters",
    "circuit": "circuits",
    "vehicle": "vehicles",
}


def sanitize_name(name: str) -> str:
    """
    returns the image filename for a display name.

    must stay identical to the downloaders that write the asset directory.
    """
    cleaned = re.sub(r"[^A-Za-z0-9_-]", "_", name)
    cleaned = re.sub(r"__+", "_", cleaned)
    cleaned = re.sub(r"^_|_$", "", cleaned)
    return cleaned + ".png"


def asset_path(kind: str, name: str) -> str:
    """path of the image for a character, circuit or vehicle."""
    if kind not in ASSET_DIRS:
        raise ValueError(f"unknown asset kind '{kind}'")
    return f"{ASSET_DIRS[kind]}/{sanitize_name(name)}"
