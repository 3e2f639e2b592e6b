import os
from pathlib import Path
from typing import Dict, Optional

CONFIG_DIR = Path(os.environ.get("MKWLOG_HOME", Path.home() / ".mkwlog"))
CONFIG_FILE = CONFIG_DIR / "config"

DATA_DIR_KEY = "MKWLOG_DATA_DIR"


def _read_config() -> Dict[str, str]:
    config = {}
    if not CONFIG_FILE.exists():
        return config

    try:
        with open(CONFIG_FILE, "r") as f:
            for line in f:
                line = line.strip()
                if "=" in line:
                    key, value = line.split("=", 1)
                    config[key] = value
    except (IOError, PermissionError, OSError):
        # if we can't read the file, treat as not configured
        return {}
    return config


def get_config_value(key: str) -> Optional[str]:
    """get a value from the config file."""
    return _read_config().get(key)


def set_config_value(key: str, value: str):
    """set a value in the config file, preserving other config values."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    config = _read_config()
    config[key] = value

    try:
        with open(CONFIG_FILE, "w") as f:
            for k, v in config.items():
                f.write(f"{k}={v}\n")
    except (IOError, PermissionError, OSError) as e:
        raise RuntimeError(f"failed to write config file: {e}") from e


def get_data_dir() -> Path:
    """directory holding the stored records."""
    configured = get_config_value(DATA_DIR_KEY)
    if configured:
        return Path(configured).expanduser()
    return CONFIG_DIR / "data"


def set_data_dir(path: Path):
    set_config_value(DATA_DIR_KEY, str(Path(path).expanduser().resolve()))


ACTIVE_PROFILE_KEY = "MKWLOG_ACTIVE_PROFILE"


def get_active_profile_id() -> Optional[str]:
    """profile selected for new times, None when nothing is selected."""
    return get_config_value(ACTIVE_PROFILE_KEY) or None


def set_active_profile_id(profile_id: Optional[str]):
    set_config_value(ACTIVE_PROFILE_KEY, profile_id or "")
