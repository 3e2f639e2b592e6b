"""character/vehicle profiles."""
from .registry import ProfileRegistry

__all__ = [
    "ProfileRegistry",
]
