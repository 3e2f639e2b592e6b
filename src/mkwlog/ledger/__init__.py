"""recorded times and their rankings."""
from .ledger import TimeLedger
from .ranking import compute_rankings, medal_for

__all__ = [
    "TimeLedger",
    "compute_rankings",
    "medal_for",
]
