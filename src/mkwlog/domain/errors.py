from typing import List, Optional


class MkwlogError(Exception):
    """base class for exceptions in mkwlog."""
    pass


class ValidationError(MkwlogError):
    """raised when an operation is refused before any state is touched."""
    pass


class FormatError(MkwlogError):
    """raised when CSV text cannot be decoded at all."""
    def __init__(self, message: str, missing: Optional[List[str]] = None):
        self.missing = missing or []
        super().__init__(message)


class ImportRowError(MkwlogError):
    """a single CSV row that was skipped during decode."""
    def __init__(self, row_number: int, reason: str):
        self.row_number = row_number
        self.reason = reason
        super().__init__(f"Row {row_number}: {reason}")


class StorageError(MkwlogError):
    """raised when a persisted record cannot be written."""
    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Failed to write '{key}': {reason}")
