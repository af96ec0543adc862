from __future__ import annotations


class StorageError(Exception):
    """A database read or write failed; the operation must be treated as not applied."""

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation}: database error ({cause})")
