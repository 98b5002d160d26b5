"""Exceptions raised by the state store.

Lookups that match nothing raise a ``NotFoundError`` subclass carrying the
key that was asked for. Raw ``sqlite3`` errors are not wrapped.
"""


class StateStoreError(Exception):
    """Base exception for all state store errors."""


class ConnectionError(StateStoreError):  # noqa: A001
    """The store was used before ``connect()`` or after ``close()``."""

    def __init__(self, message: str = "Database not connected") -> None:
        super().__init__(message)


class NotFoundError(StateStoreError):
    """No stored record has the requested key."""

    what = "Record"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"{self.what} not found: {key}")


class ItemNotFoundError(NotFoundError):
    """No item id starts with the given prefix."""

    what = "Item"


class SourceNotFoundError(NotFoundError):
    what = "Source"


class InvalidRuleError(StateStoreError):
    """A rule has an unknown kind or a blank pattern."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid rule: {reason}")


class MigrationError(StateStoreError):
    """A schema migration script failed; ``version`` is the step that broke."""

    def __init__(self, version: int, message: str) -> None:
        self.version = version
        super().__init__(f"Migration {version} failed: {message}")
