"""State management errors."""


class StateError(Exception):
    """Raised when persisted engine state cannot be read or written."""
