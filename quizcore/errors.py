"""Exceptions raised by the quiz engine."""


class LoadError(Exception):
    """Question pool could not be loaded, or is empty."""
    pass


class StorageError(Exception):
    """Answer history could not be read or written."""
    pass


class SessionStateError(Exception):
    """Operation not allowed in the exam session's current state."""
    pass
