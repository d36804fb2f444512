class MeditimerError(Exception):
    """Base class for errors raised by the session store."""


class PersistenceError(MeditimerError):
    """The backing key-value store could not be read or written."""


class CorruptDataError(MeditimerError):
    """Stored session data does not parse into a list of sessions."""
