# shidduch/utils/errors.py
# Domain errors raised by services; routers translate them to HTTP status codes.


class ShidduchError(RuntimeError):
    """Base class for every error the pipeline surfaces to a caller."""


class ExtractionError(ShidduchError):
    """The text-extraction service was unreachable or replied with no text."""


class CompletionError(ShidduchError):
    """The completion service failed on a call whose result cannot be degraded."""


class PersistenceError(ShidduchError):
    """A batch write was rejected; nothing from the batch remains stored."""


class ChildProfileNotFound(ShidduchError):
    pass


class LibraryEntryNotFound(ShidduchError):
    pass


class NotesRequired(ShidduchError):
    """AI profile generation was asked for with no notes given or stored."""
