"""
Exception types raised by the catalog and preview readers.
"""


class LuminosityError(Exception):
    """Base class for all catalog and preview errors."""


class OpenError(LuminosityError):
    """A catalog or preview database could not be opened."""


class CorruptFormat(LuminosityError):
    """A preview container has a bad marker or is truncated."""


class NotFound(LuminosityError):
    """No preview cache entry exists for a photo."""


class QueryError(LuminosityError):
    """A query against a catalog or preview database failed."""


class Unavailable(LuminosityError):
    """The catalog has no previews directory."""
