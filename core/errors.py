"""Errors raised by services and shown to the user by the pages."""


class OticaError(Exception):
    """Base class; the message is meant to be displayed as-is."""


class ValidationError(OticaError):
    """A required field is missing or a value is out of range."""


class ConflictError(OticaError):
    """A unique key (SKU, username) already exists."""


class NotFoundError(OticaError):
    """The record was removed or never existed."""


class PersistenceError(OticaError):
    """The database could not be read or written."""
