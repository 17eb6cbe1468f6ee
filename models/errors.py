"""Errors raised by the bracket engine."""


class TournamentError(Exception):
    """Base class for bracket engine errors."""


class InvalidCode(TournamentError, ValueError):
    """A bracket code that cannot be decoded (wrong length or symbols)."""


class MalformedImportError(TournamentError, ValueError):
    """Team import data is missing or invalid."""


class ConfigurationError(TournamentError):
    """Team count or round tables do not fit together."""
