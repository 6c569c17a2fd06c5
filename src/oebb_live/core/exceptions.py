"""Custom exceptions for the ÖBB live data client."""


class OebbLiveError(Exception):
    """Base exception for oebb-live errors."""

    pass


class UpstreamUnavailableError(OebbLiveError):
    """Raised when the upstream service cannot be reached or times out."""

    pass


class UpstreamFormatError(OebbLiveError):
    """Raised when an upstream payload does not have the expected shape."""

    pass


class NotFoundError(OebbLiveError):
    """Raised when a train cannot be found on a station board."""

    pass


class NoDeparturesError(OebbLiveError):
    """Raised when a board payload carries no departures list."""

    pass


class ValidationError(OebbLiveError):
    """Raised when input validation fails."""

    pass
