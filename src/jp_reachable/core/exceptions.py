"""Custom exceptions for reachable station collection."""


class ReachableSearchError(Exception):
    """Base exception for reachable station collection errors."""

    pass


class NetworkError(ReachableSearchError):
    """Raised when there's a network-related error."""

    pass


class ResponseFormatError(ReachableSearchError):
    """Raised when a response body cannot be decoded into the expected shape."""

    pass


class CollectionError(ReachableSearchError):
    """Raised when an (origin, band) request exhausts its retries."""

    def __init__(self, message: str, origin: str | None = None, band: str | None = None):
        super().__init__(message)
        self.origin = origin
        self.band = band


class ConfigurationError(ReachableSearchError):
    """Raised when the run configuration is invalid or unreadable."""

    pass


class OutputWriteError(ReachableSearchError):
    """Raised when an output artifact cannot be persisted."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class ValidationError(ReachableSearchError):
    """Raised when input validation fails."""

    pass
