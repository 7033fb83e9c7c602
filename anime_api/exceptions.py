"""Exception hierarchy for the episodes API.

Provider failures are recoverable and drive the fallback chain; an
AggregationError means every fallback path was exhausted.
"""


class EpisodesError(Exception):
    """Base exception for all episodes API errors."""

    pass


class ProviderError(EpisodesError):
    """Raised when an upstream provider request fails or returns unusable data."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class AggregationError(EpisodesError):
    """Raised when no provider could supply episodes for an anime."""

    pass
