class FlightSearchError(Exception):
    """Base class for errors raised by the search pipeline."""


class ConfigurationError(FlightSearchError):
    """Required configuration (proxy credentials) is missing or malformed."""


class InvalidDateError(FlightSearchError, ValueError):
    """The departure date expression could not be resolved."""

    def __init__(self, expression: str):
        self.expression = expression
        super().__init__(f"Invalid or missing departure date: {expression!r}")


class NetworkError(FlightSearchError):
    """Transport failure while fetching the provider page."""


class UnparseableQueryError(FlightSearchError, ValueError):
    """A free-form query did not yield the required flight details."""


class ConversationClosedError(FlightSearchError):
    """A turn was sent to a conversation that already completed."""
