class RailError(RuntimeError):
    """Base class for errors surfaced to the user as plain text."""
    pass


class TransportError(RailError):
    """Raised when the upstream host cannot be reached or answers with an unexpected status."""
    pass


class UpstreamRejected(RailError):
    """Raised when upstream explicitly refuses a query (FAIL result or blocked status)."""
    pass


class DecodeError(RailError):
    """Raised when an upstream response does not have the expected shape."""
    pass


class PollBudgetExhausted(RailError):
    """Raised when a poll job is still pending after the allowed number of polls."""
    pass


class InvalidUserInput(RailError):
    """Raised for user input that cannot be interpreted (bad index, bad date)."""
    pass


class NotFound(RailError):
    """Raised when a lookup legitimately yields nothing."""
    pass


class SubscriptionStoreError(RailError):
    """Raised when the subscription store cannot read or write."""
    pass
