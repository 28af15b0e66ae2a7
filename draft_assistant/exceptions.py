"""Exception types raised by the draft assistant."""


class DraftAssistantError(Exception):
    """Base class for draft assistant errors."""


class InvalidQueryError(DraftAssistantError, ValueError):
    """Raised when a projection or lookup request has unusable parameters."""


class UpstreamUnavailableError(DraftAssistantError):
    """Raised when the player directory cannot be fetched or restored from a snapshot."""
