"""
Domain exceptions.

Services raise these; the handlers registered in `bloxmarket.main` turn them
into `{"error": <message>}` responses with the matching status code.
"""


class BloxMarketError(Exception):
    """Base exception for all domain errors."""

    status_code: int = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class InvalidInputError(BloxMarketError):
    """Missing or malformed input."""
    status_code = 400


class ConflictError(BloxMarketError):
    """Request conflicts with the current state of a record."""
    status_code = 400


class AuthenticationError(BloxMarketError):
    """Missing, invalid, expired or revoked credentials."""
    status_code = 401


class PermissionDeniedError(BloxMarketError):
    """Authenticated, but not allowed to do this."""
    status_code = 403


class NotFoundError(BloxMarketError):
    """Referenced record does not exist."""
    status_code = 404
