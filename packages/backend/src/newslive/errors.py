"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; the exception handlers registered in main.py turn
them into `{"error": message}` responses with the matching status code.
"""


class NewsLiveError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(NewsLiveError):
    """Missing or malformed input."""

    status_code = 400


class AuthError(NewsLiveError):
    """Bad credentials, or a missing/invalid/expired session."""

    status_code = 401


class AuthorizationError(NewsLiveError):
    """Authenticated, but not allowed to touch this resource."""

    status_code = 403


class NotFoundError(NewsLiveError):
    status_code = 404


class ConflictError(NewsLiveError):
    """A unique field (e.g. email) is already taken."""

    status_code = 409
