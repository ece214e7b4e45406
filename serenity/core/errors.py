"""Domain errors raised by the library services.

Every error carries the HTTP status the API layer answers with, so routes
never translate exceptions by hand (see ``serenity.main``).
"""


class LibraryError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class AuthenticationError(LibraryError):
    status_code = 401


class NotFoundError(LibraryError):
    """Target is absent or owned by another identity."""
    status_code = 404


class TrackValidationError(LibraryError):
    status_code = 422


class InvalidTransitionError(LibraryError):
    status_code = 409


class CascadeDeleteError(LibraryError):
    status_code = 503


class ProviderError(LibraryError):
    """Synthesis provider answered non-2xx or could not be reached."""
    status_code = 502
