"""Exception taxonomy for the activity engine."""


class ShallWeWalkError(Exception):
    """Base class for every error raised by the engine."""


class InputError(ShallWeWalkError, ValueError):
    """Malformed user or sensor input (duration text, numbers, coordinates)."""


class DecodeError(ShallWeWalkError, ValueError):
    """An encoded polyline could not be decoded."""


class RouteError(ShallWeWalkError):
    """The routing service request failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(RouteError):
    """Routing service unreachable or timed out."""


class AuthError(RouteError):
    """Routing service rejected the session (401); the user has to sign in again."""


class StateError(ShallWeWalkError, RuntimeError):
    """A session operation was called from a state that does not allow it."""


class PersistenceError(ShallWeWalkError):
    """Durable storage could not be read or written."""
