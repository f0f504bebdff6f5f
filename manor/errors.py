"""Errors raised by game operations.

Every rejection raised by the engine is a GameError. The API layer turns them
into structured responses; ``kind`` is the tag sent to the client and
``status_code`` the HTTP status.
"""


class GameError(Exception):
    """Base class for rejected game operations."""

    kind = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GameError):
    """Malformed or missing input."""

    kind = "validation"
    status_code = 400


class NotFoundError(ValidationError):
    """Unknown player or target."""

    kind = "not_found"
    status_code = 404


class PermissionDeniedError(GameError):
    """The player's role or status does not allow the action."""

    kind = "permission"
    status_code = 403


class TimingError(GameError):
    """Action attempted outside its eligible window."""

    kind = "timing"
    status_code = 409


class StateConflictError(GameError):
    """The action would violate a game invariant."""

    kind = "conflict"
    status_code = 409


class Unauthorized(GameError):
    """GM secret did not match."""

    kind = "unauthorized"
    status_code = 401


class EmptySentence(ValidationError):
    def __init__(self, message: str = "Secret sentence cannot be empty."):
        super().__init__(message)


class RegistrationClosed(TimingError):
    def __init__(self, message: str = "Registration is closed; the first round is over."):
        super().__init__(message)


class NoPlayers(StateConflictError):
    def __init__(self, message: str = "No players to assign roles."):
        super().__init__(message)
