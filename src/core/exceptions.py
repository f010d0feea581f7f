"""Custom exceptions. Every layer raises a subclass of ArcadeError so callers can catch a single top-level type."""


class ArcadeError(Exception):
    """Base class for all errors raised by this package."""


# --- Log pipeline ---
class LogValidationError(ArcadeError):
    """A log entry is missing a required field or carries a malformed payload. Nothing gets stored."""


class StorageError(ArcadeError):
    """The embedded database could not complete a read or write."""


class LogSinkError(ArcadeError):
    """The emitter could not hand an entry to the persistence gateway."""


# --- Gameplay ---
class GameplayInvariantViolation(ArcadeError):
    """A requested transition would break the rules of the game. Raised before any state is mutated."""


class OutOfBoundsError(GameplayInvariantViolation):
    """Cell reference outside of the fixed board dimensions."""


class IllegalMoveError(GameplayInvariantViolation):
    """Move does not follow the movement rules."""


class NotYourTurnError(GameplayInvariantViolation):
    """Someone else has to move first."""


class GameStateError(GameplayInvariantViolation):
    """Game is not in a state that accepts this input (not started / already finished)."""
