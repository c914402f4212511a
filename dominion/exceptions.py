"""
Domain exceptions for the turn engine.

Every error the engine raises derives from DominionError, which carries a
human message plus a details dict and serialises itself for API responses.

Validation errors also subclass ValueError so callers that only know the
"bad input -> 400" convention keep working.
"""


class DominionError(Exception):
    """Base class for all engine errors."""

    retryable = False

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.__class__.__name__,
                "message": self.message,
                "details": self.details,
                "retryable": self.retryable,
            }
        }


# =============================================================================
# Validation: rejected before any phase runs, nothing mutated
# =============================================================================

class TurnValidationError(DominionError, ValueError):
    """The turn (or action) cannot start in the game's current state."""


class GameNotFoundError(TurnValidationError):
    def __init__(self, game_id: int):
        super().__init__("Game not found", details={"game_id": game_id})


class EmpireNotFoundError(TurnValidationError):
    def __init__(self, empire_id: int, game_id: int | None = None):
        super().__init__(
            "Empire not found",
            details={"empire_id": empire_id, "game_id": game_id},
        )


class GameNotActiveError(TurnValidationError):
    def __init__(self, game_id: int, status: str):
        super().__init__(
            "Game is not active",
            details={"game_id": game_id, "status": status},
        )


class TurnLimitReachedError(TurnValidationError):
    def __init__(self, game_id: int, current_turn: int, turn_limit: int):
        super().__init__(
            "Game has already reached its turn limit",
            details={"game_id": game_id, "current_turn": current_turn, "turn_limit": turn_limit},
        )


# =============================================================================
# Concurrency
# =============================================================================

class TurnInProgressError(DominionError):
    """Another advance_turn call already holds this game's lock."""

    def __init__(self, game_id: int):
        super().__init__("A turn is already being processed for this game", details={"game_id": game_id})


# =============================================================================
# Transform: a phase broke an invariant, whole turn discarded
# =============================================================================

class TurnPhaseError(DominionError):
    def __init__(self, phase: str, message: str, details: dict | None = None):
        self.phase = phase
        merged = {"phase": phase}
        merged.update(details or {})
        super().__init__(f"Phase '{phase}' failed: {message}", details=merged)


# =============================================================================
# External: storage unavailable, safe to retry
# =============================================================================

class PersistenceUnavailableError(DominionError):
    retryable = True

    def __init__(self, message: str = "Persistence layer unavailable", details: dict | None = None):
        super().__init__(message, details=details)


# =============================================================================
# Fatal: snapshot restore refused, live state untouched
# =============================================================================

class SnapshotError(DominionError):
    pass


class SnapshotNotFoundError(SnapshotError):
    def __init__(self, game_id: int):
        super().__init__("No saved snapshot for this game", details={"game_id": game_id})


class SnapshotVersionError(SnapshotError):
    def __init__(self, found: object, expected: int):
        super().__init__(
            "Snapshot version mismatch",
            details={"found": found, "expected": expected},
        )


class SnapshotCorruptedError(SnapshotError):
    def __init__(self, reason: str):
        super().__init__("Snapshot data is corrupted", details={"reason": reason})
