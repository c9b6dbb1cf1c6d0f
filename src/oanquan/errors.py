"""Exception hierarchy for the rules engine.

Invalid caller input raises an `InvalidInputError` subclass and the engine
refuses to proceed. `BoardIntegrityError` marks an internal inconsistency; the
turn machine catches it, logs it and force-ends the turn.
"""

from typing import Any

__all__ = [
    "BoardIntegrityError",
    "InvalidDirectionError",
    "InvalidInputError",
    "InvalidSettingsError",
    "OAnQuanError",
    "UnknownPitError",
    "UnsupportedLayoutError",
]


class OAnQuanError(Exception):
    """Base exception for all engine errors.

    Attributes:
        code: machine-readable error code
        message: human-readable description
        context: extra values for debugging
    """

    code: str = "OANQUAN_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": self.context}


class InvalidInputError(OAnQuanError):
    code: str = "INVALID_INPUT"


class UnknownPitError(InvalidInputError):
    code: str = "UNKNOWN_PIT"

    def __init__(self, pit_id: str):
        super().__init__(f"Pit {pit_id!r} is not on the board", context={"pit_id": pit_id})
        self.pit_id = pit_id


class InvalidDirectionError(InvalidInputError):
    code: str = "INVALID_DIRECTION"

    def __init__(self, token: object):
        super().__init__(f"Invalid direction {token!r}", context={"token": token})


class UnsupportedLayoutError(InvalidInputError):
    """Layout, player count and pits-per-player do not form a supported board."""

    code: str = "UNSUPPORTED_LAYOUT"


class InvalidSettingsError(InvalidInputError):
    code: str = "INVALID_SETTINGS"


class BoardIntegrityError(OAnQuanError):
    """Neighbour resolution or pit lookup failed in the middle of a turn."""

    code: str = "BOARD_INTEGRITY"
