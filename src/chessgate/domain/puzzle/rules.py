from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class IllegalMoveError(RuntimeError):
    code = "illegal_move"


@dataclass(frozen=True)
class PositionStatus:
    in_check: bool
    in_checkmate: bool
    in_stalemate: bool
    in_draw: bool
    is_game_over: bool


@dataclass(frozen=True)
class AppliedMove:
    """Oracle result for a legal move: the new position and its notations."""

    position: Any
    uci: str
    san: str


class RulesOracle(Protocol):
    """Contract for the chess rules collaborator.

    Position handles are opaque to callers and owned by them. Operations
    return new handles instead of mutating the one passed in.
    """

    def load(self, fen: str) -> Any:
        """Build a position handle from FEN."""

    def fen(self, position: Any) -> str:
        ...

    def side_to_move(self, position: Any) -> str:
        """Return ``"white"`` or ``"black"``."""

    def apply_move(
        self,
        position: Any,
        from_square: str,
        to_square: str,
        promotion: str | None = None,
    ) -> AppliedMove:
        """Play a move or raise IllegalMoveError."""

    def status(self, position: Any) -> PositionStatus:
        ...

    def undo(self, position: Any) -> Any:
        """Return the position before the last applied move."""


__all__ = ["AppliedMove", "IllegalMoveError", "PositionStatus", "RulesOracle"]
