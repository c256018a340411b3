from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Sequence


class SolutionConvention(str, Enum):
    """Where a source puts the first scripted move of its solution."""

    solver_first = "solver_first"
    setup_first = "setup_first"


class PuzzleFetchError(RuntimeError):
    code = "puzzle_fetch_failed"


@dataclass(frozen=True)
class PuzzleRequest:
    puzzle_id: str | None = None


@dataclass(frozen=True)
class PuzzleDefinition:
    """Raw puzzle as delivered by a source, before normalization."""

    id: str
    position_fen: str
    moves: Sequence[str]
    convention: SolutionConvention
    rating: int | None = None
    themes: Sequence[str] = field(default_factory=tuple)
    plays: int | None = None
    game_id: str | None = None
    source: str = "unknown"


class PuzzleSource(Protocol):
    def fetch_puzzle(self, request: PuzzleRequest) -> PuzzleDefinition:
        """Return a puzzle definition or raise PuzzleFetchError."""


__all__ = [
    "PuzzleDefinition",
    "PuzzleFetchError",
    "PuzzleRequest",
    "PuzzleSource",
    "SolutionConvention",
]
