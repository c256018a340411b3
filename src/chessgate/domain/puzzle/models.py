from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Tuple

from src.chessgate.domain.puzzle.errors import MalformedPuzzleError
from src.chessgate.domain.puzzle.notation import is_canonical, split_uci
from src.chessgate.domain.puzzle.rules import IllegalMoveError, RulesOracle
from src.chessgate.domain.puzzle.source import PuzzleDefinition, SolutionConvention

_DIFFICULTY_BANDS: Tuple[Tuple[int, str], ...] = (
    (1200, "Beginner"),
    (1500, "Easy"),
    (1800, "Intermediate"),
    (2100, "Advanced"),
    (2400, "Expert"),
)


@dataclass(frozen=True)
class Puzzle:
    """Immutable puzzle ready for solving.

    ``solution[0]`` is always the solver's move; solver and opponent plies
    alternate from there.
    """

    id: str
    starting_fen: str
    solution: Tuple[str, ...]
    rating: int | None = None
    themes: Tuple[str, ...] = field(default_factory=tuple)
    source: str = "unknown"
    plays: int | None = None
    game_id: str | None = None

    def __post_init__(self) -> None:
        if not self.solution:
            raise MalformedPuzzleError(f"Puzzle {self.id} has an empty solution.")

    @property
    def total_plies(self) -> int:
        return len(self.solution)

    @property
    def difficulty(self) -> str:
        return difficulty_label(self.rating)


def difficulty_label(rating: int | None) -> str:
    if rating is None:
        return "Unrated"
    for ceiling, label in _DIFFICULTY_BANDS:
        if rating < ceiling:
            return label
    return "Master"


def format_themes(themes: Iterable[str]) -> str:
    formatted = [theme[:1].upper() + theme[1:] for theme in themes if theme]
    if not formatted:
        return "General"
    return ", ".join(formatted)


def normalize_puzzle(definition: PuzzleDefinition, oracle: RulesOracle) -> Puzzle:
    """Turn a source definition into a solver-first, fully legal Puzzle."""
    moves = list(definition.moves)
    try:
        position = oracle.load(definition.position_fen)
    except ValueError as exc:
        raise MalformedPuzzleError(
            f"Puzzle {definition.id} has an invalid position: {definition.position_fen!r}"
        ) from exc

    if definition.convention is SolutionConvention.setup_first:
        if not moves:
            raise MalformedPuzzleError(f"Puzzle {definition.id} has no setup move.")
        setup_move = moves.pop(0)
        position = _replay(definition.id, oracle, position, setup_move)

    if not moves:
        raise MalformedPuzzleError(f"Puzzle {definition.id} has an empty solution.")

    starting_fen = oracle.fen(position)
    for move in moves:
        position = _replay(definition.id, oracle, position, move)

    return Puzzle(
        id=definition.id,
        starting_fen=starting_fen,
        solution=tuple(moves),
        rating=definition.rating,
        themes=tuple(definition.themes),
        source=definition.source,
        plays=definition.plays,
        game_id=definition.game_id,
    )


def _replay(puzzle_id: str, oracle: RulesOracle, position, move: str):
    if not is_canonical(move):
        raise MalformedPuzzleError(f"Puzzle {puzzle_id} has non-canonical move {move!r}.")
    parts = split_uci(move)
    try:
        applied = oracle.apply_move(position, parts.from_square, parts.to_square, parts.promotion)
    except IllegalMoveError as exc:
        raise MalformedPuzzleError(f"Puzzle {puzzle_id} has illegal move {move}.") from exc
    if applied.uci != move:
        raise MalformedPuzzleError(
            f"Puzzle {puzzle_id} move {move} resolves to {applied.uci} on the board."
        )
    return applied.position


__all__ = ["Puzzle", "difficulty_label", "format_themes", "normalize_puzzle"]
