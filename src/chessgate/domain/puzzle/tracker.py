from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

from src.chessgate.domain.puzzle.errors import (
    MalformedPuzzleError,
    NoReplyPendingError,
    OpponentReplyPendingError,
    PuzzleAlreadyResolvedError,
)


class SolverOutcome(str, Enum):
    in_progress = "in_progress"
    failed_awaiting_retry = "failed_awaiting_retry"
    solved = "solved"


class MoveOutcome(str, Enum):
    rejected = "rejected"
    accepted_awaiting_opponent_reply = "accepted_awaiting_opponent_reply"
    accepted_puzzle_complete = "accepted_puzzle_complete"


@dataclass(frozen=True)
class Progress:
    cursor: int
    total: int

    @property
    def percentage(self) -> int:
        if self.total <= 0:
            return 0
        # Half-up rounding, the way the browser rounds progress bars.
        value = math.floor(100 * self.cursor / self.total + 0.5)
        return max(0, min(100, value))


class SolverSession:
    """Track a solver's walk through a puzzle's solution line.

    Even indices of the solution are the solver's plies and odd indices are
    the scripted opponent replies. Moves are compared by exact string
    equality in canonical UCI notation; legality is the caller's concern.
    """

    def __init__(self, solution: Sequence[str]) -> None:
        if not solution:
            raise MalformedPuzzleError("Puzzle solution must contain at least one move.")
        self._solution: Tuple[str, ...] = tuple(solution)
        self._cursor = 0
        self._outcome = SolverOutcome.in_progress
        self._reply_pending = False

    @property
    def solution(self) -> Tuple[str, ...]:
        return self._solution

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def outcome(self) -> SolverOutcome:
        return self._outcome

    @property
    def reply_pending(self) -> bool:
        return self._reply_pending

    @property
    def is_resolved(self) -> bool:
        return self._outcome is SolverOutcome.solved or self._cursor >= len(self._solution)

    @property
    def expected_move(self) -> str | None:
        if self.is_resolved:
            return None
        return self._solution[self._cursor]

    def attempt_move(self, proposed_move: str) -> MoveOutcome:
        if self._outcome is not SolverOutcome.in_progress or self._cursor >= len(self._solution):
            raise PuzzleAlreadyResolvedError(
                f"Cannot play {proposed_move}: puzzle is {self._outcome.value}."
            )
        if self._reply_pending:
            raise OpponentReplyPendingError("The opponent reply has not been applied yet.")

        if proposed_move != self._solution[self._cursor]:
            self._outcome = SolverOutcome.failed_awaiting_retry
            return MoveOutcome.rejected

        self._cursor += 1
        if self._cursor == len(self._solution):
            self._outcome = SolverOutcome.solved
            return MoveOutcome.accepted_puzzle_complete

        self._reply_pending = True
        return MoveOutcome.accepted_awaiting_opponent_reply

    def next_opponent_reply(self) -> str | None:
        if not self._reply_pending:
            return None
        return self._solution[self._cursor]

    def confirm_opponent_reply_applied(self) -> None:
        if not self._reply_pending:
            raise NoReplyPendingError("No opponent reply is pending.")

        self._reply_pending = False
        self._cursor += 1
        if self._cursor == len(self._solution):
            self._outcome = SolverOutcome.solved

    def acknowledge_failure(self) -> None:
        """Return a rejected attempt to play; the same move stays expected."""
        if self._outcome is SolverOutcome.solved:
            raise PuzzleAlreadyResolvedError("Puzzle is already solved.")
        if self._outcome is SolverOutcome.failed_awaiting_retry:
            self._outcome = SolverOutcome.in_progress

    def progress(self) -> Progress:
        return Progress(cursor=self._cursor, total=len(self._solution))

    def reset(self) -> None:
        self._cursor = 0
        self._outcome = SolverOutcome.in_progress
        self._reply_pending = False


__all__ = ["MoveOutcome", "Progress", "SolverOutcome", "SolverSession"]
