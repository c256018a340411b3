from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Any, List, Protocol
from uuid import UUID, uuid4

from src.chessgate.domain.puzzle.errors import (
    AttemptNotFoundError,
    PuzzleAlreadyResolvedError,
)
from src.chessgate.domain.puzzle.models import Puzzle, normalize_puzzle
from src.chessgate.domain.puzzle.notation import split_uci
from src.chessgate.domain.puzzle.rules import IllegalMoveError, PositionStatus, RulesOracle
from src.chessgate.domain.puzzle.source import PuzzleRequest, PuzzleSource
from src.chessgate.domain.puzzle.tracker import (
    MoveOutcome,
    Progress,
    SolverOutcome,
    SolverSession,
)


class MoveActor(str, Enum):
    solver = "solver"
    opponent = "opponent"


@dataclass
class PlayedMove:
    uci: str
    san: str
    actor: MoveActor
    timestamp: datetime


@dataclass
class PuzzleAttempt:
    id: UUID
    puzzle: Puzzle
    tracker: SolverSession
    position: Any
    moves: List[PlayedMove] = field(default_factory=list)
    mistakes: int = 0
    hints_used: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    solved_at: datetime | None = None
    # Serializes read-apply-save sequences on this attempt.
    lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    @property
    def status(self) -> SolverOutcome:
        return self.tracker.outcome

    @property
    def solved(self) -> bool:
        return self.tracker.outcome is SolverOutcome.solved


@dataclass(frozen=True)
class MoveFeedback:
    """What the board should show after the solver played a move."""

    outcome: MoveOutcome
    move: PlayedMove
    played_fen: str
    current_fen: str
    status: PositionStatus
    progress: Progress
    opponent_reply: PlayedMove | None = None
    solved: bool = False


class PuzzleAttemptRepository(Protocol):
    """Storage contract for live attempts."""

    def create(self, attempt: PuzzleAttempt) -> PuzzleAttempt:
        ...

    def get(self, attempt_id: UUID) -> PuzzleAttempt | None:
        ...

    def save(self, attempt: PuzzleAttempt) -> PuzzleAttempt:
        ...

    def delete(self, attempt_id: UUID) -> bool:
        ...


class PuzzleAttemptManager:
    """Coordinate puzzle attempts across tracker, rules oracle, and source."""

    def __init__(
        self,
        repository: PuzzleAttemptRepository,
        oracle: RulesOracle,
        source: PuzzleSource | None = None,
    ) -> None:
        self._repository = repository
        self._oracle = oracle
        self._source = source

    def start_attempt(self, request: PuzzleRequest | None = None) -> PuzzleAttempt:
        if self._source is None:
            raise RuntimeError("No puzzle source configured.")
        definition = self._source.fetch_puzzle(request or PuzzleRequest())
        puzzle = normalize_puzzle(definition, self._oracle)
        return self.start_attempt_from_puzzle(puzzle)

    def start_attempt_from_puzzle(self, puzzle: Puzzle) -> PuzzleAttempt:
        attempt = PuzzleAttempt(
            id=uuid4(),
            puzzle=puzzle,
            tracker=SolverSession(puzzle.solution),
            position=self._oracle.load(puzzle.starting_fen),
        )
        return self._repository.create(attempt)

    def get_attempt(self, attempt_id: UUID) -> PuzzleAttempt:
        attempt = self._repository.get(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(f"Attempt {attempt_id} not found.")
        return attempt

    def solver_color(self, attempt: PuzzleAttempt) -> str:
        return self._oracle.side_to_move(self._oracle.load(attempt.puzzle.starting_fen))

    def current_fen(self, attempt: PuzzleAttempt) -> str:
        return self._oracle.fen(attempt.position)

    def side_to_move(self, attempt: PuzzleAttempt) -> str:
        return self._oracle.side_to_move(attempt.position)

    def submit_uci(self, attempt_id: UUID, uci: str) -> MoveFeedback:
        try:
            parts = split_uci(uci)
        except ValueError as exc:
            raise IllegalMoveError(f"Invalid UCI string: {uci}") from exc
        return self.submit_move(attempt_id, parts.from_square, parts.to_square, parts.promotion)

    def submit_move(
        self,
        attempt_id: UUID,
        from_square: str,
        to_square: str,
        promotion: str | None = None,
    ) -> MoveFeedback:
        attempt = self.get_attempt(attempt_id)
        with attempt.lock:
            return self._submit_locked(attempt, from_square, to_square, promotion)

    def _submit_locked(
        self,
        attempt: PuzzleAttempt,
        from_square: str,
        to_square: str,
        promotion: str | None,
    ) -> MoveFeedback:
        tracker = attempt.tracker
        if tracker.is_resolved:
            raise PuzzleAlreadyResolvedError(f"Attempt {attempt.id} is already solved.")

        applied = self._oracle.apply_move(attempt.position, from_square, to_square, promotion)

        # The board was reverted when the last move was rejected.
        if tracker.outcome is SolverOutcome.failed_awaiting_retry:
            tracker.acknowledge_failure()
        outcome = tracker.attempt_move(applied.uci)

        now = datetime.now(timezone.utc)
        played = PlayedMove(uci=applied.uci, san=applied.san, actor=MoveActor.solver, timestamp=now)
        played_fen = self._oracle.fen(applied.position)
        reply: PlayedMove | None = None
        attempt.updated_at = now

        if outcome is MoveOutcome.rejected:
            attempt.mistakes += 1
            attempt.position = self._oracle.undo(applied.position)
        else:
            attempt.position = applied.position
            attempt.moves.append(played)
            if outcome is MoveOutcome.accepted_awaiting_opponent_reply:
                reply = self._play_opponent_reply(attempt)

        if attempt.solved and attempt.solved_at is None:
            attempt.solved_at = now

        self._repository.save(attempt)
        return MoveFeedback(
            outcome=outcome,
            move=played,
            played_fen=played_fen,
            current_fen=self._oracle.fen(attempt.position),
            status=self._oracle.status(attempt.position),
            progress=tracker.progress(),
            opponent_reply=reply,
            solved=attempt.solved,
        )

    def reset_attempt(self, attempt_id: UUID) -> PuzzleAttempt:
        attempt = self.get_attempt(attempt_id)
        with attempt.lock:
            attempt.tracker.reset()
            attempt.position = self._oracle.load(attempt.puzzle.starting_fen)
            attempt.moves.clear()
            attempt.solved_at = None
            attempt.updated_at = datetime.now(timezone.utc)
            return self._repository.save(attempt)

    def hint(self, attempt_id: UUID) -> str:
        attempt = self.get_attempt(attempt_id)
        with attempt.lock:
            expected = attempt.tracker.expected_move
            if expected is None:
                raise PuzzleAlreadyResolvedError(f"Attempt {attempt_id} is already solved.")
            attempt.hints_used += 1
            attempt.updated_at = datetime.now(timezone.utc)
            self._repository.save(attempt)
            return expected

    def discard_attempt(self, attempt_id: UUID) -> None:
        if not self._repository.delete(attempt_id):
            raise AttemptNotFoundError(f"Attempt {attempt_id} not found.")

    def _play_opponent_reply(self, attempt: PuzzleAttempt) -> PlayedMove:
        reply_uci = attempt.tracker.next_opponent_reply()
        parts = split_uci(reply_uci)
        applied = self._oracle.apply_move(
            attempt.position, parts.from_square, parts.to_square, parts.promotion
        )
        attempt.tracker.confirm_opponent_reply_applied()
        attempt.position = applied.position
        reply = PlayedMove(
            uci=applied.uci,
            san=applied.san,
            actor=MoveActor.opponent,
            timestamp=datetime.now(timezone.utc),
        )
        attempt.moves.append(reply)
        return reply


__all__ = [
    "MoveActor",
    "MoveFeedback",
    "PlayedMove",
    "PuzzleAttempt",
    "PuzzleAttemptManager",
    "PuzzleAttemptRepository",
]
