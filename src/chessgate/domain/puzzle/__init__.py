from .attempt_manager import (
    MoveActor,
    MoveFeedback,
    PlayedMove,
    PuzzleAttempt,
    PuzzleAttemptManager,
    PuzzleAttemptRepository,
)
from .errors import (
    AttemptNotFoundError,
    MalformedPuzzleError,
    NoReplyPendingError,
    OpponentReplyPendingError,
    PuzzleAlreadyResolvedError,
    PuzzleError,
)
from .models import Puzzle, difficulty_label, format_themes, normalize_puzzle
from .rules import AppliedMove, IllegalMoveError, PositionStatus, RulesOracle
from .source import (
    PuzzleDefinition,
    PuzzleFetchError,
    PuzzleRequest,
    PuzzleSource,
    SolutionConvention,
)
from .tracker import MoveOutcome, Progress, SolverOutcome, SolverSession

__all__ = [
    "AppliedMove",
    "AttemptNotFoundError",
    "IllegalMoveError",
    "MalformedPuzzleError",
    "MoveActor",
    "MoveFeedback",
    "MoveOutcome",
    "NoReplyPendingError",
    "OpponentReplyPendingError",
    "PlayedMove",
    "PositionStatus",
    "Progress",
    "Puzzle",
    "PuzzleAlreadyResolvedError",
    "PuzzleAttempt",
    "PuzzleAttemptManager",
    "PuzzleAttemptRepository",
    "PuzzleDefinition",
    "PuzzleError",
    "PuzzleFetchError",
    "PuzzleRequest",
    "PuzzleSource",
    "RulesOracle",
    "SolutionConvention",
    "SolverOutcome",
    "SolverSession",
    "difficulty_label",
    "format_themes",
    "normalize_puzzle",
]
