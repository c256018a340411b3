from __future__ import annotations


class PuzzleError(RuntimeError):
    """Base class for puzzle-related domain errors."""

    code: str = "puzzle_error"


class PuzzleAlreadyResolvedError(PuzzleError):
    code = "puzzle_already_resolved"


class NoReplyPendingError(PuzzleError):
    code = "no_reply_pending"


class OpponentReplyPendingError(PuzzleError):
    code = "opponent_reply_pending"


class MalformedPuzzleError(PuzzleError):
    code = "malformed_puzzle"


class AttemptNotFoundError(PuzzleError):
    code = "attempt_not_found"


__all__ = [
    "AttemptNotFoundError",
    "MalformedPuzzleError",
    "NoReplyPendingError",
    "OpponentReplyPendingError",
    "PuzzleAlreadyResolvedError",
    "PuzzleError",
]
