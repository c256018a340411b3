from __future__ import annotations

from typing import Any
from uuid import UUID

from flask import Blueprint, current_app, jsonify, request

from src.chessgate.domain.puzzle import (
    AttemptNotFoundError,
    IllegalMoveError,
    MalformedPuzzleError,
    MoveFeedback,
    MoveOutcome,
    OpponentReplyPendingError,
    PlayedMove,
    PositionStatus,
    PuzzleAlreadyResolvedError,
    PuzzleAttempt,
    PuzzleAttemptManager,
    PuzzleFetchError,
    PuzzleRequest,
    format_themes,
)
from src.chessgate.domain.puzzle.notation import is_canonical, join_uci
from src.chessgate.infrastructure.config import AppConfig
from src.chessgate.interface.http.gate_routes import access_granted, grant_access
from src.chessgate.interface.telemetry.logging import (
    TRACE_HEADER,
    bind_trace,
    get_logger,
    resolve_trace_id,
)

puzzle_bp = Blueprint("puzzles", __name__)
logger = get_logger("chessgate.api.puzzles")


def _app_config() -> AppConfig:
    return current_app.config["APP_CONFIG"]


def _attempt_manager() -> PuzzleAttemptManager:
    return PuzzleAttemptManager(
        current_app.extensions["puzzle_attempts"],
        current_app.extensions["rules_oracle"],
        current_app.extensions.get("puzzle_source"),
    )


def _serialize_move(move: PlayedMove) -> dict[str, Any]:
    return {
        "uci": move.uci,
        "san": move.san,
        "actor": move.actor.value,
        "timestamp": move.timestamp.isoformat(),
    }


def _serialize_status(status: PositionStatus) -> dict[str, bool]:
    return {
        "inCheck": status.in_check,
        "inCheckmate": status.in_checkmate,
        "inStalemate": status.in_stalemate,
        "inDraw": status.in_draw,
        "isGameOver": status.is_game_over,
    }


def _serialize_attempt(
    manager: PuzzleAttemptManager,
    attempt: PuzzleAttempt,
    trace_id: str | None = None,
) -> dict[str, Any]:
    puzzle = attempt.puzzle
    progress = attempt.tracker.progress()
    return {
        "id": str(attempt.id),
        "puzzle": {
            "id": puzzle.id,
            "fen": puzzle.starting_fen,
            "rating": puzzle.rating,
            "difficulty": puzzle.difficulty,
            "themes": list(puzzle.themes),
            "themesLabel": format_themes(puzzle.themes),
            "solverColor": manager.solver_color(attempt),
            "totalPlies": puzzle.total_plies,
            "source": puzzle.source,
        },
        "status": attempt.status.value,
        "currentFen": manager.current_fen(attempt),
        "sideToMove": manager.side_to_move(attempt),
        "moves": [_serialize_move(move) for move in attempt.moves],
        "progress": {
            "cursor": progress.cursor,
            "total": progress.total,
            "percentage": progress.percentage,
        },
        "mistakes": attempt.mistakes,
        "hintsUsed": attempt.hints_used,
        "startedAt": attempt.started_at.isoformat(),
        "updatedAt": attempt.updated_at.isoformat(),
        "solvedAt": attempt.solved_at.isoformat() if attempt.solved_at else None,
        "traceId": trace_id,
    }


def _serialize_feedback(feedback: MoveFeedback, trace_id: str | None = None) -> dict[str, Any]:
    cfg = _app_config()
    return {
        "outcome": feedback.outcome.value,
        "move": _serialize_move(feedback.move),
        "playedFen": feedback.played_fen,
        "currentFen": feedback.current_fen,
        "opponentReply": _serialize_move(feedback.opponent_reply) if feedback.opponent_reply else None,
        "positionStatus": _serialize_status(feedback.status),
        "progress": {
            "cursor": feedback.progress.cursor,
            "total": feedback.progress.total,
            "percentage": feedback.progress.percentage,
        },
        "solved": feedback.solved,
        "accessGranted": access_granted(),
        "delays": {
            "revertMs": cfg.revert_delay_ms,
            "replyMs": cfg.reply_delay_ms,
            "accessGrantMs": cfg.access_grant_delay_ms,
        },
        "traceId": trace_id,
    }


def _domain_error(code: str, message: str, status: int = 400, detail: Any | None = None):
    payload: dict[str, Any] = {"code": code, "message": message}
    if detail is not None:
        payload["detail"] = detail
    return jsonify(payload), status


def _parse_attempt_id(attempt_id: str) -> UUID | None:
    try:
        return UUID(attempt_id)
    except ValueError:
        return None


@puzzle_bp.post("")
def start_attempt():
    payload = request.get_json(silent=True) or {}
    trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
    log = bind_trace(logger, trace_id)
    if not isinstance(payload, dict):
        return _domain_error("invalid_puzzle_id", "Request body must be a JSON object.")

    puzzle_id = payload.get("puzzleId")
    if puzzle_id is not None and (not isinstance(puzzle_id, str) or not puzzle_id.strip()):
        return _domain_error("invalid_puzzle_id", "puzzleId must be a non-empty string.")

    manager = _attempt_manager()
    try:
        attempt = manager.start_attempt(PuzzleRequest(puzzle_id=puzzle_id.strip() if puzzle_id else None))
    except PuzzleFetchError as exc:
        log.warning("puzzle_fetch_failed", puzzle_id=puzzle_id, detail=str(exc))
        return _domain_error(exc.code, "Failed to load puzzle. Please try again.", status=502)
    except MalformedPuzzleError as exc:
        log.warning("malformed_puzzle", puzzle_id=puzzle_id, detail=str(exc))
        return _domain_error(exc.code, str(exc), status=422)

    log.info(
        "attempt_started",
        attempt_id=str(attempt.id),
        puzzle_id=attempt.puzzle.id,
        rating=attempt.puzzle.rating,
        total_plies=attempt.puzzle.total_plies,
    )
    return jsonify(_serialize_attempt(manager, attempt, trace_id=trace_id)), 201


@puzzle_bp.get("/<attempt_id>")
def get_attempt(attempt_id: str):
    trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
    log = bind_trace(logger, trace_id, attempt_id=attempt_id)
    attempt_uuid = _parse_attempt_id(attempt_id)
    if attempt_uuid is None:
        return _domain_error("invalid_attempt_id", "attemptId must be a valid UUID.")

    manager = _attempt_manager()
    try:
        attempt = manager.get_attempt(attempt_uuid)
    except AttemptNotFoundError as exc:
        log.warning("attempt_not_found")
        return _domain_error(exc.code, "Attempt not found.", status=404)

    return jsonify(_serialize_attempt(manager, attempt, trace_id=trace_id)), 200


@puzzle_bp.post("/<attempt_id>/moves")
def submit_move(attempt_id: str):
    payload = request.get_json(silent=True) or {}
    trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
    log = bind_trace(logger, trace_id, attempt_id=attempt_id)
    attempt_uuid = _parse_attempt_id(attempt_id)
    if attempt_uuid is None:
        return _domain_error("invalid_attempt_id", "attemptId must be a valid UUID.")
    if not isinstance(payload, dict):
        return _domain_error("invalid_move", "Request body must be a JSON object.")

    uci = payload.get("uci")
    from_square = payload.get("from")
    to_square = payload.get("to")
    promotion = payload.get("promotion")
    if uci is None and not (isinstance(from_square, str) and isinstance(to_square, str)):
        return _domain_error("invalid_move", "Provide uci, or from and to squares, as strings.")
    if uci is not None and not isinstance(uci, str):
        return _domain_error("invalid_move", "uci must be provided as a string.")
    if promotion is not None and not isinstance(promotion, str):
        return _domain_error("invalid_move", "promotion must be a string.")
    candidate = uci if uci is not None else join_uci(from_square, to_square, promotion)
    if not is_canonical(candidate):
        return _domain_error("invalid_move", f"{candidate!r} is not a valid UCI move.")

    manager = _attempt_manager()
    try:
        if uci is not None:
            feedback = manager.submit_uci(attempt_uuid, uci)
        else:
            feedback = manager.submit_move(attempt_uuid, from_square, to_square, promotion or None)
    except AttemptNotFoundError as exc:
        log.warning("attempt_not_found")
        return _domain_error(exc.code, "Attempt not found.", status=404)
    except IllegalMoveError as exc:
        log.warning("illegal_move_rejected", uci=uci, detail=str(exc))
        return _domain_error(exc.code, str(exc), status=409)
    except PuzzleAlreadyResolvedError as exc:
        log.warning("move_after_completion", reason=str(exc))
        return _domain_error(exc.code, "Puzzle already solved.", status=409)
    except OpponentReplyPendingError as exc:
        log.warning("move_out_of_sequence", reason=str(exc))
        return _domain_error(exc.code, str(exc), status=409)

    if feedback.solved:
        grant_access("puzzle")
        log.info("puzzle_solved", uci=feedback.move.uci, cursor=feedback.progress.cursor)
    elif feedback.outcome is MoveOutcome.rejected:
        log.info("move_rejected", uci=feedback.move.uci, cursor=feedback.progress.cursor)
    else:
        log.info(
            "move_accepted",
            uci=feedback.move.uci,
            reply=feedback.opponent_reply.uci if feedback.opponent_reply else None,
            cursor=feedback.progress.cursor,
        )
    return jsonify(_serialize_feedback(feedback, trace_id=trace_id)), 200


@puzzle_bp.post("/<attempt_id>/reset")
def reset_attempt(attempt_id: str):
    trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
    log = bind_trace(logger, trace_id, attempt_id=attempt_id)
    attempt_uuid = _parse_attempt_id(attempt_id)
    if attempt_uuid is None:
        return _domain_error("invalid_attempt_id", "attemptId must be a valid UUID.")

    manager = _attempt_manager()
    try:
        attempt = manager.reset_attempt(attempt_uuid)
    except AttemptNotFoundError as exc:
        log.warning("attempt_not_found")
        return _domain_error(exc.code, "Attempt not found.", status=404)

    log.info("attempt_reset", mistakes=attempt.mistakes)
    return jsonify(_serialize_attempt(manager, attempt, trace_id=trace_id)), 200


@puzzle_bp.post("/<attempt_id>/hint")
def request_hint(attempt_id: str):
    trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
    log = bind_trace(logger, trace_id, attempt_id=attempt_id)
    attempt_uuid = _parse_attempt_id(attempt_id)
    if attempt_uuid is None:
        return _domain_error("invalid_attempt_id", "attemptId must be a valid UUID.")

    manager = _attempt_manager()
    try:
        hint = manager.hint(attempt_uuid)
        attempt = manager.get_attempt(attempt_uuid)
    except AttemptNotFoundError as exc:
        log.warning("attempt_not_found")
        return _domain_error(exc.code, "Attempt not found.", status=404)
    except PuzzleAlreadyResolvedError as exc:
        return _domain_error(exc.code, "Puzzle already solved.", status=409)

    log.info("hint_given", hints_used=attempt.hints_used)
    return jsonify({"hint": hint, "hintsUsed": attempt.hints_used, "traceId": trace_id}), 200


@puzzle_bp.delete("/<attempt_id>")
def discard_attempt(attempt_id: str):
    trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
    log = bind_trace(logger, trace_id, attempt_id=attempt_id)
    attempt_uuid = _parse_attempt_id(attempt_id)
    if attempt_uuid is None:
        return _domain_error("invalid_attempt_id", "attemptId must be a valid UUID.")

    try:
        _attempt_manager().discard_attempt(attempt_uuid)
    except AttemptNotFoundError as exc:
        log.warning("attempt_not_found")
        return _domain_error(exc.code, "Attempt not found.", status=404)

    log.info("attempt_discarded")
    return "", 204


__all__ = ["puzzle_bp"]
