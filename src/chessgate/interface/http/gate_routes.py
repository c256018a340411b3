from __future__ import annotations

from flask import Blueprint, jsonify, request, session

from src.chessgate.interface.telemetry.logging import (
    TRACE_HEADER,
    bind_trace,
    get_logger,
    resolve_trace_id,
)

gate_bp = Blueprint("gate", __name__)
logger = get_logger("chessgate.api.gate")

_GATE_KEY = "access_granted_via"


def grant_access(via: str) -> None:
    """Record in the visitor's signed session cookie that the gate is open."""
    session.setdefault(_GATE_KEY, via)


def access_granted() -> bool:
    return _GATE_KEY in session


def _gate_state(trace_id: str | None = None) -> dict:
    return {
        "accessGranted": access_granted(),
        "grantedVia": session.get(_GATE_KEY),
        "traceId": trace_id,
    }


@gate_bp.get("")
def gate_status():
    trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
    return jsonify(_gate_state(trace_id)), 200


@gate_bp.post("/skip")
def skip_puzzle():
    trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
    log = bind_trace(logger, trace_id)

    grant_access("skip")
    log.info("gate_skipped", granted_via=session.get(_GATE_KEY))
    return jsonify(_gate_state(trace_id)), 200


@gate_bp.post("/lock")
def lock_gate():
    trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
    session.pop(_GATE_KEY, None)
    bind_trace(logger, trace_id).info("gate_locked")
    return jsonify(_gate_state(trace_id)), 200


__all__ = ["access_granted", "gate_bp", "grant_access"]
