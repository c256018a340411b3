from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import chess
import pytest

from src.chessgate.domain.puzzle import MalformedPuzzleError, PuzzleFetchError

from tests.factories import opening_definition


def _start(client, **body) -> dict:
    response = client.post("/api/v1/puzzles", json=body)
    assert response.status_code == 201
    return response.get_json()


def test_healthcheck(client):
    assert client.get("/healthz").get_json() == {"status": "ok"}


def test_start_attempt_serializes_puzzle_without_solution(client):
    response = client.post("/api/v1/puzzles", json={}, headers={"X-Trace-Id": "trace-123"})
    assert response.status_code == 201
    payload = response.get_json()

    assert UUID(payload["id"])
    assert payload["status"] == "in_progress"
    assert payload["currentFen"] == chess.STARTING_FEN
    assert payload["sideToMove"] == "white"
    assert payload["moves"] == []
    assert payload["progress"] == {"cursor": 0, "total": 3, "percentage": 0}
    assert payload["mistakes"] == 0
    assert payload["hintsUsed"] == 0
    assert payload["solvedAt"] is None
    assert payload["traceId"] == "trace-123"
    assert isinstance(datetime.fromisoformat(payload["startedAt"]), datetime)

    puzzle = payload["puzzle"]
    assert puzzle["id"] == "open1"
    assert puzzle["fen"] == chess.STARTING_FEN
    assert puzzle["difficulty"] == "Easy"
    assert puzzle["themesLabel"] == "Opening, Short"
    assert puzzle["solverColor"] == "white"
    assert puzzle["totalPlies"] == 3
    assert "solution" not in puzzle
    assert "e7e5" not in response.get_data(as_text=True)


def test_start_attempt_by_puzzle_id(client, fake_source):
    payload = _start(client, puzzleId="mate1")
    assert payload["puzzle"]["id"] == "mate1"
    assert fake_source.requests[-1].puzzle_id == "mate1"


def test_start_attempt_rejects_bad_puzzle_id(client):
    response = client.post("/api/v1/puzzles", json={"puzzleId": 42})
    assert response.status_code == 400
    assert response.get_json()["code"] == "invalid_puzzle_id"


def test_start_attempt_rejects_non_object_body(client):
    response = client.post("/api/v1/puzzles", json=["mate1"])
    assert response.status_code == 400
    assert response.get_json()["code"] == "invalid_puzzle_id"


def test_fetch_failure_maps_to_bad_gateway(client, fake_source):
    fake_source.fail_with = PuzzleFetchError("lichess down")
    response = client.post("/api/v1/puzzles", json={})
    assert response.status_code == 502
    assert response.get_json()["code"] == "puzzle_fetch_failed"


def test_malformed_puzzle_maps_to_unprocessable(client, fake_source):
    fake_source.definitions = {"bad": opening_definition(id="bad", moves=("e2e5",))}
    response = client.post("/api/v1/puzzles", json={})
    assert response.status_code == 422
    assert response.get_json()["code"] == "malformed_puzzle"


def test_correct_move_includes_opponent_reply(client):
    attempt_id = _start(client)["id"]

    response = client.post(f"/api/v1/puzzles/{attempt_id}/moves", json={"from": "e2", "to": "e4"})
    assert response.status_code == 200
    payload = response.get_json()

    assert payload["outcome"] == "accepted_awaiting_opponent_reply"
    assert payload["move"]["san"] == "e4"
    assert payload["move"]["actor"] == "solver"
    assert payload["opponentReply"]["uci"] == "e7e5"
    assert payload["opponentReply"]["actor"] == "opponent"
    assert chess.Board(payload["playedFen"]).turn == chess.BLACK
    assert chess.Board(payload["currentFen"]).turn == chess.WHITE
    assert payload["progress"] == {"cursor": 2, "total": 3, "percentage": 67}
    assert payload["solved"] is False
    assert payload["accessGranted"] is False
    assert payload["delays"] == {"revertMs": 10, "replyMs": 20, "accessGrantMs": 30}


def test_wrong_move_is_rejected_and_reverted(client):
    attempt_id = _start(client)["id"]

    response = client.post(f"/api/v1/puzzles/{attempt_id}/moves", json={"uci": "d2d4"})
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["outcome"] == "rejected"
    assert payload["currentFen"] == chess.STARTING_FEN
    assert payload["playedFen"] != chess.STARTING_FEN
    assert payload["opponentReply"] is None

    state = client.get(f"/api/v1/puzzles/{attempt_id}").get_json()
    assert state["status"] == "failed_awaiting_retry"
    assert state["mistakes"] == 1
    assert state["progress"]["cursor"] == 0


def test_illegal_move_returns_conflict(client):
    attempt_id = _start(client)["id"]

    response = client.post(f"/api/v1/puzzles/{attempt_id}/moves", json={"uci": "e7e5"})
    assert response.status_code == 409
    assert response.get_json()["code"] == "illegal_move"


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"uci": 12},
        {"from": "e2"},
        {"from": "e2", "to": "e4", "promotion": 1},
        ["e2e4"],
        {"from": "z9", "to": "e4"},
        {"from": "e2", "to": "e4", "promotion": "x"},
        {"uci": "E2E4"},
    ],
)
def test_malformed_move_body_is_bad_request(client, body):
    attempt_id = _start(client)["id"]
    response = client.post(f"/api/v1/puzzles/{attempt_id}/moves", json=body)
    assert response.status_code == 400
    assert response.get_json()["code"] == "invalid_move"


def test_move_after_solve_returns_conflict(client):
    attempt_id = _start(client, puzzleId="mate1")["id"]
    solved = client.post(f"/api/v1/puzzles/{attempt_id}/moves", json={"uci": "a1a8"}).get_json()
    assert solved["solved"] is True
    assert solved["positionStatus"]["inCheckmate"] is True

    again = client.post(f"/api/v1/puzzles/{attempt_id}/moves", json={"uci": "g1f1"})
    assert again.status_code == 409
    assert again.get_json()["code"] == "puzzle_already_resolved"


def test_unknown_and_invalid_attempt_ids(client):
    assert client.get("/api/v1/puzzles/not-a-uuid").status_code == 400
    missing = client.get(f"/api/v1/puzzles/{uuid4()}")
    assert missing.status_code == 404
    assert missing.get_json()["code"] == "attempt_not_found"
    assert client.post(f"/api/v1/puzzles/{uuid4()}/moves", json={"uci": "e2e4"}).status_code == 404
    assert client.post(f"/api/v1/puzzles/{uuid4()}/reset").status_code == 404
    assert client.post(f"/api/v1/puzzles/{uuid4()}/hint").status_code == 404
    assert client.delete(f"/api/v1/puzzles/{uuid4()}").status_code == 404


def test_reset_returns_to_starting_position(client):
    attempt_id = _start(client)["id"]
    client.post(f"/api/v1/puzzles/{attempt_id}/moves", json={"uci": "e2e4"})

    response = client.post(f"/api/v1/puzzles/{attempt_id}/reset")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["currentFen"] == chess.STARTING_FEN
    assert payload["moves"] == []
    assert payload["progress"]["cursor"] == 0
    assert payload["status"] == "in_progress"


def test_hint_reveals_next_move(client):
    attempt_id = _start(client)["id"]

    response = client.post(f"/api/v1/puzzles/{attempt_id}/hint")
    assert response.status_code == 200
    assert response.get_json()["hint"] == "e2e4"
    assert response.get_json()["hintsUsed"] == 1


def test_hint_after_solve_returns_conflict(client):
    attempt_id = _start(client, puzzleId="mate1")["id"]
    client.post(f"/api/v1/puzzles/{attempt_id}/moves", json={"uci": "a1a8"})

    response = client.post(f"/api/v1/puzzles/{attempt_id}/hint")
    assert response.status_code == 409


def test_discard_attempt(client):
    attempt_id = _start(client)["id"]
    assert client.delete(f"/api/v1/puzzles/{attempt_id}").status_code == 204
    assert client.get(f"/api/v1/puzzles/{attempt_id}").status_code == 404
