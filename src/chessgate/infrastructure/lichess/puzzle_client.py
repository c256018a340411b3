from __future__ import annotations

import io
from typing import Any, Mapping

import chess
import chess.pgn
import requests

from src.chessgate.domain.puzzle.source import (
    PuzzleDefinition,
    PuzzleFetchError,
    PuzzleRequest,
    PuzzleSource,
    SolutionConvention,
)

DEFAULT_API_BASE = "https://lichess.org/api"


class LichessPuzzleClient(PuzzleSource):
    """Fetch puzzles from the public Lichess API.

    One request per fetch, no retries and no caching. Lichess publishes
    ``puzzle.solution`` starting with the solver's move, so the default
    convention is ``solver_first``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        *,
        timeout: float = 10.0,
        convention: SolutionConvention = SolutionConvention.solver_first,
        http: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.convention = convention
        self._http = http or requests.Session()

    def fetch_puzzle(self, request: PuzzleRequest) -> PuzzleDefinition:
        if request.puzzle_id:
            path = f"puzzle/{request.puzzle_id}"
        else:
            path = "puzzle/daily"
        payload = self._get_json(path)
        return parse_lichess_puzzle(payload, convention=self.convention)

    def fetch_daily(self) -> PuzzleDefinition:
        return self.fetch_puzzle(PuzzleRequest())

    def fetch_by_id(self, puzzle_id: str) -> PuzzleDefinition:
        return self.fetch_puzzle(PuzzleRequest(puzzle_id=puzzle_id))

    def ping(self) -> bool:
        try:
            response = self._http.head(f"{self.base_url}/puzzle/daily", timeout=self.timeout)
        except requests.RequestException:
            return False
        return response.ok

    def _get_json(self, path: str) -> Mapping[str, Any]:
        url = f"{self.base_url}/{path}"
        try:
            response = self._http.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise PuzzleFetchError(f"Failed to reach {url}: {exc}") from exc

        if not response.ok:
            raise PuzzleFetchError(
                f"Failed to fetch {path}: {response.status_code} {response.reason}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise PuzzleFetchError(f"Response from {url} is not valid JSON.") from exc


def _optional_int(value: Any) -> int | None:
    return int(value) if value is not None else None


def parse_lichess_puzzle(
    payload: Mapping[str, Any],
    *,
    convention: SolutionConvention = SolutionConvention.solver_first,
) -> PuzzleDefinition:
    """Convert a Lichess ``/api/puzzle`` response into a definition.

    The game PGN is played out to its last move to reach the puzzle
    position; a ``[FEN]`` header, when present, sets the start.
    """
    try:
        game_data = payload["game"]
        puzzle_data = payload["puzzle"]
        puzzle_id = str(puzzle_data["id"])
        solution = [str(move) for move in puzzle_data["solution"]]
        pgn_text = game_data["pgn"]
    except (KeyError, TypeError) as exc:
        raise PuzzleFetchError(f"Unexpected Lichess puzzle payload: missing {exc}") from exc

    try:
        rating = _optional_int(puzzle_data.get("rating"))
        plays = _optional_int(puzzle_data.get("plays"))
    except (TypeError, ValueError) as exc:
        raise PuzzleFetchError(f"Unexpected Lichess puzzle payload: {exc}") from exc

    game = chess.pgn.read_game(io.StringIO(pgn_text))
    if game is None or game.errors:
        raise PuzzleFetchError(f"Could not parse PGN for puzzle {puzzle_id}.")

    board = game.end().board()
    return PuzzleDefinition(
        id=puzzle_id,
        position_fen=board.fen(),
        moves=tuple(solution),
        convention=convention,
        rating=rating,
        themes=tuple(puzzle_data.get("themes") or ()),
        plays=plays,
        game_id=game_data.get("id"),
        source="lichess",
    )


__all__ = ["DEFAULT_API_BASE", "LichessPuzzleClient", "parse_lichess_puzzle"]
