from __future__ import annotations

import click

from src.chessgate.domain.puzzle import (
    IllegalMoveError,
    MalformedPuzzleError,
    MoveOutcome,
    PuzzleAttemptManager,
    PuzzleFetchError,
    PuzzleRequest,
    format_themes,
)
from src.chessgate.infrastructure.chess_rules import PythonChessRulesOracle
from src.chessgate.infrastructure.config import AppConfig, load_config
from src.chessgate.infrastructure.lichess import LichessPuzzleClient
from src.chessgate.infrastructure.persistence.attempt_store import (
    InMemoryPuzzleAttemptRepository,
)

_COMMANDS_HELP = "Enter moves in UCI (e.g. e2e4, e7e8q), or: hint, reset, quit."


def _build_client(config: AppConfig) -> LichessPuzzleClient:
    return LichessPuzzleClient(
        config.lichess_api_base,
        timeout=config.lichess_timeout_seconds,
        convention=config.lichess_solution_convention,
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def cli() -> None:
    """Chess puzzle gate for the portfolio site."""


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=5000, show_default=True)
@click.option("--debug", is_flag=True, help="Run Flask in debug mode.")
def serve(host: str, port: int, debug: bool) -> None:
    """Run the HTTP API."""
    from src.chessgate.interface.http.app import create_app

    app = create_app(load_config())
    app.run(host=host, port=port, debug=debug)


@cli.command()
def ping() -> None:
    """Check that the Lichess puzzle API is reachable."""
    client = _build_client(load_config())
    if client.ping():
        click.secho(f"Lichess API reachable at {client.base_url}", fg="green")
        return
    click.secho(f"Lichess API unreachable at {client.base_url}", fg="red", err=True)
    raise SystemExit(1)


@cli.command()
@click.option("--puzzle-id", default=None, help="Lichess puzzle id (defaults to the daily puzzle).")
def solve(puzzle_id: str | None) -> None:
    """Fetch a puzzle and solve it in the terminal."""
    oracle = PythonChessRulesOracle()
    manager = PuzzleAttemptManager(
        InMemoryPuzzleAttemptRepository(),
        oracle,
        _build_client(load_config()),
    )

    try:
        attempt = manager.start_attempt(PuzzleRequest(puzzle_id=puzzle_id))
    except (PuzzleFetchError, MalformedPuzzleError) as exc:
        click.secho(f"Failed to load puzzle: {exc}", fg="red", err=True)
        raise SystemExit(1)

    puzzle = attempt.puzzle
    orientation = manager.solver_color(attempt)
    click.echo(
        f"Puzzle {puzzle.id} | {puzzle.difficulty} ({puzzle.rating or '?'}) | "
        f"{format_themes(puzzle.themes)}"
    )
    click.echo(f"{orientation.capitalize()} to move - find the best move!")
    click.echo(_COMMANDS_HELP)

    while True:
        click.echo()
        click.echo(oracle.render(attempt.position, orientation=orientation))
        entry = click.prompt("Your move", type=str).strip()
        command = entry.lower()

        if command in {"quit", "exit", "q"}:
            click.echo("Skipping straight to the portfolio.")
            return
        if command == "reset":
            manager.reset_attempt(attempt.id)
            click.echo("Puzzle reset.")
            continue
        if command == "hint":
            click.echo(f"Hint: try {manager.hint(attempt.id)}")
            continue

        try:
            feedback = manager.submit_uci(attempt.id, entry)
        except IllegalMoveError as exc:
            click.secho(f"Illegal move: {exc}", fg="yellow")
            continue

        if feedback.outcome is MoveOutcome.rejected:
            click.secho(f"{feedback.move.san} is not it. Try again.", fg="red")
            continue

        click.secho(f"{feedback.move.san} - excellent move!", fg="green")
        if feedback.opponent_reply is not None:
            click.echo(f"Opponent replies {feedback.opponent_reply.san}.")

        if feedback.solved:
            click.echo(oracle.render(attempt.position, orientation=orientation))
            click.secho(
                f"Puzzle solved with {attempt.mistakes} mistake(s) and "
                f"{attempt.hints_used} hint(s). Access granted!",
                fg="green",
            )
            return


def main() -> None:  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()


__all__ = ["cli", "main"]
