from __future__ import annotations

import chess
import pytest

from src.chessgate.domain.puzzle import IllegalMoveError

from tests.factories import BACK_RANK_FEN


def test_apply_move_returns_new_position_and_notation(oracle) -> None:
    start = oracle.load(chess.STARTING_FEN)

    applied = oracle.apply_move(start, "g1", "f3")

    assert applied.uci == "g1f3"
    assert applied.san == "Nf3"
    assert oracle.fen(start) == chess.STARTING_FEN
    assert oracle.side_to_move(start) == "white"
    assert oracle.side_to_move(applied.position) == "black"


def test_illegal_move_is_rejected(oracle) -> None:
    start = oracle.load(chess.STARTING_FEN)
    with pytest.raises(IllegalMoveError) as excinfo:
        oracle.apply_move(start, "e2", "e5")
    assert excinfo.value.code == "illegal_move"


def test_bad_square_names_are_illegal(oracle) -> None:
    start = oracle.load(chess.STARTING_FEN)
    with pytest.raises(IllegalMoveError):
        oracle.apply_move(start, "z9", "e4")
    with pytest.raises(IllegalMoveError):
        oracle.apply_move(start, "e2", "e4", "x")


def test_missing_promotion_defaults_to_queen(oracle) -> None:
    position = oracle.load("k7/7P/8/8/8/8/8/K7 w - - 0 1")

    queen = oracle.apply_move(position, "h7", "h8")
    rook = oracle.apply_move(position, "h7", "h8", "r")

    assert queen.uci == "h7h8q"
    assert rook.uci == "h7h8r"
    assert oracle.status(queen.position).in_check


def test_status_reports_checkmate(oracle) -> None:
    position = oracle.load(BACK_RANK_FEN)
    before = oracle.status(position)
    assert not before.in_check
    assert not before.is_game_over

    mated = oracle.apply_move(position, "a1", "a8")
    status = oracle.status(mated.position)

    assert mated.san == "Ra8#"
    assert status.in_check
    assert status.in_checkmate
    assert status.is_game_over
    assert not status.in_stalemate


def test_status_reports_stalemate(oracle) -> None:
    status = oracle.status(oracle.load("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"))
    assert status.in_stalemate
    assert status.in_draw
    assert not status.in_check


def test_undo_returns_previous_position(oracle) -> None:
    start = oracle.load(chess.STARTING_FEN)
    applied = oracle.apply_move(start, "e2", "e4")

    reverted = oracle.undo(applied.position)

    assert oracle.fen(reverted) == chess.STARTING_FEN
    assert oracle.fen(applied.position) != chess.STARTING_FEN
    with pytest.raises(IllegalMoveError):
        oracle.undo(start)


def test_render_flips_for_black(oracle) -> None:
    position = oracle.load(chess.STARTING_FEN)
    white_view = oracle.render(position).splitlines()
    black_view = oracle.render(position, orientation="black").splitlines()

    assert white_view[0] == "r n b q k b n r"
    assert black_view[0] == "R N B K Q B N R"
    assert black_view[-1] == "r n b k q b n r"
