from __future__ import annotations

import chess

from src.chessgate.domain.puzzle.rules import (
    AppliedMove,
    IllegalMoveError,
    PositionStatus,
    RulesOracle,
)


class PythonChessRulesOracle(RulesOracle):
    """Rules oracle backed by python-chess boards.

    Handles are ``chess.Board`` instances. Every transition works on a copy,
    so a caller's handle never changes underneath it.
    """

    def load(self, fen: str) -> chess.Board:
        return chess.Board(fen)

    def fen(self, position: chess.Board) -> str:
        return position.fen()

    def side_to_move(self, position: chess.Board) -> str:
        return "white" if position.turn == chess.WHITE else "black"

    def apply_move(
        self,
        position: chess.Board,
        from_square: str,
        to_square: str,
        promotion: str | None = None,
    ) -> AppliedMove:
        move = self._resolve_move(position, from_square, to_square, promotion)
        board = position.copy()
        san = board.san(move)
        board.push(move)
        return AppliedMove(position=board, uci=move.uci(), san=san)

    def status(self, position: chess.Board) -> PositionStatus:
        return PositionStatus(
            in_check=position.is_check(),
            in_checkmate=position.is_checkmate(),
            in_stalemate=position.is_stalemate(),
            in_draw=(
                position.is_stalemate()
                or position.is_insufficient_material()
                or position.can_claim_draw()
            ),
            is_game_over=position.is_game_over(claim_draw=True),
        )

    def undo(self, position: chess.Board) -> chess.Board:
        if not position.move_stack:
            raise IllegalMoveError("No moves to undo.")
        board = position.copy()
        board.pop()
        return board

    def render(self, position: chess.Board, *, orientation: str = "white") -> str:
        """Plain-text diagram of the board, flipped for black."""
        if orientation == "black":
            return str(position.transform(chess.flip_vertical).transform(chess.flip_horizontal))
        return str(position)

    def _resolve_move(
        self,
        position: chess.Board,
        from_square: str,
        to_square: str,
        promotion: str | None,
    ) -> chess.Move:
        try:
            source = chess.parse_square(from_square)
            target = chess.parse_square(to_square)
            piece = chess.Piece.from_symbol(promotion).piece_type if promotion else None
        except ValueError as exc:
            raise IllegalMoveError(
                f"Invalid move {from_square}{to_square}{promotion or ''}."
            ) from exc

        move = chess.Move(source, target, promotion=piece)
        if move in position.legal_moves:
            return move

        # Unspecified promotions default to a queen.
        if piece is None:
            queen_move = chess.Move(source, target, promotion=chess.QUEEN)
            if queen_move in position.legal_moves:
                return queen_move

        raise IllegalMoveError(
            f"Move {move.uci()} is not legal in the current position."
        )


__all__ = ["PythonChessRulesOracle"]
