"""Rules oracle adapters."""

from .python_chess_oracle import PythonChessRulesOracle

__all__ = ["PythonChessRulesOracle"]
