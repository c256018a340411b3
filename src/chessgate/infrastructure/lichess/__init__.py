"""Lichess API integration."""

from .puzzle_client import DEFAULT_API_BASE, LichessPuzzleClient, parse_lichess_puzzle

__all__ = ["DEFAULT_API_BASE", "LichessPuzzleClient", "parse_lichess_puzzle"]
