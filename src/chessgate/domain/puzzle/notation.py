from __future__ import annotations

import re
from typing import NamedTuple

_UCI_PATTERN = re.compile(r"^([a-h][1-8])([a-h][1-8])([qrbn])?$")


class MoveParts(NamedTuple):
    from_square: str
    to_square: str
    promotion: str | None = None


def is_canonical(move: str) -> bool:
    """Return True for lower-case UCI such as ``e2e4`` or ``h7h8q``."""
    return bool(_UCI_PATTERN.match(move))


def split_uci(move: str) -> MoveParts:
    match = _UCI_PATTERN.match(move)
    if match is None:
        raise ValueError(f"Not a canonical move: {move!r}")
    from_square, to_square, promotion = match.groups()
    return MoveParts(from_square, to_square, promotion)


def join_uci(from_square: str, to_square: str, promotion: str | None = None) -> str:
    return f"{from_square}{to_square}{promotion or ''}"


__all__ = ["MoveParts", "is_canonical", "join_uci", "split_uci"]
