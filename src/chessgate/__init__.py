"""
ChessGate package bootstrap.

Subpackages:
- interface: Adapters for HTTP, CLI, and telemetry layers.
- domain: Puzzle solution tracking and the contracts it relies on.
- infrastructure: Rules oracle, Lichess client, configuration, and attempt storage.
"""

__all__ = ["interface", "domain", "infrastructure"]
