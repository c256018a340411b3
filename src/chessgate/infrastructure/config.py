from __future__ import annotations

from dataclasses import dataclass, field
import os
import secrets

from src.chessgate.domain.puzzle.source import SolutionConvention


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Centralized runtime configuration for the puzzle gate service."""

    lichess_api_base: str = "https://lichess.org/api"
    lichess_timeout_seconds: float = 10.0
    lichess_solution_convention: SolutionConvention = SolutionConvention.solver_first
    flask_env: str = "production"
    secret_key: str = field(default_factory=lambda: secrets.token_hex(32))
    revert_delay_ms: int = 500
    reply_delay_ms: int = 500
    access_grant_delay_ms: int = 1500
    attempt_ttl_seconds: int = 3600
    max_attempts: int = 10_000
    additional: dict[str, str] = field(default_factory=dict)


def load_config(prefix: str = "") -> AppConfig:
    """Load application configuration from environment variables."""

    def _get_env(key: str, default: str = "") -> str:
        env_key = f"{prefix}{key}"
        return os.getenv(env_key, default)

    def _parse_float(raw: str, fallback: float) -> float:
        try:
            return float(raw)
        except (TypeError, ValueError):
            return fallback

    def _parse_int(raw: str, fallback: int) -> int:
        try:
            return max(0, int(raw))
        except (TypeError, ValueError):
            return fallback

    convention_raw = _get_env("LICHESS_SOLUTION_CONVENTION", SolutionConvention.solver_first.value)
    try:
        convention = SolutionConvention(convention_raw.strip().lower())
    except ValueError:
        convention = SolutionConvention.solver_first

    additional_keys = ("STRUCTLOG_LEVEL",)
    additional: dict[str, str] = {}
    for key in additional_keys:
        value = _get_env(key, "")
        if value:
            additional[key] = value

    return AppConfig(
        lichess_api_base=_get_env("LICHESS_API_BASE", "https://lichess.org/api"),
        lichess_timeout_seconds=_parse_float(_get_env("LICHESS_TIMEOUT_SECONDS", "10"), 10.0),
        lichess_solution_convention=convention,
        flask_env=_get_env("FLASK_ENV", "production"),
        secret_key=_get_env("SECRET_KEY", "") or secrets.token_hex(32),
        revert_delay_ms=_parse_int(_get_env("REVERT_DELAY_MS", "500"), 500),
        reply_delay_ms=_parse_int(_get_env("REPLY_DELAY_MS", "500"), 500),
        access_grant_delay_ms=_parse_int(_get_env("ACCESS_GRANT_DELAY_MS", "1500"), 1500),
        attempt_ttl_seconds=_parse_int(_get_env("ATTEMPT_TTL_SECONDS", "3600"), 3600),
        max_attempts=max(1, _parse_int(_get_env("MAX_ATTEMPTS", "10000"), 10_000)),
        additional=additional,
    )


__all__ = ["AppConfig", "load_config"]
