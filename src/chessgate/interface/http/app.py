from __future__ import annotations

from flask import Flask

from src.chessgate.infrastructure.chess_rules import PythonChessRulesOracle
from src.chessgate.infrastructure.config import AppConfig, load_config
from src.chessgate.infrastructure.lichess import LichessPuzzleClient
from src.chessgate.infrastructure.persistence.attempt_store import (
    InMemoryPuzzleAttemptRepository,
)
from src.chessgate.interface.http.gate_routes import gate_bp
from src.chessgate.interface.http.puzzle_routes import puzzle_bp
from src.chessgate.interface.telemetry.logging import setup_logging, get_logger


def create_app(config: AppConfig | None = None) -> Flask:
    """Instantiate Flask application with shared configuration."""
    cfg = config or load_config()

    setup_logging(cfg.additional.get("STRUCTLOG_LEVEL", "INFO"))
    logger = get_logger("chessgate.app")

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=cfg.secret_key,
        ENV=cfg.flask_env,
        APP_CONFIG=cfg,
    )

    app.extensions["rules_oracle"] = PythonChessRulesOracle()
    app.extensions["puzzle_attempts"] = InMemoryPuzzleAttemptRepository(
        ttl_seconds=cfg.attempt_ttl_seconds,
        max_attempts=cfg.max_attempts,
    )
    app.extensions["puzzle_source"] = LichessPuzzleClient(
        cfg.lichess_api_base,
        timeout=cfg.lichess_timeout_seconds,
        convention=cfg.lichess_solution_convention,
    )

    app.register_blueprint(puzzle_bp, url_prefix="/api/v1/puzzles")
    app.register_blueprint(gate_bp, url_prefix="/api/v1/gate")

    @app.get("/healthz")
    def healthcheck():
        return {"status": "ok"}, 200

    logger.info(
        "flask_app_initialized",
        env=cfg.flask_env,
        lichess_api_base=cfg.lichess_api_base,
        solution_convention=cfg.lichess_solution_convention.value,
    )
    return app


__all__ = ["create_app"]
