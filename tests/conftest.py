from __future__ import annotations

import pytest

from src.chessgate.infrastructure.chess_rules import PythonChessRulesOracle
from src.chessgate.infrastructure.config import AppConfig
from src.chessgate.interface.http.app import create_app

from tests.factories import FakePuzzleSource, back_rank_definition, opening_definition


@pytest.fixture(scope="session")
def app_config() -> AppConfig:
    """Provide a configuration tuned for isolated tests."""
    return AppConfig(
        lichess_api_base="http://lichess.invalid/api",
        lichess_timeout_seconds=1.0,
        flask_env="test",
        secret_key="test-secret",
        revert_delay_ms=10,
        reply_delay_ms=20,
        access_grant_delay_ms=30,
        additional={},
    )


@pytest.fixture
def oracle() -> PythonChessRulesOracle:
    return PythonChessRulesOracle()


@pytest.fixture
def fake_source() -> FakePuzzleSource:
    return FakePuzzleSource(opening_definition(), back_rank_definition())


@pytest.fixture
def app(app_config: AppConfig, fake_source: FakePuzzleSource):
    flask_app = create_app(app_config)
    flask_app.config.update(TESTING=True)
    flask_app.extensions["puzzle_source"] = fake_source
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
