"""Fixtures compartilhadas: banco SQLite isolado por teste."""
from __future__ import annotations

import logging

import pytest

from application.context import AppContext, build_context
from adapters.repository.sql_metrics_repository import SqlMetricsRepository


@pytest.fixture(autouse=True)
def _detach_log_handlers():
    # a CLI configura o logging com o stderr capturado do teste corrente
    yield
    logging.getLogger().handlers.clear()


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'courier_risk.db'}"


@pytest.fixture
def repo(db_url) -> SqlMetricsRepository:
    repository = SqlMetricsRepository(db_url)
    yield repository
    repository.engine.dispose()


@pytest.fixture
def context(db_url) -> AppContext:
    ctx = build_context(db_url)
    yield ctx
    ctx.repository.engine.dispose()
