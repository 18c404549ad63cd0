"""
Environment configuration and the day close worker wiring
"""

import os
from datetime import time
from unittest.mock import patch

from callpace.config import Settings
from callpace.record_store import MemoryRecordStore
from callpace.worker import WorkerService


@patch.dict(os.environ, {
    "TEAMS": "team1, team2,team3",
    "STORE_BACKEND": "Memory",
    "DAY_CLOSE_TIME": "18:30",
    "API_PORT": "9001",
    "LOG_LEVEL": "debug",
    "GEMINI_API_KEY": "secret",
}, clear=True)
def test_settings_from_environment():
    settings = Settings.from_environment()
    assert settings.teams == ["team1", "team2", "team3"]
    assert settings.store_backend == "memory"
    assert settings.day_close_time == time(18, 30)
    assert settings.api_port == 9001
    assert settings.log_level == "DEBUG"
    assert settings.gemini_model == "gemini-2.5-flash"
    assert settings.legacy_team == "team1"
    assert isinstance(settings.build_store(), MemoryRecordStore)


@patch.dict(os.environ, {}, clear=True)
def test_settings_defaults():
    settings = Settings.from_environment()
    assert settings.teams == ["team1", "team2"]
    assert settings.day_close_time == time(18, 5)
    assert settings.db_params["port"] == 5432


@patch('psycopg2.connect')
def test_postgres_backend(mock_connect):
    settings = Settings(store_backend="postgres", db_params={"host": "db"})
    store = settings.build_store()
    assert type(store).__name__ == "PostgresRecordStore"
    mock_connect.assert_called_with(host="db")


def test_worker_runs_day_close():
    worker = WorkerService(Settings(teams=["team1"]), store=MemoryRecordStore())
    with patch.object(worker.scheduler, "should_run_now", return_value=True):
        result = worker.run_day_close()
    assert result["status"] == "success"
    assert list(result["report"]["teams"]) == ["team1"]


def test_worker_logs_skip():
    worker = WorkerService(Settings(), store=MemoryRecordStore())
    with patch.object(worker.scheduler, "should_run_now", return_value=False):
        assert worker.run_day_close()["status"] == "skipped"
