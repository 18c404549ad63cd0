"""Environment-driven configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import time
from typing import Any, Dict, List


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    store_backend: str = "memory"
    db_params: Dict[str, Any] = field(default_factory=dict)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    ai_timeout: int = 30
    teams: List[str] = field(default_factory=lambda: ["team1", "team2"])
    legacy_team: str = "team1"
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    log_level: str = "INFO"
    day_close_time: time = time(18, 5)

    @classmethod
    def from_environment(cls) -> "Settings":
        hour, minute = os.getenv("DAY_CLOSE_TIME", "18:05").split(":")
        return cls(
            store_backend=os.getenv("STORE_BACKEND", "memory").lower(),
            db_params={
                "host": os.getenv("DB_HOST", "localhost"),
                "port": int(os.getenv("DB_PORT", 5432)),
                "database": os.getenv("DB_NAME", "call_pacing"),
                "user": os.getenv("DB_USER", "pacing_user"),
                "password": os.getenv("DB_PASSWORD", ""),
            },
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            ai_timeout=int(os.getenv("AI_TIMEOUT", 30)),
            teams=_split(os.getenv("TEAMS", "team1,team2")),
            legacy_team=os.getenv("LEGACY_TEAM", "team1"),
            api_host=os.getenv("API_HOST", "127.0.0.1"),
            api_port=int(os.getenv("API_PORT", 8000)),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            day_close_time=time(int(hour), int(minute)),
        )

    def build_store(self):
        """Record store selected by ``STORE_BACKEND``."""
        from .record_store import MemoryRecordStore, PostgresRecordStore

        if self.store_backend == "postgres":
            return PostgresRecordStore(self.db_params)
        return MemoryRecordStore()
