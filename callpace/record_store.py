#!/usr/bin/env python3
"""
Key/value record store for daily records and monthly overrides.
PostgreSQL-backed with a process-local in-memory implementation for
tests and single-user runs.
"""

import json
import logging
from typing import Any, Dict, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from .calendar_service import DateLike, to_date

logger = logging.getLogger(__name__)

DAILY_KEY_PREFIX = "performance-dashboard"
OVERRIDE_KEY_PREFIX = "monthly-overrides"


def daily_record_key(team: str, day: DateLike) -> str:
    return f"{DAILY_KEY_PREFIX}-{team}-{to_date(day).isoformat()}"


def legacy_daily_record_key(day: DateLike) -> str:
    """Pre multi-team key; read as a fallback, never written"""
    return f"{DAILY_KEY_PREFIX}-{to_date(day).isoformat()}"


def monthly_override_key(team: str, year_month: str) -> str:
    return f"{OVERRIDE_KEY_PREFIX}-{team}-{year_month}"


class RecordStore:
    """get/set/remove of string values by string key"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryRecordStore(RecordStore):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.records: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.records.get(key)

    def set(self, key: str, value: str) -> None:
        self.records[key] = value

    def remove(self, key: str) -> None:
        self.records.pop(key, None)


class PostgresRecordStore(RecordStore):
    """Persistent record store on a single key/value table"""

    def __init__(self, db_params: Dict[str, Any]):
        self.db_params = db_params
        self._ensure_table()

    def _get_connection(self):
        """Get database connection"""
        return psycopg2.connect(**self.db_params)

    def _ensure_table(self):
        """Create records table if it doesn't exist"""
        with self._get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS dashboard_records (
                        record_key VARCHAR(255) PRIMARY KEY,
                        record_value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                conn.commit()
                logger.info("Dashboard records table ensured")

    def get(self, key: str) -> Optional[str]:
        with self._get_connection() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute("""
                    SELECT record_value FROM dashboard_records
                    WHERE record_key = %s
                """, (key,))
                result = cursor.fetchone()
                return result['record_value'] if result else None

    def set(self, key: str, value: str) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute("""
                    INSERT INTO dashboard_records (record_key, record_value)
                    VALUES (%s, %s)
                    ON CONFLICT (record_key)
                    DO UPDATE SET record_value = EXCLUDED.record_value,
                                  updated_at = CURRENT_TIMESTAMP
                """, (key, value))
                conn.commit()

    def remove(self, key: str) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute("""
                    DELETE FROM dashboard_records
                    WHERE record_key = %s
                """, (key,))
                conn.commit()


def _read_raw(store: RecordStore, key: str) -> Optional[str]:
    try:
        return store.get(key)
    except Exception as e:
        logger.error(f"Failed to read record {key}: {e}")
        return None


def _decode(key: str, raw: Optional[str]) -> Optional[Any]:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Corrupt record {key}: {e}")
        return None


def read_json(store: RecordStore, key: str) -> Optional[Any]:
    """Read and decode a record; missing, unreadable or corrupt records give None"""
    return _decode(key, _read_raw(store, key))


def write_json(store: RecordStore, key: str, payload: Any) -> bool:
    """Encode and write a record; failures are logged and reported as False"""
    try:
        store.set(key, json.dumps(payload, ensure_ascii=False))
        return True
    except Exception as e:
        logger.error(f"Failed to write record {key}: {e}")
        return False


def remove_record(store: RecordStore, key: str) -> bool:
    try:
        store.remove(key)
        return True
    except Exception as e:
        logger.error(f"Failed to remove record {key}: {e}")
        return False


def read_daily_record(store: RecordStore, team: str, day: DateLike,
                      legacy_team: Optional[str] = None) -> Optional[Any]:
    """Daily record for (team, day), falling back to the legacy key for ``legacy_team``"""
    key = daily_record_key(team, day)
    raw = _read_raw(store, key)
    if raw is None and legacy_team is not None and team == legacy_team:
        key = legacy_daily_record_key(day)
        raw = _read_raw(store, key)
    return _decode(key, raw)
