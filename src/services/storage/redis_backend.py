import json
import logging
from typing import Optional

import redis

from src.services.errors import PersistenceFailure
from src.services.storage.base import StorageBackend, apply_query


logger = logging.getLogger("storage.redis")


class RedisBackend(StorageBackend):
    """
    Key-value blob backend: each table is one JSON array under `<prefix>_<table>`,
    every slot one JSON object under `<prefix>_<key>`.
    Every write is read-modify-write of the whole array; concurrent writers race.
    """

    def __init__(self, client, prefix: str = "dental"):
        self.r = client
        self.prefix = prefix

    @classmethod
    def from_config(cls, config) -> "RedisBackend":
        client = redis.Redis(
            host=config.get("REDIS_HOST", "localhost"),
            port=int(config.get("REDIS_PORT", 6379)),
            db=int(config.get("REDIS_DB", 0)),
            decode_responses=True,
        )
        return cls(client, prefix=config.get("REDIS_KEY_PREFIX", "dental"))

    def _key(self, name: str) -> str:
        return f"{self.prefix}_{name}"

    def _load(self, table: str) -> list[dict]:
        self._check_table(table)
        try:
            raw = self.r.get(self._key(table))
        except redis.RedisError as e:
            logger.exception(f"[load] Failed for table={table}: {e}")
            raise PersistenceFailure() from e
        if not raw:
            return []
        try:
            rows = json.loads(raw)
        except ValueError:
            logger.warning(f"[load] Corrupted blob for table={table}; treating as empty")
            return []
        return rows if isinstance(rows, list) else []

    def _store(self, table: str, rows: list[dict]):
        try:
            self.r.set(self._key(table), json.dumps(rows))
        except redis.RedisError as e:
            logger.exception(f"[store] Failed for table={table}, rows={len(rows)}: {e}")
            raise PersistenceFailure() from e

    def select(self, table, eq=None, between=None, order_by=None, descending=False):
        return apply_query(self._load(table), eq, between, order_by, descending)

    def insert(self, table, row):
        rows = self._load(table)
        rows.append(dict(row))
        self._store(table, rows)
        return dict(row)

    def update(self, table, row_id, patch, eq=None) -> Optional[dict]:
        rows = self._load(table)
        criteria = dict(eq or {}, id=row_id)
        for index, row in enumerate(rows):
            if all(row.get(k) == v for k, v in criteria.items()):
                merged = {**row, **patch}
                rows[index] = merged
                self._store(table, rows)
                return dict(merged)
        return None

    def get_slot(self, key):
        try:
            raw = self.r.get(self._key(key))
        except redis.RedisError as e:
            logger.exception(f"[get_slot] Failed for key={key}: {e}")
            raise PersistenceFailure() from e
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            # Same recovery as a corrupted local profile: act signed out
            logger.warning(f"[get_slot] Corrupted value for key={key}; ignoring")
            return None

    def set_slot(self, key, value):
        try:
            if value is None:
                self.r.delete(self._key(key))
            else:
                self.r.set(self._key(key), json.dumps(value))
        except redis.RedisError as e:
            logger.exception(f"[set_slot] Failed for key={key}: {e}")
            raise PersistenceFailure() from e
