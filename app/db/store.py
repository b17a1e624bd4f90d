"""Dual-backed JSON collections.

Each collection (bookings, crm-leads, payment-intents) is a JSON array kept
under one Redis key and mirrored to ``<DATA_DIR>/<name>.json``. Redis is the
primary; the file is the fallback when Redis is switched off, unreachable or
empty. Writes go to both and succeed if either one accepted the data.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import redis

from app.core.config import settings
from app.core.errors import StorageWriteFailure
from app.db.redis_client import get_redis

logger = logging.getLogger(__name__)

KEY_PREFIX = "savanablu"


@dataclass
class StoreResult:
    ok: bool
    written: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    skipped: bool = False  # idempotent no-op, nothing had to be written

    def raise_for_failure(self, context: str = "") -> None:
        if not self.ok:
            raise StorageWriteFailure(f"{context or 'write'} failed on every backend: {self.errors}")


class RedisBackend:
    name = "redis"

    def __init__(self, collection: str, client_factory=get_redis):
        self.key = f"{KEY_PREFIX}:{collection}"
        self._client_factory = client_factory

    def read(self) -> list | None:
        client = self._client_factory()
        if client is None:
            return None
        raw = client.get(self.key)
        if not raw:
            return None
        data = json.loads(raw)
        return data if isinstance(data, list) else None

    def write(self, items: list) -> None:
        client = self._client_factory()
        if client is None:
            raise StorageWriteFailure("redis store is disabled")
        client.set(self.key, json.dumps(items, ensure_ascii=False))


class FileBackend:
    name = "file"

    def __init__(self, collection: str, data_dir: str | None = None):
        self.collection = collection
        self._data_dir = data_dir

    @property
    def path(self) -> Path:
        # resolved on every call so DATA_DIR can change after import (tests, scripts)
        return Path(self._data_dir or settings.DATA_DIR) / f"{self.collection}.json"

    def read(self) -> list | None:
        path = self.path
        if not path.exists():
            return None
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw or "[]")
        return data if isinstance(data, list) else None

    def write(self, items: list) -> None:
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(json.dumps(items, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, path)


_READ_ERRORS = (redis.RedisError, OSError, ValueError)
_WRITE_ERRORS = (redis.RedisError, OSError, TypeError, ValueError, StorageWriteFailure)


class DualStore:
    def __init__(self, collection: str, primary=None, secondary=None):
        self.collection = collection
        self.primary = primary if primary is not None else RedisBackend(collection)
        self.secondary = secondary if secondary is not None else FileBackend(collection)

    def read_all(self) -> list[dict]:
        """Primary first, file second. A total failure reads as an empty collection."""
        for backend in (self.primary, self.secondary):
            try:
                items = backend.read()
            except _READ_ERRORS as e:
                logger.warning("read %s from %s failed: %s", self.collection, backend.name, e)
                continue
            if items:
                return items
        return []

    def write_all(self, items: list[dict]) -> StoreResult:
        result = StoreResult(ok=False)
        for backend in (self.primary, self.secondary):
            try:
                backend.write(items)
                result.written.append(backend.name)
            except _WRITE_ERRORS as e:
                result.errors[backend.name] = str(e)
                logger.warning("write %s to %s failed: %s", self.collection, backend.name, e)
        result.ok = bool(result.written)
        if not result.ok:
            logger.error("write %s failed on every backend: %s", self.collection, result.errors)
        return result
