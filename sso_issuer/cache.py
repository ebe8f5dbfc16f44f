"""
Expiring key/value cache used for client credentials and the auth setting.
The core depends only on the ExpiringCache protocol (get, set with TTL, delete).
Backend failures (sqlalchemy.exc.SQLAlchemyError) propagate to the caller.
"""
import json
import logging
import threading
from typing import Any, Protocol

from sqlalchemy.orm import sessionmaker

from sso_issuer.clock import Clock, now_ms
from sso_issuer.models import CacheEntry

logger = logging.getLogger(__name__)


class ExpiringCache(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> None: ...

    def delete(self, key: str) -> None: ...


class SqlExpiringCache:
    """
    JSON values in the cache_entries table, each with an absolute expiry.
    Expired entries read as missing and are removed on read.
    """

    def __init__(self, session_factory: sessionmaker, clock: Clock = now_ms):
        self._session_factory = session_factory
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            db = self._session_factory()
            try:
                entry = db.get(CacheEntry, key)
                if entry is None:
                    return None
                if self._clock() > entry.expires_at:
                    db.delete(entry)
                    db.commit()
                    logger.debug("Cache entry expired: %s", key)
                    return None
                return json.loads(entry.value)
            finally:
                db.close()

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        expires_at = self._clock() + int(ttl_seconds * 1000)
        with self._lock:
            db = self._session_factory()
            try:
                db.merge(CacheEntry(key=key, value=json.dumps(value), expires_at=expires_at))
                db.commit()
            finally:
                db.close()

    def delete(self, key: str) -> None:
        with self._lock:
            db = self._session_factory()
            try:
                db.query(CacheEntry).filter(CacheEntry.key == key).delete()
                db.commit()
            finally:
                db.close()
