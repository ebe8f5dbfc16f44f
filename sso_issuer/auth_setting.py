"""
Auth setting: where the downstream login flow begins (initUrl) and the callback host.
Stored in the expiring cache with its own TTL; consumed by /publish-config.
"""
import logging
from dataclasses import dataclass
from urllib.parse import urlparse

from sso_issuer.cache import ExpiringCache
from sso_issuer.clock import Clock, iso_from_ms, now_ms

logger = logging.getLogger(__name__)

AUTH_SETTING_KEY = "auth_setting"


@dataclass
class AuthSettingRecord:
    init_url: str
    callback_host: str
    updated_at: str

    def to_dict(self) -> dict:
        return {"initUrl": self.init_url, "callbackHost": self.callback_host, "updatedAt": self.updated_at}

    @classmethod
    def from_dict(cls, data: dict) -> "AuthSettingRecord":
        return cls(
            init_url=data["initUrl"],
            callback_host=data["callbackHost"],
            updated_at=data.get("updatedAt", ""),
        )


class AuthSettingStore:
    def __init__(self, cache: ExpiringCache, ttl_seconds: int, clock: Clock = now_ms):
        self._cache = cache
        self._ttl = ttl_seconds
        self._clock = clock

    def save(self, init_url: str, callback_host: str) -> AuthSettingRecord:
        record = AuthSettingRecord(
            init_url=init_url,
            callback_host=callback_host,
            updated_at=iso_from_ms(self._clock()),
        )
        self._cache.set(AUTH_SETTING_KEY, record.to_dict(), self._ttl)
        logger.debug("Auth setting saved (ttl=%ss)", self._ttl)
        return record

    def get(self) -> AuthSettingRecord | None:
        data = self._cache.get(AUTH_SETTING_KEY)
        if not data:
            return None
        return AuthSettingRecord.from_dict(data)

    def clear(self) -> None:
        self._cache.delete(AUTH_SETTING_KEY)


def is_http_url(value: str | None) -> bool:
    """Absolute http(s) URL with a host; localhost allowed."""
    if not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
