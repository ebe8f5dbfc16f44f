"""
Client credential manager. One active client_id/client_secret pair at a time,
kept in the expiring cache; generating a new pair invalidates the previous one
and the auth setting tied to it.
"""
import base64
import hmac
import logging
import secrets
from dataclasses import asdict, dataclass

from sso_issuer.auth_setting import AuthSettingStore
from sso_issuer.cache import ExpiringCache
from sso_issuer.clock import Clock, iso_from_ms, now_ms

logger = logging.getLogger(__name__)

CLIENT_CREDENTIALS_KEY = "client_credentials"


@dataclass
class ClientCredentials:
    client_id: str
    client_secret: str
    created_at: str  # ISO-8601 UTC

    def to_dict(self) -> dict:
        return asdict(self)


def generate_client_id() -> str:
    """
    16 random bytes -> 22 chars. Standard base64 with '+' and '/' replaced by
    'A' and 'B' so the id never contains reserved URL characters.
    """
    raw = base64.b64encode(secrets.token_bytes(16)).decode("ascii")
    return raw.replace("+", "A").replace("/", "B").rstrip("=")


def generate_client_secret() -> str:
    """32 random bytes -> 43 chars base64url (256-bit entropy)."""
    return base64.urlsafe_b64encode(secrets.token_bytes(32)).rstrip(b"=").decode("ascii")


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class ClientCredentialManager:
    def __init__(
        self,
        cache: ExpiringCache,
        auth_settings: AuthSettingStore,
        ttl_seconds: int,
        clock: Clock = now_ms,
    ):
        self._cache = cache
        self._auth_settings = auth_settings
        self._ttl = ttl_seconds
        self._clock = clock

    def generate_credentials(self) -> ClientCredentials:
        """Replace any existing pair (and the auth setting) with a fresh one."""
        # Two separate cache operations; rotation is not atomic
        self._cache.delete(CLIENT_CREDENTIALS_KEY)
        self._auth_settings.clear()
        credentials = ClientCredentials(
            client_id=generate_client_id(),
            client_secret=generate_client_secret(),
            created_at=iso_from_ms(self._clock()),
        )
        self._cache.set(CLIENT_CREDENTIALS_KEY, credentials.to_dict(), self._ttl)
        logger.info("Generated client credentials client_id=%s (ttl=%ss)", credentials.client_id, self._ttl)
        return credentials

    def get_credentials(self) -> ClientCredentials | None:
        """Cached pair, or None if missing or expired (the cache enforces the TTL)."""
        data = self._cache.get(CLIENT_CREDENTIALS_KEY)
        if not data:
            return None
        return ClientCredentials(**data)

    def validate_credentials(self, client_id: str, client_secret: str | None = None) -> bool:
        """client_id is always compared; client_secret only when supplied."""
        credentials = self.get_credentials()
        if credentials is None:
            return False
        if not _same(client_id, credentials.client_id):
            return False
        if client_secret is not None and not _same(client_secret, credentials.client_secret):
            return False
        return True
