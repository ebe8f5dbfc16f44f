"""
In-memory authorization code and access token stores.
Each store guards its dict with a lock: request handlers and the expiry sweeper
touch the same entries from different threads.
"""
import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Generic, TypeVar

from sso_issuer.clock import Clock, now_ms

logger = logging.getLogger(__name__)

# URL-safe alphanumerics (A-Z, a-z, 0-9)
ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
AUTH_CODE_LENGTH = 9
ACCESS_TOKEN_LENGTH = 28


def random_string(length: int) -> str:
    """
    Map each secure random byte onto ALPHABET by modulo. Slightly biased
    towards the first 8 symbols (256 % 62 == 8); never blocks or retries.
    """
    data = secrets.token_bytes(length)
    return "".join(ALPHABET[b % len(ALPHABET)] for b in data)


@dataclass
class AuthorizationCodeRecord:
    client_id: str
    redirect_uri: str
    response_type: str
    scope: str
    created_at: int  # epoch ms
    expires_at: int  # epoch ms


@dataclass
class AccessTokenRecord:
    access_token: str
    client_id: str
    created_at: int
    expires_at: int


R = TypeVar("R", AuthorizationCodeRecord, AccessTokenRecord)


class _ExpiringRecordStore(Generic[R]):
    def __init__(self, expires_in: int, clock: Clock = now_ms):
        self._expires_in = expires_in
        self._clock = clock
        self._records: dict[str, R] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._records

    def _expiry_window(self) -> tuple[int, int]:
        """(created_at, expires_at) for a record created now."""
        created = self._clock()
        return created, created + self._expires_in * 1000

    def purge_expired(self, now: int | None = None) -> int:
        """Delete every record with expires_at <= now. Returns how many were removed."""
        if now is None:
            now = self._clock()
        with self._lock:
            expired = [k for k, r in self._records.items() if r.expires_at <= now]
            for k in expired:
                del self._records[k]
        return len(expired)


class AuthorizationCodeStore(_ExpiringRecordStore[AuthorizationCodeRecord]):
    """Issued -> Consumed | Expired. A code can be redeemed at most once."""

    def issue_code(self, client_id: str, redirect_uri: str, response_type: str, scope: str) -> str:
        if not client_id or not redirect_uri or not response_type:
            raise ValueError("client_id, redirect_uri and response_type are required")
        code = random_string(AUTH_CODE_LENGTH)
        created_at, expires_at = self._expiry_window()
        record = AuthorizationCodeRecord(
            client_id=client_id,
            redirect_uri=redirect_uri,
            response_type=response_type,
            scope=scope,
            created_at=created_at,
            expires_at=expires_at,
        )
        # No collision check; 62**9 codes
        with self._lock:
            self._records[code] = record
        logger.debug("Issued authorization code for client_id=%s", client_id)
        return code

    def validate_code(self, code: str) -> AuthorizationCodeRecord | None:
        """
        Consume the code. Returns its record once; every later call, and any
        call after expiry, returns None. Expired, used and unknown codes are
        indistinguishable to the caller.
        """
        with self._lock:
            record = self._records.pop(code, None)
        if record is None:
            return None
        if self._clock() > record.expires_at:
            return None
        return record


class AccessTokenStore(_ExpiringRecordStore[AccessTokenRecord]):
    """Opaque bearer tokens; validation is repeatable until expiry."""

    def issue_token(self, client_id: str) -> AccessTokenRecord:
        if not client_id:
            raise ValueError("client_id is required")
        created_at, expires_at = self._expiry_window()
        record = AccessTokenRecord(
            access_token=random_string(ACCESS_TOKEN_LENGTH),
            client_id=client_id,
            created_at=created_at,
            expires_at=expires_at,
        )
        with self._lock:
            self._records[record.access_token] = record
        logger.debug("Issued access token for client_id=%s", client_id)
        return record

    def validate_token(self, token: str) -> AccessTokenRecord | None:
        # Not called by any endpoint; kept for resource-server style checks
        with self._lock:
            record = self._records.get(token)
            if record is None:
                return None
            if self._clock() > record.expires_at:
                del self._records[token]
                return None
            return record
