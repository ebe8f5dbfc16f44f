"""
ID token signer. Pure apart from reading the clock; never touches the cache.
Expiry of ID tokens is enforced by verifiers through the exp claim.
"""
import logging
from dataclasses import asdict, dataclass

import jwt

from sso_issuer.clock import Clock, now_ms
from sso_issuer.errors import SigningError
from sso_issuer.keys import SigningMaterial

logger = logging.getLogger(__name__)


@dataclass
class IdentityClaims:
    iss: str
    sub: str
    aud: str
    email: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    birthday: str | None = None
    preferred_username: str | None = None
    phone_number: str | None = None

    def to_payload(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


class IdTokenSigner:
    def __init__(self, material: SigningMaterial, expires_in: int, clock: Clock = now_ms):
        self._material = material
        self._expires_in = expires_in
        self._clock = clock

    @property
    def expires_in(self) -> int:
        return self._expires_in

    def sign_id_token(self, claims: IdentityClaims) -> str:
        """Compact JWS with iat/exp stamped. Raises SigningError if the key or algorithm is unusable."""
        iat = self._clock() // 1000
        payload = claims.to_payload()
        payload["iat"] = iat
        payload["exp"] = iat + self._expires_in
        try:
            token = jwt.encode(
                payload,
                self._material.private_key,
                algorithm=self._material.algorithm,
                headers={"kid": self._material.key_id},
            )
        except (jwt.PyJWTError, NotImplementedError, ValueError, TypeError) as e:
            # Message only names the failure type; key material stays out of logs
            raise SigningError(f"ID token signing failed ({type(e).__name__})") from e
        if isinstance(token, bytes):
            token = token.decode("utf-8")
        logger.debug("Signed ID token for aud=%s", claims.aud)
        return token
