"""
ID token verification for the validator role.
Imports a public JWK, checks the signature and iss/aud/exp, returns the claims.
"""
import logging

import jwt
from jwt import PyJWK, PyJWKClient

logger = logging.getLogger(__name__)

ALLOWED_ALGORITHMS = ["RS256", "RS384", "RS512", "PS256", "PS384", "PS512"]


class IdTokenVerificationError(Exception):
    """The ID token is malformed, badly signed, expired, or issued for someone else."""


def _decode(id_token: str, key: PyJWK, issuer: str, audience: str) -> dict:
    algorithms = [key.algorithm_name] if key.algorithm_name in ALLOWED_ALGORITHMS else ALLOWED_ALGORITHMS
    try:
        return jwt.decode(
            id_token,
            key.key,
            algorithms=algorithms,
            audience=audience,
            issuer=issuer,
            options={"verify_exp": True, "verify_aud": True, "verify_iss": True, "require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise IdTokenVerificationError("Token expired") from e
    except jwt.InvalidAudienceError as e:
        raise IdTokenVerificationError("Invalid audience") from e
    except jwt.InvalidIssuerError as e:
        raise IdTokenVerificationError("Invalid issuer") from e
    except jwt.InvalidSignatureError as e:
        raise IdTokenVerificationError("Signature verification failed") from e
    except jwt.InvalidTokenError as e:
        logger.debug("ID token verification failed: %s", e)
        raise IdTokenVerificationError(f"Invalid token: {e}") from e


def verify_id_token(id_token: str, jwk: dict, issuer: str, audience: str) -> dict:
    """
    Verify id_token with the given public JWK. Returns decoded claims.
    Raises IdTokenVerificationError with a readable reason.
    """
    try:
        key = PyJWK(jwk)
    except jwt.PyJWTError as e:
        raise IdTokenVerificationError(f"Invalid JWK: {e}") from e
    return _decode(id_token, key, issuer, audience)


def verify_id_token_from_jwks(id_token: str, jwks_uri: str, issuer: str, audience: str) -> dict:
    """Same as verify_id_token, with the key picked by kid from the issuer's JWKS."""
    try:
        client = PyJWKClient(uri=jwks_uri, cache_jwk_set=False)
        key = client.get_signing_key_from_jwt(id_token)
    except jwt.PyJWTError as e:
        raise IdTokenVerificationError(f"Unable to resolve signing key: {e}") from e
    return _decode(id_token, key, issuer, audience)
