"""Tests for ID token verification against a public JWK."""
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from sso_validator.verify import IdTokenVerificationError, verify_id_token

ISSUER = "https://issuer.test"
AUDIENCE = "client-abc"


def test_valid_token_returns_claims(public_jwk, make_id_token):
    claims = verify_id_token(make_id_token(), public_jwk, issuer=ISSUER, audience=AUDIENCE)
    assert claims["sub"] == "user-id-123"
    assert claims["aud"] == AUDIENCE


def test_wrong_audience(public_jwk, make_id_token):
    with pytest.raises(IdTokenVerificationError, match="Invalid audience"):
        verify_id_token(make_id_token(aud="someone-else"), public_jwk, issuer=ISSUER, audience=AUDIENCE)


def test_wrong_issuer(public_jwk, make_id_token):
    with pytest.raises(IdTokenVerificationError, match="Invalid issuer"):
        verify_id_token(make_id_token(iss="https://evil.test"), public_jwk, issuer=ISSUER, audience=AUDIENCE)


def test_expired_token(public_jwk, make_id_token):
    with pytest.raises(IdTokenVerificationError, match="Token expired"):
        verify_id_token(make_id_token(lifetime=-60), public_jwk, issuer=ISSUER, audience=AUDIENCE)


def test_signed_with_other_key(public_jwk, make_id_token):
    other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    with pytest.raises(IdTokenVerificationError, match="Signature verification failed"):
        verify_id_token(make_id_token(key=other), public_jwk, issuer=ISSUER, audience=AUDIENCE)


def test_garbage_token(public_jwk):
    with pytest.raises(IdTokenVerificationError, match="Invalid token"):
        verify_id_token("not.a.jwt", public_jwk, issuer=ISSUER, audience=AUDIENCE)


def test_invalid_jwk(make_id_token):
    with pytest.raises(IdTokenVerificationError, match="Invalid JWK"):
        verify_id_token(make_id_token(), {"kty": "RSA", "kid": "x"}, issuer=ISSUER, audience=AUDIENCE)
