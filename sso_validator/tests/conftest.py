"""Pytest configuration for sso_validator: a throwaway RSA key and a token factory."""
import time

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from sso_validator import main as validator_main

ISSUER = "https://issuer.test"
AUDIENCE = "client-abc"


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def public_jwk(rsa_key):
    jwk = RSAAlgorithm.to_jwk(rsa_key.public_key(), as_dict=True)
    jwk.update({"kid": "test-key", "alg": "RS256", "use": "sig"})
    return jwk


@pytest.fixture
def make_id_token(rsa_key):
    def _make(iss=ISSUER, aud=AUDIENCE, lifetime=900, key=None, **extra):
        iat = int(time.time())
        payload = {"iss": iss, "sub": "user-id-123", "aud": aud, "iat": iat, "exp": iat + lifetime}
        payload.update(extra)
        return jwt.encode(payload, key or rsa_key, algorithm="RS256", headers={"kid": "test-key"})

    return _make


@pytest.fixture(autouse=True)
def reset_token_response():
    validator_main.clear_token_response()
    yield
    validator_main.clear_token_response()
