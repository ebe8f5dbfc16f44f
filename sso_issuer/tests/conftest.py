"""
Pytest configuration for sso_issuer. In-memory SQLite cache, fake clock and a
throwaway RSA key so tests never touch the filesystem or sleep through TTLs.
"""
import os
import time

# In-memory SQLite; database.make_engine uses StaticPool so all connections share the same DB
os.environ["SSO_CACHE_URL"] = "sqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient

from sso_issuer.cache import SqlExpiringCache
from sso_issuer.config import IssuerSettings
from sso_issuer.database import init_db, make_engine, make_session_factory
from sso_issuer.issuer import build_issuer
from sso_issuer.keys import SigningMaterial, generate_key
from sso_issuer.main import create_app

TEST_ISSUER = "https://issuer.test"


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int | None = None):
        self.now = start_ms if start_ms is not None else int(time.time() * 1000)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(scope="session")
def rsa_key():
    return generate_key()


@pytest.fixture
def signing(rsa_key):
    return SigningMaterial(algorithm="RS256", key_id="test-key", private_key=rsa_key)


@pytest.fixture
def engine():
    engine = make_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def cache(engine, clock):
    return SqlExpiringCache(make_session_factory(engine), clock=clock)


@pytest.fixture
def settings(tmp_path):
    return IssuerSettings(
        issuer=TEST_ISSUER,
        auth_code_expires_in=300,
        access_token_expires_in=600,
        id_token_expires_in=900,
        client_credentials_ttl=900,
        auth_setting_ttl=900,
        app_config_path=str(tmp_path / "config.json"),
    )


@pytest.fixture
def issuer(settings, signing, cache, clock):
    return build_issuer(settings, signing=signing, cache=cache, clock=clock)


@pytest.fixture
def client(issuer):
    """TestClient with lifespan run (issuer attached, sweeper started and stopped)."""
    with TestClient(create_app(issuer=issuer)) as c:
        yield c
