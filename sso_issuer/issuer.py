"""
Issuer container: builds the core components for one process and owns their lifecycle.
Endpoints reach it through the get_issuer dependency (app.state.issuer).
"""
import logging
from dataclasses import dataclass

from fastapi import Request

from sso_issuer.auth_setting import AuthSettingStore
from sso_issuer.cache import ExpiringCache, SqlExpiringCache
from sso_issuer.clients import ClientCredentialManager
from sso_issuer.clock import Clock, now_ms
from sso_issuer.config import IssuerSettings
from sso_issuer.database import init_db, make_engine, make_session_factory
from sso_issuer.errors import ConfigurationError
from sso_issuer.id_token import IdentityClaims, IdTokenSigner
from sso_issuer.keys import SigningMaterial, load_signing_material
from sso_issuer.stores import AccessTokenStore, AuthorizationCodeStore
from sso_issuer.sweeper import ExpirySweeper

logger = logging.getLogger(__name__)


@dataclass
class Issuer:
    settings: IssuerSettings
    signing: SigningMaterial
    cache: ExpiringCache
    auth_settings: AuthSettingStore
    clients: ClientCredentialManager
    codes: AuthorizationCodeStore
    tokens: AccessTokenStore
    id_tokens: IdTokenSigner
    sweeper: ExpirySweeper

    def start(self) -> None:
        self.sweeper.start()

    def stop(self) -> None:
        self.sweeper.stop()

    def identity_claims_for(self, client_id: str) -> IdentityClaims:
        """Claims of the configured demo subject, addressed to client_id."""
        profile = dict(self.settings.subject_profile)
        return IdentityClaims(iss=self.settings.issuer, aud=client_id, **profile)


def build_issuer(
    settings: IssuerSettings,
    *,
    signing: SigningMaterial | None = None,
    cache: ExpiringCache | None = None,
    clock: Clock = now_ms,
) -> Issuer:
    """
    Wire the core from settings. signing and cache may be injected (tests);
    otherwise the key is read from settings.signing_key_path and the cache
    backend is created at settings.cache_url.
    Raises ConfigurationError for invalid settings or key material.
    """
    settings.validate()
    if "sub" not in settings.subject_profile:
        raise ConfigurationError("subject_profile must contain 'sub'")
    if signing is None:
        signing = load_signing_material(
            settings.signing_key_path, settings.signing_alg, settings.signing_key_id
        )
    if cache is None:
        engine = make_engine(settings.cache_url)
        init_db(engine)
        cache = SqlExpiringCache(make_session_factory(engine), clock=clock)

    auth_settings = AuthSettingStore(cache, settings.auth_setting_ttl, clock=clock)
    codes = AuthorizationCodeStore(settings.auth_code_expires_in, clock=clock)
    tokens = AccessTokenStore(settings.access_token_expires_in, clock=clock)
    return Issuer(
        settings=settings,
        signing=signing,
        cache=cache,
        auth_settings=auth_settings,
        clients=ClientCredentialManager(cache, auth_settings, settings.client_credentials_ttl, clock=clock),
        codes=codes,
        tokens=tokens,
        id_tokens=IdTokenSigner(signing, settings.id_token_expires_in, clock=clock),
        sweeper=ExpirySweeper([codes, tokens], interval=settings.sweep_interval),
    )


def get_issuer(request: Request) -> Issuer:
    """Dependency: the issuer built by the app lifespan."""
    return request.app.state.issuer
