"""
Issuer configuration. Values come from env; no secrets in this file.
The private signing key is read from SIGNING_KEY_PATH at startup, never from env.
"""
import os
from dataclasses import dataclass, field

from sso_issuer.errors import ConfigurationError

# Issuer URL (public identifier, used as iss in ID tokens)
ISSUER = os.environ.get("SSO_ISSUER", "http://127.0.0.1:9000").rstrip("/")

PORT = int(os.environ.get("SSO_PORT", "9000"))

# JWS algorithm and key id for ID tokens
SIGNING_ALG = os.environ.get("SSO_SIGNING_ALG", "RS256")
SIGNING_KEY_ID = os.environ.get("SSO_SIGNING_KEY_ID", "idTokenRsaKey")

# RSA private key PEM; generate one with `python -m sso_issuer.keys`
SIGNING_KEY_PATH = os.environ.get("SSO_SIGNING_KEY_PATH", "certs/private.pem")

# Lifetimes (seconds)
AUTH_CODE_EXPIRES_IN = int(os.environ.get("SSO_AUTH_CODE_EXPIRES_IN", "900"))
ACCESS_TOKEN_EXPIRES_IN = int(os.environ.get("SSO_ACCESS_TOKEN_EXPIRES_IN", "900"))
ID_TOKEN_EXPIRES_IN = int(os.environ.get("SSO_ID_TOKEN_EXPIRES_IN", "900"))
CLIENT_CREDENTIALS_TTL = int(os.environ.get("SSO_CLIENT_CREDENTIALS_TTL", "900"))
AUTH_SETTING_TTL = int(os.environ.get("SSO_AUTH_SETTING_TTL", "900"))

# How often expired codes and access tokens are evicted from memory
SWEEP_INTERVAL = float(os.environ.get("SSO_SWEEP_INTERVAL", "60"))

# Expiring cache for client credentials and auth setting (SQLite file by default)
CACHE_URL = os.environ.get("SSO_CACHE_URL", "sqlite:///./sso_cache.db")

# App config (frontendPort, backendPort) merged with the auth setting by /publish-config
APP_CONFIG_PATH = os.environ.get("SSO_APP_CONFIG_PATH", "config.json")

SUPPORTED_RESPONSE_TYPES = ("code",)
SUPPORTED_SCOPES = ("openid",)

# Demo subject placed in every ID token; this issuer has no user store
SUBJECT_PROFILE = {
    "sub": os.environ.get("SSO_SUBJECT_SUB", "user-id-123"),
    "email": os.environ.get("SSO_SUBJECT_EMAIL", "john.doe@example.com"),
    "given_name": os.environ.get("SSO_SUBJECT_GIVEN_NAME", "John"),
    "family_name": os.environ.get("SSO_SUBJECT_FAMILY_NAME", "Doe"),
    "birthday": os.environ.get("SSO_SUBJECT_BIRTHDAY", "1970-01-01"),
    "preferred_username": os.environ.get("SSO_SUBJECT_PREFERRED_USERNAME", "john_doe_19700101"),
    "phone_number": os.environ.get("SSO_SUBJECT_PHONE_NUMBER", "+0000000000"),
}


@dataclass(frozen=True)
class IssuerSettings:
    """Read-only settings handed to the issuer core at construction."""

    issuer: str = ISSUER
    signing_alg: str = SIGNING_ALG
    signing_key_id: str = SIGNING_KEY_ID
    signing_key_path: str = SIGNING_KEY_PATH
    auth_code_expires_in: int = AUTH_CODE_EXPIRES_IN
    access_token_expires_in: int = ACCESS_TOKEN_EXPIRES_IN
    id_token_expires_in: int = ID_TOKEN_EXPIRES_IN
    client_credentials_ttl: int = CLIENT_CREDENTIALS_TTL
    auth_setting_ttl: int = AUTH_SETTING_TTL
    sweep_interval: float = SWEEP_INTERVAL
    cache_url: str = CACHE_URL
    app_config_path: str = APP_CONFIG_PATH
    subject_profile: dict = field(default_factory=lambda: dict(SUBJECT_PROFILE))

    def validate(self) -> "IssuerSettings":
        """Raise ConfigurationError if a lifetime or interval is not positive."""
        for name in (
            "auth_code_expires_in",
            "access_token_expires_in",
            "id_token_expires_in",
            "client_credentials_ttl",
            "auth_setting_ttl",
            "sweep_interval",
        ):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if not self.issuer:
            raise ConfigurationError("issuer is required")
        return self
