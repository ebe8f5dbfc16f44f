"""
Validator configuration. The client pair comes from POST /client on the issuer.
"""
import os

# Issuer base URL (where /authorize, /token and JWKS are called)
ISSUER_URL = os.environ.get("SSO_ISSUER_URL", "http://127.0.0.1:9000").rstrip("/")

# Expected iss claim in ID tokens
EXPECTED_ISSUER = os.environ.get("SSO_EXPECTED_ISSUER", ISSUER_URL).rstrip("/")

CLIENT_ID = os.environ.get("SSO_CLIENT_ID", "")
CLIENT_SECRET = os.environ.get("SSO_CLIENT_SECRET", "")

REDIRECT_URI = os.environ.get("SSO_REDIRECT_URI", "http://127.0.0.1:8000/callback")

SCOPE = "openid"

PORT = int(os.environ.get("SSO_VALIDATOR_PORT", "8000"))

HTTP_TIMEOUT = float(os.environ.get("SSO_VALIDATOR_HTTP_TIMEOUT", "10"))
