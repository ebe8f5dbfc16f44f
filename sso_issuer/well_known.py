"""
Well-known endpoints: JWKS and OpenID Connect discovery.
"""
from fastapi import APIRouter, Depends

from sso_issuer.config import SUPPORTED_RESPONSE_TYPES, SUPPORTED_SCOPES
from sso_issuer.issuer import Issuer, get_issuer
from sso_issuer.keys import get_jwks

router = APIRouter()


@router.get("/.well-known/jwks.json")
def jwks_json(issuer: Issuer = Depends(get_issuer)):
    """JSON Web Key Set for ID token signature verification."""
    return get_jwks(issuer.signing)


@router.get("/.well-known/openid-configuration")
def openid_configuration(issuer: Issuer = Depends(get_issuer)):
    """OpenID Connect discovery document."""
    base = issuer.settings.issuer
    return {
        "issuer": base,
        "authorization_endpoint": f"{base}/authorize",
        "token_endpoint": f"{base}/token",
        "jwks_uri": f"{base}/.well-known/jwks.json",
        "response_types_supported": list(SUPPORTED_RESPONSE_TYPES),
        "scopes_supported": list(SUPPORTED_SCOPES),
        "subject_types_supported": ["public"],
        "id_token_signing_alg_values_supported": [issuer.signing.algorithm],
        "token_endpoint_auth_methods_supported": ["client_secret_basic"],
        "grant_types_supported": ["authorization_code"],
    }
