"""
Issuer errors and the stable OAuth error codes returned by the request layer.
Expected absence (unknown client, invalid code) is None/False, never an exception.
"""

# OAuth error codes (RFC 6749 §4.1.2.1, §5.2)
INVALID_REQUEST = "invalid_request"
INVALID_CLIENT = "invalid_client"
INVALID_GRANT = "invalid_grant"
INVALID_SCOPE = "invalid_scope"
UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"
SERVER_ERROR = "server_error"

# Human-readable descriptions; never include why a code was rejected
MISSING_REQUIRED_PARAMS = "Required parameters are missing: client_id, redirect_uri or response_type"
UNSUPPORTED_RESPONSE_TYPE_DESC = 'Unsupported response_type, response_type must be "code"'
UNSUPPORTED_SCOPE_DESC = 'Unsupported scope, scope must be "openid"'
INVALID_REDIRECT_URI = "redirect_uri must be an absolute http(s) URL"
INVALID_CLIENT_DESC = "Authentication failed: invalid client_id or unauthenticated client"
AUTH_CODE_MISSING = "Missing authorization code"
AUTHORIZATION_HEADER_MISSING = "Required Authorization header is missing"
AUTH_CREDENTIALS_MISSING = "Required Authorization header credentials are missing"
INVALID_CLIENT_CREDENTIALS = "Invalid client credentials"
INVALID_OR_EXPIRED_CODE = "Authentication failed: invalid or expired authorization code"


class IssuerError(Exception):
    """Server-side fault: a broken deployment, not bad input. Never retried."""


class ConfigurationError(IssuerError):
    """Missing or malformed signing key, unsupported algorithm, invalid settings."""


class SigningError(IssuerError):
    """The JWT signer rejected the key material or algorithm."""


def oauth_error(error: str, description: str | None = None) -> dict:
    """Build the detail body used by HTTPException in the endpoint modules."""
    detail = {"error": error}
    if description:
        detail["error_description"] = description
    return detail
