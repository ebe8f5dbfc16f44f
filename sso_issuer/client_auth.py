"""
Client authentication at the token endpoint (RFC 6749 §2.3.1).
Credentials arrive as Authorization: Basic base64(client_id:client_secret).
"""
import base64
import binascii
import logging

from fastapi import HTTPException

from sso_issuer.clients import ClientCredentialManager
from sso_issuer.errors import (
    AUTH_CREDENTIALS_MISSING,
    AUTHORIZATION_HEADER_MISSING,
    INVALID_CLIENT,
    INVALID_CLIENT_CREDENTIALS,
    INVALID_REQUEST,
    oauth_error,
)

logger = logging.getLogger(__name__)

_BASIC_CHALLENGE = {"WWW-Authenticate": "Basic"}


def is_basic(header_value: str | None) -> bool:
    return bool(header_value) and header_value.strip().lower().startswith("basic ")


def parse_basic(header_value: str) -> tuple[str, str] | None:
    """Parse 'Basic <base64(client_id:client_secret)>'. Returns (client_id, client_secret) or None."""
    if not is_basic(header_value):
        return None
    encoded = header_value.strip()[6:].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    if ":" not in decoded:
        return None
    client_id, _, client_secret = decoded.partition(":")
    return client_id, client_secret


def require_client_auth(clients: ClientCredentialManager, authorization: str | None) -> str:
    """
    Authenticate the client from the Authorization header. Raises 401 when the header
    is missing, malformed, or the credentials do not match. Returns the client_id.
    """
    if not is_basic(authorization):
        raise HTTPException(
            status_code=401,
            detail=oauth_error(INVALID_REQUEST, AUTHORIZATION_HEADER_MISSING),
            headers=_BASIC_CHALLENGE,
        )
    parsed = parse_basic(authorization)
    if parsed is None or not parsed[0] or not parsed[1]:
        raise HTTPException(
            status_code=401,
            detail=oauth_error(INVALID_CLIENT, AUTH_CREDENTIALS_MISSING),
            headers=_BASIC_CHALLENGE,
        )
    client_id, client_secret = parsed
    if not clients.validate_credentials(client_id, client_secret):
        logger.warning("Client authentication failed for client_id=%s", client_id)
        raise HTTPException(
            status_code=401,
            detail=oauth_error(INVALID_CLIENT, INVALID_CLIENT_CREDENTIALS),
            headers=_BASIC_CHALLENGE,
        )
    return client_id
