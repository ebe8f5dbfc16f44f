"""
Token endpoint (POST /token). Authorization code exchange only; no refresh tokens.
"""
import logging

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel

from sso_issuer.client_auth import require_client_auth
from sso_issuer.errors import (
    AUTH_CODE_MISSING,
    INVALID_GRANT,
    INVALID_OR_EXPIRED_CODE,
    INVALID_REQUEST,
    SERVER_ERROR,
    SigningError,
    oauth_error,
)
from sso_issuer.issuer import Issuer, get_issuer

logger = logging.getLogger(__name__)
router = APIRouter()


class TokenRequest(BaseModel):
    code: str | None = None


@router.post("/token")
def token(
    body: TokenRequest | None = None,
    authorization: str | None = Header(None),
    issuer: Issuer = Depends(get_issuer),
):
    """
    Exchange an authorization code for an access token and an ID token.
    The client authenticates with HTTP Basic; the code must have been issued to it.
    """
    code = body.code if body else None
    if not code:
        raise HTTPException(status_code=400, detail=oauth_error(INVALID_REQUEST, AUTH_CODE_MISSING))

    client_id = require_client_auth(issuer.clients, authorization)

    # Consumes the code even when it belongs to another client
    record = issuer.codes.validate_code(code)
    if record is None or record.client_id != client_id:
        logger.warning("Token exchange rejected for client_id=%s", client_id)
        raise HTTPException(status_code=400, detail=oauth_error(INVALID_GRANT, INVALID_OR_EXPIRED_CODE))

    # Sign first: no access token is registered for a response that fails
    try:
        id_token = issuer.id_tokens.sign_id_token(issuer.identity_claims_for(client_id))
    except SigningError:
        logger.exception("ID token signing failed for client_id=%s", client_id)
        raise HTTPException(status_code=500, detail=oauth_error(SERVER_ERROR))
    access = issuer.tokens.issue_token(client_id)

    logger.info("Tokens issued for client_id=%s", client_id)
    return {
        "access_token": access.access_token,
        "token_type": "Bearer",
        "id_token": id_token,
        "expires_in": issuer.settings.access_token_expires_in,
    }
