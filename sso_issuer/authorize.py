"""
Authorization endpoint (GET|POST /authorize).
Validates the request and the client, issues a one-time code and returns the
redirect URL as JSON (the caller follows it).
"""
import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fastapi import APIRouter, Depends, HTTPException

from sso_issuer.auth_setting import is_http_url
from sso_issuer.config import SUPPORTED_RESPONSE_TYPES, SUPPORTED_SCOPES
from sso_issuer.errors import (
    INVALID_CLIENT,
    INVALID_CLIENT_DESC,
    INVALID_REDIRECT_URI,
    INVALID_REQUEST,
    INVALID_SCOPE,
    MISSING_REQUIRED_PARAMS,
    UNSUPPORTED_RESPONSE_TYPE,
    UNSUPPORTED_RESPONSE_TYPE_DESC,
    UNSUPPORTED_SCOPE_DESC,
    oauth_error,
)
from sso_issuer.issuer import Issuer, get_issuer

logger = logging.getLogger(__name__)
router = APIRouter()


def build_redirect_url(redirect_uri: str, code: str, state: str | None) -> str:
    """Append code (and state, if given) to redirect_uri, keeping its existing query."""
    parts = urlsplit(redirect_uri)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.append(("code", code))
    if state:
        query.append(("state", state))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


@router.api_route("/authorize", methods=["GET", "POST"])
def authorize(
    client_id: str | None = None,
    response_type: str | None = None,
    scope: str | None = None,
    redirect_uri: str | None = None,
    state: str | None = None,
    issuer: Issuer = Depends(get_issuer),
):
    """
    Authorization Code request. Parameters come from the query string for both methods.
    Returns {"redirectUrl": "<redirect_uri>?code=...&state=..."}.
    """
    if not client_id or not redirect_uri or not response_type:
        raise HTTPException(status_code=400, detail=oauth_error(INVALID_REQUEST, MISSING_REQUIRED_PARAMS))
    if response_type not in SUPPORTED_RESPONSE_TYPES:
        raise HTTPException(
            status_code=400,
            detail=oauth_error(UNSUPPORTED_RESPONSE_TYPE, UNSUPPORTED_RESPONSE_TYPE_DESC),
        )
    if scope not in SUPPORTED_SCOPES:
        raise HTTPException(status_code=400, detail=oauth_error(INVALID_SCOPE, UNSUPPORTED_SCOPE_DESC))
    if not is_http_url(redirect_uri):
        raise HTTPException(status_code=400, detail=oauth_error(INVALID_REQUEST, INVALID_REDIRECT_URI))

    if not issuer.clients.validate_credentials(client_id):
        logger.warning("Authorize rejected: unknown client_id=%s", client_id)
        raise HTTPException(status_code=400, detail=oauth_error(INVALID_CLIENT, INVALID_CLIENT_DESC))

    code = issuer.codes.issue_code(
        client_id=client_id,
        redirect_uri=redirect_uri,
        response_type=response_type,
        scope=scope,
    )
    logger.info("Authorization code issued for client_id=%s", client_id)
    return {"redirectUrl": build_redirect_url(redirect_uri, code, state)}
