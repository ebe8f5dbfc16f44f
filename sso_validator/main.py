"""
Auth validator: plays the relying party against the issuer.
Calls /authorize then /token with the configured client, keeps the token response,
and verifies the ID token against the issuer's JWKS. Port 8000 by default.
"""
import logging
import secrets
from urllib.parse import parse_qs, urlsplit

import httpx
from fastapi import FastAPI

from sso_validator.config import (
    CLIENT_ID,
    CLIENT_SECRET,
    EXPECTED_ISSUER,
    HTTP_TIMEOUT,
    ISSUER_URL,
    PORT,
    REDIRECT_URI,
    SCOPE,
)
from sso_validator.verify import IdTokenVerificationError, verify_id_token_from_jwks

logger = logging.getLogger(__name__)

app = FastAPI(title="SSO Auth Validator", version="1.0.0")

# Last successful token response; single slot, lab use
_token_response: dict | None = None


def get_token_response() -> dict | None:
    return _token_response


def clear_token_response() -> None:
    global _token_response
    _token_response = None


def _error_body(r: httpx.Response) -> dict:
    """Issuer error passed back as-is when it is JSON."""
    if r.headers.get("content-type", "").startswith("application/json"):
        body = r.json()
        if isinstance(body, dict):
            return body
    return {"message": r.text or f"HTTP {r.status_code}"}


def _first(params: dict[str, list[str]], name: str) -> str | None:
    values = params.get(name)
    return values[0] if values else None


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "sso_validator"}


@app.get("/auth-validator/call-authorize-and-token")
def call_authorize_and_token():
    """Run the authorization code flow end to end and return the token response."""
    global _token_response
    if not CLIENT_ID or not CLIENT_SECRET:
        return {"message": "SSO_CLIENT_ID and SSO_CLIENT_SECRET must be set"}

    state = secrets.token_urlsafe(16)
    params = {
        "client_id": CLIENT_ID,
        "redirect_uri": REDIRECT_URI,
        "response_type": "code",
        "scope": SCOPE,
        "state": state,
    }
    try:
        r = httpx.get(f"{ISSUER_URL}/authorize", params=params, timeout=HTTP_TIMEOUT)
    except httpx.HTTPError as e:
        logger.error("/authorize request failed: %s", e)
        return {"message": f"/authorize request failed: {e}"}
    if r.status_code != 200:
        return _error_body(r)

    redirect_url = r.json().get("redirectUrl")
    if not redirect_url:
        return {"message": "Issuer did not return redirectUrl"}
    query = parse_qs(urlsplit(redirect_url).query)
    code = _first(query, "code")
    if not code:
        return {"message": '"/authorize" - Missing authorization code in redirectUrl'}
    if _first(query, "state") != state:
        logger.warning("State mismatch in /authorize response")
        return {"message": "State mismatch - CSRF validation failed"}

    try:
        r = httpx.post(
            f"{ISSUER_URL}/token",
            json={"code": code},
            auth=(CLIENT_ID, CLIENT_SECRET),
            headers={"Accept": "application/json"},
            timeout=HTTP_TIMEOUT,
        )
    except httpx.HTTPError as e:
        logger.error("/token request failed: %s", e)
        return {"message": f"/token request failed: {e}"}
    if r.status_code != 200:
        return _error_body(r)

    _token_response = r.json()
    logger.info("Token exchange succeeded for client_id=%s", CLIENT_ID)
    return _token_response


@app.get("/auth-validator/validate-id-token")
def validate_id_token():
    """Verify the stored ID token (signature, iss, aud, exp)."""
    tokens = get_token_response()
    if not tokens or not tokens.get("id_token"):
        return {
            "isValid": False,
            "error": 'id_token not found. Call "/auth-validator/call-authorize-and-token" first',
        }
    try:
        payload = verify_id_token_from_jwks(
            tokens["id_token"],
            f"{ISSUER_URL}/.well-known/jwks.json",
            issuer=EXPECTED_ISSUER,
            audience=CLIENT_ID,
        )
    except IdTokenVerificationError as e:
        logger.warning("ID token validation failed: %s", e)
        return {"isValid": False, "error": str(e)}
    return {"isValid": True, "payload": payload}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "sso_validator.main:app",
        host="127.0.0.1",
        port=PORT,
        reload=True,
    )
