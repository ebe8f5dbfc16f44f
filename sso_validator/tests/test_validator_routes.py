"""Tests for the validator routes (authorize + token call, ID token validation)."""
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import httpx
from fastapi.testclient import TestClient

from sso_validator import main as validator_main
from sso_validator.main import app
from sso_validator.verify import verify_id_token

client = TestClient(app)

ISSUER = "https://issuer.test"
AUDIENCE = "client-abc"


class MockResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body if body is not None else {}
        self.headers = {"content-type": "application/json"}
        self.text = str(self._body)

    def json(self):
        return self._body


def _echo_authorize(url, params=None, timeout=None):
    redirect = f"{params['redirect_uri']}?code=CODE12345&state={params['state']}"
    return MockResponse(200, {"redirectUrl": redirect})


def _configured():
    return (
        patch("sso_validator.main.CLIENT_ID", AUDIENCE),
        patch("sso_validator.main.CLIENT_SECRET", "s3cret"),
    )


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("service") == "sso_validator"


def test_call_without_client_credentials():
    with patch("sso_validator.main.CLIENT_ID", ""):
        r = client.get("/auth-validator/call-authorize-and-token")
    assert "message" in r.json()


def test_call_authorize_and_token_success():
    token_body = {"access_token": "at", "token_type": "Bearer", "id_token": "idt", "expires_in": 900}
    id_patch, secret_patch = _configured()
    with id_patch, secret_patch, patch("sso_validator.main.httpx.get", side_effect=_echo_authorize) as mock_get, patch(
        "sso_validator.main.httpx.post", return_value=MockResponse(200, token_body)
    ) as mock_post:
        r = client.get("/auth-validator/call-authorize-and-token")

    assert r.status_code == 200
    assert r.json() == token_body
    assert validator_main.get_token_response() == token_body

    params = mock_get.call_args.kwargs["params"]
    assert params["response_type"] == "code"
    assert params["scope"] == "openid"
    assert params["client_id"] == AUDIENCE
    assert mock_post.call_args.kwargs["json"] == {"code": "CODE12345"}
    assert mock_post.call_args.kwargs["auth"] == (AUDIENCE, "s3cret")


def test_state_mismatch_stops_flow():
    def _wrong_state(url, params=None, timeout=None):
        return MockResponse(200, {"redirectUrl": f"{params['redirect_uri']}?code=C&state=forged"})

    id_patch, secret_patch = _configured()
    with id_patch, secret_patch, patch("sso_validator.main.httpx.get", side_effect=_wrong_state), patch(
        "sso_validator.main.httpx.post"
    ) as mock_post:
        r = client.get("/auth-validator/call-authorize-and-token")

    assert r.json() == {"message": "State mismatch - CSRF validation failed"}
    mock_post.assert_not_called()
    assert validator_main.get_token_response() is None


def test_missing_code_in_redirect():
    def _no_code(url, params=None, timeout=None):
        return MockResponse(200, {"redirectUrl": f"{params['redirect_uri']}?state={params['state']}"})

    id_patch, secret_patch = _configured()
    with id_patch, secret_patch, patch("sso_validator.main.httpx.get", side_effect=_no_code):
        r = client.get("/auth-validator/call-authorize-and-token")
    assert "Missing authorization code" in r.json()["message"]


def test_issuer_error_is_passed_through():
    error = {"detail": {"error": "invalid_client", "error_description": "Invalid client_id"}}
    id_patch, secret_patch = _configured()
    with id_patch, secret_patch, patch("sso_validator.main.httpx.get", return_value=MockResponse(400, error)):
        r = client.get("/auth-validator/call-authorize-and-token")
    assert r.json() == error


def test_token_error_is_passed_through():
    error = {"detail": {"error": "invalid_grant", "error_description": "Invalid or expired authorization code"}}
    id_patch, secret_patch = _configured()
    with id_patch, secret_patch, patch("sso_validator.main.httpx.get", side_effect=_echo_authorize), patch(
        "sso_validator.main.httpx.post", return_value=MockResponse(400, error)
    ):
        r = client.get("/auth-validator/call-authorize-and-token")
    assert r.json() == error
    assert validator_main.get_token_response() is None


def test_issuer_unreachable():
    id_patch, secret_patch = _configured()
    with id_patch, secret_patch, patch(
        "sso_validator.main.httpx.get", side_effect=httpx.ConnectError("connection refused")
    ):
        r = client.get("/auth-validator/call-authorize-and-token")
    assert "/authorize request failed" in r.json()["message"]


def test_validate_without_token():
    r = client.get("/auth-validator/validate-id-token")
    assert r.json()["isValid"] is False
    assert "id_token not found" in r.json()["error"]


def _verify_with(jwk):
    def _verify(id_token, jwks_uri, issuer, audience):
        return verify_id_token(id_token, jwk, issuer=issuer, audience=audience)

    return _verify


def test_validate_stored_token(public_jwk, make_id_token):
    validator_main._token_response = {"id_token": make_id_token()}
    with patch("sso_validator.main.CLIENT_ID", AUDIENCE), patch(
        "sso_validator.main.EXPECTED_ISSUER", ISSUER
    ), patch("sso_validator.main.verify_id_token_from_jwks", side_effect=_verify_with(public_jwk)) as mock_verify:
        r = client.get("/auth-validator/validate-id-token")

    data = r.json()
    assert data["isValid"] is True
    assert data["payload"]["sub"] == "user-id-123"
    assert mock_verify.call_args.args[1].endswith("/.well-known/jwks.json")


def test_validate_token_for_other_audience(public_jwk, make_id_token):
    validator_main._token_response = {"id_token": make_id_token(aud="another-client")}
    with patch("sso_validator.main.CLIENT_ID", AUDIENCE), patch(
        "sso_validator.main.EXPECTED_ISSUER", ISSUER
    ), patch("sso_validator.main.verify_id_token_from_jwks", side_effect=_verify_with(public_jwk)):
        r = client.get("/auth-validator/validate-id-token")

    assert r.json() == {"isValid": False, "error": "Invalid audience"}
