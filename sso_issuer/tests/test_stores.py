"""Tests for the authorization code and access token stores."""
import threading

import pytest

from sso_issuer.stores import (
    ALPHABET,
    AccessTokenStore,
    AuthorizationCodeStore,
    random_string,
)


@pytest.fixture
def codes(clock):
    return AuthorizationCodeStore(expires_in=300, clock=clock)


@pytest.fixture
def tokens(clock):
    return AccessTokenStore(expires_in=600, clock=clock)


def test_random_string_uses_alphabet():
    value = random_string(200)
    assert len(value) == 200
    assert set(value) <= set(ALPHABET)


def test_issue_code_shape_and_record(codes, clock):
    code = codes.issue_code("c1", "https://a/cb", "code", "openid")
    assert len(code) == 9
    assert set(code) <= set(ALPHABET)
    assert code in codes
    record = codes.validate_code(code)
    assert record.client_id == "c1"
    assert record.redirect_uri == "https://a/cb"
    assert record.response_type == "code"
    assert record.scope == "openid"
    assert record.created_at == clock.now
    assert record.expires_at == clock.now + 300 * 1000


def test_issue_code_requires_parameters(codes):
    with pytest.raises(ValueError):
        codes.issue_code("", "https://a/cb", "code", "openid")
    with pytest.raises(ValueError):
        codes.issue_code("c1", "", "code", "openid")


def test_code_is_single_use(codes):
    code = codes.issue_code("c1", "https://a/cb", "code", "openid")
    assert codes.validate_code(code) is not None
    assert codes.validate_code(code) is None
    assert code not in codes


def test_unknown_code(codes):
    assert codes.validate_code("nope") is None


def test_code_expired_on_first_use(codes, clock):
    code = codes.issue_code("c1", "https://a/cb", "code", "openid")
    clock.advance(301)
    assert codes.validate_code(code) is None
    # Expired codes are removed, not left behind
    assert code not in codes


def test_code_valid_at_exact_expiry(codes, clock):
    code = codes.issue_code("c1", "https://a/cb", "code", "openid")
    clock.advance(300)
    assert codes.validate_code(code) is not None


def test_code_returned_regardless_of_presented_client(codes):
    # Cross-field binding is the token endpoint's job
    code = codes.issue_code("c1", "https://a/cb", "code", "openid")
    assert codes.validate_code(code).client_id == "c1"


def test_concurrent_validation_yields_one_record(codes):
    code = codes.issue_code("c1", "https://a/cb", "code", "openid")
    results = []
    barrier = threading.Barrier(16)

    def redeem():
        barrier.wait()
        results.append(codes.validate_code(code))

    threads = [threading.Thread(target=redeem) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sum(1 for r in results if r is not None) == 1


def test_issue_token_shape(tokens, clock):
    record = tokens.issue_token("c1")
    assert len(record.access_token) == 28
    assert set(record.access_token) <= set(ALPHABET)
    assert record.client_id == "c1"
    assert record.expires_at == clock.now + 600 * 1000


def test_token_validation_is_repeatable(tokens):
    record = tokens.issue_token("c1")
    assert tokens.validate_token(record.access_token).client_id == "c1"
    assert tokens.validate_token(record.access_token).client_id == "c1"
    assert len(tokens) == 1


def test_token_expires(tokens, clock):
    record = tokens.issue_token("c1")
    clock.advance(601)
    assert tokens.validate_token(record.access_token) is None
    assert len(tokens) == 0


def test_unknown_token(tokens):
    assert tokens.validate_token("missing") is None


def test_purge_expired_removes_only_expired(codes, clock):
    old = codes.issue_code("c1", "https://a/cb", "code", "openid")
    clock.advance(200)
    fresh = codes.issue_code("c1", "https://a/cb", "code", "openid")
    clock.advance(100)
    # old.expires_at == now: purged (<=), fresh still has 200s left
    assert codes.purge_expired() == 1
    assert old not in codes
    assert fresh in codes
