"""Tests for the digest authentication exchange."""

from unittest.mock import patch

import httpx
import pytest
from envoy_stats import digest
from envoy_stats.digest import DigestChallenge
from envoy_stats.errors import DigestAuthError

ENVOY_CHALLENGE = 'Digest realm="enphaseenergy.com", qop="auth", nonce="abc123"'
INVERTERS_URL = "http://envoy.local/api/v1/production/inverters"


def test_compute_response_matches_rfc2617_example():
    """The worked example from RFC 2617 section 3.5."""
    challenge = DigestChallenge(
        realm="testrealm@host.com",
        nonce="dcd98b7102dd2f0e8b11d0f600bfb0c093",
        qop="auth",
        opaque="5ccc069c403ebaf9f0171e9517f40e41",
    )

    response = digest.compute_response(
        challenge,
        "Mufasa",
        "Circle Of Life",
        "GET",
        "/dir/index.html",
        nc="00000001",
        cnonce="0a4f113b",
    )

    assert response == "6629fae49393a05397450978507c4ef1"


def test_compute_response_without_qop():
    challenge = DigestChallenge(
        realm="testrealm@host.com", nonce="dcd98b7102dd2f0e8b11d0f600bfb0c093"
    )

    response = digest.compute_response(
        challenge, "Mufasa", "Circle Of Life", "GET", "/dir/index.html"
    )

    assert response == "670fd8c2df070c60b045671b8b24ff02"


def test_parse_challenge():
    challenge = digest.parse_challenge(
        'Digest realm="enphaseenergy.com", qop="auth,auth-int", nonce="abc123", opaque="xyz"'
    )

    assert challenge.realm == "enphaseenergy.com"
    assert challenge.nonce == "abc123"
    assert challenge.qop == "auth"
    assert challenge.algorithm == "MD5"
    assert challenge.opaque == "xyz"


@pytest.mark.parametrize(
    "header, match",
    [
        (None, "no WWW-Authenticate"),
        ('Basic realm="envoy"', "unsupported auth scheme"),
        ('Digest qop="auth", nonce="abc"', "missing 'realm'"),
        ('Digest realm="envoy", algorithm=SHA-512-256, nonce="abc"', "unsupported digest algorithm"),
        ('Digest realm="envoy", qop="auth-int", nonce="abc"', "unsupported qop"),
    ],
)
def test_parse_challenge_errors(header, match):
    with pytest.raises(DigestAuthError, match=match) as excinfo:
        digest.parse_challenge(header)
    assert excinfo.value.phase == "challenge"


def test_build_authorization_includes_qop_fields():
    challenge = digest.parse_challenge(ENVOY_CHALLENGE)

    header = digest.build_authorization(
        challenge, "envoy", "123456", "GET", "/api/v1/production/inverters", cnonce="feedface"
    )

    assert header.startswith("Digest ")
    assert 'username="envoy"' in header
    assert 'uri="/api/v1/production/inverters"' in header
    assert 'response="7f32f6e8cf13073b632a1606a1958012"' in header
    assert "qop=auth" in header
    assert "nc=00000001" in header
    assert 'cnonce="feedface"' in header


def test_digest_get_two_phase_exchange():
    """The probe is challenged and the retry carries the computed digest."""
    seen = []

    def handler(request):
        seen.append(request.headers.get("Authorization"))
        if "Authorization" not in request.headers:
            return httpx.Response(401, headers={"WWW-Authenticate": ENVOY_CHALLENGE})
        return httpx.Response(200, json=[])

    with patch("envoy_stats.digest.os.urandom", return_value=bytes.fromhex("feedface")):
        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            response = digest.digest_get(client, INVERTERS_URL, "envoy", "123456")

    assert response.status_code == 200
    assert seen[0] is None
    assert 'response="7f32f6e8cf13073b632a1606a1958012"' in seen[1]


def test_digest_get_without_challenge_returns_probe():
    def handler(request):
        return httpx.Response(200, json=[])

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        response = digest.digest_get(client, INVERTERS_URL, "envoy", "123456")

    assert response.status_code == 200


def test_digest_get_rejected_credentials():
    def handler(request):
        return httpx.Response(401, headers={"WWW-Authenticate": ENVOY_CHALLENGE})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(DigestAuthError, match="rejected") as excinfo:
            digest.digest_get(client, INVERTERS_URL, "envoy", "wrong")

    assert excinfo.value.phase == "authenticate"


def test_digest_get_probe_network_error():
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(DigestAuthError) as excinfo:
            digest.digest_get(client, INVERTERS_URL, "envoy", "123456")

    assert excinfo.value.phase == "probe"
    assert excinfo.value.step == "digest.probe"
