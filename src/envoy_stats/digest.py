"""HTTP digest authentication (RFC 2617) for the gateway's inverter API.

The exchange is done in the open rather than through a transport hook so each
phase can fail on its own:

1. probe: plain GET, expected to be answered with a 401 challenge
2. challenge: parse realm, nonce, algorithm and qop from WWW-Authenticate
3. authenticate: repeat the GET with a computed Authorization header
"""

import hashlib
import logging
import os
import urllib.request
from dataclasses import dataclass

import httpx

from .errors import DigestAuthError

logger = logging.getLogger(__name__)

_HASHES = {
    "MD5": hashlib.md5,
    "SHA-256": hashlib.sha256,
}


@dataclass(frozen=True)
class DigestChallenge:
    """Parameters of a WWW-Authenticate: Digest challenge."""

    realm: str
    nonce: str
    algorithm: str = "MD5"
    qop: str | None = None
    opaque: str | None = None

    @property
    def is_session(self) -> bool:
        return self.algorithm.upper().endswith("-SESS")


def parse_challenge(header: str | None) -> DigestChallenge:
    """Parse a WWW-Authenticate header value into a DigestChallenge."""
    if not header:
        raise DigestAuthError("challenge", "401 response has no WWW-Authenticate header")

    scheme, _, params = header.strip().partition(" ")
    if scheme.lower() != "digest":
        raise DigestAuthError("challenge", f"unsupported auth scheme {scheme!r}")

    try:
        fields = urllib.request.parse_keqv_list(urllib.request.parse_http_list(params))
    except (ValueError, IndexError) as e:
        raise DigestAuthError("challenge", f"malformed challenge {header!r}") from e
    fields = {key.lower(): value for key, value in fields.items()}

    for required in ("realm", "nonce"):
        if required not in fields:
            raise DigestAuthError("challenge", f"challenge is missing {required!r}")

    algorithm = fields.get("algorithm", "MD5")
    if algorithm.upper().removesuffix("-SESS") not in _HASHES:
        raise DigestAuthError("challenge", f"unsupported digest algorithm {algorithm!r}")

    qop = None
    if "qop" in fields:
        offered = [option.strip().lower() for option in fields["qop"].split(",")]
        if "auth" not in offered:
            raise DigestAuthError("challenge", f"unsupported qop {fields['qop']!r}")
        qop = "auth"

    return DigestChallenge(
        realm=fields["realm"],
        nonce=fields["nonce"],
        algorithm=algorithm,
        qop=qop,
        opaque=fields.get("opaque"),
    )


def _hash(challenge: DigestChallenge, data: str) -> str:
    algorithm = challenge.algorithm.upper().removesuffix("-SESS")
    return _HASHES[algorithm](data.encode("utf-8")).hexdigest()


def compute_response(
    challenge: DigestChallenge,
    username: str,
    password: str,
    method: str,
    uri: str,
    nc: str = "00000001",
    cnonce: str = "",
) -> str:
    """Compute the request-digest for a challenge (RFC 2617 section 3.2.2.1)."""
    ha1 = _hash(challenge, f"{username}:{challenge.realm}:{password}")
    if challenge.is_session:
        ha1 = _hash(challenge, f"{ha1}:{challenge.nonce}:{cnonce}")
    ha2 = _hash(challenge, f"{method}:{uri}")

    if challenge.qop:
        return _hash(challenge, f"{ha1}:{challenge.nonce}:{nc}:{cnonce}:{challenge.qop}:{ha2}")
    # RFC 2069 compatibility
    return _hash(challenge, f"{ha1}:{challenge.nonce}:{ha2}")


def build_authorization(
    challenge: DigestChallenge,
    username: str,
    password: str,
    method: str,
    uri: str,
    cnonce: str | None = None,
) -> str:
    """Build the Authorization header value answering a challenge."""
    nc = "00000001"
    if cnonce is None:
        cnonce = os.urandom(8).hex()
    response = compute_response(challenge, username, password, method, uri, nc, cnonce)

    parts = [
        f'username="{username}"',
        f'realm="{challenge.realm}"',
        f'nonce="{challenge.nonce}"',
        f'uri="{uri}"',
        f"algorithm={challenge.algorithm}",
        f'response="{response}"',
    ]
    if challenge.opaque is not None:
        parts.append(f'opaque="{challenge.opaque}"')
    if challenge.qop:
        parts.extend([f"qop={challenge.qop}", f"nc={nc}", f'cnonce="{cnonce}"'])
    return "Digest " + ", ".join(parts)


def digest_get(client: httpx.Client, url: str, username: str, password: str) -> httpx.Response:
    """GET a URL protected by digest authentication.

    A gateway that answers the probe without a 401 is returned as-is.
    """
    try:
        probe = client.get(url)
    except httpx.HTTPError as e:
        raise DigestAuthError("probe", f"request to {url} failed: {e}") from e

    if probe.status_code != 401:
        logger.debug("Probe of %s answered %d without a challenge", url, probe.status_code)
        return probe

    challenge = parse_challenge(probe.headers.get("WWW-Authenticate"))
    logger.debug(
        "Digest challenge realm=%s algorithm=%s qop=%s",
        challenge.realm,
        challenge.algorithm,
        challenge.qop,
    )

    uri = probe.request.url.raw_path.decode("ascii")
    headers = {"Authorization": build_authorization(challenge, username, password, "GET", uri)}
    try:
        response = client.get(url, headers=headers)
    except httpx.HTTPError as e:
        raise DigestAuthError("authenticate", f"request to {url} failed: {e}") from e

    if response.status_code == 401:
        raise DigestAuthError("authenticate", f"credentials for {username!r} were rejected")
    return response
