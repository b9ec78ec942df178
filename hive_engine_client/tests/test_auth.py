"""Test the bearer token issuer."""

from datetime import datetime, timezone

import jwt
import pytest

from ..auth import MAX_CLOCK_SKEW, TokenIssuer, mint_token, secret_bytes, verify_token
from ..connection import DEFAULT_JWT_SECRET
from ..errors import AuthorizationError, SigningError

NOW = 1_700_000_000


def test_token_carries_only_iat():
    """Minted tokens are HS256 signed and carry a single `iat` claim."""
    token = mint_token(DEFAULT_JWT_SECRET, NOW)
    assert jwt.get_unverified_header(token)["alg"] == "HS256"
    assert verify_token(token, DEFAULT_JWT_SECRET, now=NOW) == {"iat": NOW}


def test_datetime_iat():
    """A datetime is converted to its unix timestamp."""
    moment = datetime.fromtimestamp(NOW, tz=timezone.utc)
    token = mint_token(DEFAULT_JWT_SECRET, moment)
    assert verify_token(token, DEFAULT_JWT_SECRET, now=NOW)["iat"] == NOW


@pytest.mark.parametrize(
    "offset,accepted",
    [
        pytest.param(0, True, id="same_second"),
        pytest.param(MAX_CLOCK_SKEW, True, id="at_window_edge"),
        pytest.param(-MAX_CLOCK_SKEW, True, id="at_window_edge_past"),
        pytest.param(MAX_CLOCK_SKEW + 1, False, id="too_new"),
        pytest.param(-(MAX_CLOCK_SKEW + 5), False, id="too_old"),
    ],
)
def test_clock_skew_window(offset: int, accepted: bool):
    """Tokens are only accepted within the skew window of the verifier's clock."""
    token = mint_token(DEFAULT_JWT_SECRET, NOW + offset)
    if accepted:
        verify_token(token, DEFAULT_JWT_SECRET, now=NOW)
    else:
        with pytest.raises(AuthorizationError):
            verify_token(token, DEFAULT_JWT_SECRET, now=NOW)


def test_wrong_secret_rejected():
    """A token signed with another secret does not verify."""
    token = mint_token(b"another-secret-another-secret-an", NOW)
    with pytest.raises(AuthorizationError):
        verify_token(token, DEFAULT_JWT_SECRET, now=NOW)


def test_token_without_iat_rejected():
    """A validly signed token without `iat` does not verify."""
    token = jwt.encode({"sub": "hive"}, DEFAULT_JWT_SECRET, algorithm="HS256")
    with pytest.raises(AuthorizationError):
        verify_token(token, DEFAULT_JWT_SECRET, now=NOW)


@pytest.mark.parametrize(
    "secret",
    [
        pytest.param(b"", id="empty_bytes"),
        pytest.param("", id="empty_str"),
        pytest.param("0xzz", id="bad_hex"),
        pytest.param(1234, id="not_bytes"),
    ],
)
def test_unusable_secret(secret):
    """Unusable secrets raise a signing error instead of producing a token."""
    with pytest.raises(SigningError):
        mint_token(secret, NOW)


def test_hex_secret():
    """Hex encoded secrets sign the same tokens as their raw bytes."""
    hex_secret = "0x" + DEFAULT_JWT_SECRET.hex()
    assert secret_bytes(hex_secret) == DEFAULT_JWT_SECRET
    assert mint_token(hex_secret, NOW) == mint_token(DEFAULT_JWT_SECRET, NOW)


def test_issuer_mints_fresh_tokens():
    """The issuer signs the current time and formats a bearer header."""
    issuer = TokenIssuer(DEFAULT_JWT_SECRET)
    header = issuer.authorization_header()
    scheme, token = header["Authorization"].split(" ")
    assert scheme == "Bearer"
    verify_token(token, DEFAULT_JWT_SECRET)
    assert issuer.mint(iat=NOW) == mint_token(DEFAULT_JWT_SECRET, NOW)


def test_issuer_validates_on_mint():
    """An issuer with an empty secret can be created, minting with it fails."""
    issuer = TokenIssuer(b"")
    with pytest.raises(SigningError):
        issuer.authorization_header()
