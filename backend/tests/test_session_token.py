import json
import time

import pytest

from storefront_admin.exceptions import ExpiredSessionError, MalformedTokenError
from storefront_admin.schemas.auth import SessionPayload
from storefront_admin.utils.session_token import (
    decode_payload,
    encode_payload,
    issue_session_token,
    new_session_payload,
    read_session_token,
)
from storefront_admin.utils.signing import b64url_decode, b64url_encode, sign

SECRET = "session-secret-for-tests"


def _encode_raw(data) -> str:
    return b64url_encode(json.dumps(data).encode("utf-8"))


class TestPayloadCodec:
    """Tests for encoding and decoding session payloads."""

    def test_round_trip(self):
        """Test that a decoded payload equals the encoded one."""
        payload = SessionPayload(sub="123", email="a@example.com", name="Ana", exp=1893456000)
        assert decode_payload(encode_payload(payload)) == payload

    def test_round_trip_without_name(self):
        """Test that a payload without a name decodes with an empty name."""
        payload = SessionPayload(sub="123", email="a@example.com", exp=1893456000)
        decoded = decode_payload(encode_payload(payload))
        assert decoded == payload
        assert decoded.name == ""

    def test_round_trip_non_ascii_name(self):
        """Test that non-ASCII names survive encoding."""
        payload = SessionPayload(sub="1", email="z@example.com", name="Zoë Ōtsuka", exp=1893456000)
        assert decode_payload(encode_payload(payload)) == payload

    def test_serialization_is_compact_json(self):
        """Test that payloads serialize as compact JSON in key order."""
        payload = SessionPayload(sub="1", email="e@x.io", name="N", exp=10)
        encoded = encode_payload(payload)
        assert b64url_decode(encoded) == b'{"sub":"1","email":"e@x.io","exp":10,"name":"N"}'
        assert "=" not in encoded

    def test_reads_payload_written_by_other_clients(self):
        """Test that payloads produced elsewhere in the same format decode."""
        encoded = b64url_encode(b'{"sub":"42","email":"x@y.z","exp":1893456000,"name":"X"}')
        decoded = decode_payload(encoded)
        assert decoded.sub == "42"
        assert decoded.exp == 1893456000

    @pytest.mark.parametrize(
        "encoded",
        [
            "not base64!",
            b64url_encode(b"\xff\xfe\xfd"),
            b64url_encode(b"{not json"),
            _encode_raw(["sub", "email"]),
            _encode_raw({"email": "a@b.c", "exp": 1}),
            _encode_raw({"sub": "", "email": "a@b.c", "exp": 1}),
            _encode_raw({"sub": "1", "email": "", "exp": 1}),
            _encode_raw({"sub": "1", "email": "a@b.c"}),
            _encode_raw({"sub": "1", "email": "a@b.c", "exp": "1893456000"}),
            _encode_raw({"sub": "1", "email": "a@b.c", "exp": True}),
            _encode_raw({"sub": "1", "email": "a@b.c", "exp": None}),
        ],
    )
    def test_decode_fails_closed(self, encoded):
        """Test that any malformed payload is rejected as a whole."""
        with pytest.raises(MalformedTokenError):
            decode_payload(encoded)

    def test_decode_rejects_infinite_exp(self):
        """Test that a non-finite exp is rejected."""
        encoded = b64url_encode(b'{"sub":"1","email":"a@b.c","exp":1e999}')
        with pytest.raises(MalformedTokenError):
            decode_payload(encoded)


class TestSessionToken:
    """Tests for issuing and reading signed session tokens."""

    def test_new_payload_expires_after_ttl(self):
        """Test that exp is issue time plus the TTL."""
        payload = new_session_payload("1", "a@b.c", ttl_seconds=60, now=1000)
        assert payload.exp == 1060

    def test_default_ttl_is_seven_days(self):
        """Test that sessions last seven days by default."""
        payload = new_session_payload("1", "a@b.c", now=0)
        assert payload.exp == 7 * 24 * 60 * 60

    def test_token_has_two_parts(self):
        """Test that a token is payload and signature joined by a dot."""
        token = issue_session_token(new_session_payload("1", "a@b.c"), SECRET)
        encoded, signature = token.split(".")
        assert encoded
        assert signature == sign(encoded, SECRET)

    def test_read_valid_token(self):
        """Test that a freshly issued token reads back."""
        payload = new_session_payload("1", "a@b.c", "A", ttl_seconds=60)
        token = issue_session_token(payload, SECRET)
        assert read_session_token(token, SECRET) == payload

    def test_expired_token_is_rejected(self):
        """Test that an expired token raises ExpiredSessionError."""
        payload = new_session_payload("1", "a@b.c", ttl_seconds=60, now=int(time.time()) - 120)
        token = issue_session_token(payload, SECRET)
        with pytest.raises(ExpiredSessionError):
            read_session_token(token, SECRET)

    def test_token_valid_until_exp(self):
        """Test that a token is accepted up to and including exp."""
        payload = new_session_payload("1", "a@b.c", ttl_seconds=60, now=1000)
        token = issue_session_token(payload, SECRET)
        assert read_session_token(token, SECRET, now=1060) == payload
        with pytest.raises(ExpiredSessionError):
            read_session_token(token, SECRET, now=1061)

    def test_token_from_other_secret_is_rejected(self):
        """Test that a token signed with another secret is rejected."""
        token = issue_session_token(new_session_payload("1", "a@b.c"), "secret-a")
        with pytest.raises(MalformedTokenError):
            read_session_token(token, "secret-b")

    def test_unconfigured_secret_rejects_everything(self):
        """Test that an empty secret rejects valid tokens."""
        token = issue_session_token(new_session_payload("1", "a@b.c"), SECRET)
        with pytest.raises(MalformedTokenError):
            read_session_token(token, "")

    def test_tampered_payload_is_rejected(self):
        """Test that swapping the payload invalidates the token."""
        token = issue_session_token(new_session_payload("1", "a@b.c"), SECRET)
        _, signature = token.split(".")
        forged = encode_payload(new_session_payload("1", "attacker@evil.example"))
        with pytest.raises(MalformedTokenError):
            read_session_token(f"{forged}.{signature}", SECRET)

    def test_signed_garbage_payload_is_rejected(self):
        """Test that a correctly signed but undecodable payload is rejected."""
        encoded = b64url_encode(b"garbage")
        with pytest.raises(MalformedTokenError):
            read_session_token(f"{encoded}.{sign(encoded, SECRET)}", SECRET)

    @pytest.mark.parametrize("token", ["", ".", "abc", "abc.", ".abc", "a.b.c", "a..b"])
    def test_malformed_structure_is_rejected(self, token):
        """Test that tokens without exactly two non-empty parts are rejected."""
        with pytest.raises(MalformedTokenError):
            read_session_token(token, SECRET)
