"""
Admin session tokens.

Wire format:
    base64url(json_payload) + "." + base64url(HMAC-SHA256(secret, base64url(json_payload)))

The server keeps no session store: a token is valid while its signature
checks out and its exp is in the future.
"""

import json
import time

from itsdangerous import BadData
from pydantic import ValidationError

from storefront_admin.exceptions import ExpiredSessionError, MalformedTokenError
from storefront_admin.schemas.auth import SessionPayload
from storefront_admin.utils.signing import (
    TOKEN_SEPARATOR,
    b64url_decode,
    b64url_encode,
    sign,
    verify,
)


def new_session_payload(
    sub: str,
    email: str,
    name: str = "",
    ttl_seconds: int = 7 * 24 * 60 * 60,
    now: int | None = None,
) -> SessionPayload:
    issued_at = int(time.time()) if now is None else now
    return SessionPayload(sub=sub, email=email, name=name, exp=issued_at + ttl_seconds)


def encode_payload(payload: SessionPayload) -> str:
    data = {
        "sub": payload.sub,
        "email": payload.email,
        "exp": payload.exp,
        "name": payload.name,
    }
    serialized = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return b64url_encode(serialized.encode("utf-8"))


def decode_payload(encoded: str) -> SessionPayload:
    """
    Decode the payload half of a session token.

    Raises:
        MalformedTokenError: For bad base64, bad UTF-8, bad JSON, a
            non-object document, or missing/invalid fields
    """
    try:
        raw = b64url_decode(encoded)
        data = json.loads(raw.decode("utf-8"))
    except (BadData, UnicodeError, ValueError) as e:
        raise MalformedTokenError(f"Undecodable session payload: {e}") from None

    if not isinstance(data, dict):
        raise MalformedTokenError("Session payload is not an object")

    try:
        return SessionPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedTokenError(
            f"Invalid session payload: {e.error_count()} error(s)"
        ) from None


def issue_session_token(payload: SessionPayload, secret: str) -> str:
    encoded = encode_payload(payload)
    return f"{encoded}{TOKEN_SEPARATOR}{sign(encoded, secret)}"


def split_token(token: str) -> tuple[str, str]:
    parts = token.split(TOKEN_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedTokenError("Session token must have exactly two non-empty parts")
    return parts[0], parts[1]


def read_session_token(token: str, secret: str, now: int | None = None) -> SessionPayload:
    """
    Verify and decode a session token.

    Args:
        token: Raw admin_session cookie value
        secret: Session signing secret
        now: Current epoch seconds (defaults to time.time())

    Returns:
        The decoded payload

    Raises:
        MalformedTokenError: Bad structure, bad signature, or bad payload
        ExpiredSessionError: Signature is valid but exp has passed
    """
    encoded, signature = split_token(token)

    if not verify(encoded, signature, secret):
        raise MalformedTokenError("Session signature mismatch")

    payload = decode_payload(encoded)

    current = int(time.time()) if now is None else now
    if payload.exp < current:
        raise ExpiredSessionError("Session expired")

    return payload
