"""
HMAC-SHA256 signing for admin session tokens (itsdangerous).

Signature format:
    base64url(HMAC-SHA256(secret, encoded_payload)), without padding
"""

import hashlib
import re

from itsdangerous import BadData, BadSignature, Signer
from itsdangerous.encoding import base64_decode, base64_encode

from storefront_admin.exceptions import ConfigurationError

TOKEN_SEPARATOR = "."

_BASE64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


def b64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded URL-safe base64."""
    return base64_encode(data).decode("ascii")


def b64url_decode(value: str) -> bytes:
    """
    Decode unpadded URL-safe base64.

    Raises:
        BadData: If the value contains characters outside the base64url
            alphabet or has an impossible length.
    """
    # base64_decode silently drops characters outside the alphabet
    if not _BASE64URL_RE.fullmatch(value):
        raise BadData("Invalid base64-encoded data")
    return base64_decode(value)


def _signer(secret: str) -> Signer:
    return Signer(
        secret,
        sep=TOKEN_SEPARATOR,
        key_derivation="none",
        digest_method=hashlib.sha256,
    )


def sign(encoded_payload: str, secret: str) -> str:
    """
    Sign an encoded payload.

    Args:
        encoded_payload: The exact string that will appear before the "."
        secret: Session signing secret (ADMIN_JWT_SECRET)

    Returns:
        base64url signature string

    Raises:
        ConfigurationError: If no secret is configured
    """
    if not secret:
        raise ConfigurationError("ADMIN_JWT_SECRET not configured")
    return _signer(secret).get_signature(encoded_payload).decode("ascii")


def verify(encoded_payload: str, signature: str, secret: str) -> bool:
    """
    Check a presented signature against the expected one.

    Always False when no secret is configured. Only the canonical
    encoding of the digest is accepted, so any changed character fails.
    """
    if not secret or not signature:
        return False

    try:
        if b64url_encode(b64url_decode(signature)) != signature:
            return False
    except BadData:
        return False

    try:
        _signer(secret).unsign(f"{encoded_payload}{TOKEN_SEPARATOR}{signature}")
    except BadSignature:
        return False
    return True
