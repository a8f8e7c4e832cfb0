import logging
from typing import Any
from urllib.parse import urlencode

import httpx
from jose import JWTError, jwt

from storefront_admin.exceptions import UpstreamAuthError

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
GOOGLE_SCOPES = "openid email profile"


def safe_redirect_path(value: str | None, default: str) -> str:
    """Return value if it is a same-origin relative path, else default."""
    if not value or not value.startswith("/"):
        return default
    # "//host" and "/\host" are treated as absolute by browsers
    if value.startswith("//") or value.startswith("/\\"):
        return default
    return value


def build_google_auth_url(client_id: str, redirect_uri: str, state: str) -> str:
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": GOOGLE_SCOPES,
        "state": state,
        "access_type": "offline",
        "prompt": "consent",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def _response_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"body": response.text[:500]}


async def exchange_code_for_tokens(
    client: httpx.AsyncClient,
    code: str,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
) -> dict:
    response = await client.post(
        GOOGLE_TOKEN_URL,
        data={
            "code": code,
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    body = _response_json(response)
    if not response.is_success:
        logger.warning("Google token exchange failed with status %s", response.status_code)
        raise UpstreamAuthError("Google token exchange failed", detail=body)
    if not isinstance(body, dict):
        raise UpstreamAuthError("Google token exchange failed", detail=None)
    return body


def id_token_subject(id_token: str) -> str:
    """Read the sub claim of an ID token without verifying it."""
    try:
        claims = jwt.get_unverified_claims(id_token)
    except JWTError as e:
        raise UpstreamAuthError("Invalid Google ID token", detail=str(e)) from None
    return str(claims.get("sub") or "")


async def fetch_token_info(client: httpx.AsyncClient, id_token: str) -> dict:
    response = await client.get(GOOGLE_TOKENINFO_URL, params={"id_token": id_token})
    body = _response_json(response)
    if not response.is_success or not isinstance(body, dict):
        logger.warning("Google tokeninfo rejected ID token with status %s", response.status_code)
        raise UpstreamAuthError("Invalid Google ID token", detail=body)
    return body


def validate_google_claims(claims: dict, client_id: str, expected_sub: str) -> dict:
    """
    Enforce the identity rules for an admin login.

    Returns:
        Dict with sub, email and name
    """
    if str(claims.get("aud", "")) != client_id:
        raise UpstreamAuthError("Mismatched audience")

    email = str(claims.get("email") or "")
    sub = str(claims.get("sub") or "")
    if not email or not sub:
        raise UpstreamAuthError("Missing Google user info")

    if expected_sub and sub != expected_sub:
        raise UpstreamAuthError("Token subject mismatch")

    # tokeninfo reports booleans as the strings "true"/"false"
    verified = claims.get("email_verified")
    if verified is not None and str(verified).lower() == "false":
        raise UpstreamAuthError("Email not verified")

    return {"sub": sub, "email": email, "name": str(claims.get("name") or "")}
