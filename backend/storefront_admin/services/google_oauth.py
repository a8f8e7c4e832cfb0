import logging
from dataclasses import dataclass

import httpx

from storefront_admin.config import Settings
from storefront_admin.exceptions import ConfigurationError, UpstreamAuthError
from storefront_admin.schemas.auth import AdminPrincipal
from storefront_admin.utils.oidc import (
    build_google_auth_url,
    exchange_code_for_tokens,
    fetch_token_info,
    id_token_subject,
    safe_redirect_path,
    validate_google_claims,
)
from storefront_admin.utils.session_token import issue_session_token, new_session_payload

logger = logging.getLogger(__name__)


@dataclass
class CompletedLogin:
    token: str
    redirect_to: str
    principal: AdminPrincipal


class GoogleOAuthService:
    """Drives the Google redirect/callback exchange and mints admin sessions."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def authorization_url(self, from_path: str | None = None) -> str:
        settings = self.settings
        if not settings.google_oauth_configured:
            raise ConfigurationError("Google OAuth not configured")

        state = safe_redirect_path(from_path, settings.admin_landing_path)
        return build_google_auth_url(
            settings.google_client_id,
            settings.google_redirect_uri,
            state,
        )

    async def complete_login(self, code: str | None, state: str | None) -> CompletedLogin:
        """
        Exchange an authorization code for an admin session token.

        Raises:
            ConfigurationError: If code or any OAuth/session setting is missing
            UpstreamAuthError: If Google rejects the code or the identity
        """
        settings = self.settings
        if not code or not settings.google_oauth_configured or not settings.admin_jwt_secret:
            raise ConfigurationError("Invalid Google OAuth callback")

        try:
            async with httpx.AsyncClient(timeout=settings.oauth_timeout_seconds) as client:
                tokens = await exchange_code_for_tokens(
                    client,
                    code,
                    settings.google_client_id,
                    settings.google_client_secret,
                    settings.google_redirect_uri,
                )
                id_token = tokens.get("id_token")
                if not isinstance(id_token, str) or not id_token:
                    raise UpstreamAuthError("Invalid Google ID token", detail="id_token missing")

                expected_sub = id_token_subject(id_token)
                claims = await fetch_token_info(client, id_token)
        except httpx.TimeoutException as e:
            logger.warning("Google request timed out: %s", type(e).__name__)
            raise UpstreamAuthError("Google request failed", detail="timeout") from None
        except httpx.TransportError as e:
            logger.warning("Failed to contact Google: %s", type(e).__name__)
            raise UpstreamAuthError("Google request failed") from None

        identity = validate_google_claims(claims, settings.google_client_id, expected_sub)

        payload = new_session_payload(
            identity["sub"],
            identity["email"],
            identity["name"],
            ttl_seconds=settings.session_ttl_seconds,
        )
        token = issue_session_token(payload, settings.admin_jwt_secret)

        logger.info("Admin login via Google: %s", identity["email"])
        return CompletedLogin(
            token=token,
            redirect_to=safe_redirect_path(state, settings.admin_landing_path),
            principal=AdminPrincipal(method="session", **identity),
        )