import hmac
import logging
from typing import Annotated, Optional, Protocol

from fastapi import Depends, HTTPException, Request, status

from storefront_admin.config import (
    ADMIN_TOKEN_HEADER,
    SESSION_COOKIE_NAME,
    Settings,
    get_settings,
)
from storefront_admin.exceptions import AuthError
from storefront_admin.schemas.auth import AdminPrincipal
from storefront_admin.utils.session_token import read_session_token

logger = logging.getLogger(__name__)

# Principal reported for callers using the static admin token
TOKEN_ADMIN_SUB = "dev-admin"
TOKEN_ADMIN_EMAIL = "dev-admin@local"
TOKEN_ADMIN_NAME = "Dev Admin"


class CredentialChecker(Protocol):
    def check(self, request: Request) -> Optional[AdminPrincipal]:
        """Return the principal if this credential admits the request, else None."""
        ...


class SessionCookieChecker:
    """Admits requests carrying a valid, unexpired admin_session cookie."""

    def __init__(self, secret: str, cookie_name: str = SESSION_COOKIE_NAME):
        self.secret = secret
        self.cookie_name = cookie_name

    def check(self, request: Request) -> Optional[AdminPrincipal]:
        token = request.cookies.get(self.cookie_name)
        if not token:
            return None

        try:
            payload = read_session_token(token, self.secret)
        except AuthError as e:
            logger.debug("Ignoring %s cookie: %s", self.cookie_name, e.message)
            return None

        return AdminPrincipal(
            sub=payload.sub,
            email=payload.email,
            name=payload.name,
            method="session",
        )


class StaticTokenChecker:
    """Admits machine callers presenting the configured x-admin-token."""

    def __init__(self, expected: str, header_name: str = ADMIN_TOKEN_HEADER):
        self.expected = expected
        self.header_name = header_name

    def check(self, request: Request) -> Optional[AdminPrincipal]:
        if not self.expected:
            return None

        presented = request.headers.get(self.header_name, "")
        if not presented:
            return None
        if not hmac.compare_digest(presented.encode("utf-8"), self.expected.encode("utf-8")):
            return None

        return AdminPrincipal(
            sub=TOKEN_ADMIN_SUB,
            email=TOKEN_ADMIN_EMAIL,
            name=TOKEN_ADMIN_NAME,
            method="token",
        )


class DualAuthenticator:
    """
    Tries each credential checker in order and stops at the first success.

    Checkers never raise for bad credentials, so a request is either
    authenticated or not; the reason is not reported.
    """

    def __init__(self, checkers: list[CredentialChecker]):
        self.checkers = checkers

    @classmethod
    def from_settings(cls, settings: Settings) -> "DualAuthenticator":
        return cls(
            [
                SessionCookieChecker(settings.admin_jwt_secret),
                StaticTokenChecker(settings.admin_api_token),
            ]
        )

    def authenticate(self, request: Request) -> Optional[AdminPrincipal]:
        for checker in self.checkers:
            principal = checker.check(request)
            if principal is not None:
                return principal
        return None


def get_authenticator(
    settings: Annotated[Settings, Depends(get_settings)],
) -> DualAuthenticator:
    return DualAuthenticator.from_settings(settings)


async def get_current_admin_optional(
    request: Request,
    authenticator: Annotated[DualAuthenticator, Depends(get_authenticator)],
) -> Optional[AdminPrincipal]:
    """
    Get the current admin if any credential is valid.
    Returns None otherwise.
    """
    return authenticator.authenticate(request)


async def get_current_admin(
    principal: Annotated[Optional[AdminPrincipal], Depends(get_current_admin_optional)],
) -> AdminPrincipal:
    """
    Get the current admin.

    Supports two authentication methods:
    1. admin_session cookie issued by the Google login flow
    2. Static x-admin-token header for automation
    """
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return principal


# Type aliases for dependency injection
CurrentAdmin = Annotated[AdminPrincipal, Depends(get_current_admin)]
CurrentAdminOptional = Annotated[Optional[AdminPrincipal], Depends(get_current_admin_optional)]
