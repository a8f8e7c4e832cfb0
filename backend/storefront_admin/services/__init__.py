"""Service layer for business logic."""

from storefront_admin.services.google_oauth import CompletedLogin, GoogleOAuthService

__all__ = [
    "CompletedLogin",
    "GoogleOAuthService",
]
