import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from storefront_admin.config import SESSION_COOKIE_NAME, Settings, get_settings
from storefront_admin.exceptions import ConfigurationError, UpstreamAuthError
from storefront_admin.schemas.auth import AuthErrorResponse, AuthMeResponse, LogoutResponse
from storefront_admin.services.google_oauth import GoogleOAuthService
from storefront_admin.utils.auth import CurrentAdminOptional

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_google_oauth_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> GoogleOAuthService:
    return GoogleOAuthService(settings)


OAuthService = Annotated[GoogleOAuthService, Depends(get_google_oauth_service)]


def _error(status_code: int, error: str, detail: Any = None) -> JSONResponse:
    content: dict[str, Any] = {"error": error}
    if detail is not None:
        content["detail"] = detail
    return JSONResponse(status_code=status_code, content=content)


def _session_cookie_options(settings: Settings) -> dict[str, Any]:
    # Logout must repeat these exactly or the browser keeps the original cookie
    return {
        "httponly": True,
        "samesite": "lax",
        "secure": settings.is_production,
        "path": "/",
    }


@router.get(
    "/google/start",
    response_model=None,
    responses={500: {"model": AuthErrorResponse}},
)
async def google_start(
    service: OAuthService,
    from_: Annotated[str | None, Query(alias="from")] = None,
) -> Response:
    try:
        url = service.authorization_url(from_)
    except ConfigurationError as e:
        logger.error("Google login requested but OAuth is not configured")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get(
    "/google/callback",
    response_model=None,
    responses={
        400: {"model": AuthErrorResponse},
        401: {"model": AuthErrorResponse},
        500: {"model": AuthErrorResponse},
    },
)
async def google_callback(
    service: OAuthService,
    settings: Annotated[Settings, Depends(get_settings)],
    code: str | None = None,
    state: str | None = None,
) -> Response:
    try:
        login = await service.complete_login(code, state)
    except ConfigurationError as e:
        return _error(status.HTTP_400_BAD_REQUEST, e.message)
    except UpstreamAuthError as e:
        return _error(status.HTTP_401_UNAUTHORIZED, e.message, e.detail)
    except Exception:
        logger.exception("Unexpected failure completing Google login")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Google auth error")

    response = RedirectResponse(login.redirect_to, status_code=status.HTTP_302_FOUND)
    response.set_cookie(SESSION_COOKIE_NAME, login.token, **_session_cookie_options(settings))
    return response


@router.get(
    "/me",
    response_model=AuthMeResponse,
    response_model_exclude_none=True,
    responses={401: {"model": AuthMeResponse}},
)
async def auth_me(admin: CurrentAdminOptional) -> Any:
    if admin is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"authenticated": False},
        )
    return AuthMeResponse(authenticated=True, user=admin.public_user())


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> LogoutResponse:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        "",
        max_age=0,
        **_session_cookie_options(settings),
    )
    return LogoutResponse(ok=True)
