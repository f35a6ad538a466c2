from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from storefront.config import Settings
from storefront.repositories.storage import Storage
from storefront.schemas.user import UserOut


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_id(
    request: Request,
    x_session_id: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """
    Session cookie first, then the x-session-id header. Clients sending
    neither share the anonymous session (and therefore one cart).
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return token or x_session_id or settings.ANONYMOUS_SESSION_ID


def require_admin(
    x_user_id: Optional[int] = Header(None),
    settings: Settings = Depends(get_app_settings),
    storage: Storage = Depends(get_storage),
) -> Optional[UserOut]:
    """Role lookup for admin routes; only enforced when ADMIN_ROLE_CHECK is on."""
    if not settings.ADMIN_ROLE_CHECK:
        return None
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="x-user-id header required")
    user = storage.get_user(x_user_id)
    if user is None or user.role != "admin":
        raise HTTPException(status_code=403, detail="Admin role required")
    return user
