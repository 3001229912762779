from typing import Optional

from fastapi import Depends, Request

from app.core.errors import AuthError
from app.services.session_service import SessionManager, SessionState

LOGIN_PAGE = "/login.html"


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(request.app.state.settings.SESSION_COOKIE_NAME)


def get_session_state(request: Request, sessions: SessionManager = Depends(get_session_manager)) -> SessionState:
    return sessions.resolve(get_session_token(request))


async def require_admin(state: SessionState = Depends(get_session_state)) -> SessionState:
    """
    Gate for API/data endpoints: anything but an admin session gets a 401 JSON body.
    """
    if not state.is_admin:
        raise AuthError()
    return state


async def require_admin_page(state: SessionState = Depends(get_session_state)) -> SessionState:
    """
    Gate for HTML pages: anything but an admin session is redirected to the login page.
    """
    if not state.is_admin:
        raise AuthError(redirect_to=LOGIN_PAGE)
    return state
