import os

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import FileResponse, RedirectResponse

from app.core.errors import storage_errors
from app.core.logger import logger
from app.core.security import (
    LOGIN_PAGE,
    get_session_manager,
    get_session_state,
    get_session_token,
    require_admin_page,
)
from app.models.api_models import LoginRequest, MessageResponse
from app.services.session_service import SessionManager, SessionState

router = APIRouter()

ADMIN_PAGE = "/admin.html"


def public_file(request: Request, name: str) -> FileResponse:
    return FileResponse(os.path.join(request.app.state.public_dir, name))


@router.get("/")
async def root():
    return RedirectResponse(LOGIN_PAGE, status_code=302)


@router.get("/login.html")
def login_page(request: Request, state: SessionState = Depends(get_session_state)):
    if state.is_admin:
        return RedirectResponse(ADMIN_PAGE, status_code=302)
    return public_file(request, "login.html")


@router.post("/login", response_model=MessageResponse)
def login(
    req: LoginRequest,
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
):
    settings = request.app.state.settings
    with storage_errors("Server error during login."):
        state = sessions.login(req.username, req.password, previous_token=get_session_token(request))

    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        state.token,
        max_age=settings.SESSION_MAX_AGE,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return {"message": "Login successful!"}


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
):
    settings = request.app.state.settings
    with storage_errors("Failed to logout."):
        sessions.logout(get_session_token(request))

    response.delete_cookie(
        settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    logger.info("👋 Session closed")
    return {"message": "Logged out successfully."}


@router.get("/admin.html", dependencies=[Depends(require_admin_page)])
@router.get("/admin_panel.html", dependencies=[Depends(require_admin_page)])
def admin_page(request: Request):
    return public_file(request, "admin_panel.html")
