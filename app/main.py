from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from app.api import auth, bookings
from app.core.config import Settings, settings
from app.core.config_loader import load_company_config, resolve_path
from app.core.errors import AuthError, BookingAppError
from app.core.logger import logger, setup_logging
from app.services.db_service import Database
from app.services.notification_service import NotificationDispatcher
from app.services.session_service import SessionManager

setup_logging(settings.LOG_LEVEL, resolve_path(settings.LOG_DIR))


async def booking_app_error_handler(request: Request, exc: BookingAppError):
    if isinstance(exc, AuthError) and exc.redirect_to:
        return RedirectResponse(exc.redirect_to, status_code=302)
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message} ({exc.__cause__!r})")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"⚠️ Rejected payload on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"message": "Invalid request payload."})


# Global Exception Handler
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"🔥 UNHANDLED ERROR: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal Server Error", "detail": "An unexpected error occurred. Please contact support."}
    )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Builds the application with its process-scoped resources (connection
    pool, session manager, notification dispatcher) attached to app.state.
    """
    app_settings = app_settings or settings
    db = Database(app_settings.DATABASE_URL, pool_size=app_settings.DB_POOL_SIZE)
    sessions = SessionManager(db, max_age=app_settings.SESSION_MAX_AGE)
    company_config = load_company_config(app_settings.COMPANY_CONFIG_PATH)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("🚀 Starting booking backend")
        db.check_connection()
        db.create_tables()
        sessions.clear_expired()
        yield
        # Shutdown
        logger.info("🛑 Shutting down backend")
        db.dispose()

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.settings = app_settings
    app.state.db = db
    app.state.sessions = sessions
    app.state.notifications = NotificationDispatcher(app_settings, company_config)
    app.state.public_dir = resolve_path(app_settings.PUBLIC_DIR)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in app_settings.CLIENT_URL.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BookingAppError, booking_app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # Include routers
    app.include_router(auth.router, tags=["Auth"])
    app.include_router(bookings.router, prefix=app_settings.API_PREFIX, tags=["Bookings"])

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "environment": app_settings.ENVIRONMENT, "timestamp": datetime.now().isoformat()}

    # Static assets last so the gated pages above take precedence
    app.mount("/", StaticFiles(directory=app.state.public_dir), name="public")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
