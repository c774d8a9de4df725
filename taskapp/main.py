"""
FastAPI application factory
"""
import logging
import traceback

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from taskapp.config import get_settings
from taskapp.infrastructure.db.session import check_db_connection
from taskapp.infrastructure.notifications.center import get_notification_center
from taskapp.application.bootstrap import start_notifications, stop_notifications
from taskapp.api.v1 import actions, export, notifications, settings as settings_api

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every unhandled exception with its traceback and answers 500"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            tb_str = traceback.format_exc()
            logger.error("\n%s\nERROR on %s %s\n%s%s", "=" * 60, request.method, request.url.path, tb_str, "=" * 60)
            return Response(content=f"Internal Server Error: {exc}", status_code=500)


def create_app() -> FastAPI:
    """
    Application factory - builds and configures the FastAPI app

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title="Perso/Pro Tasks",
        debug=settings.DEBUG,
    )

    app.add_middleware(ErrorLoggingMiddleware)

    # Routers
    app.include_router(actions.router)
    app.include_router(settings_api.router)
    app.include_router(notifications.router)
    app.include_router(export.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (checks the database answers)"""
        check_db_connection()
        return "ok"

    @app.on_event("startup")
    def _startup_notifications() -> None:
        # Migrations, then reminders and digests back into the scheduler
        start_notifications(get_notification_center())

    @app.on_event("shutdown")
    def _shutdown_notifications() -> None:
        stop_notifications(get_notification_center())

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskapp.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
