from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from src.audit.api import router as audit_router
from src.audit.application.audit_log_service import AuditLogService
from src.config import Settings, get_settings
from src.notifications.api import router as notifications_router
from src.notifications.application.notification_service import NotificationService
from src.notifications.infrastructure.sinks import make_notification_sink
from src.scheduling.api.routes import router as scheduling_router
from src.scheduling.application.factories import make_availability_service, make_scheduling_service
from src.scheduling.application.services.slot_locks import SlotLockRegistry
from src.shared.api.middleware import CorrelationIdMiddleware, JwtContextMiddleware
from src.shared.database import Database
from src.shared.exceptions import register_exception_handlers  # central mapping
from src.shared.health import router as health_router
from src.shared.infrastructure.observability.logger import configure_logging, get_logger

logger = get_logger(__name__)


def _wire_services(app: FastAPI, settings: Settings, database: Database) -> None:
    """One store handle, one lock registry, injected into every service."""
    locks = SlotLockRegistry()
    notifier = make_notification_sink(settings.NOTIFICATION_SINK, database.session_factory)

    app.state.settings = settings
    app.state.database = database
    app.state.slot_locks = locks
    app.state.scheduling_service = make_scheduling_service(database.session_factory, notifier, locks)
    app.state.availability_service = make_availability_service(database.session_factory, locks)
    app.state.notification_service = NotificationService(database.session_factory)
    app.state.audit_log_service = AuditLogService(database.session_factory)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or get_settings()
    database = database or Database(settings.effective_database_url, echo=settings.DATABASE_ECHO)
    configure_logging(settings.LOG_LEVEL, settings.JSON_LOGS, service=settings.PROJECT_NAME)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.DATABASE_CREATE_ALL:
            await database.create_all()
        logger.info(
            "application_started",
            environment=settings.ENVIRONMENT,
            backend=database.engine.dialect.name,
            notification_sink=settings.NOTIFICATION_SINK,
        )
        yield
        await database.dispose()
        logger.info("application_stopped")

    app = FastAPI(
        title="Clinic Scheduling API",
        version=settings.PROJECT_VERSION,
        swagger_ui_parameters={"persistAuthorization": True},
        lifespan=lifespan,
    )
    _wire_services(app, settings, database)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    # JWT -> request.state.principal (added before correlation id so it runs inside it)
    app.add_middleware(JwtContextMiddleware, settings=settings)
    app.add_middleware(CorrelationIdMiddleware)

    # Routers
    app.include_router(health_router)
    app.include_router(scheduling_router, prefix=settings.API_V1_STR)
    app.include_router(notifications_router, prefix=settings.API_V1_STR)
    app.include_router(audit_router, prefix=settings.API_V1_STR)

    # Centralized error handling -> {code, message, details?, correlation_id?}
    register_exception_handlers(app)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "message": "Clinic Scheduling API",
            "docs": "/docs",
            "health": "/health",
        }

    # ---- Custom OpenAPI to add Bearer auth ----
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            routes=app.routes,
        )
        schema.setdefault("components", {}).setdefault("securitySchemes", {})["bearerAuth"] = {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
        schema["security"] = [{"bearerAuth": []}]
        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi

    return app


app = create_app()
