from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
from apscheduler.schedulers.asyncio import AsyncIOScheduler
import logging

from leadflow import __version__
from leadflow.app.config import Settings, settings as default_settings
from leadflow.app.exceptions import register_exception_handlers
from leadflow.app.logging_config import setup_logging
from leadflow.app.middleware import register_middleware
from leadflow.api.v1.router import api_router
from leadflow.db.base import Base, engine
from leadflow.services.messaging import NotificationService, OTPService, build_otp_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")
    Base.metadata.create_all(bind=engine)

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        app.state.otp_service.sweep,
        "interval",
        seconds=settings.OTP_SWEEP_INTERVAL_SECS,
        id="otp_sweep",
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"OTP sweep scheduled every {settings.OTP_SWEEP_INTERVAL_SECS}s")

    yield

    # Shutdown
    logger.info("Shutting down...")
    scheduler.shutdown(wait=False)
    await app.state.otp_service.drain()
    await app.state.otp_store.close()


def create_application(settings: Settings = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging()

    application = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=__version__,
        lifespan=lifespan,
    )

    # Shared services; built here so they exist even when the lifespan does not run
    notifier = NotificationService()
    otp_store = build_otp_store(settings)
    application.state.settings = settings
    application.state.notifier = notifier
    application.state.otp_store = otp_store
    application.state.otp_service = OTPService.from_settings(otp_store, notifier, settings)

    # Middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(GZipMiddleware, minimum_size=1000)
    register_middleware(application)
    register_exception_handlers(application)

    # Routers
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @application.get("/health")
    async def health_check():
        return {"status": "healthy", "environment": settings.ENVIRONMENT}

    return application


app = create_application()
