# agro_monitor/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agro_monitor.database import engine, settings
from agro_monitor.models import Base
from agro_monitor.init_db import init_database
from agro_monitor.services.scheduler import start_scheduler, stop_scheduler

# Routers
from agro_monitor.routers import (
    health_router,
    zones_router,
    sensors_router,
    notifications_router,
    weather_router,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Agro Monitor API",
        description="Sensor monitoring, threshold alerts and weather for agricultural enterprises",
        version="1.0.0",
    )

    # The frontend and cron triggers call from arbitrary origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    # Mount router
    app.include_router(health_router)            # /healthz, /api/v1/health
    app.include_router(zones_router)             # /api/v1/zones/...
    app.include_router(sensors_router)           # /api/v1/sensors/... and /collect
    app.include_router(notifications_router)     # /api/v1/notifications/...
    app.include_router(weather_router)           # /api/v1/weather

    # Startup: DB + demo data + scheduler (all idempotent)
    @app.on_event("startup")
    async def _startup():
        if engine is None:
            logger.error("DATABASE_URL is not configured, skipping database setup and sensor polling")
            return
        Base.metadata.create_all(bind=engine)
        init_database()
        start_scheduler()

    @app.on_event("shutdown")
    async def _shutdown():
        stop_scheduler()

    return app


app = create_app()
