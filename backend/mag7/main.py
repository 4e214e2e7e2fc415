from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mag7.api import dashboard, health, tickers
from mag7.core.config import get_settings
from mag7.services.dashboard_service import get_dashboard_service
from mag7.services.scheduler import start_scheduler, stop_scheduler

settings = get_settings()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.api_key_configured:
        logger.warning("MASSIVE_API_KEY is not set; dashboard endpoints will return setup instructions")
    if settings.inproc_refresh_enabled:
        start_scheduler(get_dashboard_service(), settings.refresh_interval_seconds)
    yield
    get_dashboard_service().cancel()
    if settings.inproc_refresh_enabled:
        stop_scheduler()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(tickers.router, prefix=settings.api_prefix)
app.include_router(dashboard.router, prefix=settings.api_prefix)
