from __future__ import annotations

import logging
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler

from mag7.core.config import ConfigurationError
from mag7.services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)

scheduler: BackgroundScheduler | None = None


def _refresh_tick(service: DashboardService) -> None:
    try:
        result = service.refresh()
        logger.info("background refresh loaded %d tickers (%d failed)", len(result.tickers), len(result.failures))
    except ConfigurationError as exc:
        logger.error("background refresh skipped: %s", exc)
    except Exception as exc:
        logger.exception("background refresh failed: %s", exc)


def start_scheduler(service: DashboardService, interval_seconds: int) -> None:
    global scheduler
    if scheduler is not None:
        return

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        _refresh_tick,
        "interval",
        seconds=interval_seconds,
        args=[service],
        id="dashboard-refresh",
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(),
    )
    scheduler.start()
    logger.info("Background refresh scheduler started (every %ss)", interval_seconds)


def stop_scheduler() -> None:
    global scheduler
    if scheduler is None:
        return
    scheduler.shutdown(wait=False)
    scheduler = None
    logger.info("Background refresh scheduler stopped")
