from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from mag7.core.config import ConfigurationError
from mag7.quant import EmptyInputError
from mag7.schemas.dashboard import (
    ChartMode,
    ChartResponse,
    DashboardResponse,
    DashboardStatusResponse,
    MarketStats,
    RefreshResponse,
    TickerCardDetail,
)
from mag7.services.dashboard_service import DashboardService, NoDataAvailableError, get_dashboard_service
from mag7.services.market_client import EmptySeriesError, MarketDataError, NoDataError

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=503, detail={"error": exc.code, "message": str(exc)})
    if isinstance(exc, MarketDataError) and not isinstance(exc, (NoDataError, EmptySeriesError)):
        return HTTPException(status_code=502, detail={"error": "upstream_error", "message": str(exc)})
    return HTTPException(status_code=404, detail={"error": "no_data", "message": str(exc)})


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    mode: ChartMode = Query("raw", description="Chart normalization: raw prices or indexed to 100"),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    try:
        return service.dashboard(mode)
    except (ConfigurationError, NoDataAvailableError, EmptyInputError) as exc:
        raise _to_http(exc) from exc


@router.get("/chart", response_model=ChartResponse)
def get_chart(
    mode: ChartMode = Query("raw", description="Chart normalization: raw prices or indexed to 100"),
    service: DashboardService = Depends(get_dashboard_service),
) -> ChartResponse:
    try:
        return service.chart(mode)
    except (ConfigurationError, NoDataAvailableError) as exc:
        raise _to_http(exc) from exc


@router.get("/stats", response_model=MarketStats)
def get_stats(service: DashboardService = Depends(get_dashboard_service)) -> MarketStats:
    try:
        return service.stats()
    except (ConfigurationError, NoDataAvailableError, EmptyInputError) as exc:
        raise _to_http(exc) from exc


@router.get("/status", response_model=DashboardStatusResponse)
def get_status(service: DashboardService = Depends(get_dashboard_service)) -> DashboardStatusResponse:
    return service.status()


@router.post("/refresh", response_model=RefreshResponse)
def refresh(service: DashboardService = Depends(get_dashboard_service)) -> RefreshResponse:
    try:
        return service.refresh()
    except ConfigurationError as exc:
        raise _to_http(exc) from exc


@router.get("/tickers/{ticker}", response_model=TickerCardDetail)
def get_ticker(ticker: str, service: DashboardService = Depends(get_dashboard_service)) -> TickerCardDetail:
    try:
        return service.ticker(ticker)
    except (ConfigurationError, MarketDataError) as exc:
        raise _to_http(exc) from exc
