from fastapi import APIRouter, Depends

from mag7.core.config import Settings, get_settings
from mag7.core.tickers import universe_view
from mag7.schemas.dashboard import TickerInfoView

router = APIRouter(prefix="/tickers", tags=["tickers"])


@router.get("", response_model=list[TickerInfoView])
def list_tickers(settings: Settings = Depends(get_settings)) -> list[TickerInfoView]:
    return [TickerInfoView(**row) for row in universe_view(settings.tickers_list)]
