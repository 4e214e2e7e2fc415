from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SETUP_INSTRUCTIONS = (
    "Set MASSIVE_API_KEY before starting the server: "
    "1) get a free API key from https://polygon.io/, "
    "2) add MASSIVE_API_KEY=<your key> to backend/.env (or export it), "
    "3) restart the server."
)


class ConfigurationError(RuntimeError):
    def __init__(self, message: str, code: str = "api_key_required") -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class MarketDataConfig:
    """Everything the market data client needs, passed in explicitly."""

    api_key: str
    base_url: str = "https://api.polygon.io"
    history_start: date = date(2024, 9, 14)
    history_end: date = date(2024, 12, 13)
    timeout_seconds: float = 20.0


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Magnificent 7 Dashboard", alias="APP_NAME")
    api_prefix: str = Field(default="/api", alias="API_PREFIX")
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        alias="CORS_ORIGINS",
    )

    massive_api_key: str = Field(default="", alias="MASSIVE_API_KEY")
    massive_api_base: str = Field(default="https://api.polygon.io", alias="MASSIVE_API_BASE")
    request_timeout_seconds: float = Field(default=20.0, gt=0, alias="REQUEST_TIMEOUT_SECONDS")

    # Pinned to the last trading day with complete market data, not "today".
    history_end_date: date = Field(default=date(2024, 12, 13), alias="HISTORY_END_DATE")
    history_window_days: int = Field(default=90, ge=1, alias="HISTORY_WINDOW_DAYS")

    # Free tier allows 5 requests/minute: one every 12s plus a 3s buffer.
    fetch_delay_ms: int = Field(default=15000, ge=0, alias="FETCH_DELAY_MS")
    dashboard_tickers: str = Field(default="TSLA", alias="DASHBOARD_TICKERS")

    cache_ttl_seconds: int = Field(default=600, ge=0, alias="CACHE_TTL_SECONDS")
    inproc_refresh_enabled: bool = Field(default=False, alias="INPROC_REFRESH_ENABLED")
    refresh_interval_seconds: int = Field(default=600, ge=30, alias="REFRESH_INTERVAL_SECONDS")

    @property
    def cors_origins_list(self) -> list[str]:
        raw = self.cors_origins.strip()
        if raw == "*":
            return ["*"]
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @property
    def tickers_list(self) -> list[str]:
        seen: list[str] = []
        for raw in self.dashboard_tickers.split(","):
            value = raw.strip().upper()
            if value and value not in seen:
                seen.append(value)
        return seen

    @property
    def history_start_date(self) -> date:
        return self.history_end_date - timedelta(days=self.history_window_days)

    @property
    def api_key_configured(self) -> bool:
        return bool(self.massive_api_key.strip())

    def market_data_config(self) -> MarketDataConfig:
        if not self.api_key_configured:
            raise ConfigurationError(f"Market data API key is missing. {SETUP_INSTRUCTIONS}")
        if not self.tickers_list:
            raise ConfigurationError(
                "No tickers configured. Set DASHBOARD_TICKERS to a comma-separated list such as TSLA,AAPL.",
                code="no_tickers_configured",
            )
        return MarketDataConfig(
            api_key=self.massive_api_key.strip(),
            base_url=self.massive_api_base.rstrip("/"),
            history_start=self.history_start_date,
            history_end=self.history_end_date,
            timeout_seconds=self.request_timeout_seconds,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
