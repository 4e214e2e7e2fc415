from datetime import date
from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from mag7.core.config import ConfigurationError, Settings
from mag7.core.tickers import MAG7_UNIVERSE, ticker_info, universe_view


def _settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_defaults_match_reference_deployment(monkeypatch):
    for name in ("MASSIVE_API_KEY", "DASHBOARD_TICKERS", "FETCH_DELAY_MS", "HISTORY_END_DATE", "HISTORY_WINDOW_DAYS"):
        monkeypatch.delenv(name, raising=False)

    settings = _settings()

    assert settings.tickers_list == ["TSLA"]
    assert settings.fetch_delay_ms == 15000
    assert settings.history_end_date == date(2024, 12, 13)
    assert settings.history_start_date == date(2024, 9, 14)
    assert settings.api_key_configured is False


def test_missing_api_key_is_a_configuration_error(monkeypatch):
    monkeypatch.delenv("MASSIVE_API_KEY", raising=False)

    with pytest.raises(ConfigurationError) as excinfo:
        _settings().market_data_config()

    assert "MASSIVE_API_KEY" in str(excinfo.value)
    assert "polygon.io" in str(excinfo.value)


def test_blank_api_key_counts_as_missing():
    with pytest.raises(ConfigurationError):
        _settings(MASSIVE_API_KEY="   ").market_data_config()


def test_market_data_config_from_settings():
    settings = _settings(
        MASSIVE_API_KEY=" secret ",
        MASSIVE_API_BASE="https://api.polygon.io/",
        HISTORY_END_DATE="2024-06-28",
        HISTORY_WINDOW_DAYS=30,
        REQUEST_TIMEOUT_SECONDS=5,
    )

    config = settings.market_data_config()

    assert config.api_key == "secret"
    assert config.base_url == "https://api.polygon.io"
    assert config.history_end == date(2024, 6, 28)
    assert config.history_start == date(2024, 5, 29)
    assert config.timeout_seconds == 5


def test_tickers_list_is_upper_cased_and_deduplicated():
    settings = _settings(DASHBOARD_TICKERS=" aapl, MSFT,,tsla,AAPL ")
    assert settings.tickers_list == ["AAPL", "MSFT", "TSLA"]


def test_tickers_from_environment(monkeypatch):
    monkeypatch.setenv("DASHBOARD_TICKERS", "NVDA,META")
    monkeypatch.setenv("FETCH_DELAY_MS", "0")

    settings = _settings()

    assert settings.tickers_list == ["NVDA", "META"]
    assert settings.fetch_delay_ms == 0


def test_cors_origins_list():
    assert _settings(CORS_ORIGINS="*").cors_origins_list == ["*"]
    assert _settings(CORS_ORIGINS="http://a, http://b").cors_origins_list == ["http://a", "http://b"]


def test_universe_has_all_seven_and_marks_enabled():
    rows = universe_view(["tsla"])

    assert [r["ticker"] for r in rows] == [info.ticker for info in MAG7_UNIVERSE]
    assert len(rows) == 7
    assert [r["ticker"] for r in rows if r["enabled"]] == ["TSLA"]


def test_universe_lists_enabled_symbols_outside_the_seven():
    rows = universe_view(["TSLA", "PLTR"])

    assert rows[-1] == {"ticker": "PLTR", "name": "PLTR", "color": ticker_info("PLTR").color, "enabled": True}
    assert ticker_info(" nvda ").name == "NVIDIA"


def test_empty_ticker_list_is_a_configuration_error():
    settings = _settings(MASSIVE_API_KEY="k", DASHBOARD_TICKERS=" , ,")

    assert settings.tickers_list == []
    with pytest.raises(ConfigurationError) as excinfo:
        settings.market_data_config()

    assert excinfo.value.code == "no_tickers_configured"
    assert "DASHBOARD_TICKERS" in str(excinfo.value)
