"""Configuration management for liqwatch."""
import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()

DEFAULT_COINGLASS_URL = (
    "https://open-api-v3.coinglass.com/api/futures/liquidation/v3/aggregated-history"
)


class CoinglassConfig(BaseModel):
    """Upstream metric provider configuration."""
    api_key: str = Field(
        default_factory=lambda: os.getenv("CG_API_KEY", "YOUR_COINGLASS_API_KEY")
    )
    base_url: str = Field(
        default_factory=lambda: os.getenv("CG_BASE_URL", DEFAULT_COINGLASS_URL)
    )
    symbol: str = Field(default_factory=lambda: os.getenv("CG_SYMBOL", "BTC"))
    interval: str = Field(default_factory=lambda: os.getenv("CG_INTERVAL", "5m"))
    exchanges: str = Field(default_factory=lambda: os.getenv("CG_EXCHANGES", "ALL"))

    # request / retry behaviour
    timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("FETCH_TIMEOUT_SECONDS", "5")),
        gt=0,
        validate_default=True,
    )
    max_retries: int = Field(
        default_factory=lambda: int(os.getenv("FETCH_MAX_RETRIES", "3")),
        ge=0,
        validate_default=True,
    )
    retry_delay_seconds: float = Field(
        default_factory=lambda: float(os.getenv("FETCH_RETRY_DELAY_SECONDS", "5")),
        ge=0,
        validate_default=True,
    )


class TelegramConfig(BaseModel):
    """Messaging endpoint configuration."""
    bot_token: str = Field(
        default_factory=lambda: os.getenv("TELEGRAM_BOT_TOKEN", "YOUR_TELEGRAM_BOT_TOKEN")
    )
    chat_id: str = Field(
        default_factory=lambda: os.getenv("TELEGRAM_CHAT_ID", "YOUR_TELEGRAM_CHAT_ID")
    )
    api_base_url: str = Field(
        default_factory=lambda: os.getenv("TELEGRAM_API_URL", "https://api.telegram.org")
    )
    timeout_seconds: float = Field(default=10.0, gt=0)

    # message content
    symbol_label: str = Field(
        default_factory=lambda: os.getenv("ALERT_SYMBOL_LABEL", "BTCUSDT.P")
    )
    footer: str = Field(
        default_factory=lambda: os.getenv(
            "ALERT_FOOTER", "© 2025 VORFX | All rights reserved."
        )
    )


class MonitorConfig(BaseModel):
    """Initial thresholds and polling cadence."""
    long_threshold: float = Field(
        default_factory=lambda: float(os.getenv("LONG_THRESHOLD", "5000000"))
    )
    short_threshold: float = Field(
        default_factory=lambda: float(os.getenv("SHORT_THRESHOLD", "10000000"))
    )
    poll_interval_seconds: float = Field(
        default_factory=lambda: float(os.getenv("POLL_INTERVAL_SECONDS", "60")),
        gt=0,
        validate_default=True,
    )


class ServerConfig(BaseModel):
    """Control surface configuration."""
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    # consecutive fetch failures before /health reports DEGRADED
    degraded_after_failures: int = Field(default=3, ge=1)


class Config(BaseModel):
    """Main application configuration."""
    coinglass: CoinglassConfig = Field(default_factory=CoinglassConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_dir: str = Field(default_factory=lambda: os.getenv("LOG_DIR", "logs"))

# single global config instance that everything uses
config = Config()
