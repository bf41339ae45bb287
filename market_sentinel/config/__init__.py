"""
Application Settings
Load from environment variables, .env and an optional YAML file
"""

import os
from decimal import Decimal
from typing import Optional, Tuple, Type

import pytz
from apscheduler.triggers.cron import CronTrigger
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from market_sentinel.domain.errors import ConfigurationError
from market_sentinel.domain.strategy import factor_ladders
from market_sentinel.domain.strategy.tier_policy import validate_tier_table

DEFAULT_CONFIG_PATH = "config/config.yml"


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Market
    # ======================
    SYMBOL: str = "SPX500"
    DATA_SOURCE_BASE_URL: str = ""
    DATA_SOURCE_API_KEY: Optional[str] = None
    HTTPS_PROXY: Optional[str] = None
    MOCK_MARKET_DATA: bool = False

    # ======================
    # Telegram
    # ======================
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_CHAT_ID: Optional[str] = None
    TELEGRAM_ENABLED: bool = False
    NOTIFY_MAX_RETRIES: int = Field(default=3, ge=0)

    # ======================
    # Fund
    # ======================
    MONTHLY_BUDGET: Decimal = Decimal("10000")
    FUND_STATE_FILE: str = "data/fund_state.json"
    HISTORY_DB_PATH: str = "data/market_sentinel.db"

    # ======================
    # Scheduler
    # ======================
    SCHEDULER_ENABLED: bool = True
    RUN_ON_START: bool = False
    WEEKLY_CRON: str = "0 8 * * mon"
    DAILY_CRON: str = "0 22 * * mon-fri"
    MONTHLY_CRON: str = "0 9 1 * *"
    QUARTERLY_CRON: str = "0 9 1 1,4,7,10 *"
    WEEKLY_RESET_CRON: str = "0 0 * * mon"

    # ======================
    # Timezone
    # ======================
    TIMEZONE: str = "Asia/Shanghai"

    # ======================
    # Application
    # ======================
    DEBUG: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ======================
    # Logging
    # ======================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/market_sentinel.log"
    LOG_MAX_BYTES: int = 10_485_760
    LOG_BACKUP_COUNT: int = 5

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # YAML sits below the environment; a missing file yields nothing
        yaml_settings = YamlConfigSettingsSource(
            settings_cls,
            yaml_file=os.getenv("CONFIG_PATH", DEFAULT_CONFIG_PATH),
        )
        return init_settings, env_settings, dotenv_settings, yaml_settings, file_secret_settings

    @property
    def cron_schedules(self) -> dict:
        return {
            "weekly": self.WEEKLY_CRON,
            "daily": self.DAILY_CRON,
            "monthly": self.MONTHLY_CRON,
            "quarterly": self.QUARTERLY_CRON,
            "weekly_reset": self.WEEKLY_RESET_CRON,
        }

    def validate_runtime(self) -> None:
        """
        Startup checks that field types alone cannot express,
        plus the scoring ladders and tier table

        Raises:
            ConfigurationError: settings unusable for a live process
        """
        problems = []

        if self.MONTHLY_BUDGET <= 0:
            problems.append("MONTHLY_BUDGET must be positive")

        if self.TELEGRAM_ENABLED:
            if not self.TELEGRAM_BOT_TOKEN:
                problems.append("TELEGRAM_BOT_TOKEN is required when TELEGRAM_ENABLED")
            if not self.TELEGRAM_CHAT_ID:
                problems.append("TELEGRAM_CHAT_ID is required when TELEGRAM_ENABLED")

        try:
            timezone = pytz.timezone(self.TIMEZONE)
        except pytz.UnknownTimeZoneError:
            problems.append(f"Unknown TIMEZONE '{self.TIMEZONE}'")
            timezone = pytz.utc

        for name, expr in self.cron_schedules.items():
            try:
                CronTrigger.from_crontab(expr, timezone=timezone)
            except ValueError as exc:
                problems.append(f"Invalid {name} cron '{expr}': {exc}")

        try:
            factor_ladders.validate_ladders()
            validate_tier_table()
        except ValueError as exc:
            problems.append(f"Invalid scoring tables: {exc}")

        if problems:
            raise ConfigurationError("; ".join(problems))


settings = Settings()
