"""Application settings and shared constants."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "Woodshop ERP"
    database_url: str = Field("sqlite:///./woodshop_erp.db")
    log_level: str = Field("INFO")
    default_profit_margin: float = Field(30.0)
    pending_project_share: float = Field(0.5)
    recent_activity_limit: int = Field(5)
    currency_symbol: str = Field("R$")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be a standard logging level name")
        return level

    @field_validator("default_profit_margin")
    @classmethod
    def validate_profit_margin(cls, v: float) -> float:
        if v < 0 or v > 99:
            raise ValueError("default_profit_margin must be between 0 and 99")
        return v

    @field_validator("pending_project_share")
    @classmethod
    def validate_pending_share(cls, v: float) -> float:
        if v < 0 or v > 1:
            raise ValueError("pending_project_share must be between 0 and 1")
        return v

    @field_validator("recent_activity_limit")
    @classmethod
    def validate_activity_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("recent_activity_limit must be positive")
        return v


def sale_price_from_margin(cost: float, margin_pct: float) -> float:
    if margin_pct <= 0 or margin_pct >= 100:
        return cost
    return round(cost / (1 - margin_pct / 100.0), 2)


def format_currency(value: float, symbol: str = "R$") -> str:
    """Brazilian style money formatting: R$ 1.234,56"""
    text = f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{symbol} {text}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
