from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "zeitkonto"
    calculation_version: int = 1
    log_level: str = "INFO"
    log_json: bool = True
    recalc_max_days: int = 366

    model_config = SettingsConfigDict(
        env_prefix="ZEITKONTO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_calculation_version() -> int:
    return max(1, get_settings().calculation_version)


def get_log_level() -> str:
    raw = (get_settings().log_level or "").strip().upper()
    return raw or "INFO"
