from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.datasource import DataSource, InMemoryDataSource, SupabaseDataSource

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DASHBOARD_", env_file=".env", extra="ignore")

    supabase_url: str = ""
    supabase_key: str = ""
    http_timeout: float = 10.0
    page_size: int = Field(default=10, gt=0)
    data_file: Optional[Path] = None
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def create_data_source(settings: Settings) -> DataSource:
    if settings.supabase_url:
        if not settings.supabase_key:
            logger.warning("DASHBOARD_SUPABASE_URL is set without DASHBOARD_SUPABASE_KEY")
        logger.info("using Supabase data source at %s", settings.supabase_url)
        return SupabaseDataSource(settings.supabase_url, settings.supabase_key, timeout=settings.http_timeout)
    if settings.data_file is not None:
        return InMemoryDataSource.from_json(settings.data_file)
    logger.info("no backend configured; starting with empty in-memory tables")
    return InMemoryDataSource()
