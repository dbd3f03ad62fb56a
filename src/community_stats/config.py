"""
Runtime settings for the community statistics service.
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class StatsSettings(BaseModel):
    database_url: Optional[str] = None
    """SQLAlchemy URL of the store; unset means no repository is built"""

    per_month_window_months: Optional[int] = None
    """Restrict per-month series to this many trailing months (unset: whole history)"""

    log_level: str = "INFO"


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_settings(dotenv: bool = True) -> StatsSettings:
    if dotenv:
        load_dotenv()
    defaults = StatsSettings()
    window = _env_int("COMMUNITY_STATS_PER_MONTH_WINDOW_MONTHS", defaults.per_month_window_months)
    if window is not None and window <= 0:
        window = None
    return StatsSettings(
        database_url=os.getenv("COMMUNITY_STATS_DATABASE_URL", defaults.database_url),
        per_month_window_months=window,
        log_level=os.getenv("COMMUNITY_STATS_LOG_LEVEL", defaults.log_level).upper(),
    )
