from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AppSettings(BaseModel):
    """
    Tool settings.
    Read from the optional ``settings`` object of config.json, so they can be
    changed with e.g. ``npm-statistic set settings.max_concurrency 8``.
    """

    model_config = ConfigDict(extra="ignore")

    registry_url: str = Field(
        default="https://registry.npmjs.org",
        description="Base URL of the npm registry.",
    )
    downloads_url: str = Field(
        default="https://api.npmjs.org/downloads/point",
        description="Base URL of the npm downloads API (point values).",
    )
    download_period: str = Field(
        default="last-month",
        description="Downloads API period: last-day, last-week, last-month or a YYYY-MM-DD:YYYY-MM-DD range.",
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Per-request network timeout in seconds.",
    )
    max_concurrency: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Maximum number of packages fetched at the same time.",
    )
