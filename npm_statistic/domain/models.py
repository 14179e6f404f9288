"""
Pydantic models for npm-statistic.

This module defines the records that flow through the tool:
- Package entries read from the ``packages`` list of config.json
- PackageInfo records produced by the package fetcher
- Monthly statistics documents persisted under stats/

The configuration document itself stays an untyped JSON tree (see
``JsonValue``) because ``get``/``set`` address arbitrary paths inside it.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# A decoded JSON document. Containers are dict (object) and list (array);
# everything else is a scalar.
JsonScalar = Union[None, bool, int, float, str]
JsonValue = Union[JsonScalar, List["JsonValue"], Dict[str, "JsonValue"]]


# ---------------------------------------------------------------------------
# Configuration models (config.json)
# ---------------------------------------------------------------------------


class PackageEntry(BaseModel):
    """
    One tracked package as listed in ``config.packages``.

    Only ``name`` is required; any other keys the user stores next to it are
    kept but ignored by the updater.
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(
        min_length=1,
        description="npm package name, including the scope for scoped packages (e.g. '@types/node').",
    )


# ---------------------------------------------------------------------------
# Fetched package data
# ---------------------------------------------------------------------------


class PackageInfo(BaseModel):
    """
    Snapshot of one package's remote data at fetch time.

    Built by the package fetcher from the npm registry document of the latest
    release and the downloads API point value for the configured period.
    """

    name: str = Field(description="Package name as reported by the registry.")
    version: Optional[str] = Field(
        default=None,
        description="Version tagged 'latest' on the registry.",
    )
    description: Optional[str] = Field(default=None)
    license: Optional[str] = Field(default=None)
    homepage: Optional[str] = Field(default=None)
    downloads: int = Field(
        ge=0,
        description="Number of downloads within [period_start, period_end].",
    )
    period: str = Field(
        default="last-month",
        description="Downloads API period the count was requested for.",
    )
    period_start: Optional[date] = Field(default=None)
    period_end: Optional[date] = Field(default=None)
    fetched_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp of the fetch.",
    )


# ---------------------------------------------------------------------------
# Statistics models (stats/MM.YYYY.json)
# ---------------------------------------------------------------------------


class PackageRecord(BaseModel):
    """
    A package entry as stored in a statistics file.

    Extra keys are allowed so records written by other versions of the tool
    (or edited by hand) survive a load/merge/save cycle unchanged.
    """

    model_config = ConfigDict(extra="allow")

    name: str


class StatisticsDocument(BaseModel):
    """
    Statistics for one calendar month.

    Always carries a ``packages`` list, even when freshly created.
    """

    model_config = ConfigDict(extra="allow")

    packages: List[PackageRecord] = Field(
        description="Package records, at most one per package name.",
    )

    def find(self, name: str) -> Optional[int]:
        for i, record in enumerate(self.packages):
            if record.name == name:
                return i
        return None

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class UpdateReport(BaseModel):
    """Outcome of one ``update`` run."""

    period_key: str
    updated: List[str] = Field(default_factory=list)
    failed: Dict[str, str] = Field(
        default_factory=dict,
        description="Package name -> reason for every package that could not be fetched.",
    )
    saved: bool = Field(
        default=False,
        description="True when the statistics file was rewritten.",
    )
