"""
Monthly statistics files.

One file per calendar month is stored at stats/MM.YYYY.json and always has
the shape {"packages": [...]}, with at most one record per package name.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import ValidationError

from npm_statistic.domain.errors import DocumentMalformedError, StatisticsFileMalformedError
from npm_statistic.domain.models import PackageInfo, PackageRecord, StatisticsDocument
from npm_statistic.domain.periods import statistics_file_name
from npm_statistic.storage.db_manager import DocumentStore

logger = logging.getLogger(__name__)

MergeOutcome = Literal["appended", "replaced"]


def empty_statistics() -> StatisticsDocument:
    return StatisticsDocument(packages=[])


def merge_package(doc: StatisticsDocument, info: PackageInfo) -> MergeOutcome:
    """
    Put ``info`` into ``doc.packages``.

    The record with the same name is replaced in place (keeping its
    position); otherwise the record is appended.
    """
    record = PackageRecord(**info.model_dump(mode="json"))
    index = doc.find(info.name)
    if index is None:
        doc.packages.append(record)
        return "appended"
    doc.packages[index] = record
    return "replaced"


class StatisticsStore:
    """Manages storage of the monthly statistics files."""

    def __init__(self, stats_dir: Path, store: DocumentStore):
        self.stats_dir = stats_dir
        self._store = store

    def path_for(self, period_key: str) -> Path:
        return self.stats_dir / statistics_file_name(period_key)

    def ensure_and_load(self, period_key: str) -> StatisticsDocument:
        """
        Load the statistics document for ``period_key``, seeding the file
        with an empty package list first if it does not exist.

        Raises StatisticsFileMalformedError if the file exists but is not a
        valid statistics document. The file is left untouched in that case.
        """
        path = self.path_for(period_key)
        self.stats_dir.mkdir(parents=True, exist_ok=True)
        if self._store.ensure(path, empty_statistics().to_json_dict()):
            logger.info(f"Created statistics file {path}")

        try:
            raw = self._store.load(path)
        except DocumentMalformedError as e:
            raise StatisticsFileMalformedError(path, e.reason) from e

        if raw is None:
            # Removed between ensure() and load().
            return empty_statistics()
        if not isinstance(raw, dict):
            raise StatisticsFileMalformedError(path, f"top level must be an object, got {type(raw).__name__}")
        if "packages" not in raw:
            raise StatisticsFileMalformedError(path, 'missing "packages" list')

        try:
            return StatisticsDocument(**raw)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(p) for p in first["loc"])
            raise StatisticsFileMalformedError(path, f"{location}: {first['msg']}") from e

    def save(self, period_key: str, doc: StatisticsDocument) -> None:
        self._store.save(self.path_for(period_key), doc.to_json_dict())

    async def save_async(self, period_key: str, doc: StatisticsDocument) -> None:
        await self._store.save_async(self.path_for(period_key), doc.to_json_dict())
