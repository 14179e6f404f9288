"""
Update the current month's statistics for every configured package.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from npm_statistic.data.statistics import StatisticsStore, merge_package
from npm_statistic.domain.errors import ConfigMalformedError, FetchError
from npm_statistic.domain.models import PackageEntry, PackageInfo, StatisticsDocument, UpdateReport
from npm_statistic.services.package_fetcher import PackageFetcher

logger = logging.getLogger(__name__)

PACKAGES_KEY = "packages"


def configured_package_names(config: Dict[str, Any], config_path: Path) -> List[str]:
    """
    Names from ``config.packages`` in order, without duplicates.
    Entries that are not objects with a non-empty string ``name`` are skipped.
    """
    raw = config.get(PACKAGES_KEY)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigMalformedError(config_path, f'"{PACKAGES_KEY}" must be a list.')

    names: List[str] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.warning(f"Skipping {PACKAGES_KEY}.{i}: expected an object, got {type(item).__name__}")
            continue
        try:
            entry = PackageEntry(**item)
        except ValidationError:
            logger.warning(f'Skipping {PACKAGES_KEY}.{i}: no valid "name"')
            continue
        if entry.name in names:
            logger.debug(f"Ignoring duplicate package {entry.name}")
            continue
        names.append(entry.name)
    return names


async def _fetch_one(
    fetcher: PackageFetcher,
    name: str,
    semaphore: asyncio.Semaphore,
) -> Tuple[str, Optional[PackageInfo], Optional[str]]:
    async with semaphore:
        try:
            return name, await fetcher.fetch(name), None
        except FetchError as e:
            logger.warning(f"Got error: {e}")
            return name, None, e.reason
        except Exception as e:
            # Log error but continue with other packages
            logger.error(f"Failed to update package {name}: {e}", exc_info=True)
            return name, None, str(e) or type(e).__name__


async def update_statistics(
    names: List[str],
    fetcher: PackageFetcher,
    stats: StatisticsStore,
    period_key: str,
    doc: StatisticsDocument,
    max_concurrency: int = 4,
) -> UpdateReport:
    """
    Fetch every package in ``names`` and merge the results into ``doc``,
    the statistics document of ``period_key``.

    - ``doc`` is loaded by the caller (StatisticsStore.ensure_and_load)
      before the event loop starts, so a malformed file aborts the run
      before any network request.
    - Fetches run concurrently, at most ``max_concurrency`` at a time.
      A failing package is logged and skipped.
    - The file is written once, after all fetches have settled, and only
      when at least one package was fetched.
    """
    report = UpdateReport(period_key=period_key)

    if not names:
        logger.info("No packages configured. Nothing to update.")
        return report

    logger.info(f"Updating {len(names)} package(s) for {period_key}")
    semaphore = asyncio.Semaphore(max_concurrency)
    results = await asyncio.gather(*(_fetch_one(fetcher, name, semaphore) for name in names))

    for name, info, error in results:
        if info is None:
            report.failed[name] = error or "unknown error"
            continue
        outcome = merge_package(doc, info)
        logger.debug(f"{name}: {outcome}")
        report.updated.append(name)

    if report.updated:
        await stats.save_async(period_key, doc)
        report.saved = True

    logger.info(
        f"Updated {len(report.updated)} of {len(names)} package(s) in {stats.path_for(period_key)}"
    )
    return report
