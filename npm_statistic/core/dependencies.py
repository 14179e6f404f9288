from pathlib import Path
from typing import Optional

import httpx

from npm_statistic.data.models import AppSettings
from npm_statistic.data.repository import ConfigRepository
from npm_statistic.data.statistics import StatisticsStore
from npm_statistic.services.package_fetcher import NpmPackageFetcher, PackageFetcher
from npm_statistic.storage.db_manager import DocumentStore
from npm_statistic.storage.json_db_manager import JsonDocumentStore


class Dependencies:
    """
    Builds the collaborators of one invocation.
    Tests pass a base directory and an httpx transport or a fetcher.
    """

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        store: Optional[DocumentStore] = None,
        fetcher: Optional[PackageFetcher] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.store = store or JsonDocumentStore()
        self.config_repository = ConfigRepository(self.store, base_dir)
        self._fetcher = fetcher
        self._transport = transport

    def get_statistics_store(self) -> StatisticsStore:
        return StatisticsStore(self.config_repository.stats_dir, self.store)

    def get_fetcher(self, settings: AppSettings) -> PackageFetcher:
        if self._fetcher is not None:
            return self._fetcher
        return NpmPackageFetcher(settings, transport=self._transport)
