"""Shared test doubles and file helpers."""

import json
from pathlib import Path
from typing import Dict, Optional

from npm_statistic.domain.errors import NetworkError
from npm_statistic.domain.models import PackageInfo
from npm_statistic.services.package_fetcher import PackageFetcher


class FakeFetcher(PackageFetcher):
    """Returns canned PackageInfo records; names in ``failures`` raise."""

    def __init__(self, downloads: Optional[Dict[str, int]] = None, failures=()):
        self.downloads = downloads or {}
        self.failures = set(failures)
        self.calls = []

    async def fetch(self, name: str) -> PackageInfo:
        self.calls.append(name)
        if name in self.failures:
            raise NetworkError(name, "connection refused")
        return PackageInfo(name=name, version="1.0.0", downloads=self.downloads.get(name, 0))


def write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))
