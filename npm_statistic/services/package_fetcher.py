"""
Fetch package data from the public npm services.
"""
from __future__ import annotations

import logging
import urllib.parse
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from npm_statistic import __version__
from npm_statistic.data.models import AppSettings
from npm_statistic.domain.errors import NetworkError, ParseError
from npm_statistic.domain.models import PackageInfo

logger = logging.getLogger(__name__)


class PackageFetcher(ABC):
    """
    Given a package name, produce a PackageInfo record.
    Implementations raise NetworkError or ParseError on failure.
    """

    @abstractmethod
    async def fetch(self, name: str) -> PackageInfo:
        pass


def _license_name(raw: Any) -> Optional[str]:
    # Old manifests use {"type": "MIT", "url": ...} instead of an SPDX string.
    if isinstance(raw, dict):
        raw = raw.get("type")
    return raw if isinstance(raw, str) else None


def _optional_str(raw: Any) -> Optional[str]:
    return raw if isinstance(raw, str) else None


class NpmPackageFetcher(PackageFetcher):
    """
    Reads the latest release from the npm registry and the download count
    for the configured period from the npm downloads API.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or AppSettings()
        self._transport = transport

    def registry_url(self, name: str) -> str:
        # Scoped names keep the "@" but the "/" must be encoded: @scope%2Fname
        encoded = urllib.parse.quote(name, safe="@")
        return f"{self.settings.registry_url.rstrip('/')}/{encoded}/latest"

    def downloads_url(self, name: str) -> str:
        encoded = urllib.parse.quote(name, safe="@/")
        period = urllib.parse.quote(self.settings.download_period, safe=":")
        return f"{self.settings.downloads_url.rstrip('/')}/{period}/{encoded}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            follow_redirects=True,
            headers={
                "Accept": "application/json",
                "User-Agent": f"npm-statistic/{__version__}",
            },
            transport=self._transport,
        )

    async def _get_json(self, client: httpx.AsyncClient, name: str, url: str) -> Dict[str, Any]:
        logger.debug(f"GET {url}")
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NetworkError(name, f"HTTP {e.response.status_code} from {url}") from e
        except httpx.HTTPError as e:
            raise NetworkError(name, f"{type(e).__name__} while requesting {url}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(name, f"invalid JSON from {url}") from e

        if not isinstance(data, dict):
            raise ParseError(name, f"expected a JSON object from {url}, got {type(data).__name__}")
        return data

    async def fetch(self, name: str) -> PackageInfo:
        async with self._client() as client:
            latest = await self._get_json(client, name, self.registry_url(name))
            downloads = await self._get_json(client, name, self.downloads_url(name))

        if "downloads" not in downloads:
            raise ParseError(name, '"downloads" missing from downloads API response')

        try:
            info = PackageInfo(
                name=name,
                version=_optional_str(latest.get("version")),
                description=_optional_str(latest.get("description")),
                license=_license_name(latest.get("license")),
                homepage=_optional_str(latest.get("homepage")),
                downloads=downloads["downloads"],
                period=self.settings.download_period,
                period_start=downloads.get("start"),
                period_end=downloads.get("end"),
            )
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(p) for p in first["loc"])
            raise ParseError(name, f"{location}: {first['msg']}") from e

        logger.debug(f"Fetched {name} {info.version}: {info.downloads} downloads")
        return info
