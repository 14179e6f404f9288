"""Pytest fixtures for npm-statistic tests."""

import pytest

from npm_statistic.core.dependencies import Dependencies
from tests.helpers import FakeFetcher


@pytest.fixture
def base_dir(tmp_path, monkeypatch):
    """Empty working directory; NPM_STATISTIC_HOME is cleared."""
    monkeypatch.delenv("NPM_STATISTIC_HOME", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def deps(base_dir, fetcher):
    return Dependencies(base_dir=base_dir, fetcher=fetcher)
