from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from npm_statistic.data.models import AppSettings
from npm_statistic.domain.errors import ConfigMalformedError, DocumentMalformedError
from npm_statistic.storage.db_manager import DocumentStore

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "NPM_STATISTIC_HOME"
CONFIG_FILE_NAME = "config.json"
STATS_DIR_NAME = "stats"
SETTINGS_KEY = "settings"


def get_base_dir() -> Path:
    """
    Determine the directory holding config.json and stats/.

    Priority:
    1. Environment variable NPM_STATISTIC_HOME
    2. The current working directory
    """
    env_path = os.environ.get(HOME_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.cwd()


class ConfigRepository:
    """
    Owns config.json and the stats/ directory next to it.
    """

    def __init__(self, store: DocumentStore, base_dir: Optional[Path] = None):
        self._store = store
        self._base_dir = base_dir if base_dir is not None else get_base_dir()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def config_path(self) -> Path:
        return self._base_dir / CONFIG_FILE_NAME

    @property
    def stats_dir(self) -> Path:
        return self._base_dir / STATS_DIR_NAME

    def bootstrap(self) -> None:
        """
        Create a missing config.json ({}) and stats/ directory.
        Safe to call on every run.
        """
        self._base_dir.mkdir(parents=True, exist_ok=True)

        if not self._store.exists(self.config_path):
            logger.warning(f'Cannot find config ("{self.config_path}"). Create new empty config.')
            self._store.save(self.config_path, {})

        if not self.stats_dir.is_dir():
            logger.info(f"Creating statistics directory {self.stats_dir}")
            self.stats_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> Dict[str, Any]:
        """
        Load config.json. The top level must be a JSON object.
        A missing file (removed after bootstrap) reads as an empty config.
        """
        try:
            config = self._store.load(self.config_path)
        except DocumentMalformedError as e:
            raise ConfigMalformedError(self.config_path, e.reason) from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigMalformedError(
                self.config_path,
                f"Top level must be an object, got {type(config).__name__}.",
            )
        return config

    def save(self, config: Dict[str, Any]) -> None:
        self._store.save(self.config_path, config)

    def settings(self, config: Dict[str, Any]) -> AppSettings:
        raw = config.get(SETTINGS_KEY)
        if raw is None:
            return AppSettings()
        if not isinstance(raw, dict):
            raise ConfigMalformedError(self.config_path, f'"{SETTINGS_KEY}" must be an object.')
        try:
            return AppSettings(**raw)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigMalformedError(self.config_path, f"Invalid settings: {errors}") from e
