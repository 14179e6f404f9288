import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from npm_statistic.domain.errors import DocumentMalformedError
from npm_statistic.domain.json_paths import loads_strict
from npm_statistic.domain.models import JsonValue
from npm_statistic.storage.db_manager import DocumentStore

logger = logging.getLogger(__name__)


class JsonDocumentStore(DocumentStore):
    """
    UTF-8 JSON files on the local filesystem.

    Writes go to ``<name>.tmp`` next to the target and are moved into place
    once fully flushed, so a failed write never leaves a truncated document.
    No locking: two processes writing the same file race and the last
    writer wins.
    """

    def __init__(self, indent: Optional[int] = 2):
        self._indent = indent

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def load(self, path: Path) -> Optional[JsonValue]:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise DocumentMalformedError(path, f"not valid UTF-8 ({e.reason})") from e

        try:
            return loads_strict(raw)
        except json.JSONDecodeError as e:
            raise DocumentMalformedError(path, e.msg + f" at line {e.lineno} column {e.colno}") from e
        except ValueError as e:
            raise DocumentMalformedError(path, str(e)) from e

    def dumps(self, data: JsonValue) -> str:
        return json.dumps(data, indent=self._indent, ensure_ascii=False, allow_nan=False)

    def save(self, path: Path, data: JsonValue) -> None:
        content = self.dumps(data)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            tmp_path.replace(path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {len(content)} characters to {path}")

    async def save_async(self, path: Path, data: JsonValue) -> None:
        content = self.dumps(data)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(content)
                await f.flush()
                await asyncio.get_running_loop().run_in_executor(None, os.fsync, f.fileno())
            await aiofiles.os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {len(content)} characters to {path}")
