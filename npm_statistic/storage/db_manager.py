from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from npm_statistic.domain.models import JsonValue


class DocumentStore(ABC):
    """
    Abstract base class for loading and persisting whole JSON documents.
    """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Return True if a document is stored at ``path``."""
        pass

    @abstractmethod
    def load(self, path: Path) -> Optional[JsonValue]:
        """
        Load the document at ``path``.
        Returns None if nothing is stored there; raises DocumentMalformedError
        if something is stored but cannot be decoded.
        """
        pass

    @abstractmethod
    def save(self, path: Path, data: JsonValue) -> None:
        """Replace the document at ``path`` with ``data`` (whole-file write)."""
        pass

    @abstractmethod
    async def save_async(self, path: Path, data: JsonValue) -> None:
        """Same as save(), for callers running inside an event loop."""
        pass

    def ensure(self, path: Path, default: JsonValue) -> bool:
        """
        Create the document with ``default`` if it does not exist yet.
        Returns True when it was created.
        """
        if self.exists(path):
            return False
        self.save(path, default)
        return True
