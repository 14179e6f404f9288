"""
Error taxonomy for npm-statistic.

Domain and storage code raise these; the CLI boundary in ``main.run`` turns
them into a single diagnostic line and a non-zero exit code.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class NpmStatisticError(Exception):
    """Base class for every error the tool reports to the user."""


class DocumentMalformedError(NpmStatisticError):
    """A JSON file exists but could not be decoded."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f'Cannot parse "{path}": {reason}')


class ConfigMalformedError(NpmStatisticError):
    def __init__(self, path: Path, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f'Wrong config format (in "{path}").'
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class StatisticsFileMalformedError(NpmStatisticError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f'Wrong statistics file format (in "{path}"): {reason}')


class UnknownCommandError(NpmStatisticError):
    def __init__(self, command: str):
        self.command = command
        super().__init__(f'Unknown command: "{command}".')


class InsufficientArgumentsError(NpmStatisticError):
    def __init__(self, command: str, expected: int, got: int):
        self.command = command
        self.expected = expected
        self.got = got
        super().__init__(f'Not enough args for "{command}": expected {expected}, got {got}.')


class InvalidMutationTargetError(NpmStatisticError):
    """The parent of a dotted path is missing or is not a container."""

    def __init__(self, key: str, parent_path: str):
        self.key = key
        self.parent_path = parent_path
        super().__init__(f'Cannot set key "{key}" in "{parent_path}".')


class FetchError(NpmStatisticError):
    """Retrieving or parsing remote data for one package failed."""

    def __init__(self, package_name: str, reason: str):
        self.package_name = package_name
        self.reason = reason
        super().__init__(f"{package_name}: {reason}")


class NetworkError(FetchError):
    pass


class ParseError(FetchError):
    pass
