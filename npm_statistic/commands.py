"""
The three commands of the tool and their dispatch.

``dispatch`` checks the command name before touching the filesystem, so an
unknown command has no side effect besides the diagnostic.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from npm_statistic.core.dependencies import Dependencies
from npm_statistic.domain.errors import InsufficientArgumentsError, UnknownCommandError
from npm_statistic.domain.json_paths import MISSING, assign, parse_value, resolve, split_path, to_json_text
from npm_statistic.domain.periods import current_period_key
from npm_statistic.services.statistics_updater import configured_package_names, update_statistics

logger = logging.getLogger(__name__)


class CommandKind(str, Enum):
    UPDATE = "update"
    GET = "get"
    SET = "set"


DEFAULT_COMMAND = CommandKind.UPDATE

# Positional arguments each command needs at least.
MIN_ARGUMENTS: Mapping[CommandKind, int] = MappingProxyType({
    CommandKind.UPDATE: 0,
    CommandKind.GET: 0,
    CommandKind.SET: 2,
})

Handler = Callable[[List[str], Dict[str, Any], Dependencies], None]


def parse_command(name: Optional[str]) -> CommandKind:
    """Map a command-line word to a CommandKind. Empty means ``update``."""
    if not name:
        return DEFAULT_COMMAND
    try:
        return CommandKind(name)
    except ValueError:
        raise UnknownCommandError(name) from None


def check_arguments(kind: CommandKind, args: List[str]) -> None:
    expected = MIN_ARGUMENTS[kind]
    if len(args) < expected:
        raise InsufficientArgumentsError(kind.value, expected, len(args))


def run_get(args: List[str], config: Dict[str, Any], deps: Dependencies) -> None:
    """Print the JSON value at the dotted path (the whole config without one)."""
    keys = split_path(args[0]) if args else []
    value = resolve(config, keys)
    if value is MISSING:
        logger.info(f'No value at "{args[0]}".')
    print(to_json_text(value))


def run_set(args: List[str], config: Dict[str, Any], deps: Dependencies) -> None:
    """Assign a value at the dotted path and rewrite config.json."""
    check_arguments(CommandKind.SET, args)
    if len(args) > 2:
        logger.debug(f"Ignoring extra arguments: {args[2:]}")

    path, raw_value = args[0], args[1]
    assign(config, split_path(path), parse_value(raw_value))
    deps.config_repository.save(config)
    logger.debug(f'Set "{path}" in {deps.config_repository.config_path}')


def run_update(args: List[str], config: Dict[str, Any], deps: Dependencies) -> None:
    """Fetch every configured package and merge it into this month's statistics."""
    repository = deps.config_repository
    settings = repository.settings(config)
    names = configured_package_names(config, repository.config_path)
    stats = deps.get_statistics_store()
    period_key = current_period_key()
    doc = stats.ensure_and_load(period_key)
    report = asyncio.run(
        update_statistics(
            names,
            deps.get_fetcher(settings),
            stats,
            period_key,
            doc,
            max_concurrency=settings.max_concurrency,
        )
    )
    if report.failed:
        logger.warning(f"Skipped {len(report.failed)} package(s): {', '.join(report.failed)}")


_HANDLERS: Mapping[CommandKind, Handler] = MappingProxyType({
    CommandKind.UPDATE: run_update,
    CommandKind.GET: run_get,
    CommandKind.SET: run_set,
})


def handler_for(kind: CommandKind) -> Handler:
    return _HANDLERS[kind]


def dispatch(argv: List[str], deps: Optional[Dependencies] = None) -> None:
    """
    Run one command.
    - resolve the command (default ``update``) and check its arguments
    - create config.json / stats/ if missing
    - load config.json (must be a JSON object)
    - call the handler with the remaining arguments
    """
    kind = parse_command(argv[0] if argv else None)
    args = list(argv[1:])
    check_arguments(kind, args)
    deps = deps or Dependencies()

    deps.config_repository.bootstrap()
    config = deps.config_repository.load()
    handler_for(kind)(args, config, deps)
