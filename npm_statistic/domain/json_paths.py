import json
import math
import re
from typing import Any, List

from npm_statistic.domain.errors import InvalidMutationTargetError
from npm_statistic.domain.models import JsonValue

# Canonical array index: "0", "7", "42" but never "07" or "-1".
_INDEX_RE = re.compile(r"^(0|[1-9][0-9]*)$")


class _Missing:
    """Sentinel for a path that does not resolve. Distinct from a stored null."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def split_path(dotted: str) -> List[str]:
    """
    Split a dotted path into keys.

    ``"packages.0.name"`` -> ``["packages", "0", "name"]``. The empty string
    is the single key ``""``; use an empty list to address the root.
    """
    return dotted.split(".")


def is_container(value: Any) -> bool:
    return isinstance(value, (dict, list))


def _child(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value[key] if key in value else MISSING
    if isinstance(value, list):
        if _INDEX_RE.match(key):
            index = int(key)
            if index < len(value):
                return value[index]
        return MISSING
    return MISSING


def resolve(document: JsonValue, keys: List[str]) -> Any:
    """
    Walk ``document`` one key at a time.

    Returns the value found at the end of the path, or ``MISSING`` as soon as
    a step does not resolve. Never raises. An empty path returns the document.
    """
    value: Any = document
    for key in keys:
        value = _child(value, key)
        if value is MISSING:
            return MISSING
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(text: str) -> float:
    # "1e400" overflows to inf, which has no JSON representation.
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"{text} is out of range")
    return value


def loads_strict(text: str) -> JsonValue:
    """
    Decode JSON text, rejecting NaN, Infinity and numbers that overflow a
    float. Raises ValueError (json.JSONDecodeError for syntax errors).
    """
    return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)


def parse_value(raw: str) -> JsonValue:
    """
    Interpret a command-line value.

    Valid JSON (numbers, true/false/null, objects, arrays, quoted strings)
    is decoded; anything else is kept verbatim as a string.
    """
    try:
        return loads_strict(raw)
    except ValueError:
        return raw


def assign(document: JsonValue, keys: List[str], value: JsonValue) -> None:
    """
    Set ``value`` at ``keys`` inside ``document`` in place.

    The parent (all keys but the last) must resolve to a dict or a list.
    List parents accept an existing index (replace) or ``len(list)``
    (append). Raises InvalidMutationTargetError otherwise; the document is
    not modified in that case.
    """
    if not keys:
        raise ValueError("assign() needs at least one key")

    parent_keys, final_key = keys[:-1], keys[-1]
    parent = resolve(document, parent_keys)
    parent_path = ".".join(parent_keys)

    if isinstance(parent, dict):
        parent[final_key] = value
        return

    if isinstance(parent, list) and _INDEX_RE.match(final_key):
        index = int(final_key)
        if index < len(parent):
            parent[index] = value
            return
        if index == len(parent):
            parent.append(value)
            return

    raise InvalidMutationTargetError(final_key, parent_path)


def to_json_text(value: Any) -> str:
    """Compact JSON text for printing; ``MISSING`` prints as ``null``."""
    if value is MISSING:
        value = None
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
