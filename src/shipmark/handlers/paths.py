"""Dotted key path navigation over round-trip YAML documents.

Documents are the ``CommentedMap``/``CommentedSeq`` trees produced by
ruamel.yaml's round-trip loader. Comments and scalar styles live on the
containers, so assigning a single key leaves everything else untouched.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping, MutableSequence
from typing import Any

from ruamel.yaml.scalarstring import ScalarString

from shipmark.exceptions import KeyPathError

logger = logging.getLogger(__name__)


def parse_path(path: str) -> list[str]:
    """Split a dotted path into keys.

    A segment wrapped in single or double quotes is one key, even when it
    contains dots: ``annotations."app.kubernetes.io/version"``.
    """
    keys: list[str] = []
    current = ""
    quote: str | None = None

    for char in path:
        if quote is None and char in ("'", '"'):
            quote = char
        elif quote is not None and char == quote:
            quote = None
        elif quote is None and char == ".":
            if current:
                keys.append(current)
            current = ""
        else:
            current += char

    if current:
        keys.append(current)
    return keys


def get_path(doc: Any, path: str) -> Any:
    """Return the value at ``path``, or None if the path does not resolve."""
    current = doc
    for key in parse_path(path):
        if isinstance(current, MutableSequence):
            index = _as_index(key)
            if index is None or not 0 <= index < len(current):
                return None
            current = current[index]
        elif isinstance(current, MutableMapping):
            if key not in current:
                return None
            current = current[key]
        else:
            return None
    return current


def set_path(doc: Any, path: str, value: str) -> None:
    """Assign ``value`` to the last key of ``path``.

    Every segment except the last must already exist and be a collection,
    and the last segment must be a key of a mapping. Missing intermediate
    containers are never created.

    Raises:
        KeyPathError: If the path cannot be resolved
    """
    keys = parse_path(path)
    if not keys:
        raise KeyPathError("Empty key path")

    current = doc
    for position, key in enumerate(keys[:-1], start=1):
        prefix = ".".join(keys[:position])
        if isinstance(current, MutableSequence):
            index = _as_index(key)
            if index is None or not 0 <= index < len(current):
                raise KeyPathError(f"Key not found: {prefix}")
            current = current[index]
        elif isinstance(current, MutableMapping):
            if current.get(key) is None:
                raise KeyPathError(f"Key not found: {prefix}")
            current = current[key]
        else:
            raise KeyPathError(f"Cannot navigate to {prefix}")

    if not isinstance(current, MutableMapping):
        raise KeyPathError(f"Cannot set value at {path}")

    final = keys[-1]
    previous = current.get(final)
    if isinstance(previous, ScalarString):
        # keep the quoting style of the value being replaced
        current[final] = type(previous)(value)
    else:
        current[final] = value
    logger.debug("Set %s to %r", path, value)


def _as_index(key: str) -> int | None:
    try:
        return int(key)
    except ValueError:
        return None
