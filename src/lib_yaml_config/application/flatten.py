"""Flatten configuration trees into dotted ``key -> value`` properties.

Used by the ``properties`` CLI command and by hosts that feed configuration
into systems expecting flat key/value pairs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator

from ..domain.tree import NodeKind, kind_of
from .config import Config


def flatten(config: Config | Mapping[str, Any], flatten_lists: bool = False) -> dict[str, Any]:
    """Return the leaves of *config* keyed by their dotted path.

    Nested maps always contribute their keys as path components. Lists stay
    whole values unless *flatten_lists* is set, in which case each element is
    keyed by its index (elements themselves are not descended into).

    Examples
    --------
    >>> flatten({"db": {"host": "h", "ports": [1, 2]}})
    {'db.host': 'h', 'db.ports': [1, 2]}
    >>> flatten({"db": {"ports": [1, 2]}}, flatten_lists=True)
    {'db.ports.0': 1, 'db.ports.1': 2}
    """

    tree = config.as_dict() if isinstance(config, Config) else config
    return dict(_entries(tree, None, flatten_lists))


def _entries(mapping: Mapping[Any, Any], prefix: str | None, flatten_lists: bool) -> Iterator[tuple[str, Any]]:
    for key, value in mapping.items():
        name = str(key) if prefix is None else f"{prefix}.{key}"
        kind = kind_of(value)
        if kind is NodeKind.MAPPING:
            yield from _entries(value, name, flatten_lists)
        elif kind is NodeKind.SEQUENCE and flatten_lists:
            for index, item in enumerate(value):
                yield f"{name}.{index}", item
        else:
            yield name, value
