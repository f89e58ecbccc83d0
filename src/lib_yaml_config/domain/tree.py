"""Tree node classification and copy helpers.

Purpose
-------
Parsed YAML arrives as plain ``dict``/``list``/scalar values. Navigation and
merging dispatch on the *kind* of a node rather than on ad-hoc ``isinstance``
chains; this module is the single place that decides what a node is.

Contents
--------
* :class:`NodeKind` – the three node variants (plus ``NULL`` for YAML ``~``).
* :func:`kind_of` – classify a node.
* :func:`children` – ordered ``(label, child)`` pairs of a container.
* :func:`scalar_text` – canonical text for scalar comparisons/coercion.
* :func:`deepcopy_tree` – clone a tree so callers never alias stored nodes.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Iterator


class NodeKind(Enum):
    """Variants of a configuration tree node."""

    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SCALAR = "scalar"
    NULL = "null"


def kind_of(node: Any) -> NodeKind:
    """Return the :class:`NodeKind` for *node*.

    Tuples count as sequences so frozen or hand-built trees behave like parsed
    ones.

    Examples
    --------
    >>> kind_of({"a": 1}), kind_of([1]), kind_of("x"), kind_of(None)
    (<NodeKind.MAPPING: 'mapping'>, <NodeKind.SEQUENCE: 'sequence'>, <NodeKind.SCALAR: 'scalar'>, <NodeKind.NULL: 'null'>)
    """

    if node is None:
        return NodeKind.NULL
    if isinstance(node, Mapping):
        return NodeKind.MAPPING
    if isinstance(node, (list, tuple)):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def is_container(node: Any) -> bool:
    """Return ``True`` for mappings and sequences."""

    return kind_of(node) in (NodeKind.MAPPING, NodeKind.SEQUENCE)


def children(node: Any) -> Iterator[tuple[str, Any]]:
    """Yield ``(label, child)`` pairs in document order.

    Mapping labels are the keys, sequence labels the decimal indices. Scalars
    have no children.

    Examples
    --------
    >>> list(children(["a", "b"]))
    [('0', 'a'), ('1', 'b')]
    """

    kind = kind_of(node)
    if kind is NodeKind.MAPPING:
        for key, value in node.items():
            yield str(key), value
    elif kind is NodeKind.SEQUENCE:
        for index, value in enumerate(node):
            yield str(index), value


def positional(node: Any) -> list[Any]:
    """Return the children of a container as a list (mapping values in key order)."""

    if kind_of(node) is NodeKind.MAPPING:
        return list(node.values())
    return list(node)


def scalar_text(value: Any) -> str:
    """Render a scalar the way YAML would spell it.

    Booleans become ``true``/``false`` and ``None`` becomes ``null`` so that
    predicate comparisons and string coercion match the document text.

    Examples
    --------
    >>> scalar_text(True), scalar_text(None), scalar_text(2.5)
    ('true', 'null', '2.5')
    """

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def deepcopy_tree(node: Any) -> Any:
    """Clone mappings and sequences recursively; scalars are shared.

    Examples
    --------
    >>> original = {"a": [1, {"b": 2}]}
    >>> clone = deepcopy_tree(original)
    >>> clone["a"][1]["b"] = 3
    >>> original["a"][1]["b"]
    2
    """

    kind = kind_of(node)
    if kind is NodeKind.MAPPING:
        return {key: deepcopy_tree(value) for key, value in node.items()}
    if kind is NodeKind.SEQUENCE:
        return [deepcopy_tree(item) for item in node]
    return node
