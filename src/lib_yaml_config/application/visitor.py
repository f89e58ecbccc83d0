"""Multi-value path visiting.

Purpose
-------
Collect every node matched by a path that may fan out (``*``, ``**``,
``[*]``, ``[]`` and ``[field=value]``). Matches are reported depth-first in
document order: mapping insertion order, then sequence index order.

Semantics
---------
* The literal prefix before the first fan-out segment is resolved with
  :func:`lib_yaml_config.application.navigator.resolve_segments`, so a missing
  prefix raises :class:`~lib_yaml_config.domain.errors.NotFound` exactly like
  a single-value lookup.
* From the first fan-out segment on, branches that do not match are pruned
  silently; a path matching nothing yields an empty list.
* ``**`` in the middle of a path anchors the remainder at the current node
  and at every container below it (zero or more levels), so ``a.**.name``
  also matches ``a.name``. Write ``a.*.**.name`` to require at least one
  level in between. A trailing ``**`` yields every leaf scalar below the
  current node.
* ``**`` is applied before any predicate that follows it: ``a.**[id=1]``
  filters the children of every anchor, skipping non-map elements.
* YAML ``null`` leaves are never reported.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence

from ..domain.tree import NodeKind, children, is_container, kind_of, positional
from ..domain.ypath import (
    DoubleWildcard,
    Index,
    Key,
    LastIndex,
    PathExpression,
    PathSegment,
    Predicate,
    Wildcard,
    parse_path,
)
from .navigator import MISSING, lookup_key, match_predicate, resolve_segments

Visitor = Callable[[Any], None]


def visit(tree: Any, path: str | PathExpression) -> list[Any]:
    """Return all nodes matched by *path* in document order.

    Examples
    --------
    >>> visit({"a": {"name": 1}, "b": {"name": 2}}, "*.name")
    [1, 2]
    >>> visit({"a": {"x": [1, 2], "y": {"z": 3}}}, "a.**")
    [1, 2, 3]
    >>> visit({"a": {}}, "a.*.missing")
    []
    """

    collected: list[Any] = []
    walk(tree, path, collected.append)
    return collected


def walk(tree: Any, path: str | PathExpression, visitor: Visitor) -> None:
    """Call *visitor* for every node matched by *path*."""

    expression = parse_path(path) if isinstance(path, str) else path
    if expression.is_empty:
        visitor(tree)
        return
    split = expression.fan_out_index()
    anchor = resolve_segments(tree, expression.segments[:split], expression.raw)
    _descend(anchor, expression.segments, split, visitor)


def _descend(node: Any, segments: Sequence[PathSegment], index: int, visitor: Visitor) -> None:
    if index == len(segments):
        if node is not None:
            visitor(node)
        return

    segment = segments[index]
    if isinstance(segment, DoubleWildcard):
        if index == len(segments) - 1:
            _leaves(node, visitor)
            return
        _descend(node, segments, index + 1, visitor)
        for _, child in children(node):
            if is_container(child):
                _descend(child, segments, index, visitor)
        return

    if isinstance(segment, Wildcard):
        for _, child in children(node):
            _descend(child, segments, index + 1, visitor)
        return

    kind = kind_of(node)
    if isinstance(segment, Key):
        if kind is NodeKind.MAPPING:
            value = lookup_key(node, segment.name)
            if value is not MISSING:
                _descend(value, segments, index + 1, visitor)
        elif kind is NodeKind.SEQUENCE and segment.name.isdigit():
            _descend_at(node, int(segment.name), segments, index, visitor)
        return

    if not is_container(node):
        return
    if isinstance(segment, Index):
        _descend_at(node, segment.position, segments, index, visitor)
    elif isinstance(segment, LastIndex):
        _descend_at(node, len(node) - 1, segments, index, visitor)
    elif isinstance(segment, Predicate):
        for candidate in positional(node):
            if kind_of(candidate) is not NodeKind.MAPPING:
                continue
            matched = match_predicate(candidate, segment, "")
            if matched is not None:
                _descend(matched, segments, index + 1, visitor)


def _descend_at(node: Any, position: int, segments: Sequence[PathSegment], index: int, visitor: Visitor) -> None:
    items = positional(node)
    if 0 <= position < len(items):
        _descend(items[position], segments, index + 1, visitor)


def _leaves(node: Any, visitor: Visitor) -> None:
    if is_container(node):
        for _, child in children(node):
            _leaves(child, visitor)
    elif node is not None:
        visitor(node)
