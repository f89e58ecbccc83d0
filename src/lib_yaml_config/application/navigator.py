"""Single-value path resolution.

Purpose
-------
Walk a parsed :class:`~lib_yaml_config.domain.ypath.PathExpression` through a
configuration tree one segment at a time and return the node it lands on.
Absence and kind mismatches surface as typed errors; a raw ``None`` is never
returned.

Contents
    - ``resolve``: public entry point accepting a path string or expression.
    - ``resolve_segments``: segment loop shared with the wildcard visitor.
    - ``step``: resolve one literal segment against one node.
    - ``match_predicate``: ``[field=value]`` evaluation shared with the visitor.
    - ``lookup_key``: mapping lookup tolerant of non-string YAML keys.

System Role
-----------
Used by :class:`lib_yaml_config.application.config.Config` for every ``get``
without wildcards, and by :mod:`lib_yaml_config.application.visitor` to
resolve the literal prefix of a wildcard path.
"""

from __future__ import annotations

from typing import Any, Sequence

from ..domain.errors import InvalidType, NotFound
from ..domain.tree import NodeKind, kind_of, positional, scalar_text
from ..domain.ypath import Index, Key, LastIndex, PathExpression, PathSegment, Predicate, parse_path

MISSING: Any = object()
"""Sentinel for "no such key"; distinct from a present YAML ``null``."""


def resolve(tree: Any, path: str | PathExpression) -> Any:
    """Return the node addressed by *path* inside *tree*.

    An empty path returns *tree* itself.

    Raises
    ------
    NotFound
        When a key, index or predicate has no match, or the value is ``null``.
    InvalidType
        When a segment meets a node of the wrong kind or an index is out of
        bounds.

    Examples
    --------
    >>> tree = {"items": [{"id": 1, "v": "a"}, {"id": 2, "v": "b"}]}
    >>> resolve(tree, "items[id=2].v")
    'b'
    >>> resolve(tree, "items[last].id")
    2
    """

    expression = parse_path(path) if isinstance(path, str) else path
    return resolve_segments(tree, expression.segments, expression.raw)


def resolve_segments(tree: Any, segments: Sequence[PathSegment], raw: str) -> Any:
    """Apply *segments* left to right starting at *tree*."""

    current = tree
    for position, segment in enumerate(segments):
        current = step(current, segment, position, raw)
    if current is None:
        raise NotFound("Value is null", path=raw)
    return current


def step(node: Any, segment: PathSegment, position: int, raw: str) -> Any:
    """Resolve a single literal *segment* against *node*."""

    kind = kind_of(node)
    if kind is NodeKind.NULL:
        raise NotFound(f"Unable to request sub-element {position} ('{segment}') of a null value", path=raw)

    if isinstance(segment, Key):
        if kind is NodeKind.MAPPING:
            value = lookup_key(node, segment.name)
            if value is MISSING:
                raise NotFound(f"Unable to request sub-element {position}: '{segment}'", path=raw)
            return value
        if kind is NodeKind.SEQUENCE:
            if not segment.name.isdigit():
                raise NotFound(f"Sub-element {position} ('{segment}') is not an index into a list", path=raw)
            return _element_at(node, int(segment.name), segment, raw)
        raise InvalidType(
            f"Sub-element {position} ('{segment}') requested but the value was a {type(node).__name__}",
            path=raw,
        )

    if kind is NodeKind.SCALAR:
        raise InvalidType(
            f"Segment '{segment}' requires a list or map but the value was a {type(node).__name__}",
            path=raw,
        )

    if isinstance(segment, Index):
        return _element_at(node, segment.position, segment, raw)
    if isinstance(segment, LastIndex):
        return _element_at(node, len(node) - 1, segment, raw)
    if isinstance(segment, Predicate):
        for candidate in positional(node):
            matched = match_predicate(candidate, segment, raw)
            if matched is not None:
                return matched
        raise NotFound(f"No element matched '{segment}'", path=raw)
    raise InvalidType(f"Segment '{segment}' can match several values; use get_multiple", path=raw)


def match_predicate(element: Any, predicate: Predicate, raw: str) -> Any | None:
    """Return the node selected by *predicate* for *element* or ``None``.

    Two layouts are recognised. The flat layout compares ``field`` (itself a
    path) directly inside *element*, returning *element*. When *element* does
    not have the field, its mapping values are inspected (the
    ``- bucket: {field: value}`` layout) and the first satisfying inner
    mapping is returned.

    Examples
    --------
    >>> match_predicate({"id": 2}, Predicate("id", "=", "2"), "")
    {'id': 2}
    >>> match_predicate({"b1": {"default": True}}, Predicate("default", "=", "true"), "")
    {'default': True}
    >>> match_predicate({"id": 2}, Predicate("id", "!=", "2"), "") is None
    True
    """

    if kind_of(element) is not NodeKind.MAPPING:
        raise InvalidType(
            f"Predicate '{predicate}' requires map elements but the element was a {type(element).__name__}",
            path=raw,
        )
    value = _field_value(element, predicate.field)
    if value is MISSING:
        for inner in element.values():
            if kind_of(inner) is NodeKind.MAPPING and _compare(predicate, lookup_key(inner, predicate.field)):
                return inner
    return element if _compare(predicate, value) else None


def lookup_key(mapping: Any, name: str) -> Any:
    """Return ``mapping[name]`` or :data:`MISSING`.

    YAML allows non-string keys (``1: one``); those match on their rendered text.
    """

    if name in mapping:
        return mapping[name]
    for key, value in mapping.items():
        if not isinstance(key, str) and scalar_text(key) == name:
            return value
    return MISSING


def _element_at(node: Any, index: int, segment: PathSegment, raw: str) -> Any:
    items = positional(node)
    if index < 0 or index >= len(items):
        raise InvalidType(
            f"The index {index} is out of bounds for collection size {len(items)} at '{segment}'",
            path=raw,
        )
    return items[index]


def _field_value(element: Any, field: str) -> Any:
    value = lookup_key(element, field)
    if value is not MISSING:
        return value
    try:
        return resolve(element, field)
    except (NotFound, InvalidType):
        return MISSING


def _compare(predicate: Predicate, value: Any) -> bool:
    matches = value is not MISSING and value is not None and scalar_text(value) == predicate.value
    return not matches if predicate.negated else matches
