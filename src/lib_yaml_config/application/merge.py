"""Application-layer merge policy.

Purpose
-------
Combine configuration trees so that later layers override or extend earlier
ones. The algorithm is free of I/O so it can be reused by the loaders, by
:meth:`lib_yaml_config.application.config.Config.merge` and by the CLI.

Contents
    - ``MergeAction``: collision policy (``union``, ``keep_base``,
      ``keep_extra``, ``fail``).
    - ``merge_trees``: merge one *extra* tree into a *base* tree.
    - ``merge_layers``: fold an ordered sequence of trees.
    - ``_merge_entry`` / ``_merge_mapping`` / ``_apply``: recursive stanzas
      dispatched on the kind of the colliding nodes.

Rules
-----
* Two mappings are always merged key by key; keys new to *base* are appended
  in *extra* order.
* Two sequences collide under ``list_action``; ``union`` appends *extra*.
* Anything else (scalars, kind mismatch, ``null``) collides under
  ``default_action``; ``union`` lets *extra* win.
* *extra* is never mutated and never aliased: inserted nodes are copies.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Iterable

from ..domain.errors import MergeConflict
from ..domain.tree import NodeKind, deepcopy_tree, kind_of
from ..domain.ypath import join_path
from ..observability import log_debug


class MergeAction(str, Enum):
    """Collision policy applied when base and extra both define a path."""

    UNION = "union"
    """Maps are merged, lists are concatenated, scalars are taken from extra."""
    KEEP_BASE = "keep_base"
    """The base value is kept and the extra value ignored."""
    KEEP_EXTRA = "keep_extra"
    """The extra value replaces the base value wholesale."""
    FAIL = "fail"
    """A :class:`~lib_yaml_config.domain.errors.MergeConflict` is raised."""

    @classmethod
    def parse(cls, value: MergeAction | str) -> MergeAction:
        """Return the action named by *value* (case-insensitive).

        Examples
        --------
        >>> MergeAction.parse("KEEP_EXTRA")
        <MergeAction.KEEP_EXTRA: 'keep_extra'>
        >>> MergeAction.parse("merge")
        Traceback (most recent call last):
        ...
        ValueError: Unknown merge action 'merge'; expected one of union, keep_base, keep_extra, fail
        """

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown merge action {value!r}; expected one of {choices}") from exc


def merge_trees(
    base: Any,
    extra: Any,
    default_action: MergeAction | str = MergeAction.UNION,
    list_action: MergeAction | str = MergeAction.KEEP_EXTRA,
) -> Any:
    """Merge *extra* into *base* and return the result.

    Why
    ----
    Layered configuration (behaviour, environment, local overrides) needs a
    deterministic way to let later files refine earlier ones.

    What
    ----
    Mutates mappings and lists inside *base* in place; when a collision
    resolves to *extra* the base node is replaced by a copy. Callers must use
    the return value because a root-level collision may replace *base*.

    Raises
    ------
    MergeConflict
        When an applicable action is ``fail``; the error names the dotted path.

    Examples
    --------
    >>> merge_trees({"x": [1, 2], "y": 1}, {"x": [3, 4], "z": 2}, "union", "union")
    {'x': [1, 2, 3, 4], 'y': 1, 'z': 2}
    >>> merge_trees({"x": 1}, {"x": 2}, "keep_base", "keep_base")
    {'x': 1}
    """

    return _merge_entry("", base, extra, MergeAction.parse(default_action), MergeAction.parse(list_action))


def merge_layers(
    layers: Iterable[Mapping[str, Any]],
    default_action: MergeAction | str = MergeAction.UNION,
    list_action: MergeAction | str = MergeAction.KEEP_EXTRA,
) -> dict[str, Any]:
    """Fold *layers* pairwise from lowest to highest precedence.

    ``merge_layers([f1, f2, f3])`` equals ``merge(merge(merge({}, f1), f2), f3)``.
    The inputs are left untouched.

    Examples
    --------
    >>> merge_layers([{"service": {"timeout": 5}}, {"service": {"timeout": 10}}])
    {'service': {'timeout': 10}}
    """

    default = MergeAction.parse(default_action)
    lists = MergeAction.parse(list_action)
    merged: dict[str, Any] = {}
    for position, layer in enumerate(layers):
        merged = _merge_entry("", merged, layer, default, lists)
        log_debug("layer_merged", resource=None, path=None, layer=position, keys=len(layer))
    return merged


def _merge_entry(path: str, base: Any, extra: Any, default_action: MergeAction, list_action: MergeAction) -> Any:
    """Dispatch on the kinds of *base* and *extra*."""

    base_kind = kind_of(base)
    extra_kind = kind_of(extra)
    if base_kind is NodeKind.MAPPING and extra_kind is NodeKind.MAPPING:
        _merge_mapping(path, base, extra, default_action, list_action)
        return base
    if base_kind is NodeKind.SEQUENCE and extra_kind is NodeKind.SEQUENCE:
        return _apply(list_action, path, base, extra, sequences=True)
    return _apply(default_action, path, base, extra, sequences=False)


def _merge_mapping(
    path: str,
    base: dict[Any, Any],
    extra: Mapping[Any, Any],
    default_action: MergeAction,
    list_action: MergeAction,
) -> None:
    """Merge every key of *extra* into *base*."""

    for key, value in list(extra.items()):
        if key not in base:
            base[key] = deepcopy_tree(value)
            continue
        base[key] = _merge_entry(join_path(path, key), base[key], value, default_action, list_action)


def _apply(action: MergeAction, path: str, base: Any, extra: Any, *, sequences: bool) -> Any:
    """Resolve one collision according to *action*."""

    if action is MergeAction.FAIL:
        kind = "list" if sequences else "value"
        raise MergeConflict(f"Duplicate {kind} with merge action '{action.value}'", path=path or "<root>")
    if action is MergeAction.KEEP_BASE:
        return base
    addition = deepcopy_tree(extra)
    if action is MergeAction.KEEP_EXTRA or not sequences:
        return addition
    if isinstance(base, list):
        base.extend(addition)
        return base
    return [*base, *addition]
