"""Configuration facade combining a tree with the path engine.

Purpose
-------
Anchor the :class:`Config` object returned by every loader. It owns one
configuration tree, answers path queries through the navigator and visitor,
applies ``${…}`` extrapolation on read and supports layered merging.

Contents
--------
* :class:`Config` – query, typed accessors, sub-map views and merge.
* :class:`NoProperties` – property source used when the caller supplies none.

System Role
-----------
:func:`lib_yaml_config.core.parse_config` and friends build a :class:`Config`
from parsed documents; consumers only talk to this type. The tree is never
exposed directly: reads return copies, so callers cannot mutate stored nodes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Iterator

from ..domain.errors import AmbiguousPath, InvalidType, NotFound
from ..domain.tree import NodeKind, deepcopy_tree, kind_of, scalar_text
from ..domain.ypath import PathExpression, parse_path
from ..observability import log_debug, log_info
from .extrapolate import Extrapolator
from .merge import MergeAction, merge_trees
from .navigator import resolve
from .ports import PropertySource
from .visitor import visit, walk

_UNSET: Any = object()
_TRUE_TEXT = frozenset({"true", "yes", "on"})
_FALSE_TEXT = frozenset({"false", "no", "off"})


class NoProperties:
    """Property source that defines nothing; ``${…}`` then needs a fallback or ``path:``."""

    def lookup(self, namespace: str, name: str) -> str | None:
        return None


class Config:
    """Named configuration tree with path-based accessors.

    Why
    ----
    Applications want ``cfg.get_integer("service.port")`` instead of nested
    dictionary walks, typed errors instead of ``None`` and optional
    substitution of ``${user.home}`` style references.

    What
    ----
    Wraps a root mapping. The public ``extrapolate`` attribute switches
    substitution for subsequent reads; it never changes the stored tree.
    Sub-map views copy the flag when they are created and may be toggled
    independently afterwards. ``path:`` references in a view resolve against
    the configuration the view was taken from.

    Parameters
    ----------
    tree:
        Root mapping; copied so the caller keeps ownership of its object.
    name:
        Label used in logs and ``repr`` (usually the resource pattern).
    extrapolate:
        Initial value of the ``extrapolate`` flag.
    properties:
        Source for ``sys:``/``env:`` references. Defaults to :class:`NoProperties`.

    Examples
    --------
    >>> cfg = Config({"service": {"ports": [80, 443], "name": "demo"}})
    >>> cfg.get("service.ports[last]")
    443
    >>> cfg.get_string("service.ports[0]")
    '80'
    >>> cfg.get_integer("service.timeout", 30)
    30
    >>> "service.name" in cfg
    True
    """

    __slots__ = ("extrapolate", "_tree", "_name", "_properties", "_root")

    def __init__(
        self,
        tree: Mapping[str, Any] | None = None,
        *,
        name: str = "<memory>",
        extrapolate: bool = False,
        properties: PropertySource | None = None,
    ) -> None:
        if tree is not None and kind_of(tree) is not NodeKind.MAPPING:
            raise InvalidType(f"A configuration root must be a map, got {type(tree).__name__}")
        self.extrapolate = extrapolate
        self._tree: dict[str, Any] = deepcopy_tree(tree) if tree is not None else {}
        self._name = name
        self._properties: PropertySource = properties if properties is not None else NoProperties()
        self._root: Any = None

    @property
    def name(self) -> str:
        """Label of the configuration (resource pattern or ``<memory>``)."""

        return self._name

    def __repr__(self) -> str:
        return f"Config(name={self._name!r}, keys={list(self._tree)!r}, extrapolate={self.extrapolate!r})"

    # ------------------------------------------------------------------ mapping protocol

    def __getitem__(self, key: str) -> Any:
        """Return the top-level value stored under *key* (``KeyError`` when absent)."""

        return self._present(self._tree[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._tree)

    def __len__(self) -> int:
        return len(self._tree)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.contains(path)

    def keys(self) -> list[str]:
        """Return the top-level keys in document order."""

        return list(self._tree)

    # ------------------------------------------------------------------ generic access

    def get(self, path: str, default: Any = _UNSET) -> Any:
        """Return the value at *path*.

        Why
        ----
        Single entry point for untyped access; all typed accessors build on it.

        What
        ----
        Literal paths are resolved directly. Paths with ``*`` or ``**`` must
        match exactly one non-null node. Containers come back as copies;
        strings are substituted and type-guessed when ``extrapolate`` is on.

        Parameters
        ----------
        path:
            Path expression such as ``servers[name=primary].port``.
        default:
            Returned instead of raising :class:`NotFound` / :class:`InvalidType`.

        Raises
        ------
        NotFound
            The path does not exist or points to ``null``.
        InvalidType
            A segment met the wrong kind of node; :class:`AmbiguousPath` when
            a wildcard path matched several nodes.
        MalformedConfig
            An extrapolation reference could not be resolved.

        Examples
        --------
        >>> cfg = Config({"a": {"x": 1, "y": 2}})
        >>> cfg.get("a.x"), cfg.get("a.z", "fallback")
        (1, 'fallback')
        >>> cfg.get("a.*")
        Traceback (most recent call last):
        ...
        lib_yaml_config.domain.errors.AmbiguousPath: Path matched 2 values; use get_multiple (path: 'a.*')
        """

        try:
            return self._present(self._node(path))
        except (NotFound, InvalidType):
            if default is _UNSET:
                raise
            log_debug("default_value_used", config=self._name, path=path)
            return default

    def get_string(self, path: str, default: Any = _UNSET) -> str:
        """Return the scalar at *path* rendered as text (``true``/``false`` for booleans)."""

        return self._typed(path, default, _as_string)

    def get_integer(self, path: str, default: Any = _UNSET) -> int:
        """Return the value at *path* as ``int``; text such as ``"42"`` is accepted.

        Examples
        --------
        >>> Config({"port": "8080"}).get_integer("port")
        8080
        >>> Config({"port": "eighty"}).get_integer("port", 80)
        80
        """

        return self._typed(path, default, _as_integer)

    def get_float(self, path: str, default: Any = _UNSET) -> float:
        """Return the value at *path* as ``float``."""

        return self._typed(path, default, _as_float)

    def get_boolean(self, path: str, default: Any = _UNSET) -> bool:
        """Return the value at *path* as ``bool``.

        Accepts YAML booleans and the texts ``true/false``, ``yes/no`` and
        ``on/off`` in any case.
        """

        return self._typed(path, default, _as_boolean)

    def get_list(self, path: str, default: Any = _UNSET) -> list[Any]:
        """Return the sequence at *path* as a new list.

        Examples
        --------
        >>> cfg = Config({"arr": [1, 2, 3]})
        >>> cfg.get_list("arr")
        [1, 2, 3]
        >>> cfg.get_list("arr[3]")
        Traceback (most recent call last):
        ...
        lib_yaml_config.domain.errors.InvalidType: The index 3 is out of bounds for collection size 3 at '[3]' (path: 'arr[3]')
        """

        return self._typed(path, default, _as_list)

    def get_sub_map(self, path: str, maintain_keys: bool = False) -> Config:
        """Return the mapping at *path* as a :class:`Config` view.

        Parameters
        ----------
        path:
            Path to a mapping.
        maintain_keys:
            Prefix every key of the view with ``path.`` so the keys read like
            full paths of the parent configuration.

        Raises
        ------
        InvalidType
            When the node at *path* is not a mapping.

        Examples
        --------
        >>> cfg = Config({"db": {"host": "localhost"}})
        >>> cfg.get_sub_map("db").get("host")
        'localhost'
        >>> cfg.get_sub_map("db", maintain_keys=True).keys()
        ['db.host']
        """

        node = self._node(path)
        if kind_of(node) is not NodeKind.MAPPING:
            raise InvalidType(f"Expected a map but got {type(node).__name__}", path=path)
        if maintain_keys:
            node = {f"{path}.{key}": value for key, value in node.items()}
        return self._view(node, f"{self._name}:{path}")

    get_yaml = get_sub_map

    def get_yaml_list(self, path: str) -> list[Config]:
        """Return the sequence of maps at *path* as :class:`Config` views.

        ``null`` elements become empty views; any other non-map element raises
        :class:`InvalidType`.

        Examples
        --------
        >>> cfg = Config({"servers": [{"name": "a"}, {"name": "b"}]})
        >>> [view.get("name") for view in cfg.get_yaml_list("servers")]
        ['a', 'b']
        """

        node = self._node(path)
        if kind_of(node) is not NodeKind.SEQUENCE:
            raise InvalidType(f"Expected a list but got {type(node).__name__}", path=path)
        views: list[Config] = []
        for position, element in enumerate(node):
            if element is None:
                element = {}
            if kind_of(element) is not NodeKind.MAPPING:
                raise InvalidType(f"Element {position} is a {type(element).__name__}, not a map", path=path)
            views.append(self._view(element, f"{self._name}:{path}[{position}]"))
        return views

    def get_multiple(self, path: str) -> list[Any]:
        """Return every value matched by *path* in document order.

        Examples
        --------
        >>> cfg = Config({"servers": [{"name": "a", "port": 1}, {"name": "b", "port": 2}]})
        >>> cfg.get_multiple("servers[*].port")
        [1, 2]
        >>> cfg.get_multiple("servers[name!=a].name")
        ['b']
        """

        return [self._present(node) for node in visit(self._tree, path)]

    def visit(self, path: str, callback: Callable[[Any], None]) -> None:
        """Call *callback* with every value matched by *path* in document order."""

        walk(self._tree, path, lambda node: callback(self._present(node)))

    def contains(self, path: str) -> bool:
        """Return ``True`` when *path* resolves to at least one non-null value."""

        try:
            expression = parse_path(path)
            if expression.is_multi:
                return bool(visit(self._tree, expression))
            resolve(self._tree, expression)
        except (NotFound, InvalidType):
            return False
        return True

    # ------------------------------------------------------------------ export and merge

    def as_dict(self, *, extrapolate: bool | None = None) -> dict[str, Any]:
        """Return a deep, mutable copy of the tree.

        Strings are substituted and type-guessed when *extrapolate* is true; ``None`` follows the
        ``extrapolate`` attribute.

        Examples
        --------
        >>> cfg = Config({"service": {"timeout": 5}})
        >>> clone = cfg.as_dict()
        >>> clone["service"]["timeout"] = 10
        >>> cfg.get("service.timeout")
        5
        """

        return self._present(self._tree, extrapolate)

    def to_yaml(self) -> str:
        """Serialise :meth:`as_dict` as block-style YAML, keeping key order.

        Examples
        --------
        >>> print(Config({"service": {"ports": [80, 443]}}).to_yaml(), end="")
        service:
          ports:
          - 80
          - 443
        """

        import yaml

        return yaml.safe_dump(self.as_dict(), sort_keys=False, allow_unicode=True, default_flow_style=False)

    def merge(
        self,
        extra: Config | Mapping[str, Any],
        default_action: MergeAction | str = MergeAction.UNION,
        list_action: MergeAction | str = MergeAction.KEEP_EXTRA,
    ) -> Config:
        """Merge *extra* into this configuration and return ``self``.

        Why
        ----
        Allows callers to overlay programmatic overrides on top of loaded
        files with the same rules used for layered loading.

        What
        ----
        Copies the current tree, merges *extra* into the copy with
        :func:`~lib_yaml_config.application.merge.merge_trees` and installs the
        result. Views taken before the merge keep seeing the old values.
        *extra* is never modified. On :class:`MergeConflict` the
        configuration is left unchanged. *extra* must be a map;
        anything else raises :class:`InvalidType`.

        Examples
        --------
        >>> cfg = Config({"x": [1, 2], "y": 1})
        >>> cfg.merge({"x": [3], "z": 2}, "union", "union").as_dict()
        {'x': [1, 2, 3], 'y': 1, 'z': 2}
        """

        extra_tree = extra._tree if isinstance(extra, Config) else extra
        if kind_of(extra_tree) is not NodeKind.MAPPING:
            raise InvalidType(f"Only maps can be merged into a configuration, got {type(extra_tree).__name__}")
        merged = merge_trees(deepcopy_tree(self._tree), extra_tree, default_action, list_action)
        self._tree = merged
        log_info("configuration_merged", config=self._name, path=None, keys=len(merged))
        return self

    # ------------------------------------------------------------------ internals

    def _node(self, path: str | PathExpression) -> Any:
        expression = parse_path(path) if isinstance(path, str) else path
        if not expression.is_multi:
            return resolve(self._tree, expression)
        matches = visit(self._tree, expression)
        if not matches:
            raise NotFound("No values matched", path=expression.raw)
        if len(matches) > 1:
            raise AmbiguousPath(f"Path matched {len(matches)} values; use get_multiple", path=expression.raw)
        return matches[0]

    def _typed(self, path: str, default: Any, convert: Callable[[Any, str], Any]) -> Any:
        try:
            return convert(self._present(self._node(path)), path)
        except (NotFound, InvalidType):
            if default is _UNSET:
                raise
            log_debug("default_value_used", config=self._name, path=path)
            return default

    def _present(self, node: Any, extrapolate: bool | None = None) -> Any:
        active = self.extrapolate if extrapolate is None else extrapolate
        if active:
            return Extrapolator(self._properties, self._lookup_path).apply(node)
        return deepcopy_tree(node)

    def _root_tree(self) -> Any:
        return self._tree if self._root is None else self._root

    def _lookup_path(self, path: str) -> Any:
        try:
            return resolve(self._root_tree(), path)
        except (NotFound, InvalidType):
            return None

    def _view(self, node: Mapping[str, Any], name: str) -> Config:
        view = Config(name=name, extrapolate=self.extrapolate, properties=self._properties)
        view._tree = node if isinstance(node, dict) else dict(node)
        view._root = self._root_tree()
        return view


def _as_string(value: Any, path: str) -> str:
    if kind_of(value) is not NodeKind.SCALAR:
        raise InvalidType(f"Expected a scalar but got {type(value).__name__}", path=path)
    return scalar_text(value)


def _as_integer(value: Any, path: str) -> int:
    if isinstance(value, bool) or kind_of(value) is not NodeKind.SCALAR:
        raise InvalidType(f"Expected an integer but got {type(value).__name__}", path=path)
    try:
        return int(scalar_text(value).strip())
    except ValueError as exc:
        raise InvalidType(f"Unable to parse '{value}' as an integer", path=path) from exc


def _as_float(value: Any, path: str) -> float:
    if isinstance(value, bool) or kind_of(value) is not NodeKind.SCALAR:
        raise InvalidType(f"Expected a number but got {type(value).__name__}", path=path)
    try:
        return float(scalar_text(value).strip())
    except ValueError as exc:
        raise InvalidType(f"Unable to parse '{value}' as a number", path=path) from exc


def _as_boolean(value: Any, path: str) -> bool:
    if isinstance(value, bool):
        return value
    text = scalar_text(value).strip().lower() if kind_of(value) is NodeKind.SCALAR else ""
    if text in _TRUE_TEXT:
        return True
    if text in _FALSE_TEXT:
        return False
    raise InvalidType(f"Unable to parse '{value}' as a boolean", path=path)


def _as_list(value: Any, path: str) -> list[Any]:
    if kind_of(value) is not NodeKind.SEQUENCE:
        raise InvalidType(f"Expected a list but got {type(value).__name__}", path=path)
    return list(value)
