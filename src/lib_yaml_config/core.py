"""Composition root for ``lib_yaml_config``.

Purpose
-------
Provide the entry points that orchestrate resource resolution, YAML parsing
and merge policy enforcement, and hand back a ready
:class:`~lib_yaml_config.application.config.Config`.

Contents
--------
* :func:`parse_config` – one in-memory document or stream.
* :func:`resolve_multi_config` – concatenate every resolved document and parse
  once, so YAML anchors may cross file boundaries.
* :func:`resolve_layered_configs` – parse every resolved document separately
  and fold them with the layer merger.
* :func:`_resolve_paths` – internal helper shared by both resource modes.

System Role
-----------
This module connects adapters (filesystem resolver, YAML loader, property
source) with the application layer while emitting structured observability
signals. It is the canonical location for wiring alternative adapters.
"""

from __future__ import annotations

from typing import IO, Sequence

from .adapters.file_loaders.structured import YAMLFileLoader
from .adapters.path_resolvers.default import DefaultResourceResolver
from .adapters.properties.default import DefaultPropertySource
from .application.config import Config
from .application.merge import MergeAction, merge_layers
from .application.ports import DocumentLoader, PropertySource, ResourceResolver
from .domain.errors import ResourceNotFound
from .observability import bind_trace_id, log_debug, log_info, make_event


def parse_config(
    source: str | bytes | IO[str] | IO[bytes],
    *,
    extrapolate: bool = True,
    properties: PropertySource | None = None,
    name: str | None = None,
    loader: DocumentLoader | None = None,
    yaml12: bool = False,
) -> Config:
    """Parse a single YAML document into a :class:`Config`.

    Why
    ----
    Tests, embedded defaults and network-fetched documents never touch the
    filesystem resolver.

    Parameters
    ----------
    source:
        YAML text, bytes or a readable stream.
    extrapolate:
        Initial state of :attr:`Config.extrapolate`.
    properties:
        Source for ``${…}`` references; defaults to
        :class:`~lib_yaml_config.adapters.properties.default.DefaultPropertySource`.
    name:
        Label for error messages and logs.
    yaml12:
        Resolve plain scalars with the YAML 1.2 core schema, so keys such as
        ``on``/``no`` stay strings and ``0777`` stays decimal. Ignored when an
        explicit *loader* is given.

    Raises
    ------
    MalformedConfig
        When the document does not parse or its root is not a map.

    Examples
    --------
    >>> cfg = parse_config("service:\\n  port: ${app.port:-8080}\\n")
    >>> cfg.get("service.port")
    8080
    >>> cfg.extrapolate = False
    >>> cfg.get("service.port")
    '${app.port:-8080}'
    """

    document = source.read() if hasattr(source, "read") else source
    label = name or getattr(source, "name", None) or "<string>"
    tree = (loader or YAMLFileLoader(yaml12=yaml12)).parse(document, name=label)
    return Config(tree, name=label, extrapolate=extrapolate, properties=_properties(properties))


def resolve_multi_config(
    *resources: str,
    extrapolate: bool = True,
    properties: PropertySource | None = None,
    resolver: ResourceResolver | None = None,
    loader: DocumentLoader | None = None,
    yaml12: bool = False,
) -> Config:
    """Load every resource as one concatenated document.

    Why
    ----
    A behaviour file may define anchors (``&defaults``) that an environment
    file references (``*defaults``); that only works when both are parsed as
    a single document.

    What
    ----
    Resolves each resource in argument order (globs expand alphanumerically),
    joins the raw bytes with newlines and parses the result once. Top-level
    keys defined again in a later file replace earlier ones wholesale.
    ``yaml12=True`` switches to the YAML 1.2 core schema as in
    :func:`parse_config`.

    Raises
    ------
    ResourceNotFound
        When no resource resolves to a file.
    MalformedConfig
        When the combined document does not parse to a map.

    Examples
    --------
    >>> from pathlib import Path
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> _ = (root / "a.yaml").write_text("base: &base {x: 1}\\n", encoding="utf-8")
    >>> _ = (root / "b.yaml").write_text("derived: *base\\n", encoding="utf-8")
    >>> resolve_multi_config(str(root / "*.yaml")).get("derived.x")
    1
    >>> tmp.cleanup()
    """

    doc_loader = loader or YAMLFileLoader(yaml12=yaml12)
    paths = _resolve_paths(resources, resolver)
    document = b"\n".join(doc_loader.read(path) for path in paths)
    label = ", ".join(resources)
    tree = doc_loader.parse(document, name=label)
    log_info("configuration_merged", **make_event(label, None, {"files": len(paths), "mode": "multi"}))
    return Config(tree, name=label, extrapolate=extrapolate, properties=_properties(properties))


def resolve_layered_configs(
    *resources: str,
    default_action: MergeAction | str = MergeAction.UNION,
    list_action: MergeAction | str = MergeAction.KEEP_EXTRA,
    extrapolate: bool = True,
    properties: PropertySource | None = None,
    resolver: ResourceResolver | None = None,
    loader: DocumentLoader | None = None,
    yaml12: bool = False,
) -> Config:
    """Load every resource separately and merge them in order.

    Why
    ----
    The usual deployment layout is ``app-behaviour.yaml`` shipped with the code,
    overlaid by ``app-environment.yaml`` and optional local overrides; each
    layer should refine the previous one rather than replace whole top-level
    branches.

    What
    ----
    Resolves every resource (argument order, globs alphanumerically), parses
    each file and folds them with
    :func:`~lib_yaml_config.application.merge.merge_layers` using
    *default_action* for maps and scalars and *list_action* for lists.
    ``yaml12=True`` switches to the YAML 1.2 core schema as in
    :func:`parse_config`.

    Raises
    ------
    ResourceNotFound
        When no resource resolves to a file.
    MalformedConfig
        When a document does not parse or its root is not a map.
    MergeConflict
        When an action is ``fail`` and two layers define the same value.

    Examples
    --------
    >>> from pathlib import Path
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> _ = (root / "app-behaviour.yaml").write_text("db: {host: localhost, port: 5432}\\n", encoding="utf-8")
    >>> _ = (root / "app-environment.yaml").write_text("db: {host: prod.example.org}\\n", encoding="utf-8")
    >>> cfg = resolve_layered_configs(str(root / "app-behaviour.yaml"), str(root / "app-environment.yaml"))
    >>> cfg.get("db.host"), cfg.get("db.port")
    ('prod.example.org', 5432)
    >>> tmp.cleanup()
    """

    doc_loader = loader or YAMLFileLoader(yaml12=yaml12)
    paths = _resolve_paths(resources, resolver)
    layers = [doc_loader.load(path) for path in paths]
    label = ", ".join(resources)
    merged = merge_layers(layers, default_action, list_action)
    log_info("configuration_merged", **make_event(label, None, {"files": len(paths), "mode": "layered"}))
    return Config(merged, name=label, extrapolate=extrapolate, properties=_properties(properties))


def _resolve_paths(resources: Sequence[str], resolver: ResourceResolver | None) -> list[str]:
    """Resolve *resources* in argument order, raising when nothing matched.

    Examples
    --------
    >>> _resolve_paths(["/nonexistent/*.yaml"], None)
    Traceback (most recent call last):
    ...
    lib_yaml_config.domain.errors.ResourceNotFound: No configuration resolved from /nonexistent/*.yaml (path: '/nonexistent/*.yaml')
    """

    active = resolver or DefaultResourceResolver()
    bind_trace_id(None)
    paths: list[str] = []
    for resource in resources:
        matches = active.resolve(resource)
        log_debug("resource_resolved", **make_event(resource, None, {"files": len(matches)}))
        paths.extend(matches)
    if not paths:
        label = ", ".join(resources)
        raise ResourceNotFound(f"No configuration resolved from {label or 'an empty resource list'}", path=label)
    return paths


def _properties(properties: PropertySource | None) -> PropertySource:
    return properties if properties is not None else DefaultPropertySource()


__all__ = [
    "parse_config",
    "resolve_multi_config",
    "resolve_layered_configs",
]
