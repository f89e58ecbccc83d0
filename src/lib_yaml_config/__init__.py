"""YAML configuration with path queries, layered merging and ``${…}`` substitution.

The public surface is intentionally small: load a configuration with one of
the :mod:`lib_yaml_config.core` functions, then query it through
:class:`Config`. Everything else (parser, navigator, merger, adapters) is
reachable through its module for callers who need to wire custom adapters.

Examples
--------
>>> cfg = parse_config("servers:\\n  - {name: a, port: 80}\\n  - {name: b, port: 81}\\n")
>>> cfg.get_integer("servers[name=b].port")
81
>>> cfg.get_multiple("servers[*].name")
['a', 'b']
"""

from __future__ import annotations

from .adapters.path_resolvers.default import DefaultResourceResolver
from .adapters.properties.default import DefaultPropertySource
from .application.config import Config
from .application.flatten import flatten
from .application.merge import MergeAction, merge_trees
from .auto import AutoConfig
from .core import parse_config, resolve_layered_configs, resolve_multi_config
from .domain.errors import (
    AmbiguousPath,
    InvalidType,
    MalformedConfig,
    MergeConflict,
    NotFound,
    ResourceNotFound,
    YAMLConfigError,
)
from .domain.ypath import PathExpression, parse_path
from .observability import bind_trace_id, get_logger

__all__ = [
    "AmbiguousPath",
    "AutoConfig",
    "Config",
    "DefaultPropertySource",
    "DefaultResourceResolver",
    "InvalidType",
    "MalformedConfig",
    "MergeAction",
    "MergeConflict",
    "NotFound",
    "PathExpression",
    "ResourceNotFound",
    "YAMLConfigError",
    "bind_trace_id",
    "flatten",
    "get_logger",
    "merge_trees",
    "parse_config",
    "parse_path",
    "resolve_layered_configs",
    "resolve_multi_config",
]
