"""YAML document loader.

Purpose
-------
Convert on-disk or in-memory YAML documents into plain mappings that the path
engine and the merge policy understand. The adapter is a small wrapper around
``yaml.safe_load`` so error handling, observability and root-shape checks live
in one place.

Contents
--------
* :class:`BaseFileLoader` – shared helpers for reading files and validating
  mapping outputs.
* :class:`YAML12Loader` – PyYAML safe loader using the YAML 1.2 core schema.
* :class:`YAMLFileLoader` – implementation of the
  :class:`~lib_yaml_config.application.ports.DocumentLoader` port.

System Role
-----------
Invoked by :mod:`lib_yaml_config.core` for every resolved resource before the
documents are concatenated or merged.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from ...domain.errors import MalformedConfig, ResourceNotFound
from ...domain.tree import scalar_text
from ...observability import log_debug, log_error

_YAML11_SCALAR_TAGS = frozenset(
    {
        "tag:yaml.org,2002:bool",
        "tag:yaml.org,2002:int",
        "tag:yaml.org,2002:float",
        "tag:yaml.org,2002:timestamp",
    }
)


class BaseFileLoader:
    """Common utilities shared by document loaders."""

    def read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`ResourceNotFound` when the file is missing.

        Why
        ----
        Centralise file existence checks and logging so every caller behaves
        consistently.

        Side Effects
        ------------
        Emits ``config_file_read`` debug events.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b"key: value")
        >>> tmp.close()
        >>> BaseFileLoader().read(tmp.name)[:3]
        b'key'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise ResourceNotFound(f"Configuration file not found: {path}", path=path)
        payload = file_path.read_bytes()
        log_debug("config_file_read", resource=path, path=path, size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> dict[str, Any]:
        """Ensure *data* is a mapping, otherwise raise :class:`MalformedConfig`.

        An empty document (``None``) counts as an empty mapping.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping(None, path="demo")
        {}
        >>> BaseFileLoader._ensure_mapping([1, 2], path="demo")
        Traceback (most recent call last):
        ...
        lib_yaml_config.domain.errors.MalformedConfig: Document demo did not produce a map at the root (got list) (path: 'demo')
        """

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise MalformedConfig(
                f"Document {path} did not produce a map at the root (got {type(data).__name__})", path=path
            )
        return data


class YAML12Loader(yaml.SafeLoader):
    """PyYAML safe loader resolving plain scalars with the YAML 1.2 core schema.

    Why
    ----
    PyYAML implements YAML 1.1, where ``on``/``off``/``yes``/``no`` are
    booleans and ``0777`` is octal. Configuration keys such as ``on:`` then
    vanish into ``True`` and version strings change value.

    What
    ----
    * booleans are only ``true``/``false`` (any capitalisation YAML 1.2 allows),
    * integers are decimal, ``0o`` octal or ``0x`` hexadecimal,
    * floats follow the 1.2 core pattern including ``.inf`` and ``.nan``,
    * plain timestamps stay strings,
    * mapping keys are rendered as text so the root is a mapping from strings.

    Examples
    --------
    >>> yaml.load("on: 1\\nno: x\\nversion: 0777\\nmode: 0o17\\n", Loader=YAML12Loader)
    {'on': 1, 'no': 'x', 'version': 777, 'mode': 15}
    """

    yaml_implicit_resolvers = {
        first: [(tag, regexp) for tag, regexp in resolvers if tag not in _YAML11_SCALAR_TAGS]
        for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
    }

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[str, Any]:
        mapping = super().construct_mapping(node, deep=deep)
        return {key if isinstance(key, str) else scalar_text(key): value for key, value in mapping.items()}


def _construct_core_int(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> int:
    text = str(loader.construct_scalar(node)).replace("_", "")
    unsigned = text.lstrip("+-")
    if unsigned[:2].lower() in ("0o", "0x"):
        value = int(unsigned, 0)
        return -value if text.startswith("-") else value
    return int(text, 10)


YAML12Loader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
YAML12Loader.add_implicit_resolver(
    "tag:yaml.org,2002:int",
    re.compile(r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)
YAML12Loader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(
        r"^(?:[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?"
        r"|[-+]?\.(?:inf|Inf|INF)|\.(?:nan|NaN|NAN))$"
    ),
    list("-+0123456789."),
)
YAML12Loader.add_constructor("tag:yaml.org,2002:int", _construct_core_int)


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents with PyYAML's safe loader.

    Parameters
    ----------
    yaml12:
        Resolve plain scalars with the YAML 1.2 core schema
        (:class:`YAML12Loader`) instead of PyYAML's YAML 1.1 rules.
    """

    def __init__(self, *, yaml12: bool = False) -> None:
        self.yaml12 = yaml12
        self._loader_class: type[yaml.SafeLoader] = YAML12Loader if yaml12 else yaml.SafeLoader

    def load(self, path: str) -> dict[str, Any]:
        """Return the root mapping of the YAML file at *path*.

        Raises
        ------
        ResourceNotFound
            When *path* is not a readable file.
        MalformedConfig
            When the document does not parse or its root is not a map.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile('w', suffix='.yaml', delete=False, encoding='utf-8')
        >>> _ = tmp.write('key: 1')
        >>> tmp.close()
        >>> YAMLFileLoader().load(tmp.name)["key"]
        1
        >>> Path(tmp.name).unlink()
        """

        return self.parse(self.read(path), name=path)

    def parse(self, document: str | bytes, name: str = "<string>") -> dict[str, Any]:
        """Parse an in-memory YAML *document*.

        Later occurrences of a duplicated top-level key win, which is what
        multi-file concatenation relies on.

        Examples
        --------
        >>> YAMLFileLoader().parse("a: 1\\na: 2\\n")
        {'a': 2}
        >>> YAMLFileLoader().parse(b"")
        {}
        >>> YAMLFileLoader(yaml12=True).parse("on: yes\\n")
        {'on': 'yes'}
        """

        try:
            data = yaml.load(document, Loader=self._loader_class)
        except yaml.YAMLError as exc:
            log_error("config_file_invalid", resource=name, path=name, error=str(exc))
            raise MalformedConfig(f"Invalid YAML in {name}: {exc}", path=name) from exc
        result = self._ensure_mapping(data, path=name)
        log_debug("config_file_loaded", resource=name, path=name, keys=len(result), yaml12=self.yaml12)
        return result
