"""``${…}`` reference substitution for configuration values.

Purpose
-------
Replace references such as ``${user.home}``, ``${env:HOME}`` or
``${path:service.port}`` inside string values when a
:class:`~lib_yaml_config.application.config.Config` reads with extrapolation
enabled. Nothing is ever written back into the stored tree.

Syntax
------
``${[sys:|env:|path:]name[:-fallback]}``

* no prefix / ``sys:`` – system property from the injected
  :class:`~lib_yaml_config.application.ports.PropertySource`,
* ``env:`` – environment variable from the same source,
* ``path:`` – another value of the root configuration,
* ``:-fallback`` – used when the reference is undefined; may itself contain
  references (``${a:-${b:-final}}``),
* ``$${`` – literal ``${``.

Resolved text is substituted again (a property may refer to another) up to
:data:`MAX_DEPTH` levels. Every string is type-guessed after substitution,
whether or not it held a reference: integral text becomes ``int``, decimal
text ``float`` and ``true``/``false`` ``bool``. A quoted ``"8080"`` therefore
reads back as ``8080`` while extrapolation is on.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Callable

from ..domain.errors import MalformedConfig
from ..domain.tree import NodeKind, kind_of, scalar_text
from .ports import PropertySource

MAX_DEPTH = 10
"""Maximum nesting of references resolved through other references."""

_NAMESPACES = ("sys", "env", "path")
_INTEGRAL = re.compile(r"-?[0-9]+")
_DECIMAL = re.compile(r"-?[0-9]*\.[0-9]+")
_BOOLEAN = re.compile(r"true|false")

PathLookup = Callable[[str], Any]
"""Callable returning the raw value stored at a path, or ``None`` when absent."""


class Extrapolator:
    """Substitute references in strings, lists and maps.

    Parameters
    ----------
    properties:
        Source consulted for ``sys:`` and ``env:`` references.
    path_lookup:
        Resolves ``path:`` references against the root configuration. When
        omitted, ``path:`` references count as undefined.

    Examples
    --------
    >>> class Props:
    ...     def lookup(self, namespace, name):
    ...         return {"sys": {"port": "8080"}, "env": {"HOST": "example.org"}}[namespace].get(name)
    >>> extrapolator = Extrapolator(Props())
    >>> extrapolator.apply("${port}")
    8080
    >>> extrapolator.apply("http://${env:HOST}:${port}/")
    'http://example.org:8080/'
    >>> extrapolator.apply(["${missing:-${port}}", "$${port}", "42"])
    [8080, '${port}', 42]
    """

    def __init__(self, properties: PropertySource, path_lookup: PathLookup | None = None) -> None:
        self._properties = properties
        self._path_lookup = path_lookup

    def apply(self, value: Any) -> Any:
        """Return *value* with every string substituted and type-guessed (containers are copied)."""

        kind = kind_of(value)
        if kind is NodeKind.MAPPING:
            return {key: self.apply(item) for key, item in value.items()}
        if kind is NodeKind.SEQUENCE:
            return [self.apply(item) for item in value]
        if isinstance(value, str):
            text, _ = self.expand(value)
            return guess_type(text)
        return value

    def expand(self, text: str, depth: int = 0) -> tuple[str, bool]:
        """Substitute references in *text*.

        Returns the resulting text and whether any reference was replaced.

        Raises
        ------
        MalformedConfig
            When a reference is undefined without fallback or references nest
            deeper than :data:`MAX_DEPTH`.
        """

        if depth > MAX_DEPTH:
            raise MalformedConfig(f"References nested deeper than {MAX_DEPTH} levels in '{text}'")
        if "${" not in text:
            return text, False

        parts: list[str] = []
        substituted = False
        index = 0
        while index < len(text):
            if text.startswith("$${", index):
                parts.append("${")
                index += 3
                continue
            if text.startswith("${", index):
                end = _closing_brace(text, index + 2)
                if end < 0:
                    parts.append(text[index:])
                    break
                parts.append(self._resolve(text[index + 2 : end], depth))
                substituted = True
                index = end + 1
                continue
            parts.append(text[index])
            index += 1
        return "".join(parts), substituted

    def _resolve(self, body: str, depth: int) -> str:
        name, fallback = _split_fallback(body)
        namespace, key = _split_namespace(name.strip())
        value = self._lookup(namespace, key)
        if value is None:
            if fallback is None:
                raise MalformedConfig(f"Unable to resolve '${{{body}}}' and no fallback was given", path=key)
            return self.expand(fallback, depth + 1)[0]
        return self.expand(value, depth + 1)[0]

    def _lookup(self, namespace: str, name: str) -> str | None:
        if namespace != "path":
            return self._properties.lookup(namespace, name)
        if self._path_lookup is None:
            return None
        value = self._path_lookup(name)
        if value is None:
            return None
        if isinstance(value, Mapping) or kind_of(value) is NodeKind.SEQUENCE:
            raise MalformedConfig(f"Reference '${{path:{name}}}' points to a list or map", path=name)
        return scalar_text(value)


def guess_type(text: str) -> Any:
    """Convert substituted *text* to ``int``, ``float`` or ``bool`` when it looks like one.

    Examples
    --------
    >>> guess_type("87"), guess_type("-.5"), guess_type("true"), guess_type("1.2.3")
    (87, -0.5, True, '1.2.3')
    """

    if _INTEGRAL.fullmatch(text):
        return int(text)
    if _DECIMAL.fullmatch(text):
        return float(text)
    if _BOOLEAN.fullmatch(text):
        return text == "true"
    return text


def _closing_brace(text: str, start: int) -> int:
    """Return the index of the ``}`` closing a reference body starting at *start*."""

    nesting = 0
    index = start
    while index < len(text):
        if text.startswith("${", index):
            nesting += 1
            index += 2
            continue
        if text[index] == "}":
            if nesting == 0:
                return index
            nesting -= 1
        index += 1
    return -1


def _split_fallback(body: str) -> tuple[str, str | None]:
    """Split ``name:-fallback`` at the first top-level ``:-``."""

    nesting = 0
    index = 0
    while index < len(body):
        if body.startswith("${", index):
            nesting += 1
            index += 2
            continue
        if body[index] == "}":
            nesting -= 1
        elif nesting == 0 and body.startswith(":-", index):
            return body[:index], body[index + 2 :]
        index += 1
    return body, None


def _split_namespace(name: str) -> tuple[str, str]:
    prefix, separator, rest = name.partition(":")
    if separator and prefix in _NAMESPACES:
        return prefix, rest.strip()
    return "sys", name
