"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts that adapters must satisfy so the composition
root can orchestrate behaviour without depending on concrete implementations.

Contents
--------
* :class:`PropertySource` – answers ``${…}`` lookups during extrapolation.
* :class:`ResourceResolver` – expands a resource glob into concrete files.
* :class:`DocumentLoader` – parses YAML text or files into a mapping tree.

System Role
-----------
These protocols enforce Dependency Inversion (DIP). The extrapolator and the
loader functions in :mod:`lib_yaml_config.core` ask for behaviour via these
abstractions; tests substitute in-memory fakes.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PropertySource(Protocol):
    """Look up a named property inside a namespace.

    Why
    ----
    Extrapolation must not read process state directly; hosts decide what
    ``${user.home}`` or ``${env:HOME}`` means.

    Namespaces
    ----------
    ``"sys"``
        System properties (``user.home``, ``os.name`` …) plus caller overrides.
    ``"env"``
        Process environment variables.
    """

    def lookup(self, namespace: str, name: str) -> str | None:
        """Return the property text or ``None`` when it is not defined."""


@runtime_checkable
class ResourceResolver(Protocol):
    """Expand a resource pattern into existing files.

    Why
    ----
    Keep filesystem conventions (home directory, working directory, glob
    ordering) out of the loader functions.
    """

    def resolve(self, pattern: str) -> list[str]:
        """Return matching file paths in load order; an empty list when none exist."""


@runtime_checkable
class DocumentLoader(Protocol):
    """Parse YAML documents into configuration trees.

    Why
    ----
    Segregate parsing concerns from orchestration so the parser can be swapped
    or wrapped (for example to count reads in tests).
    """

    def read(self, path: str) -> bytes:
        """Return the raw bytes of *path* or raise ``ResourceNotFound``."""

    def load(self, path: str) -> dict[str, Any]:
        """Read *path* and return its root mapping or raise ``MalformedConfig``."""

    def parse(self, document: str | bytes, name: str = "<string>") -> dict[str, Any]:
        """Parse an in-memory *document*; *name* is used in error messages."""
