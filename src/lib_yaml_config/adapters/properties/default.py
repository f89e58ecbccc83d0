"""Property source backed by the running process.

Purpose
-------
Answer ``${…}`` references during extrapolation. Implements the
:class:`lib_yaml_config.application.ports.PropertySource` port so the
application layer never reads process state directly.

Key behaviours
--------------
* ``sys`` namespace: a fixed set of host facts (see
  :func:`default_system_properties`) overlaid with caller-supplied properties.
* ``env`` namespace: process environment variables (or an injected mapping).
* Unknown namespaces resolve to ``None`` so the reference falls back or fails.
"""

from __future__ import annotations

import getpass
import os
import platform
import tempfile
from pathlib import Path
from typing import Mapping

from ...observability import log_debug


def default_system_properties() -> dict[str, str]:
    """Return the host facts exposed as unprefixed ``${…}`` references.

    Why
    ----
    Configuration files commonly point at ``${user.home}/data`` or need the
    platform separator; these names are what configuration authors expect.

    Examples
    --------
    >>> props = default_system_properties()
    >>> sorted(props)[:4]
    ['file.separator', 'line.separator', 'os.arch', 'os.name']
    >>> props["file.separator"] == os.sep
    True
    """

    return {
        "user.home": str(Path.home()),
        "user.name": _user_name(),
        "user.dir": os.getcwd(),
        "os.name": platform.system(),
        "os.arch": platform.machine(),
        "os.version": platform.release(),
        "file.separator": os.sep,
        "path.separator": os.pathsep,
        "line.separator": os.linesep,
        "python.version": platform.python_version(),
        "tmp.dir": tempfile.gettempdir(),
    }


class DefaultPropertySource:
    """Serve system properties and environment variables."""

    def __init__(
        self,
        *,
        properties: Mapping[str, object] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialise the source with optional overrides for testability.

        Parameters
        ----------
        properties:
            Extra or replacement ``sys`` properties; values are rendered with
            :func:`str`.
        environ:
            Mapping used for the ``env`` namespace. Defaults to :data:`os.environ`.
        """

        self._properties = {**default_system_properties(), **{k: str(v) for k, v in (properties or {}).items()}}
        self._environ = environ if environ is not None else os.environ

    def lookup(self, namespace: str, name: str) -> str | None:
        """Return the property *name* in *namespace* or ``None``.

        Examples
        --------
        >>> source = DefaultPropertySource(properties={"app.port": 8080}, environ={"HOME": "/home/demo"})
        >>> source.lookup("sys", "app.port"), source.lookup("env", "HOME")
        ('8080', '/home/demo')
        >>> source.lookup("env", "MISSING") is None
        True
        """

        if namespace == "sys":
            value = self._properties.get(name)
        elif namespace == "env":
            value = self._environ.get(name)
        else:
            value = None
        if value is None:
            log_debug("property_undefined", resource=None, path=None, namespace=namespace, name=name)
        return value

    @property
    def properties(self) -> dict[str, str]:
        """Copy of the ``sys`` namespace (used by the ``properties`` CLI listing)."""

        return dict(self._properties)


def _user_name() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return os.environ.get("USER", os.environ.get("USERNAME", ""))
