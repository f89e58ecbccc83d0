"""Filesystem resolution of configuration resources.

Purpose
-------
Implement the :class:`lib_yaml_config.application.ports.ResourceResolver`
protocol. The adapter is the only component that understands filesystem
conventions: home and working directories, glob expansion and ordering.

Contents
--------
* :class:`DefaultResourceResolver` – expands a name or glob into files.
* :func:`_glob_files` – helper that returns sorted regular files for a pattern.

System Role
-----------
Feeds deterministic path lists into the loader functions of
:mod:`lib_yaml_config.core` while emitting observability events about
discovered paths.
"""

from __future__ import annotations

import glob
import os
from pathlib import Path
from typing import Iterable, List

from ...observability import log_debug


class DefaultResourceResolver:
    """Resolve resource names and globs to existing files.

    Why
    ----
    Services ship ``conf/app-behaviour.yaml`` next to the code while operators
    drop overrides in their home directory; one pattern should find both.

    Rules
    -----
    * ``~`` is expanded.
    * Absolute patterns are searched as given.
    * Relative patterns are searched under the home directory first and the
      working directory second.
    * Matches for one root are sorted alphanumerically so later files override
      earlier ones when layered; directories are ignored; a file found through
      two roots is reported once.
    """

    def __init__(self, *, cwd: Path | str | None = None, home: Path | str | None = None) -> None:
        """Store the search roots.

        Parameters
        ----------
        cwd:
            Working directory for relative patterns. Defaults to :func:`Path.cwd`.
        home:
            Home directory for relative patterns. Defaults to :func:`Path.home`.
        """

        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.home = Path(home) if home is not None else Path.home()

    def resolve(self, pattern: str) -> list[str]:
        """Return files matching *pattern* in load order.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> root = Path(tmp.name)
        >>> for name in ("b.yaml", "a.yaml", "notes.txt"):
        ...     _ = (root / name).write_text("k: 1", encoding="utf-8")
        >>> resolver = DefaultResourceResolver(cwd=root, home=root / "missing")
        >>> [Path(p).name for p in resolver.resolve("*.yaml")]
        ['a.yaml', 'b.yaml']
        >>> resolver.resolve("absent-*.yaml")
        []
        >>> tmp.cleanup()
        """

        if not pattern or not pattern.strip():
            return []
        expanded = os.path.expanduser(pattern.strip())
        found: List[str] = []
        seen: set[str] = set()
        for root in self._roots(expanded):
            for path in _glob_files(root, expanded):
                identity = os.path.realpath(path)
                if identity in seen:
                    continue
                seen.add(identity)
                found.append(path)
        log_debug("resource_resolved", resource=pattern, path=None, count=len(found))
        return found

    def _roots(self, pattern: str) -> Iterable[Path | None]:
        if os.path.isabs(pattern):
            return [None]
        return [self.home, self.cwd]


def _glob_files(root: Path | None, pattern: str) -> list[str]:
    """Return sorted regular files matching *pattern* below *root*.

    Examples
    --------
    >>> _glob_files(Path("/nonexistent-root"), "*.yaml")
    []
    """

    full = pattern if root is None else str(root / pattern)
    return sorted(path for path in glob.glob(full) if os.path.isfile(path))
