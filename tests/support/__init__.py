"""Shared helpers for the test-suite.

``ConfigSandbox`` narrates fixture intent: tests describe which YAML files
exist (and where) instead of juggling paths, and the sandbox hands back
resource patterns plus a resolver rooted at the sandbox so the real home and
working directories never leak into a test.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from textwrap import dedent

from lib_yaml_config.adapters.path_resolvers.default import DefaultResourceResolver


@dataclass(frozen=True, slots=True)
class ConfigSandbox:
    """Temporary directory tree with a private home and working directory."""

    root: Path
    home: Path
    cwd: Path

    def write(self, relative: str, content: str, *, under: str = "cwd") -> Path:
        """Write dedented *content* to *relative* below the chosen root and return the path."""

        base = self.home if under == "home" else self.cwd
        target = base / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(dedent(content).lstrip("\n"), encoding="utf-8")
        return target

    def pattern(self, relative: str) -> str:
        """Return an absolute resource pattern below the working directory."""

        return str(self.cwd / relative)

    def resolver(self) -> DefaultResourceResolver:
        """Return a resolver searching the sandbox home first and the sandbox cwd second."""

        return DefaultResourceResolver(cwd=self.cwd, home=self.home)


def create_config_sandbox(tmp_path: Path) -> ConfigSandbox:
    """Create the sandbox directories below *tmp_path*."""

    home = tmp_path / "home"
    cwd = tmp_path / "work"
    home.mkdir(parents=True, exist_ok=True)
    cwd.mkdir(parents=True, exist_ok=True)
    return ConfigSandbox(root=tmp_path, home=home, cwd=cwd)


class FakeProperties:
    """In-memory property source for extrapolation tests."""

    def __init__(self, sys: dict[str, str] | None = None, env: dict[str, str] | None = None) -> None:
        self._namespaces = {"sys": dict(sys or {}), "env": dict(env or {})}
        self.lookups: list[tuple[str, str]] = []

    def lookup(self, namespace: str, name: str) -> str | None:
        self.lookups.append((namespace, name))
        return self._namespaces.get(namespace, {}).get(name)


NESTED_MAPS_YAML = """
conditionalpropermap:
  - foo: bar
    default: false
  - foo: boom
    default: true
conditionalmaplist:
  - item:
      name: first
      value: 1
  - item:
      name: second
      value: 2
servers:
  - name: primary
    port: 8080
    tags: [a, b]
  - name: secondary
    port: 8081
    tags: [c]
  - name: tertiary
    port: 8082
nested:
  level1:
    level2:
      leaf: deep
    other: 7
  empty: ~
arr: [1, 2, 3]
dotted.key: dotted
"""
"""Document modelled on the nested-map fixtures used across the unit tests."""
