"""Adapter contract tests for the default ports implementation.

Purpose
-------
Verify the default adapters continue to satisfy the application-layer ports
defined in ``lib_yaml_config.application.ports`` so dependency inversion remains
enforceable through automated tests.
"""

from __future__ import annotations

from pathlib import Path

from lib_yaml_config.adapters.file_loaders.structured import YAMLFileLoader
from lib_yaml_config.adapters.path_resolvers.default import DefaultResourceResolver
from lib_yaml_config.adapters.properties.default import DefaultPropertySource
from lib_yaml_config.application import ports
from lib_yaml_config.application.config import NoProperties
from tests.support import FakeProperties, create_config_sandbox


def test_default_resource_resolver_contract(tmp_path: Path) -> None:
    """DefaultResourceResolver must fulfil the ResourceResolver protocol and return plain strings."""

    sandbox = create_config_sandbox(tmp_path)
    sandbox.write("conf/a.yaml", "a: 1\n")
    resolver = sandbox.resolver()

    assert isinstance(resolver, ports.ResourceResolver)
    assert all(isinstance(candidate, str) for candidate in resolver.resolve("conf/*.yaml"))


def test_yaml_loader_contract(tmp_path: Path) -> None:
    """YAMLFileLoader must fulfil the DocumentLoader protocol and return mappings."""

    path = tmp_path / "doc.yaml"
    path.write_text("a: 1\n", encoding="utf-8")
    loader = YAMLFileLoader()

    assert isinstance(loader, ports.DocumentLoader)
    assert isinstance(loader.read(str(path)), bytes)
    assert isinstance(loader.load(str(path)), dict)
    assert isinstance(loader.parse(b"a: 1"), dict)


def test_property_sources_contract() -> None:
    """Every shipped or test property source must satisfy PropertySource."""

    for source in (DefaultPropertySource(environ={}), NoProperties(), FakeProperties()):
        assert isinstance(source, ports.PropertySource)
        assert source.lookup("sys", "definitely.not.defined") is None


def test_resolver_accepts_string_roots(tmp_path: Path) -> None:
    resolver = DefaultResourceResolver(cwd=str(tmp_path), home=str(tmp_path))
    assert resolver.cwd == tmp_path
