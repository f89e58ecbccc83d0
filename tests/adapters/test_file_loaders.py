from __future__ import annotations

import logging
from pathlib import Path

import pytest

from lib_yaml_config.adapters.file_loaders.structured import YAMLFileLoader
from lib_yaml_config.domain.errors import MalformedConfig, ResourceNotFound


def test_yaml_loader(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("db:\n  port: 5432\n  hosts: [a, b]\n", encoding="utf-8")
    data = YAMLFileLoader().load(str(path))
    assert data == {"db": {"port": 5432, "hosts": ["a", "b"]}}


def test_yaml_loader_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / "missing.yaml"
    with pytest.raises(ResourceNotFound) as info:
        YAMLFileLoader().load(str(missing))
    assert info.value.path == str(missing)


def test_yaml_loader_directory_is_not_a_file(tmp_path: Path) -> None:
    with pytest.raises(ResourceNotFound):
        YAMLFileLoader().read(str(tmp_path))


def test_yaml_loader_invalid(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("key: [unclosed\n", encoding="utf-8")
    caplog.set_level(logging.ERROR, logger="lib_yaml_config")
    with pytest.raises(MalformedConfig):
        YAMLFileLoader().load(str(path))
    assert [record.getMessage() for record in caplog.records] == ["config_file_invalid"]


@pytest.mark.parametrize("document", ["- 1\n- 2\n", "just text\n", "42\n"])
def test_yaml_loader_rejects_non_mapping_root(document: str) -> None:
    with pytest.raises(MalformedConfig):
        YAMLFileLoader().parse(document, name="inline")


def test_empty_document_is_an_empty_mapping(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("# only a comment\n", encoding="utf-8")
    assert YAMLFileLoader().load(str(path)) == {}


def test_safe_loader_refuses_python_tags() -> None:
    with pytest.raises(MalformedConfig):
        YAMLFileLoader().parse("value: !!python/object/apply:os.getcwd []\n")


def test_parse_keeps_last_duplicate_key_and_anchors() -> None:
    document = "base: {x: 1}\nbase: &b {x: 2}\nuse: *b\n"
    assert YAMLFileLoader().parse(document) == {"base": {"x": 2}, "use": {"x": 2}}


def test_read_returns_raw_bytes(tmp_path: Path) -> None:
    path = tmp_path / "raw.yaml"
    path.write_bytes(b"a: \xc3\xa4\n")
    loader = YAMLFileLoader()
    assert loader.read(str(path)) == b"a: \xc3\xa4\n"
    assert loader.load(str(path)) == {"a": "ä"}


def test_default_loader_follows_yaml11_scalar_rules() -> None:
    assert YAMLFileLoader().parse("on: 1\nversion: 0777\n") == {True: 1, "version": 511}


def test_yaml12_loader_keeps_yaml11_booleans_as_strings() -> None:
    data = YAMLFileLoader(yaml12=True).parse("on: 1\nno: x\nflags: [yes, off, true, False]\n")
    assert data == {"on": 1, "no": "x", "flags": ["yes", "off", True, False]}


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("0777", 777),
        ("0o17", 15),
        ("0x1F", 31),
        ("-12", -12),
        ("+3", 3),
        ("1.5", 1.5),
        ("1e3", 1000.0),
        ("2001-12-14", "2001-12-14"),
        ("~", None),
    ],
)
def test_yaml12_loader_resolves_core_schema_scalars(text: str, expected: object) -> None:
    value = YAMLFileLoader(yaml12=True).parse(f"v: {text}\n")["v"]
    assert value == expected
    assert type(value) is type(expected)


def test_yaml12_loader_renders_mapping_keys_as_text() -> None:
    data = YAMLFileLoader(yaml12=True).parse("1: one\ntrue: yes\n~: nothing\nnested: {2: two}\n")
    assert data == {"1": "one", "true": "yes", "null": "nothing", "nested": {"2": "two"}}


def test_yaml12_loader_keeps_merge_keys() -> None:
    document = "base: &b {x: 1}\nderived:\n  <<: *b\n  y: 2\n"
    assert YAMLFileLoader(yaml12=True).parse(document)["derived"] == {"x": 1, "y": 2}
