"""Reference substitution rules.

Scenarios mirror the configuration files services actually ship: properties
with fallbacks, environment lookups, cross references into the same document
and escaped dollar signs.
"""

from __future__ import annotations

import pytest
import yaml

from lib_yaml_config.application.config import Config
from lib_yaml_config.application.extrapolate import MAX_DEPTH, Extrapolator, guess_type
from lib_yaml_config.domain.errors import MalformedConfig
from tests.support import NESTED_MAPS_YAML, FakeProperties


@pytest.fixture()
def properties() -> FakeProperties:
    return FakeProperties(
        sys={"user.home": "/home/demo", "port": "8080", "alias": "${port}"},
        env={"HOME": "/env/home"},
    )


def test_system_property(properties: FakeProperties) -> None:
    assert Extrapolator(properties).apply("${user.home}/cache") == "/home/demo/cache"


def test_explicit_namespaces(properties: FakeProperties) -> None:
    extrapolator = Extrapolator(properties)
    assert extrapolator.apply("${sys:user.home}") == "/home/demo"
    assert extrapolator.apply("${env:HOME}") == "/env/home"
    assert ("env", "HOME") in properties.lookups


def test_fallback_chain(properties: FakeProperties) -> None:
    assert Extrapolator(properties).apply("${missing:-${alsomissing:-final}}") == "final"


def test_fallback_is_type_guessed(properties: FakeProperties) -> None:
    assert Extrapolator(properties).apply("${nonexisting.property:-87}") == 87


def test_resolved_values_are_substituted_again(properties: FakeProperties) -> None:
    assert Extrapolator(properties).apply("${alias}") == 8080


def test_plain_strings_are_type_guessed(properties: FakeProperties) -> None:
    extrapolator = Extrapolator(properties)
    assert extrapolator.apply("42") == 42
    assert extrapolator.apply(".5") == 0.5
    assert extrapolator.apply("true") is True
    assert extrapolator.apply("True") == "True"
    assert properties.lookups == []


def test_quoted_numbers_read_back_typed_only_while_extrapolating() -> None:
    config = Config({"port": "8080", "ratio": ".5", "flag": "true"}, extrapolate=True)
    assert (config.get("port"), config.get("ratio"), config.get("flag")) == (8080, 0.5, True)
    config.extrapolate = False
    assert config.get("port") == "8080"


def test_escaped_reference_stays_literal(properties: FakeProperties) -> None:
    assert Extrapolator(properties).apply("cost: $${port}") == "cost: ${port}"
    assert properties.lookups == []


def test_unterminated_reference_is_kept(properties: FakeProperties) -> None:
    assert Extrapolator(properties).apply("${port") == "${port"


def test_containers_are_copied_and_substituted(properties: FakeProperties) -> None:
    source = {"a": ["${port}", {"b": "${env:HOME}"}], "c": None, "d": 1.5}
    result = Extrapolator(properties).apply(source)
    assert result == {"a": [8080, {"b": "/env/home"}], "c": None, "d": 1.5}
    assert source["a"][0] == "${port}"


def test_unresolved_reference_without_fallback_raises(properties: FakeProperties) -> None:
    with pytest.raises(MalformedConfig) as info:
        Extrapolator(properties).apply("${does.not.exist}")
    assert info.value.path == "does.not.exist"


def test_reference_cycle_raises() -> None:
    cyclic = FakeProperties(sys={"a": "${b}", "b": "${a}"})
    with pytest.raises(MalformedConfig, match=str(MAX_DEPTH)):
        Extrapolator(cyclic).apply("${a}")


def test_path_reference_with_predicate() -> None:
    tree = yaml.safe_load(NESTED_MAPS_YAML)
    tree["chosen"] = "${path:conditionalpropermap[default=true].foo}"
    config = Config(tree, extrapolate=True)
    assert config.get("chosen") == "boom"


def test_path_reference_keeps_type_of_target() -> None:
    config = Config({"port": 8080, "url": "${path:port}", "text": "p=${path:port}"}, extrapolate=True)
    assert config.get("url") == 8080
    assert config.get("text") == "p=8080"


def test_path_reference_to_container_raises() -> None:
    config = Config({"db": {"host": "h"}, "ref": "${path:db}"}, extrapolate=True)
    with pytest.raises(MalformedConfig):
        config.get("ref")


def test_missing_path_reference_uses_fallback() -> None:
    config = Config({"ref": "${path:nope:-none}"}, extrapolate=True)
    assert config.get("ref") == "none"


def test_path_reference_without_lookup_is_undefined(properties: FakeProperties) -> None:
    assert Extrapolator(properties).apply("${path:x:-1}") == 1


@pytest.mark.parametrize(
    ("text", "expected"),
    [("87", 87), ("-3", -3), ("1.5", 1.5), (".5", 0.5), ("true", True), ("false", False), ("True", "True"), ("1e3", "1e3")],
)
def test_guess_type(text: str, expected: object) -> None:
    assert guess_type(text) == expected
    assert type(guess_type(text)) is type(expected)
