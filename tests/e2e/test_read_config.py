"""End-to-end loading scenarios through the public entry points.

Files are written into a ``ConfigSandbox`` and loaded the way services load
them: a behaviour file shipped with the code, an environment file on top and
optional overrides.
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from lib_yaml_config import (
    MalformedConfig,
    MergeAction,
    MergeConflict,
    ResourceNotFound,
    parse_config,
    resolve_layered_configs,
    resolve_multi_config,
)
from tests.support import ConfigSandbox, FakeProperties, create_config_sandbox

BEHAVIOUR = """
defaults: &defaults
  timeout: 5
  retries: 3
service:
  name: demo
  endpoints: [a, b]
  db:
    host: localhost
    port: 5432
"""

ENVIRONMENT = """
service:
  endpoints: [c]
  db:
    host: prod.example.org
"""


@pytest.fixture()
def sandbox(tmp_path: Path) -> ConfigSandbox:
    sandbox = create_config_sandbox(tmp_path)
    sandbox.write("conf/app-behaviour.yaml", BEHAVIOUR)
    sandbox.write("conf/app-environment.yaml", ENVIRONMENT)
    return sandbox


def test_layered_loading_merges_branches(sandbox: ConfigSandbox) -> None:
    cfg = resolve_layered_configs(
        sandbox.pattern("conf/app-behaviour.yaml"),
        sandbox.pattern("conf/app-environment.yaml"),
    )
    assert cfg.get("service.db.host") == "prod.example.org"
    assert cfg.get("service.db.port") == 5432
    assert cfg.get("service.name") == "demo"
    assert cfg.get_list("service.endpoints") == ["c"]


def test_layered_list_action_union(sandbox: ConfigSandbox) -> None:
    cfg = resolve_layered_configs(sandbox.pattern("conf/app-*.yaml"), list_action=MergeAction.UNION)
    assert cfg.get_list("service.endpoints") == ["a", "b", "c"]


def test_layered_fail_action_reports_conflict(sandbox: ConfigSandbox) -> None:
    with pytest.raises(MergeConflict) as info:
        resolve_layered_configs(sandbox.pattern("conf/app-*.yaml"), default_action="fail", list_action="union")
    assert info.value.path == "service.db.host"


def test_multi_config_replaces_top_level_keys(sandbox: ConfigSandbox) -> None:
    cfg = resolve_multi_config(sandbox.pattern("conf/app-*.yaml"))
    assert cfg.get("service.db.host") == "prod.example.org"
    assert "service.db.port" not in cfg
    assert "service.name" not in cfg


def test_multi_config_anchors_cross_files(sandbox: ConfigSandbox) -> None:
    sandbox.write("conf/app-zz-local.yaml", "local:\n  <<: *defaults\n  timeout: 9\n")
    cfg = resolve_multi_config(sandbox.pattern("conf/app-*.yaml"))
    assert cfg.get("local.timeout") == 9
    assert cfg.get("local.retries") == 3


def test_relative_resources_use_the_resolver(sandbox: ConfigSandbox) -> None:
    sandbox.write("conf/app-environment.yaml", "service:\n  db:\n    host: from-home\n", under="home")
    cfg = resolve_layered_configs("conf/app-*.yaml", resolver=sandbox.resolver())
    assert cfg.get("service.db.host") == "prod.example.org"
    assert cfg.name == "conf/app-*.yaml"


def test_missing_resources_raise(sandbox: ConfigSandbox) -> None:
    with pytest.raises(ResourceNotFound):
        resolve_layered_configs(sandbox.pattern("conf/absent-*.yaml"))
    with pytest.raises(ResourceNotFound):
        resolve_multi_config(sandbox.pattern("conf/absent.yaml"))


def test_one_existing_resource_is_enough(sandbox: ConfigSandbox) -> None:
    cfg = resolve_layered_configs(sandbox.pattern("conf/absent.yaml"), sandbox.pattern("conf/app-behaviour.yaml"))
    assert cfg.get("service.name") == "demo"


def test_non_map_root_is_malformed(sandbox: ConfigSandbox) -> None:
    sandbox.write("conf/list.yaml", "- a\n- b\n")
    with pytest.raises(MalformedConfig):
        resolve_layered_configs(sandbox.pattern("conf/list.yaml"))


def test_empty_file_counts_as_empty_map(sandbox: ConfigSandbox) -> None:
    sandbox.write("conf/empty.yaml", "")
    assert resolve_layered_configs(sandbox.pattern("conf/empty.yaml")).as_dict() == {}


def test_loaded_configs_extrapolate_by_default(sandbox: ConfigSandbox) -> None:
    sandbox.write("conf/refs.yaml", "cache: ${user.home}/cache\nraw: $${user.home}\n")
    properties = FakeProperties(sys={"user.home": "/home/demo"})
    cfg = resolve_layered_configs(sandbox.pattern("conf/refs.yaml"), properties=properties)
    assert cfg.get("cache") == "/home/demo/cache"
    assert cfg.get("raw") == "${user.home}"
    cfg = resolve_layered_configs(sandbox.pattern("conf/refs.yaml"), properties=properties, extrapolate=False)
    assert cfg.get("cache") == "${user.home}/cache"


def test_parse_config_accepts_text_bytes_and_streams() -> None:
    assert parse_config("a: 1").get("a") == 1
    assert parse_config(b"a: 2").get("a") == 2
    assert parse_config(io.StringIO("a: 3")).get("a") == 3


def test_parse_config_yaml12_keeps_on_as_a_key() -> None:
    cfg = parse_config("on: 1\nno: x\nversion: 0777\n", yaml12=True)
    assert cfg.get("on") == 1
    assert cfg.get("no") == "x"
    assert cfg.get("version") == 777


def test_layered_loading_with_yaml12(sandbox: ConfigSandbox) -> None:
    sandbox.write("conf/switches.yaml", "switches:\n  on: enabled\n  off: disabled\n")
    cfg = resolve_layered_configs(sandbox.pattern("conf/switches.yaml"), yaml12=True)
    assert cfg.get("switches.on") == "enabled"
    assert resolve_multi_config(sandbox.pattern("conf/switches.yaml"), yaml12=True).get("switches.off") == "disabled"


def test_parse_config_names_the_source() -> None:
    assert parse_config("a: 1", name="inline").name == "inline"
    with pytest.raises(MalformedConfig) as info:
        parse_config("a: [", name="inline")
    assert info.value.path == "inline"
