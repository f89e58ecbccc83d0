"""Resource resolver tests.

Each scenario runs inside a ``ConfigSandbox`` with private home and working
directories so discovery rules can be asserted exactly.
"""

from __future__ import annotations

import os
from pathlib import Path

from lib_yaml_config.adapters.path_resolvers.default import DefaultResourceResolver
from tests.support import create_config_sandbox


def test_plain_name_in_working_directory(tmp_path: Path) -> None:
    sandbox = create_config_sandbox(tmp_path)
    expected = sandbox.write("conf/app.yaml", "a: 1\n")
    assert sandbox.resolver().resolve("conf/app.yaml") == [str(expected)]


def test_home_matches_come_before_working_directory(tmp_path: Path) -> None:
    sandbox = create_config_sandbox(tmp_path)
    in_cwd = sandbox.write("app.yaml", "where: cwd\n")
    in_home = sandbox.write("app.yaml", "where: home\n", under="home")
    assert sandbox.resolver().resolve("app.yaml") == [str(in_home), str(in_cwd)]


def test_glob_matches_are_sorted_per_root(tmp_path: Path) -> None:
    sandbox = create_config_sandbox(tmp_path)
    for name in ("conf/20-b.yaml", "conf/10-a.yaml", "conf/30-c.yaml"):
        sandbox.write(name, "k: 1\n")
    resolved = sandbox.resolver().resolve("conf/*.yaml")
    assert [Path(path).name for path in resolved] == ["10-a.yaml", "20-b.yaml", "30-c.yaml"]


def test_directories_are_ignored(tmp_path: Path) -> None:
    sandbox = create_config_sandbox(tmp_path)
    (sandbox.cwd / "conf" / "nested.yaml").mkdir(parents=True)
    sandbox.write("conf/real.yaml", "k: 1\n")
    assert [Path(path).name for path in sandbox.resolver().resolve("conf/*.yaml")] == ["real.yaml"]


def test_absolute_pattern_is_used_as_given(tmp_path: Path) -> None:
    sandbox = create_config_sandbox(tmp_path)
    target = sandbox.write("abs.yaml", "k: 1\n")
    resolver = DefaultResourceResolver(cwd=tmp_path / "elsewhere", home=tmp_path / "nohome")
    assert resolver.resolve(str(target)) == [str(target)]


def test_tilde_is_expanded(tmp_path: Path, monkeypatch) -> None:
    sandbox = create_config_sandbox(tmp_path)
    target = sandbox.write("tilde.yaml", "k: 1\n", under="home")
    monkeypatch.setenv("HOME", str(sandbox.home))
    monkeypatch.setenv("USERPROFILE", str(sandbox.home))
    assert DefaultResourceResolver(cwd=sandbox.cwd, home=sandbox.home).resolve("~/tilde.yaml") == [str(target)]


def test_same_file_through_both_roots_is_reported_once(tmp_path: Path) -> None:
    sandbox = create_config_sandbox(tmp_path)
    target = sandbox.write("shared.yaml", "k: 1\n")
    resolver = DefaultResourceResolver(cwd=sandbox.cwd, home=sandbox.cwd)
    assert resolver.resolve("shared.yaml") == [str(target)]


def test_nothing_found(tmp_path: Path) -> None:
    sandbox = create_config_sandbox(tmp_path)
    assert sandbox.resolver().resolve("absent/*.yaml") == []
    assert sandbox.resolver().resolve("   ") == []


def test_defaults_to_process_directories() -> None:
    resolver = DefaultResourceResolver()
    assert resolver.cwd == Path(os.getcwd())
    assert resolver.home == Path.home()
