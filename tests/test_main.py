"""
End-to-end tests of the command line: bootstrap, get/set and update.
"""

import json
import logging

import pytest

from npm_statistic.commands import CommandKind, handler_for, parse_command, run_get, run_set, run_update
from npm_statistic.core.dependencies import Dependencies
from npm_statistic.domain.errors import UnknownCommandError
from npm_statistic.domain.periods import current_period_key
from npm_statistic.main import run
from tests.helpers import FakeFetcher, read_json, write_json


def get_output(capsys, deps, path):
    capsys.readouterr()
    assert run(["get", path], deps) == 0
    return capsys.readouterr().out.strip()


def test_parse_command():
    assert parse_command(None) is CommandKind.UPDATE
    assert parse_command("") is CommandKind.UPDATE
    assert parse_command("get") is CommandKind.GET
    assert parse_command("set") is CommandKind.SET
    with pytest.raises(UnknownCommandError):
        parse_command("delete")


def test_handler_for():
    assert handler_for(CommandKind.UPDATE) is run_update
    assert handler_for(CommandKind.GET) is run_get
    assert handler_for(CommandKind.SET) is run_set


def test_fresh_environment_update(base_dir, deps, fetcher):
    assert run([], deps) == 0

    assert (base_dir / "config.json").read_text(encoding="utf-8") == "{}"
    assert (base_dir / "stats").is_dir()
    stats_file = base_dir / "stats" / f"{current_period_key()}.json"
    assert read_json(stats_file) == {"packages": []}
    assert fetcher.calls == []


def test_bootstrap_is_idempotent(base_dir, deps):
    write_json(base_dir / "config.json", {"keep": 1})
    assert run(["get"], deps) == 0
    assert run(["get"], deps) == 0
    assert read_json(base_dir / "config.json") == {"keep": 1}


def test_default_dependencies_use_working_directory(base_dir):
    assert run(["set", "a", "1"]) == 0
    assert read_json(base_dir / "config.json") == {"a": 1}


def test_home_environment_variable(base_dir, tmp_path_factory, monkeypatch):
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("NPM_STATISTIC_HOME", str(home))
    assert run(["set", "a", "1"]) == 0
    assert read_json(home / "config.json") == {"a": 1}
    assert not (base_dir / "config.json").exists()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("42", 42),
        ("3.5", 3.5),
        ("false", False),
        ("null", None),
        ('{"name":"left-pad"}', {"name": "left-pad"}),
        ('[1,"two"]', [1, "two"]),
        ('"quoted"', "quoted"),
        ("plain string", "plain string"),
    ],
)
def test_set_then_get_roundtrip(base_dir, deps, capsys, raw, expected):
    assert run(["set", "value", raw], deps) == 0
    assert json.loads(get_output(capsys, deps, "value")) == expected
    assert read_json(base_dir / "config.json")["value"] == expected


def test_set_nested_paths(base_dir, deps, capsys):
    assert run(["set", "packages", "[]"], deps) == 0
    assert run(["set", "packages.0", '{"name": "left-pad"}'], deps) == 0
    assert run(["set", "packages.0.name", "is-odd"], deps) == 0

    assert get_output(capsys, deps, "packages.0.name") == '"is-odd"'
    assert get_output(capsys, deps, "packages") == '[{"name":"is-odd"}]'


def test_get_whole_config(base_dir, deps, capsys):
    write_json(base_dir / "config.json", {"a": {"b": 1}})
    capsys.readouterr()
    assert run(["get"], deps) == 0
    assert capsys.readouterr().out.strip() == '{"a":{"b":1}}'


def test_get_missing_path_prints_null(base_dir, deps, capsys):
    write_json(base_dir / "config.json", {"a": 1})
    assert get_output(capsys, deps, "a.b.c") == "null"
    assert get_output(capsys, deps, "missing") == "null"


@pytest.mark.parametrize("path", ["missing.child", "count.child", "list.9"])
def test_set_invalid_target_leaves_file_unchanged(base_dir, deps, caplog, path):
    write_json(base_dir / "config.json", {"count": 3, "list": []})
    before = (base_dir / "config.json").read_bytes()

    assert run(["set", path, "1"], deps) == 1

    assert (base_dir / "config.json").read_bytes() == before
    assert "Cannot set key" in caplog.text


@pytest.mark.parametrize("argv", [["set"], ["set", "only.path"]])
def test_set_insufficient_arguments(base_dir, deps, caplog, argv):
    write_json(base_dir / "config.json", {"a": 1})
    before = (base_dir / "config.json").read_bytes()

    assert run(argv, deps) == 1

    assert (base_dir / "config.json").read_bytes() == before
    assert "Not enough args" in caplog.text


def test_set_without_arguments_in_fresh_directory_has_no_side_effects(base_dir, deps, caplog):
    assert run(["set"], deps) == 1
    assert run(["set", "a.b"], deps) == 1

    assert "Not enough args" in caplog.text
    assert list(base_dir.iterdir()) == []


def test_unknown_command_has_no_side_effects(base_dir, deps, caplog):
    assert run(["delete", "x"], deps) == 1
    assert 'Unknown command: "delete".' in caplog.text
    assert not (base_dir / "config.json").exists()
    assert not (base_dir / "stats").exists()


@pytest.mark.parametrize("content", ["{broken", "[1, 2]", '"text"'])
def test_malformed_config(base_dir, deps, caplog, content):
    (base_dir / "config.json").write_text(content, encoding="utf-8")

    assert run(["set", "a", "1"], deps) == 1

    assert "Wrong config format" in caplog.text
    assert (base_dir / "config.json").read_text(encoding="utf-8") == content


def test_update_with_fetch_failure_completes(base_dir, caplog):
    write_json(base_dir / "config.json", {"packages": [{"name": "left-pad"}, {"name": "is-odd"}]})
    fetcher = FakeFetcher(downloads={"is-odd": 7}, failures={"left-pad"})
    deps = Dependencies(base_dir=base_dir, fetcher=fetcher)

    with caplog.at_level(logging.WARNING):
        assert run(["update"], deps) == 0

    assert "left-pad" in caplog.text
    assert sorted(fetcher.calls) == ["is-odd", "left-pad"]
    stats = read_json(base_dir / "stats" / f"{current_period_key()}.json")
    assert [(p["name"], p["downloads"]) for p in stats["packages"]] == [("is-odd", 7)]


def test_update_replaces_existing_record(base_dir):
    write_json(base_dir / "config.json", {"packages": [{"name": "a"}, {"name": "b"}]})
    stats_file = base_dir / "stats" / f"{current_period_key()}.json"
    write_json(stats_file, {"packages": [{"name": "a", "downloads": 1}]})
    deps = Dependencies(base_dir=base_dir, fetcher=FakeFetcher(downloads={"a": 100, "b": 5}))

    assert run([], deps) == 0

    packages = read_json(stats_file)["packages"]
    assert [(p["name"], p["downloads"]) for p in packages] == [("a", 100), ("b", 5)]


def test_update_with_malformed_statistics_file(base_dir, deps, fetcher, caplog):
    write_json(base_dir / "config.json", {"packages": [{"name": "a"}]})
    stats_file = base_dir / "stats" / f"{current_period_key()}.json"
    stats_file.parent.mkdir()
    stats_file.write_text("not json", encoding="utf-8")

    assert run([], deps) == 1

    assert "Wrong statistics file format" in caplog.text
    assert fetcher.calls == []
    assert stats_file.read_text(encoding="utf-8") == "not json"


def test_invalid_settings_block_update_but_not_get_set(base_dir, deps, capsys, caplog):
    write_json(base_dir / "config.json", {"settings": {"max_concurrency": 0}})

    assert run(["update"], deps) == 1
    assert "Invalid settings" in caplog.text

    assert run(["set", "settings.max_concurrency", "2"], deps) == 0
    assert get_output(capsys, deps, "settings.max_concurrency") == "2"
    assert run(["update"], deps) == 0


@pytest.mark.parametrize("raw", ["1e400", "-1e400"])
def test_set_overflowing_number_is_stored_as_string(base_dir, deps, capsys, raw):
    assert run(["set", "big", raw], deps) == 0

    text = (base_dir / "config.json").read_text(encoding="utf-8")
    assert "Infinity" not in text
    assert read_json(base_dir / "config.json") == {"big": raw}
    assert get_output(capsys, deps, "big") == json.dumps(raw)
