"""CLI tests: exit codes, config loading and report output."""

import json
import logging

import pytest

import main
from provisioner.catalog import apply_nodejs_method
from provisioner.resolvers import dotnet as dotnet_module
from provisioner.resolvers import github as github_module
from provisioner.resolvers import nodejs as nodejs_module


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def write_binary(path, version):
    path.write_text(f'#!/bin/sh\necho "{version}"\n')
    path.chmod(0o755)
    return path


def write_config(tmp_path, binary, versions=None, **extra):
    tool = {
        "name": "demo",
        "channel": "latest",
        "channels": ["latest"],
        "detect": {"binary": str(binary)},
        "resolver": {"kind": "fixed", "options": {"versions": versions or {"latest": "1.2.3"}}},
        "installer": {"kind": "script", "options": {"url": "https://example.invalid/install.sh"}},
    }
    tool.update(extra)
    config_path = tmp_path / "tools.json"
    config_path.write_text(json.dumps({"tools": [tool], "preflight": {"enabled": False}}))
    return config_path


def test_current_tool_exits_zero(tmp_path, capsys):
    binary = write_binary(tmp_path / "demo", "1.2.3")
    config = write_config(tmp_path, binary)

    code = main.main(["--config", str(config), "--json"])

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["outcomes"][0]["state"] == "skipped"
    assert report["outcomes"][0]["plan"]["action"] == "skip"


def test_dry_run_plans_install_without_running_it(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    config = write_config(tmp_path, tmp_path / "missing", profile_lines=["export DEMO=1"])

    code = main.main(["--config", str(config), "--dry-run", "--json"])

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["dry_run"] is True
    assert report["outcomes"][0]["state"] == "planned"
    assert report["outcomes"][0]["plan"]["action"] == "install"
    assert not (tmp_path / ".bashrc").exists()


def test_unsupported_channel_is_config_error(tmp_path):
    config = write_config(tmp_path, tmp_path / "missing")
    assert main.main(["--config", str(config), "--channel", "sts"]) == 2


def test_unknown_tool_selection_is_config_error(tmp_path):
    config = write_config(tmp_path, tmp_path / "missing")
    assert main.main(["--config", str(config), "--only", "nope"]) == 2


def test_invalid_json_is_config_error(tmp_path):
    config = tmp_path / "tools.json"
    config.write_text("{not json")
    assert main.main(["--config", str(config)]) == 2


def test_missing_config_file_is_config_error(tmp_path):
    assert main.main(["--config", str(tmp_path / "nope.json")]) == 2


def test_invalid_tool_definition_is_config_error(tmp_path):
    config = write_config(tmp_path, tmp_path / "missing", installer={"kind": "snap"})
    assert main.main(["--config", str(config)]) == 2


def test_bad_argument_exits_two():
    with pytest.raises(SystemExit) as excinfo:
        main.main(["--channel", "nightly"])
    assert excinfo.value.code == 2


def test_log_file_receives_summary(tmp_path):
    binary = write_binary(tmp_path / "demo", "1.2.3")
    config = write_config(tmp_path, binary)
    log_file = tmp_path / "logs" / "provision.log"

    assert main.main(["--config", str(config), "--log-file", str(log_file)]) == 0
    content = log_file.read_text()
    assert "SUMMARY" in content
    assert "demo: skipped" in content


def test_default_catalog_loads():
    settings = main.load_config(main.parse_arguments([]))
    names = [tool.name for tool in settings.tools]
    assert names == ["dotnet", "dotnet-sts", "powershell", "nodejs", "uv", "oh-my-posh"]
    assert all(tool.channel in tool.channels for tool in settings.tools)


def fake_github(url, timeout, headers=None):
    if url.endswith("/releases/latest"):
        return {"tag_name": "v1.0.0"}
    return [{"tag_name": "v7.4.6", "draft": False, "prerelease": False}]


def fake_node_index(url, timeout, headers=None):
    return [
        {"version": "v23.3.0", "lts": False},
        {"version": "v22.11.0", "lts": "Jod"},
    ]


def fake_dotnet_index(url, timeout, headers=None):
    return {"releases-index": [
        {"channel-version": "9.0", "latest-sdk": "9.0.101",
         "release-type": "sts", "support-phase": "active"},
        {"channel-version": "8.0", "latest-sdk": "8.0.404",
         "release-type": "lts", "support-phase": "active"},
    ]}


def test_lts_channel_with_default_catalog(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr(github_module, "fetch_json", fake_github)
    monkeypatch.setattr(nodejs_module, "fetch_json", fake_node_index)
    monkeypatch.setattr(dotnet_module, "fetch_json", fake_dotnet_index)

    code = main.main(["--skip-preflight", "--channel", "lts", "--dry-run", "--json"])

    report = json.loads(capsys.readouterr().out)
    channels = {o["tool"]: o["plan"]["channel"] for o in report["outcomes"]}
    assert channels == {
        "dotnet": "lts",
        "dotnet-sts": "sts",
        "powershell": "lts",
        "nodejs": "lts",
        "uv": "latest",
        "oh-my-posh": "latest",
    }
    targets = {o["tool"]: o["plan"]["target_version"] for o in report["outcomes"]}
    assert targets["dotnet"] == "8.0.404"
    assert targets["powershell"] == "7.4.6"
    assert targets["nodejs"] == "22.11.0"
    assert code == 0


def test_nodejs_method_flag_selects_nvm():
    settings = main.load_config(main.parse_arguments(["--nodejs-method", "nvm"]))
    assert settings.nodejs_method == "nvm"

    tools = apply_nodejs_method(settings.tools, settings.nodejs_method)
    nodejs = next(tool for tool in tools if tool.name == "nodejs")
    assert nodejs.installer.kind == "nvm"
    assert nodejs.detect.binary == "~/.nvm/current/bin/node"
    assert [tool.name for tool in tools] == [tool.name for tool in settings.tools]


def test_skip_preflight_flag_disables_checks():
    settings = main.load_config(main.parse_arguments(["--skip-preflight"]))
    assert settings.preflight.enabled is False
    assert main.build_preflight(settings.preflight, None) is None
    assert main.load_config(main.parse_arguments([])).preflight.enabled is True
