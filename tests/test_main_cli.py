from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import main as main_module
from main import _parse_args, _resolve_server_config
from userapi.application import create_app
from userapi.client import UsersClient


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "9090"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 9090


def test_users_subcommand_parses_actions() -> None:
    args = _parse_args(["users", "--service-url", "http://svc:1", "delete", "3"])
    assert args.command == "users"
    assert args.action == "delete"
    assert args.user_id == 3
    assert args.service_url == "http://svc:1"


def test_cli_flags_override_configuration(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "userapi.yaml"
    config_path.write_text("server:\n  port: 9000\n  host: 10.0.0.1\n", encoding="utf-8")
    monkeypatch.delenv("USERAPI_PORT", raising=False)
    monkeypatch.delenv("USERAPI_HOST", raising=False)

    args = _parse_args(["serve", "--config", str(config_path), "--port", "9200"])
    config = _resolve_server_config(args)

    assert config.host == "10.0.0.1"
    assert config.port == 9200


def test_serve_runs_uvicorn_with_resolved_config(monkeypatch) -> None:
    captured = {}

    def fake_run(app, **kwargs):
        captured["app"] = app
        captured.update(kwargs)

    import uvicorn

    monkeypatch.setattr(uvicorn, "run", fake_run)
    monkeypatch.delenv("USERAPI_CONFIG", raising=False)

    main_module.main(["--port", "8181", "--log-level", "warning"])

    assert captured["port"] == 8181
    assert captured["log_level"] == "warning"
    assert captured["app"].state.config.port == 8181


@pytest.fixture()
def patched_client(monkeypatch):
    test_client = TestClient(create_app())
    monkeypatch.setattr(
        main_module,
        "UsersClient",
        lambda base_url: UsersClient(base_url, client=test_client),
    )
    yield test_client
    test_client.close()


def test_users_commands_against_service(patched_client, capsys) -> None:
    with pytest.raises(SystemExit) as created:
        main_module.main(["users", "create", "Ada"])
    assert created.value.code == 0
    assert "Created user #1: Ada" in capsys.readouterr().out

    with pytest.raises(SystemExit):
        main_module.main(["users", "list"])
    output = capsys.readouterr().out
    assert "1 user(s) found:" in output
    assert "Ada" in output

    with pytest.raises(SystemExit) as missing:
        main_module.main(["users", "get", "5"])
    assert missing.value.code == 1
    assert "resource not found" in capsys.readouterr().err
