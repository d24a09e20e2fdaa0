"""Tests for the carbon-ledger command line."""

import json

import pytest

from carbon_ledger import cli
from carbon_ledger.auth.jwt_auth import jwt_manager


class TestParseArgs:
    def test_serve_options(self):
        ns = cli.parse_args(["serve", "--host", "0.0.0.0", "--port", "9000", "--reload"])

        assert ns.command == "serve"
        assert ns.host == "0.0.0.0"
        assert ns.port == 9000
        assert ns.reload is True

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.parse_args([])


class TestCommands:
    def test_issue_token(self, capsys):
        assert cli.main(["issue-token", "bob", "--minutes", "5"]) == 0

        token = capsys.readouterr().out.strip()
        assert jwt_manager.extract_principal(token) == "bob"

    def test_issue_token_rejects_bad_lifetime(self, capsys):
        assert cli.main(["issue-token", "bob", "--minutes", "0"]) == 2

    def test_show_config_masks_secret(self, capsys):
        assert cli.main(["show-config"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["app"]["jwt_secret_key"] == "***"
        assert data["ledger"]["admin_principal"] == "admin"

    def test_init_db(self, capsys):
        assert cli.main(["init-db"]) == 0

        assert "Initialized database" in capsys.readouterr().out

    def test_serve_runs_uvicorn(self, monkeypatch):
        calls = {}

        def fake_run(app, **kwargs):
            calls["app"] = app
            calls.update(kwargs)

        monkeypatch.setattr("uvicorn.run", fake_run)

        assert cli.main(["serve", "--port", "8123"]) == 0
        assert calls["app"] == "carbon_ledger.main:app"
        assert calls["port"] == 8123
        assert calls["host"] == "127.0.0.1"
