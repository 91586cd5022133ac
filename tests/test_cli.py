"""Tests for the CLI commands (check, rules, config init)."""

from __future__ import annotations

import json
import logging

import pytest
from typer.testing import CliRunner

from permission_to_rest.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolate(tmp_path, monkeypatch):
    """Keep the user's home config out and reset the package logger afterwards."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
    yield
    logger = logging.getLogger("permission_to_rest")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def _check(permissions_file, *args):
    return runner.invoke(app, ["--config", str(permissions_file), "check", *args])


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


class TestCheck:
    def test_allowed_exits_zero(self, permissions_file):
        result = _check(permissions_file, "retrieve", "--item", '{"id": 1, "published": true}')
        assert result.exit_code == 0
        assert "ALLOWED" in result.output

    def test_denied_exits_one(self, permissions_file):
        # published is absent, so the later cannot rule applies
        result = _check(permissions_file, "retrieve", "--item", '{"id": 1}')
        assert result.exit_code == 1
        assert "DENIED" in result.output
        assert "CANNOT" in result.output

    def test_default_deny_reports_no_rule(self, permissions_file):
        result = _check(permissions_file, "create", "--item", "{}")
        assert result.exit_code == 1
        assert "no matching rule" in result.output

    def test_update_with_subject_tag(self, permissions_file):
        result = _check(
            permissions_file,
            "update",
            "--item", json.dumps({"id": 1, "owner": "alice"}),
            "--updated", json.dumps({"name": "b"}),
            "--subject", "Article",
        )
        assert result.exit_code == 0

    def test_update_changing_blacklisted_field_denied(self, permissions_file):
        result = _check(
            permissions_file,
            "update",
            "--item", json.dumps({"id": 1, "owner": "alice"}),
            "--updated", json.dumps({"owner": "bob"}),
            "--subject", "Article",
        )
        assert result.exit_code == 1

    def test_subject_resolved_through_config(self, permissions_file):
        result = _check(permissions_file, "delete", "--item", '{"id": 1}', "--subject", "Ordered")
        assert result.exit_code == 0

    def test_update_without_payload_is_invalid(self, permissions_file):
        result = _check(permissions_file, "update", "--item", '{"id": 1}')
        assert result.exit_code == 2
        assert "updated item" in result.output

    def test_manage_is_invalid(self, permissions_file):
        result = _check(permissions_file, "manage", "--item", "{}")
        assert result.exit_code == 2

    def test_unknown_action_is_invalid(self, permissions_file):
        result = _check(permissions_file, "publish", "--item", "{}")
        assert result.exit_code == 2

    def test_bad_json_is_invalid(self, permissions_file):
        result = _check(permissions_file, "retrieve", "--item", "{not json")
        assert result.exit_code == 2
        assert "not valid JSON" in result.output

    def test_non_object_json_is_invalid(self, permissions_file):
        result = _check(permissions_file, "retrieve", "--item", "[1, 2]")
        assert result.exit_code == 2
        assert "JSON object" in result.output


# ---------------------------------------------------------------------------
# rules
# ---------------------------------------------------------------------------


class TestRules:
    def test_lists_rules(self, permissions_file):
        result = runner.invoke(app, ["--config", str(permissions_file), "rules"])
        assert result.exit_code == 0
        assert "Rules (4)" in result.output
        assert "CANNOT" in result.output
        assert "Article" in result.output

    def test_no_rules(self):
        result = runner.invoke(app, ["rules"])
        assert result.exit_code == 0
        assert "No rules configured" in result.output

    def test_unresolvable_subject(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("subjects:\n  X: 'not_a_real_module_xyz:X'\n")
        result = runner.invoke(app, ["--config", str(path), "rules"])
        assert result.exit_code == 2

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["--config", str(tmp_path / "nope.yaml"), "rules"])
        assert result.exit_code == 2
        assert "not found" in result.output

    def test_non_mapping_config_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        result = runner.invoke(app, ["--config", str(path), "rules"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# config init
# ---------------------------------------------------------------------------


class TestConfigInit:
    def test_creates_file(self, tmp_path):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0
        assert (tmp_path / "permissions.yaml").exists()

    def test_refuses_to_overwrite(self, tmp_path):
        (tmp_path / "permissions.yaml").write_text("abilities: []\n")
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 1
        assert (tmp_path / "permissions.yaml").read_text() == "abilities: []\n"

    def test_force_overwrites(self, tmp_path):
        (tmp_path / "permissions.yaml").write_text("abilities: []\n")
        result = runner.invoke(app, ["config", "init", "--force"])
        assert result.exit_code == 0
        assert "subjects" in (tmp_path / "permissions.yaml").read_text()
