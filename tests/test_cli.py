"""Tests for the rulecat CLI."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from rulecat.cli import main

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def roots(internal_root: Path, external_root: Path, write_doc) -> tuple[Path, Path]:
    write_doc(
        internal_root,
        "sources/accounts.yaml",
        "sources:\n"
        "  - id: Data.Account.Email\n"
        "    name: Email\n"
        "    category: Contact Data\n"
        "    patterns: ['.*email.*']\n",
    )
    write_doc(
        internal_root,
        "policies/default.yaml",
        "policies:\n  - id: Policy.Internal\n    name: Built-in\n    action: Deny\n",
    )
    (internal_root / "version.txt").write_text("2.0.1\n")
    write_doc(
        external_root,
        "sources/custom.yaml",
        "sources:\n"
        "  - id: Data.Account.Email\n"
        "    name: Work Email\n"
        "    patterns: ['.*workEmail.*']\n",
    )
    return internal_root, external_root


def _source_args(roots: tuple[Path, Path]) -> list[str]:
    internal, external = roots
    return ["--internal", str(internal), "--external", str(external)]


class TestLoadCommand:
    def test_json_summary(self, roots: tuple[Path, Path]) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["load", *_source_args(roots), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["internal_version"] == "2.0.1"
        assert data["counts"]["sources"] == 1
        assert data["counts"]["policies"] == 1
        assert data["rules_used"] == 2
        assert data["internal_policies"] == ["Policy.Internal"]
        assert data["diagnostics"] == []

    def test_rich_summary(self, roots: tuple[Path, Path]) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["load", *_source_args(roots)])
        assert result.exit_code == 0, result.output
        assert "2.0.1" in result.output
        assert "Rules used: 2" in result.output

    def test_rejected_documents_listed(self, roots: tuple[Path, Path], write_doc) -> None:
        _, external = roots
        write_doc(external, "sources/broken.yaml", "sources: [\n")
        runner = CliRunner()
        result = runner.invoke(main, ["load", *_source_args(roots)])
        assert result.exit_code == 0, result.output
        assert "1 document(s) rejected" in result.output
        assert "broken.yaml" in result.output

    def test_missing_root_exits_1(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["load", "--internal", str(tmp_path / "nope")])
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_no_rules_configured(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        runner = CliRunner()
        result = runner.invoke(main, ["load"])
        assert result.exit_code == 1
        assert "no rules directory configured" in result.output

    def test_config_file(self, roots: tuple[Path, Path], tmp_path: Path) -> None:
        internal, _ = roots
        cfg = tmp_path / "custom.yml"
        cfg.write_text(f"internal_rules_path: {internal}\n")
        runner = CliRunner()
        result = runner.invoke(main, ["load", "--config", str(cfg), "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["counts"]["sources"] == 1

    def test_missing_config_file(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["load", "--config", str(tmp_path / "none.yml")])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_ignore_internal(self, roots: tuple[Path, Path]) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["load", *_source_args(roots), "--ignore-internal", "--json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["internal_version"] == "not detected"
        assert data["counts"]["policies"] == 0


class TestShowCommand:
    def test_show_rule_external_wins(self, roots: tuple[Path, Path]) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["show", "Data.Account.Email", *_source_args(roots)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["name"] == "Work Email"

    def test_show_policy(self, roots: tuple[Path, Path]) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["show", "Policy.Internal", *_source_args(roots)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["internal"] is True
        assert data["action"] == "DENY"

    def test_show_unknown(self, roots: tuple[Path, Path]) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["show", "Nope", *_source_args(roots)])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestVersion:
    def test_version_option(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "rulecat" in result.output
