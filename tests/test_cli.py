"""CLI tests: help output, rule listing, scan exit codes and JSON export."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from rich.console import Console

from drizzleaudit.cli import cli
from drizzleaudit.pipeline.ui import DRIZZLEAUDIT_THEME, findings_table
from drizzleaudit.utils.exit_codes import ExitCodes

UNFILTERED_DELETE = "export async function purge(db, users) {\n  await db.delete(users);\n}\n"
SELECT_STAR = "export const rows = db.select().from(users);\n"
CLEAN = "export const answer = 42;\n"


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


class TestCliAsciiCompliance:
    """Help text must stay ASCII-safe for Windows CP1252 consoles."""

    @pytest.mark.parametrize("args", [["--help"], ["scan", "--help"], ["rules", "--help"]])
    def test_help_ascii(self, runner, args):
        result = runner.invoke(cli, args)
        assert result.exit_code == 0
        try:
            result.output.encode("ascii")
        except UnicodeEncodeError as e:
            pytest.fail(f"Non-ASCII character in daud {' '.join(args)}: {e}")

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "daud" in result.output


class TestRulesCommand:
    def test_lists_rules(self, runner):
        result = runner.invoke(cli, ["rules"])
        assert result.exit_code == 0
        assert "RULES" in result.output

    def test_preset(self, runner):
        result = runner.invoke(cli, ["rules", "--preset", "recommended"])
        assert result.exit_code == 0
        assert "recommended" in result.output

    def test_unknown_preset_rejected(self, runner):
        result = runner.invoke(cli, ["rules", "--preset", "lenient"])
        assert result.exit_code == 2


class TestScanCommand:
    def test_high_severity_fails(self, runner, tmp_path):
        (tmp_path / "purge.ts").write_text(UNFILTERED_DELETE, encoding="utf-8")
        result = runner.invoke(cli, ["scan", str(tmp_path)])
        assert result.exit_code == ExitCodes.HIGH_SEVERITY

    def test_clean_project(self, runner, tmp_path):
        (tmp_path / "answer.ts").write_text(CLEAN, encoding="utf-8")
        result = runner.invoke(cli, ["scan", str(tmp_path)])
        assert result.exit_code == ExitCodes.SUCCESS
        assert "No issues found" in result.output

    def test_no_files(self, runner, tmp_path):
        (tmp_path / "notes.md").write_text("# notes", encoding="utf-8")
        result = runner.invoke(cli, ["scan", str(tmp_path)])
        assert result.exit_code == ExitCodes.TASK_INCOMPLETE

    def test_node_modules_skipped(self, runner, tmp_path):
        vendored = tmp_path / "node_modules" / "pkg"
        vendored.mkdir(parents=True)
        (vendored / "index.ts").write_text(UNFILTERED_DELETE, encoding="utf-8")
        (tmp_path / "answer.ts").write_text(CLEAN, encoding="utf-8")
        result = runner.invoke(cli, ["scan", str(tmp_path)])
        assert result.exit_code == ExitCodes.SUCCESS

    def test_fail_on_threshold(self, runner, tmp_path):
        (tmp_path / "rows.ts").write_text(SELECT_STAR, encoding="utf-8")
        args = ["scan", str(tmp_path), "--rule", "no-select-star"]
        assert runner.invoke(cli, args).exit_code == ExitCodes.SUCCESS
        assert runner.invoke(cli, [*args, "--fail-on", "medium"]).exit_code == ExitCodes.HIGH_SEVERITY

    def test_rule_disabled_in_config(self, runner, tmp_path):
        (tmp_path / "purge.ts").write_text(UNFILTERED_DELETE, encoding="utf-8")
        config_dir = tmp_path / ".drizzleaudit"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(
            json.dumps({"rules": {"enforce-delete-with-where": "off"}}), encoding="utf-8"
        )
        result = runner.invoke(cli, ["scan", str(tmp_path)])
        assert result.exit_code == ExitCodes.SUCCESS

    def test_no_active_rules(self, runner, tmp_path):
        (tmp_path / "purge.ts").write_text(UNFILTERED_DELETE, encoding="utf-8")
        result = runner.invoke(
            cli, ["scan", str(tmp_path), "--preset", "recommended", "--rule", "limit-join-complexity"]
        )
        assert result.exit_code == ExitCodes.TASK_INCOMPLETE

    def test_output_json(self, runner, tmp_path):
        (tmp_path / "purge.ts").write_text(UNFILTERED_DELETE, encoding="utf-8")
        (tmp_path / "rows.ts").write_text(SELECT_STAR, encoding="utf-8")
        out = tmp_path / "report" / "findings.json"
        result = runner.invoke(cli, ["scan", str(tmp_path), "--output-json", str(out)])
        assert result.exit_code == ExitCodes.HIGH_SEVERITY

        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["summary"]["files_analyzed"] == 2
        assert data["summary"]["by_rule"] == {"enforce-delete-with-where": 1, "no-select-star": 1}

        first = data["findings"][0]
        assert first["rule"] == "enforce-delete-with-where"
        assert first["severity"] == "high"
        assert first["line"] == 2
        assert first["data"] == {"drizzleObjName": "db"}
        assert ">>" in first["code_snippet"]

    def test_bracketed_paths_render_verbatim(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            route_dir = Path("app") / "[id]"
            route_dir.mkdir(parents=True)
            (route_dir / "route.ts").write_text(UNFILTERED_DELETE, encoding="utf-8")
            result = runner.invoke(cli, ["scan", "app"])

        assert result.exit_code == ExitCodes.HIGH_SEVERITY
        assert "[id]" in result.output
        assert "app//route.ts" not in result.output


class TestFindingsTable:
    def render(self, table) -> str:
        console = Console(width=200, theme=DRIZZLEAUDIT_THEME)
        with console.capture() as capture:
            console.print(table)
        return capture.get()

    def test_markup_in_cells_is_literal(self):
        finding = {
            "severity": "medium",
            "file": "src/[slug]/schema.ts",
            "line": 3,
            "column": 0,
            "rule": "enforce-snake-case-naming",
            "message": "PostgreSQL tables/columns should use snake_case: '[bold]userId'",
        }
        output = self.render(findings_table([finding], max_rows=10))
        assert "src/[slug]/schema.ts:3:1" in output
        assert "'[bold]userId'" in output

    def test_max_rows(self):
        finding = {
            "severity": "high",
            "file": "a.ts",
            "line": 1,
            "column": 0,
            "rule": "enforce-delete-with-where",
            "message": "unfiltered delete",
        }
        output = self.render(findings_table([finding] * 3, max_rows=2))
        assert output.count("a.ts:1:1") == 2
