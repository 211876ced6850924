"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
from booknav.cli import cli
from click.testing import CliRunner

PAGE = "https://example.org/book/concepts/cps.html"


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep config auto-discovery away from the repository."""
    monkeypatch.chdir(tmp_path)


class TestTreeCommand:
    """Tests for the tree command."""

    def test__text_output__lists_entries(self, toc_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["tree", "--toc", str(toc_file)])

        assert result.exit_code == 0
        assert "  2   CPS (concepts/cps.html)" in result.output
        assert "---" in result.output

    def test__json_output__is_nested(self, toc_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["tree", "--toc", str(toc_file), "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[1]["children"][0]["label"] == "CPS"

    def test__missing_toc__fails(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["tree", "--toc", str(tmp_path / "missing.html")])

        assert result.exit_code == 1
        assert "TOC file not found" in result.output

    def test__toc_from_config(self, tmp_path: Path, toc_file: Path) -> None:
        config_file = tmp_path / "booknav.toml"
        config_file.write_text('[book]\ntoc_file = "book/toc.html"\n')

        runner = CliRunner()
        result = runner.invoke(cli, ["tree", "-c", str(config_file)])

        assert result.exit_code == 0
        assert "Interpreters" in result.output

    def test__invalid_config__fails(self, tmp_path: Path) -> None:
        config_file = tmp_path / "booknav.toml"
        config_file.write_text("[server]\nport = 'x'\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["tree", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "server.port must be an integer" in result.output


class TestSidebarCommand:
    """Tests for the sidebar command."""

    def test__html_output__marks_active(self, tmp_path: Path, toc_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "sidebar",
                PAGE,
                "-r",
                "../",
                "--toc",
                str(toc_file),
                "--state-file",
                str(tmp_path / "session.json"),
            ],
        )

        assert result.exit_code == 0
        assert '<a href="../concepts/cps.html" class="active">CPS</a>' in result.output

    def test__json_output__reports_state(self, tmp_path: Path, toc_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "sidebar",
                PAGE,
                "-r",
                "../",
                "--toc",
                str(toc_file),
                "--state-file",
                str(tmp_path / "session.json"),
                "--format",
                "json",
            ],
        )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["page"] == PAGE
        assert data["active"] == 2
        assert data["expanded"] == [0, 1, 2, 6]

    def test__index_alias_none__disables_landing_alias(
        self, tmp_path: Path, toc_file: Path
    ) -> None:
        toc_file.write_text(
            '<ol class="chapter"><li class="chapter-item "><a href="intro.html">Intro</a></li></ol>'
        )

        runner = CliRunner()
        args = ["sidebar", "https://example.org/book/", "--toc", str(toc_file), "--format", "json"]
        aliased = runner.invoke(cli, args)
        literal = runner.invoke(cli, [*args, "--index-alias", "none"])

        assert json.loads(aliased.output)["active"] == 0
        assert json.loads(literal.output)["active"] is None


class TestClickCommand:
    """Tests for the click command."""

    def test__click_then_sidebar__restores_scroll_once(
        self, tmp_path: Path, toc_file: Path
    ) -> None:
        state_file = tmp_path / "session.json"
        common = ["--toc", str(toc_file), "--state-file", str(state_file)]
        runner = CliRunner()

        clicked = runner.invoke(
            cli, ["click", PAGE, "4", "--scroll-top", "137", "-r", "../", *common]
        )
        assert clicked.exit_code == 0
        target = clicked.output.strip()
        assert target == "https://example.org/book/concepts/free/interpreters.html"

        loaded = runner.invoke(
            cli, ["sidebar", target, "-r", "../../", "--format", "json", *common]
        )
        reloaded = runner.invoke(
            cli, ["sidebar", target, "-r", "../../", "--format", "json", *common]
        )

        first = json.loads(loaded.output)
        second = json.loads(reloaded.output)
        assert first["scroll_top"] == 137
        assert first["scroll_restored"] is True
        assert second["scroll_restored"] is False
        assert second["scroll_top"] != 137

    def test__non_link_entry__fails(self, tmp_path: Path, toc_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["click", PAGE, "5", "--toc", str(toc_file), "--state-file", str(tmp_path / "s.json")],
        )

        assert result.exit_code == 1
        assert "not a link" in result.output

    def test__unknown_entry__fails(self, tmp_path: Path, toc_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["click", PAGE, "99", "--toc", str(toc_file), "--state-file", str(tmp_path / "s.json")],
        )

        assert result.exit_code == 1
        assert "No sidebar entry with index 99" in result.output
