"""Tests for the command line entry point."""
import pytest

from note_janitor.config import JanitorConfig
from note_janitor.janitor.formatter import LINK_REFERENCE_DEFINITION_HEADER as HEADER
from note_janitor.main import EXIT_CHANGES, EXIT_ERROR, EXIT_OK, main, parse_args, update_config


@pytest.fixture
def run_cli(notes_dir):
    def _run(*args):
        return main(["--notes-dir", str(notes_dir), "--log-level", "WARNING", *args])

    return _run


class TestArguments:
    def test_update_config_applies_overrides(self, janitor_config, tmp_path):
        args = parse_args(
            [
                "--notes-dir", str(tmp_path),
                "--include-extensions",
                "--no-headings",
                "--strict",
                "--log-level", "DEBUG",
                "--log-dir", str(tmp_path / "logs"),
            ]
        )
        cfg = update_config(args, base=janitor_config)

        assert cfg.notes_dir == tmp_path
        assert cfg.include_extensions is True
        assert cfg.generate_headings is False
        assert cfg.generate_references is True
        assert cfg.strict_blocks is True
        assert cfg.log_level == "DEBUG"
        assert cfg.log_dir == tmp_path / "logs"
        # The base configuration is left alone
        assert janitor_config.generate_headings is True

    def test_defaults_keep_base_values(self, janitor_config):
        base = janitor_config.model_copy(update={"strict_blocks": True})
        cfg = update_config(parse_args([]), base=base)
        assert cfg.strict_blocks is True
        assert isinstance(cfg, JanitorConfig)


class TestMain:
    def test_updates_notes(self, write_note, run_cli, read_note, capsys):
        alpha = write_note("alpha.md", "# Alpha\n[[beta]]\n")
        write_note("beta.md", "# Beta\n")

        assert run_cli() == EXIT_OK
        assert HEADER in read_note(alpha)
        out = capsys.readouterr().out
        assert "updated:" in out
        assert "alpha.md" in out

    def test_check_reports_without_writing(self, write_note, run_cli, read_note, capsys):
        alpha = write_note("alpha.md", "# Alpha\n[[beta]]\n")
        write_note("beta.md", "# Beta\n")

        assert run_cli("--check") == EXIT_CHANGES
        assert read_note(alpha) == "# Alpha\n[[beta]]\n"
        assert "would update:" in capsys.readouterr().out

    def test_check_on_tidy_notes(self, write_note, run_cli):
        write_note("beta.md", "# Beta\n")
        assert run_cli("--check") == EXIT_OK

    def test_dry_run_exits_cleanly(self, write_note, run_cli):
        write_note("alpha.md", "[[beta]]\n")
        write_note("beta.md", "# Beta\n")
        assert run_cli("--dry-run") == EXIT_OK

    def test_missing_notes_dir(self, tmp_path):
        assert main(["--notes-dir", str(tmp_path / "absent")]) == EXIT_ERROR

    def test_strict_failure(self, write_note, run_cli):
        write_note("broken.md", f"# Broken\n[[beta]]\n\n{HEADER}\n[beta]: beta\n")
        write_note("beta.md", "# Beta\n")
        assert run_cli("--strict") == EXIT_CHANGES

    def test_kebab_case_filenames_refresh_references(
        self, write_note, run_cli, read_note, notes_dir, capsys
    ):
        alpha = write_note("alpha.md", "# Alpha\n[[Beta Note]]\n")
        write_note("Beta Note.md", "# Beta\n")

        assert run_cli("--kebab-case-filenames") == EXIT_OK

        assert (notes_dir / "beta-note.md").exists()
        assert '[Beta Note]: beta-note "Beta"' in read_note(alpha)
        assert "renamed:" in capsys.readouterr().out
