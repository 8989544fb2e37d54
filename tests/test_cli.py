"""Unit tests for the pynextui CLI commands."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pynextui.cli import main
from pynextui.exceptions import AdbNotFoundError

GB = "Game Boy (GB)"


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def mock_config():
    """Mock the config module so no user settings leak in."""
    with patch("pynextui.cli.config") as mock:
        mock.adb_path = None
        mock.serial = None
        mock.mount_point = None
        mock.roms_path = "/mnt/SDCARD/Roms"
        mock.media_dir = ".media"
        mock.get_config_path.return_value = Path("/mock/config")
        yield mock


@pytest.fixture
def card(tmp_path):
    """A mounted SD card with a NextUI layout and one existing ROM."""
    card = tmp_path / "card"
    (card / "Bios").mkdir(parents=True)
    (card / ".system").mkdir()
    (card / ".system" / "version.txt").write_text("NextUI 6.0\n")
    (card / "Roms" / GB).mkdir(parents=True)
    (card / "Roms" / GB / "b.gb").write_bytes(b"OLD")
    return card


@pytest.fixture
def local_root(tmp_path):
    """A local ROM folder with one new and one existing ROM."""
    root = tmp_path / "local"
    (root / GB).mkdir(parents=True)
    (root / GB / "a.gb").write_bytes(b"AAAA")
    (root / GB / "b.gb").write_bytes(b"BBBBBB")
    return root


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        """Test main help shows all commands."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "NextUI" in result.output
        assert "--mount" in result.output
        assert "sync" in result.output
        assert "systems" in result.output
        assert "info" in result.output

    def test_missing_adb(self, runner, local_root):
        """Test that a missing adb binary is reported cleanly."""
        with patch(
            "pynextui.cli.AdbDevice", side_effect=AdbNotFoundError("adb not found")
        ):
            result = runner.invoke(main, ["sync", str(local_root), "-y"])
        assert result.exit_code == 1
        assert "adb not found" in result.output


class TestSystemsCommand:
    """Tests for the systems command."""

    def test_systems_table(self, runner):
        result = runner.invoke(main, ["systems"])
        assert result.exit_code == 0
        assert "GB" in result.output

    def test_systems_json(self, runner):
        result = runner.invoke(main, ["--json", "systems"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        gb = next(s for s in data if s["code"] == "GB")
        assert gb["folder"] == GB
        assert ".gb" in gb["formats"]


class TestInfoCommand:
    """Tests for the info command."""

    def test_info_valid(self, runner, card):
        with patch("pynextui.cli.get_storage_info", return_value=None):
            result = runner.invoke(main, ["--mount", str(card), "info"])
        assert result.exit_code == 0
        assert "NextUI installation found" in result.output
        assert "NextUI 6.0" in result.output

    def test_info_missing_installation(self, runner, tmp_path):
        result = runner.invoke(main, ["--mount", str(tmp_path), "info"])
        assert result.exit_code == 1
        assert "BIOS directory not found" in result.output


class TestSyncCommand:
    """Tests for the sync command."""

    def test_sync_new_files(self, runner, card, local_root):
        """Test that only new files are sent by default."""
        result = runner.invoke(main, ["--mount", str(card), "sync", str(local_root), "-y"])

        assert result.exit_code == 0, result.output
        assert "Transferred: 1" in result.output
        assert (card / "Roms" / GB / "a.gb").read_bytes() == b"AAAA"
        assert (card / "Roms" / GB / "b.gb").read_bytes() == b"OLD"

    def test_sync_prompt_overwrite(self, runner, card, local_root):
        """Test answering overwrite at the conflict prompt."""
        result = runner.invoke(
            main,
            ["--mount", str(card), "sync", str(local_root), "--include-existing"],
            input="y\no\n",
        )

        assert result.exit_code == 0, result.output
        assert "File exists on device" in result.output
        assert "Transferred: 2" in result.output
        assert (card / "Roms" / GB / "b.gb").read_bytes() == b"BBBBBB"

    def test_sync_skip_policy(self, runner, card, local_root):
        """Test --on-conflict skip never prompts."""
        result = runner.invoke(
            main,
            [
                "--mount",
                str(card),
                "sync",
                str(local_root),
                "--include-existing",
                "--on-conflict",
                "skip",
                "-y",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "File exists on device" not in result.output
        assert "Skipped: 1" in result.output
        assert (card / "Roms" / GB / "b.gb").read_bytes() == b"OLD"

    def test_sync_declined(self, runner, card, local_root):
        """Test that declining the confirmation transfers nothing."""
        result = runner.invoke(
            main, ["--mount", str(card), "sync", str(local_root)], input="n\n"
        )

        assert result.exit_code == 0
        assert "Sync cancelled" in result.output
        assert not (card / "Roms" / GB / "a.gb").exists()

    def test_sync_dry_run_json(self, runner, card, local_root):
        """Test the JSON plan of a dry run."""
        result = runner.invoke(
            main, ["--json", "--mount", str(card), "sync", str(local_root), "--dry-run"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["phase"] == "review"
        assert data["new"] == 1
        assert data["existing"] == 1
        assert not (card / "Roms" / GB / "a.gb").exists()

    def test_sync_system_filter(self, runner, card, local_root):
        """Test that --system limits the selection."""
        (local_root / "Sega Genesis (MD)").mkdir()
        (local_root / "Sega Genesis (MD)" / "s.md").write_bytes(b"S")

        result = runner.invoke(
            main,
            ["--mount", str(card), "-q", "sync", str(local_root), "-S", "md", "-y"],
        )

        assert result.exit_code == 0, result.output
        assert (card / "Roms" / "Sega Genesis (MD)" / "s.md").exists()
        assert not (card / "Roms" / GB / "a.gb").exists()

    def test_sync_no_systems(self, runner, card, tmp_path):
        """Test that a folder without systems ends without error."""
        empty = tmp_path / "empty"
        empty.mkdir()

        result = runner.invoke(main, ["--mount", str(card), "sync", str(empty), "-y"])

        assert result.exit_code == 0
        assert "No matching system directories" in result.output

    def test_sync_nothing_selected(self, runner, card, local_root):
        """Test a second run finds nothing to do."""
        runner.invoke(main, ["--mount", str(card), "sync", str(local_root), "-y"])
        result = runner.invoke(main, ["--mount", str(card), "sync", str(local_root), "-y"])

        assert result.exit_code == 0
        assert "Nothing selected" in result.output

    def test_sync_json_requires_policy(self, runner, card, local_root):
        """Test that --json refuses to prompt for selected existing files."""
        result = runner.invoke(
            main,
            [
                "--json",
                "--mount",
                str(card),
                "sync",
                str(local_root),
                "--include-existing",
            ],
        )
        assert result.exit_code == 1
        assert "--on-conflict" in result.output

    def test_sync_json_only_new_files(self, runner, card, local_root):
        """Test that --json transfers new files without a conflict policy."""
        result = runner.invoke(
            main, ["--json", "--mount", str(card), "sync", str(local_root)]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["phase"] == "done"
        assert data["counters"]["transferred"] == 1
        assert data["counters"]["bytes_transferred"] == 4
        assert (card / "Roms" / GB / "a.gb").read_bytes() == b"AAAA"
        assert (card / "Roms" / GB / "b.gb").read_bytes() == b"OLD"


class TestInitCommand:
    """Tests for the init command."""

    def test_init_saves_mount(self, runner, card, mock_config):
        result = runner.invoke(main, ["init", "--mount", str(card)])

        assert result.exit_code == 0, result.output
        assert "NextUI installation found" in result.output
        mock_config.save_value.assert_called_once_with("NEXTUI_MOUNT", str(card))

    def test_init_nothing_to_save(self, runner):
        result = runner.invoke(main, ["init"])
        assert result.exit_code == 1
        assert "Nothing to save" in result.output
