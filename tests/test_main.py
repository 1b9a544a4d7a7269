"""Tests for NEARLINK main entry point."""

from unittest.mock import patch

import pytest

from nearlink.main import main, parse_args


class TestParseArgs:
    """Tests for argument parsing."""

    def test_no_args(self):
        """No arguments leaves command unset."""
        with patch("sys.argv", ["nearlink"]):
            args = parse_args()
            assert args.command is None
            assert args.json is False

    def test_explicit_argv(self):
        """argv can be passed directly."""
        args = parse_args(["tx-status", "abc"])
        assert args.command == "tx-status"


class TestMain:
    """Tests for main()."""

    def test_exits_with_command_code(self, monkeypatch, tmp_path, capsys):
        """main() exits with the command's exit code."""
        monkeypatch.setenv("NEARLINK_KEY_DIR", str(tmp_path))

        with pytest.raises(SystemExit) as exc_info:
            main(["--json", "keys", "show", "ghost"])

        assert exc_info.value.code == 1
        assert "error" in capsys.readouterr().out

    def test_no_command_prints_help(self, monkeypatch, tmp_path, capsys):
        """main() without a command prints help and exits 0."""
        monkeypatch.setenv("NEARLINK_KEY_DIR", str(tmp_path))

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 0
        assert "usage: nearlink" in capsys.readouterr().out
