"""
Tests for the command-line interface exit codes.
"""

import socket

import pytest
import toml

from statsbot.cli import main_cli
from statsbot.cli.main import build_parser


@pytest.mark.unit
class TestArgumentParsing:
    """Test cases for the argument parser."""

    def test_subcommand_required(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])
        assert exc_info.value.code == 2

    def test_log_level_is_case_insensitive(self):
        args = build_parser().parse_args(["--log-level", "debug", "run", "x.toml"])
        assert args.log_level == "DEBUG"
        assert args.command == "run"


@pytest.mark.unit
class TestValidateConfiguration:
    """Test cases for `statsbot validate-configuration`."""

    def test_valid_file_exits_zero(self, config_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["validate-configuration", str(config_file)])

        assert exc_info.value.code == 0
        assert "is valid" in capsys.readouterr().out

    def test_missing_file_exits_one(self, temp_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["validate-configuration", str(temp_dir / "missing.toml")])

        assert exc_info.value.code == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_malformed_file_exits_one(self, temp_dir):
        path = temp_dir / "broken.toml"
        path.write_text("[irc")

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["validate-configuration", str(path)])

        assert exc_info.value.code == 1

    def test_invalid_value_exits_one(self, temp_dir, sample_config_data):
        sample_config_data["irc"]["port"] = 0
        path = temp_dir / "invalid.toml"
        with open(path, "w") as f:
            toml.dump(sample_config_data, f)

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["validate-configuration", str(path)])

        assert exc_info.value.code == 1

    def test_line_break_in_realname_exits_one(self, temp_dir, sample_config_data, capsys):
        sample_config_data["irc"]["realname"] = "Stats\r\nQUIT :bye"
        path = temp_dir / "injected.toml"
        with open(path, "w") as f:
            toml.dump(sample_config_data, f)

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["validate-configuration", str(path)])

        assert exc_info.value.code == 1
        assert "irc.realname" in capsys.readouterr().err


@pytest.mark.integration
class TestRun:
    """Test cases for `statsbot run` startup failures."""

    def test_missing_config_exits_one(self, temp_dir):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["run", str(temp_dir / "missing.toml")])
        assert exc_info.value.code == 1

    def test_listen_error_exits_one(self, temp_dir, sample_config_data):
        blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        try:
            sample_config_data["exporter"]["listen"] = f"127.0.0.1:{blocker.getsockname()[1]}"
            path = temp_dir / "statsbot.toml"
            with open(path, "w") as f:
                toml.dump(sample_config_data, f)

            with pytest.raises(SystemExit) as exc_info:
                main_cli(["run", str(path)])
        finally:
            blocker.close()

        assert exc_info.value.code == 1
