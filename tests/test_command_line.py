"""Tests for building the OpenOCD command line from settings."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from ocdrun.command_line import BIN_OPENOCD, build_run_configuration, find_openocd_scripts
from ocdrun.errors import ConfigurationMissing
from ocdrun.settings import OpenOcdSettings


def _settings(home: Path, **kw) -> OpenOcdSettings:
    return OpenOcdSettings(openocd_home=str(home), board_config_file="board/st_nucleo_f4.cfg", **kw)


class TestBuildRunConfiguration:
    def test_minimal_command_line(self, openocd_home):
        config = build_run_configuration(_settings(openocd_home))
        scripts = openocd_home / "share" / "openocd" / "scripts"

        assert config.executable == str((openocd_home / BIN_OPENOCD).absolute())
        assert config.work_dir == str((openocd_home / BIN_OPENOCD).absolute().parent)
        assert list(config.args) == [
            "-c", "tcl_port disabled",
            "-s", str(scripts.absolute()),
            "-f", "board/st_nucleo_f4.cfg",
        ]
        assert config.command_line()[0] == config.executable

    def test_program_extra_and_shutdown_in_one_command(self, openocd_home, tmp_path):
        firmware = tmp_path / "build" / "fw.elf"
        config = build_run_configuration(
            _settings(openocd_home),
            file_to_load=firmware,
            additional_command="reset run",
            shutdown=True,
        )
        expected_path = os.path.abspath(str(firmware)).replace(os.sep, "/")
        assert config.args[-2:] == ("-c", f'program "{expected_path}";reset run;shutdown')
        assert config.shutdown is True
        assert config.file_to_load == str(firmware)

    def test_shutdown_only(self, openocd_home):
        config = build_run_configuration(_settings(openocd_home), shutdown=True)
        assert config.args[-2:] == ("-c", "shutdown")

    def test_default_ports_are_not_passed(self, openocd_home):
        config = build_run_configuration(_settings(openocd_home))
        joined = " ".join(config.args)
        assert "gdb_port" not in joined
        assert "telnet_port" not in joined

    def test_custom_ports_precede_board_file(self, openocd_home):
        config = build_run_configuration(_settings(openocd_home, gdb_port=3334, telnet_port=4445))
        args = list(config.args)
        assert args.index("gdb_port 3334") < args.index("telnet_port 4445") < args.index("-f")

    def test_missing_board_file(self, openocd_home):
        with pytest.raises(ConfigurationMissing) as exc_info:
            build_run_configuration(OpenOcdSettings(openocd_home=str(openocd_home)))
        assert "Board Config file is not defined" in str(exc_info.value)
        assert exc_info.value.title == "OpenOCD run error"

    def test_blank_board_file(self, openocd_home):
        with pytest.raises(ConfigurationMissing):
            build_run_configuration(OpenOcdSettings(openocd_home=str(openocd_home), board_config_file="   "))

    def test_missing_home(self, tmp_path):
        with pytest.raises(ConfigurationMissing):
            build_run_configuration(_settings(tmp_path / "nowhere"))

    def test_missing_binary(self, openocd_home):
        (openocd_home / BIN_OPENOCD).unlink()
        with pytest.raises(ConfigurationMissing):
            build_run_configuration(_settings(openocd_home))

    def test_explicit_scripts_dir(self, openocd_home, tmp_path):
        scripts = tmp_path / "my-scripts"
        scripts.mkdir()
        config = build_run_configuration(_settings(openocd_home, scripts_dir=str(scripts)))
        assert config.args[3] == str(scripts.absolute())

    def test_explicit_scripts_dir_missing(self, openocd_home, tmp_path):
        with pytest.raises(ConfigurationMissing):
            build_run_configuration(_settings(openocd_home, scripts_dir=str(tmp_path / "gone")))


class TestFindOpenocdScripts:
    def test_prefers_share_layout(self, openocd_home):
        (openocd_home / "scripts").mkdir()
        assert find_openocd_scripts(openocd_home) == openocd_home / "share" / "openocd" / "scripts"

    def test_falls_back_to_short_layout(self, tmp_path):
        (tmp_path / "scripts").mkdir()
        assert find_openocd_scripts(tmp_path) == tmp_path / "scripts"

    def test_none_when_absent(self, tmp_path):
        assert find_openocd_scripts(tmp_path) is None
