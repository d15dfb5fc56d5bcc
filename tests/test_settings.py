"""Tests for OpenOcdSettings persistence and overrides."""

from __future__ import annotations

import json

from ocdrun.settings import DEFAULT_GDB_PORT, OpenOcdSettings, default_settings_path


class TestOpenOcdSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = OpenOcdSettings.load(tmp_path / "none.json")
        assert settings == OpenOcdSettings()
        assert settings.gdb_port == DEFAULT_GDB_PORT

    def test_save_and_load_roundtrip(self, tmp_path):
        path = tmp_path / "cfg" / "settings.json"
        original = OpenOcdSettings(openocd_home="/opt/openocd", board_config_file="board/x.cfg", gdb_port=3400)
        original.save(path)
        assert OpenOcdSettings.load(path) == original

    def test_unknown_keys_are_ignored(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"board_config_file": "b.cfg", "colour": "blue"}))
        with caplog.at_level("WARNING", logger="ocdrun.settings"):
            settings = OpenOcdSettings.load(path)
        assert settings.board_config_file == "b.cfg"
        assert "colour" in caplog.text

    def test_corrupt_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert OpenOcdSettings.load(path) == OpenOcdSettings()

    def test_non_object_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        assert OpenOcdSettings.load(path) == OpenOcdSettings()

    def test_save_replaces_existing_file(self, tmp_path):
        path = tmp_path / "cfg" / "settings.json"
        OpenOcdSettings(board_config_file="a.cfg").save(path)
        OpenOcdSettings(board_config_file="b.cfg").save(path)
        assert json.loads(path.read_text())["board_config_file"] == "b.cfg"
        assert [p.name for p in path.parent.iterdir()] == ["settings.json"]

    def test_default_path_uses_xdg_config_home(self, tmp_path):
        # conftest points XDG_CONFIG_HOME at tmp_path / "xdg"
        assert default_settings_path() == tmp_path / "xdg" / "ocdrun" / "settings.json"

    def test_with_overrides_skips_none(self):
        base = OpenOcdSettings(board_config_file="a.cfg", gdb_port=3333)
        merged = base.with_overrides(board_config_file=None, gdb_port=4000)
        assert merged.board_config_file == "a.cfg"
        assert merged.gdb_port == 4000
        assert base.gdb_port == 3333

    def test_from_env(self):
        env = {
            "OCDRUN_OPENOCD_HOME": "/usr/local",
            "OCDRUN_BOARD_CONFIG": "board/rp2040.cfg",
            "OCDRUN_GDB_PORT": "5555",
            "OCDRUN_TELNET_PORT": "not-a-number",
        }
        settings = OpenOcdSettings().from_env(env)
        assert settings.openocd_home == "/usr/local"
        assert settings.board_config_file == "board/rp2040.cfg"
        assert settings.gdb_port == 5555
        assert settings.telnet_port == 4444
