"""Shared pytest configuration for ocdrun tests."""

from __future__ import annotations

import pytest

from ocdrun.command_line import BIN_OPENOCD
from ocdrun.mocks import MockLauncher
from ocdrun.supervisor import ProcessSupervisor


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    """Keep tests away from the user's settings file and OCDRUN_* variables."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in ("OCDRUN_OPENOCD_HOME", "OCDRUN_BOARD_CONFIG", "OCDRUN_GDB_PORT", "OCDRUN_TELNET_PORT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def openocd_home(tmp_path):
    """A minimal OpenOCD install tree: bin/openocd plus share/openocd/scripts."""
    home = tmp_path / "openocd"
    binary = home / BIN_OPENOCD
    binary.parent.mkdir(parents=True)
    binary.write_text("#!/bin/sh\n")
    binary.chmod(0o755)
    (home / "share" / "openocd" / "scripts" / "board").mkdir(parents=True)
    return home


@pytest.fixture
def launcher():
    return MockLauncher()


@pytest.fixture
def supervisor(launcher):
    sup = ProcessSupervisor(launcher=launcher)
    yield sup
    sup.stop()
