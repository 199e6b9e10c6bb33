"""Root test configuration for rtk-discover.

Clears every RTK_* environment override for the entire test suite and points
XDG_DATA_HOME at a per-test temporary directory, so config and tracking tests
never read or write the developer's real data root.

Tests that exercise an override set it again with their own monkeypatch call.
"""

import pytest


@pytest.fixture(autouse=True)
def isolate_rtk_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Remove RTK_* overrides and isolate the tracking data root."""
    for name in ("RTK_TRACKING", "RTK_DB_PATH", "RTK_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))


@pytest.fixture(autouse=True)
def isolate_working_directory(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run each test from an empty directory so no stray .rtk/config.yaml is found."""
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


@pytest.fixture(autouse=True)
def isolate_config_search_paths(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ~/.rtk/config.yaml from the search order; only the (empty) cwd is searched."""
    monkeypatch.setattr("rtk_discover.config.DEFAULT_CONFIG_PATHS", [".rtk/config.yaml"])
