"""Unit tests for config loading, validation and environment overrides (rtk_discover/config.py).

Covers:
  - Missing config file → Config.defaults(), no exception
  - Missing 'version', unknown version, invalid YAML, non-mapping document → SystemExit(1)
  - tracking / logging sections merged onto defaults; invalid values → SystemExit(1)
  - search order: explicit path, RTK_CONFIG, .rtk/config.yaml
  - RTK_TRACKING boolean words; RTK_DB_PATH restricted to the data root
  - apply_logging() puts the logging section into effect
"""

from __future__ import annotations

import textwrap
from collections.abc import Iterator
from pathlib import Path

import pytest

from rtk_discover.config import (
    SUPPORTED_VERSIONS,
    Config,
    LoggingConfig,
    TrackingConfig,
    apply_logging,
    data_root,
    default_db_path,
    load_config,
    parse_bool_env,
    sanitize_db_path,
)
from rtk_discover.utils.logger import configure_logging, get_logger


def write_config(path: Path, body: str) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(body))
    return str(path)


# ─── Missing config file → defaults ───────────────────────────────────────────


class TestMissingConfigFile:

    def test_nonexistent_path_returns_defaults(self) -> None:
        config = load_config(config_path="/nonexistent/path/to/config.yaml")
        assert isinstance(config, Config)
        assert config.version == 1
        assert config.path is None

    def test_default_tracking(self, tmp_path: Path) -> None:
        config = load_config(config_path="/nonexistent/config.yaml")
        assert config.tracking == TrackingConfig(
            enabled=True,
            db_path=str(tmp_path / "xdg-data" / "rtk" / "history.db"),
            history_days=90,
        )

    def test_default_logging(self) -> None:
        config = load_config(config_path="/nonexistent/config.yaml")
        assert config.logging == LoggingConfig(level="WARNING", json=True)

    def test_supported_versions(self) -> None:
        assert SUPPORTED_VERSIONS == frozenset({1})


# ─── Startup refusal ──────────────────────────────────────────────────────────


class TestInvalidConfigFile:

    def test_missing_version(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_config(tmp_path / "c.yaml", "tracking:\n  enabled: false\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1
        assert "missing the required 'version' field" in capsys.readouterr().err

    def test_empty_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_config(tmp_path / "c.yaml", "")
        with pytest.raises(SystemExit):
            load_config(config_path=path)
        assert "CONFIG ERROR" in capsys.readouterr().err

    def test_unknown_version(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_config(tmp_path / "c.yaml", "version: 2\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(config_path=path)
        assert exc_info.value.code == 1
        assert "Unsupported config version: 2" in capsys.readouterr().err

    def test_invalid_yaml(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_config(tmp_path / "c.yaml", "version: 1\ntracking: [unclosed\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)
        assert "Failed to parse" in capsys.readouterr().err

    def test_not_a_mapping(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_config(tmp_path / "c.yaml", "- version\n- 1\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)
        assert "not a valid YAML mapping" in capsys.readouterr().err

    def test_invalid_log_level(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "c.yaml", "version: 1\nlogging:\n  level: LOUD\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)

    @pytest.mark.parametrize("value", ["0", "-5", "soon"])
    def test_invalid_history_days(self, tmp_path: Path, value: str) -> None:
        path = write_config(tmp_path / "c.yaml", f"version: 1\ntracking:\n  history_days: {value}\n")
        with pytest.raises(SystemExit):
            load_config(config_path=path)


# ─── Valid config file ────────────────────────────────────────────────────────


class TestValidConfigFile:

    def test_version_only_gives_defaults(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "c.yaml", "version: 1\n")
        config = load_config(config_path=path)
        assert config.tracking.enabled is True
        assert config.tracking.history_days == 90
        assert config.path == path

    def test_sections_merged(self, tmp_path: Path) -> None:
        path = write_config(
            tmp_path / "c.yaml",
            """\
            version: 1
            tracking:
              enabled: false
              db_path: /data/rtk.db
              history_days: 30
            logging:
              level: debug
              json: false
            unknown_section:
              ignored: true
            """,
        )
        config = load_config(config_path=path)
        assert config.tracking == TrackingConfig(enabled=False, db_path="/data/rtk.db", history_days=30)
        assert config.logging == LoggingConfig(level="DEBUG", json=False)

    def test_rtk_config_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_config(tmp_path / "env.yaml", "version: 1\ntracking:\n  history_days: 7\n")
        monkeypatch.setenv("RTK_CONFIG", path)
        assert load_config().tracking.history_days == 7

    def test_explicit_path_beats_rtk_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        explicit = write_config(tmp_path / "a.yaml", "version: 1\ntracking:\n  history_days: 1\n")
        env = write_config(tmp_path / "b.yaml", "version: 1\ntracking:\n  history_days: 2\n")
        monkeypatch.setenv("RTK_CONFIG", env)
        assert load_config(config_path=explicit).tracking.history_days == 1

    def test_working_directory_config(self) -> None:
        write_config(Path(".rtk") / "config.yaml", "version: 1\ntracking:\n  enabled: false\n")
        config = load_config()
        assert config.tracking.enabled is False
        assert config.path == ".rtk/config.yaml"


# ─── Environment overrides ────────────────────────────────────────────────────


class TestTrackingOverride:

    @pytest.mark.parametrize("word", ["0", "false", "No", "OFF"])
    def test_disables(self, word: str, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RTK_TRACKING", word)
        assert load_config().tracking.enabled is False

    def test_enables_over_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_config(tmp_path / "c.yaml", "version: 1\ntracking:\n  enabled: false\n")
        monkeypatch.setenv("RTK_TRACKING", "yes")
        assert load_config(config_path=path).tracking.enabled is True

    def test_unrecognised_word_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RTK_TRACKING", "maybe")
        assert load_config().tracking.enabled is True


class TestParseBoolEnv:

    @pytest.mark.parametrize("word", ["1", "true", "TRUE", "yes", "on", " On "])
    def test_true_words(self, word: str) -> None:
        assert parse_bool_env(word) is True

    @pytest.mark.parametrize("word", ["0", "false", "no", "off", "OFF"])
    def test_false_words(self, word: str) -> None:
        assert parse_bool_env(word) is False

    @pytest.mark.parametrize("word", ["", "2", "enabled", "y"])
    def test_unknown_words(self, word: str) -> None:
        assert parse_bool_env(word) is None


class TestDbPathOverride:

    def test_data_root_follows_xdg(self, tmp_path: Path) -> None:
        assert data_root() == tmp_path / "xdg-data" / "rtk"
        assert default_db_path() == str(tmp_path / "xdg-data" / "rtk" / "history.db")

    def test_data_root_without_xdg(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("XDG_DATA_HOME")
        monkeypatch.setenv("HOME", str(tmp_path))
        assert data_root() == tmp_path / ".local" / "share" / "rtk"

    def test_path_inside_root_accepted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        inside = data_root() / "custom" / "track.db"
        monkeypatch.setenv("RTK_DB_PATH", str(inside))
        assert load_config().tracking.db_path == str(inside.resolve())

    def test_relative_path_resolved_under_root(self) -> None:
        root = data_root()
        assert sanitize_db_path("sub/x.db", root) == str((root / "sub" / "x.db").resolve())

    def test_path_outside_root_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RTK_DB_PATH", "/etc/passwd")
        assert load_config().tracking.db_path == str(data_root() / "history.db")

    def test_parent_component_rejected(self) -> None:
        root = data_root()
        sneaky = str(root / ".." / "rtk" / "history.db")
        assert sanitize_db_path(sneaky, root) == str(root / "history.db")


# ─── apply_logging ────────────────────────────────────────────────────────────


class TestApplyLogging:

    @pytest.fixture(autouse=True)
    def restore_logging(self) -> Iterator[None]:
        yield
        configure_logging()

    def test_level_from_file_takes_effect(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = write_config(
            tmp_path / "c.yaml",
            """\
            version: 1
            logging:
              level: ERROR
              json: true
            """,
        )
        apply_logging(load_config(path))
        capsys.readouterr()
        log = get_logger("test")
        log.warning("below threshold")
        log.error("at threshold")
        err = capsys.readouterr().err
        assert "below threshold" not in err
        assert '"event": "at threshold"' in err

    def test_debug_level_enables_debug_entries(self, capsys: pytest.CaptureFixture[str]) -> None:
        apply_logging(Config(logging=LoggingConfig(level="DEBUG", json=True)))
        capsys.readouterr()
        get_logger("test").debug("verbose")
        assert "verbose" in capsys.readouterr().err
