from __future__ import annotations

from pathlib import Path

import pytest

from exline import config


@pytest.fixture
def tmp_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    home.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("EXLINE_DATA_HOME", raising=False)
    return home


def test_get_data_root_prefers_exline_data_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    data = tmp_path / "data"
    monkeypatch.setenv("EXLINE_DATA_HOME", str(data))

    assert config.get_data_root() == data
    assert data.is_dir()


def test_get_data_root_defaults_to_local_share(tmp_home: Path) -> None:
    assert config.get_data_root() == tmp_home / ".local" / "share"


def test_session_paths_live_under_exline(tmp_path: Path) -> None:
    assert config.session_db_path(tmp_path) == tmp_path / "exline" / "session.db"
    assert config.logs_dir(tmp_path) == tmp_path / "exline" / "logs"


def test_load_system_config_reads_packaged_defaults() -> None:
    cfg = config.load_system_config()

    assert cfg.enable_neovim is False
    assert cfg.get_path("neovim.path") == "nvim"
    assert cfg.get_path("command_line.prompt") == config.PROMPT_PICKER
    assert cfg.get_path("command_line.history_key") == "COMMAND_LINE_HISTORY"


def test_load_defaults_yaml_missing_file_raises() -> None:
    with pytest.raises(FileNotFoundError):
        config.load_defaults_yaml("nope.yaml")


def test_get_path_handles_missing_and_non_mapping() -> None:
    cfg = config.YAMLConfig({"a": {"b": 1}, "c": 2})

    assert cfg.get_path("a.b") == 1
    assert cfg.get_path("a.x", "d") == "d"
    assert cfg.get_path("c.d", "d") == "d"
    assert cfg.get_path("", "d") == "d"


def test_set_path_creates_intermediate_mappings() -> None:
    cfg = config.YAMLConfig({"neovim": "broken"})

    cfg.set_path("neovim.enable", True)
    cfg.set_path("command_line.prompt", config.PROMPT_INPUT_BOX)

    assert cfg.enable_neovim is True
    assert cfg.get_path("neovim") == {"enable": True}
    assert cfg.get_path("command_line") == {"prompt": config.PROMPT_INPUT_BOX}
