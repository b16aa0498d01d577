import pytest

from utils import app_config


@pytest.fixture(autouse=True)
def config_home(tmp_path, monkeypatch):
    config_dir = tmp_path / ".budget_tracker"
    monkeypatch.setattr(app_config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(app_config, "CONFIG_FILE", config_dir / "config.json")
    monkeypatch.setattr(app_config, "DEFAULT_BACKUP_DIR", config_dir / "backups")
    return config_dir


def test_defaults_without_file(config_home):
    assert app_config.load_config() == {}
    assert app_config.get_db_folder() is None
    assert app_config.get_backup_folder() == str(config_home / "backups")


def test_set_and_clear_folders(config_home):
    app_config.set_db_folder("/data/budget")
    app_config.set_backup_folder("/data/backups")
    assert app_config.get_db_folder() == "/data/budget"
    assert app_config.get_backup_folder() == "/data/backups"
    assert not (config_home / "config.tmp").exists()

    app_config.set_db_folder(None)
    assert app_config.get_db_folder() is None
    assert app_config.load_config() == {"backup_folder": "/data/backups"}


def test_corrupt_file_is_ignored(config_home):
    config_home.mkdir()
    (config_home / "config.json").write_text("{not json", encoding="utf-8")
    assert app_config.load_config() == {}

    (config_home / "config.json").write_text("[1, 2]", encoding="utf-8")
    assert app_config.load_config() == {}
