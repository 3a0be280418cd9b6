import json

import pytest
from pydantic import ValidationError

from songshelf.core.settings import (
    DEFAULT_METADATA_URL,
    LibraryOrder,
    Settings,
    load_settings,
    save_settings,
)


def test_load_settings_file_does_not_exist(isolated_home):
    """Test loading settings when the settings file doesn't exist."""
    settings = load_settings()
    assert isinstance(settings, Settings)
    assert settings.data_root == isolated_home / "data"
    assert settings.store_root == isolated_home / "data" / "Songs"
    assert settings.staging_dir == isolated_home / "data" / ".staging"
    assert settings.metadata_base_url == DEFAULT_METADATA_URL
    assert settings.library_order == LibraryOrder.TITLE


def test_save_and_load_settings(tmp_path):
    """Test saving settings and then loading them back."""
    config_path = tmp_path / "settings.json"
    settings = Settings(
        data_root=tmp_path / "music",
        library_order=LibraryOrder.FILESYSTEM,
        metadata_base_url="https://meta.example.com/",
        connection_timeout=10,
        volume=40,
    )
    save_settings(settings, config_path)

    with open(config_path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    assert raw["library_order"] == "filesystem"

    loaded = load_settings(config_path)
    assert loaded.data_root == tmp_path / "music"
    assert loaded.library_order == LibraryOrder.FILESYSTEM
    assert loaded.metadata_base_url == "https://meta.example.com"
    assert loaded.connection_timeout == 10
    assert loaded.volume == 40


def test_load_settings_invalid_json(tmp_path, isolated_home):
    config_path = tmp_path / "settings.json"
    config_path.write_text("{not json", encoding="utf-8")
    settings = load_settings(config_path)
    assert settings.data_root == isolated_home / "data"


def test_load_settings_invalid_value_falls_back(tmp_path, isolated_home):
    config_path = tmp_path / "settings.json"
    config_path.write_text(json.dumps({"volume": 500}), encoding="utf-8")
    settings = load_settings(config_path)
    assert settings.volume == 100


def test_data_root_is_created_and_expanded(tmp_path):
    target = tmp_path / "a" / "b"
    settings = Settings(data_root=str(target))
    assert settings.data_root == target
    assert target.is_dir()


@pytest.mark.parametrize("field,value", [
    ("metadata_base_url", "ftp://example.com"),
    ("connection_timeout", 0),
    ("chunk_size", -1),
    ("volume", 101),
])
def test_invalid_assignment_rejected(settings, field, value):
    with pytest.raises(ValidationError):
        setattr(settings, field, value)
