from pathlib import Path

import pytest

from songshelf.utils import paths
from songshelf.utils.paths import get_app_dir, get_config_dir, get_data_dir, get_cache_dir


def test_default_paths_generation(isolated_home):
    assert get_app_dir() == isolated_home
    assert get_config_dir() == isolated_home / "config"
    assert get_data_dir() == isolated_home / "data"
    assert get_cache_dir() == isolated_home / "cache"
    assert get_data_dir().is_dir()


def test_app_dir_defaults_to_home(monkeypatch, tmp_path):
    monkeypatch.delenv(paths.HOME_ENV_VAR, raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    assert get_app_dir() == tmp_path / ".songshelf"


def test_store_and_staging_are_siblings(tmp_path):
    store = paths.get_store_root(tmp_path)
    staging = paths.get_staging_dir(tmp_path)
    assert store == tmp_path / "Songs"
    assert staging.parent == store.parent


def test_sanitize_title_replaces_slashes():
    assert paths.sanitize_title("AC/DC - Back/In Black") == "AC-DC - Back-In Black"


def test_sanitize_title_keeps_other_characters():
    title = 'What? "Yes": <live> | * é 🎵'
    assert paths.sanitize_title(title) == title


def test_sanitize_title_only_slashes():
    assert paths.sanitize_title("///") == "---"


@pytest.mark.parametrize("safe_title,expected", [
    ("Song", True),
    ("-", True),
    ("", False),
    ("   ", False),
    (".", False),
    ("..", False),
])
def test_is_usable_title(safe_title, expected):
    assert paths.is_usable_title(safe_title) is expected


@pytest.mark.parametrize("link,expected", [
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://youtu.be/dQw4w9WgXcQ?t=42", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/v/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/watch?v=abc_DEF-123&list=PL1", "abc_DEF-123"),
    ("  https://youtu.be/dQw4w9WgXcQ  ", "dQw4w9WgXcQ"),
])
def test_extract_source_id(link, expected):
    assert paths.extract_source_id(link) == expected


@pytest.mark.parametrize("link", [
    "",
    "not a link",
    "https://example.com/",
    "https://www.youtube.com/watch",
    "https://www.youtube.com/watch?v=",
])
def test_extract_source_id_none(link):
    assert paths.extract_source_id(link) is None
