import pytest

from songshelf.core.settings import Settings
from songshelf.utils.paths import HOME_ENV_VAR


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep every application directory inside the test's tmp_path."""
    home = tmp_path / "songshelf_home"
    monkeypatch.setenv(HOME_ENV_VAR, str(home))
    return home


@pytest.fixture
def settings(tmp_path):
    return Settings(data_root=tmp_path / "data", metadata_base_url="http://metadata.test")
