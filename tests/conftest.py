import pytest

from inisettings import CONFIG_ENV_VAR


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run in an empty folder with no configuration file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    return tmp_path


@pytest.fixture
def english_data():
    return {
        "": {"LANGID": "1033", "VERSION": "1.0"},
        "General": {"Hello": "Hello", "Bye": "Goodbye %s"},
        "UI": {"Ok": "OK", "Cancel": "Cancel"},
    }


@pytest.fixture
def german_data():
    return {
        "": {"LANGID": "1031", "VERSION": "1.0"},
        "General": {"Hello": "Hallo", "Bye": "Tschüss %s"},
        "UI": {"Ok": "OK", "Cancel": ""},
    }
