import pytest

from sitegen.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from sitegen.config import ConfigError, load_client_config, read_dotenv


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("SITEGEN_API_BASE_URL", "SITEGEN_TIMEOUT", "SITEGEN_DEBUG_LOG"):
        monkeypatch.delenv(var, raising=False)


# --- read_dotenv ---

def test_read_dotenv_missing_file(tmp_path):
    assert read_dotenv(tmp_path / ".env") == {}


def test_read_dotenv_parses_values(tmp_path):
    dotenv = tmp_path / ".env"
    dotenv.write_text(
        "# comment\n"
        "SITEGEN_API_BASE_URL=http://gen.local:9000\n"
        "QUOTED=\"with spaces\"\n"
        "SINGLE='x'\n"
        "no_equals_line\n"
        "\n"
    )
    assert read_dotenv(dotenv) == {
        "SITEGEN_API_BASE_URL": "http://gen.local:9000",
        "QUOTED": "with spaces",
        "SINGLE": "x",
    }


# --- load_client_config ---

def test_defaults(tmp_path):
    config = load_client_config(tmp_path)
    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout == DEFAULT_TIMEOUT
    assert config.debug_log is None


def test_environment_used(tmp_path, monkeypatch):
    monkeypatch.setenv("SITEGEN_API_BASE_URL", "https://gen.example.com/")
    monkeypatch.setenv("SITEGEN_TIMEOUT", "45")
    config = load_client_config(tmp_path)
    assert config.base_url == "https://gen.example.com"
    assert config.timeout == 45.0


def test_dotenv_wins_over_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("SITEGEN_API_BASE_URL", "http://from-env")
    (tmp_path / ".env").write_text("SITEGEN_API_BASE_URL=http://from-dotenv\n")
    assert load_client_config(tmp_path).base_url == "http://from-dotenv"


def test_empty_dotenv_value_falls_back_to_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("SITEGEN_API_BASE_URL", "http://from-env")
    (tmp_path / ".env").write_text("SITEGEN_API_BASE_URL=\n")
    assert load_client_config(tmp_path).base_url == "http://from-env"


def test_explicit_arguments_win(tmp_path, monkeypatch):
    monkeypatch.setenv("SITEGEN_API_BASE_URL", "http://from-env")
    monkeypatch.setenv("SITEGEN_TIMEOUT", "45")
    config = load_client_config(tmp_path, base_url="http://cli", timeout=5.0)
    assert config.base_url == "http://cli"
    assert config.timeout == 5.0


def test_debug_log_relative_to_project(tmp_path, monkeypatch):
    monkeypatch.setenv("SITEGEN_DEBUG_LOG", "logs/events.jsonl")
    assert load_client_config(tmp_path).debug_log == tmp_path / "logs" / "events.jsonl"


def test_invalid_timeout(tmp_path, monkeypatch):
    monkeypatch.setenv("SITEGEN_TIMEOUT", "soon")
    with pytest.raises(ConfigError, match="SITEGEN_TIMEOUT"):
        load_client_config(tmp_path)


def test_non_positive_timeout(tmp_path):
    with pytest.raises(ConfigError, match="positive"):
        load_client_config(tmp_path, timeout=0)


def test_invalid_base_url(tmp_path):
    with pytest.raises(ConfigError, match="http"):
        load_client_config(tmp_path, base_url="localhost:8000")
