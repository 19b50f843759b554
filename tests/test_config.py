import pytest

from config.loader import load_config, section
from gst_core.errors import ConfigError


def test_repo_config_loads(monkeypatch):
    monkeypatch.delenv("GROCERY_CONFIG", raising=False)
    cfg = load_config()
    assert cfg["receipt"]["default_currency"] == "SEK"
    assert cfg["categorizer"]["country"] == "Sweden"
    assert cfg["retry"]["max_attempts"] >= 1


def test_custom_path(tmp_path):
    p = tmp_path / "config.toml"
    p.write_text('[logging]\nlevel = "DEBUG"\n', encoding="utf-8")
    assert load_config(p) == {"logging": {"level": "DEBUG"}}


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")


def test_invalid_toml(tmp_path):
    p = tmp_path / "config.toml"
    p.write_text("[logging\nlevel = ", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(p)


def test_env_var_overrides_default(tmp_path, monkeypatch):
    p = tmp_path / "alt.toml"
    p.write_text('[receipt]\ndefault_currency = "NOK"\n', encoding="utf-8")
    monkeypatch.setenv("GROCERY_CONFIG", str(p))
    assert load_config()["receipt"]["default_currency"] == "NOK"


def test_section():
    cfg = {"retry": {"max_attempts": 2}, "logging": "loud"}
    assert section(cfg, "retry") == {"max_attempts": 2}
    assert section(cfg, "categorizer") == {}
    with pytest.raises(ConfigError):
        section(cfg, "logging")
