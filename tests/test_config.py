"""Tests for configuration loading."""

import pytest

from zeta_stream.config import (
    EngineConfig,
    ZetaConfig,
    build_config,
    keys_from_env,
    load_config,
)
from zeta_stream.errors import ConfigError


class TestDefaults:
    def test_every_provider_present(self):
        cfg = build_config({})
        assert set(cfg.providers) == {"groq", "compound", "openrouter", "routeway", "gemini"}
        assert cfg.engine == EngineConfig()
        assert cfg.default_model == ZetaConfig.default_model

    def test_catalogue(self):
        cat = build_config({}).catalogue()
        assert cat["moonshotai/kimi-k2-instruct-0905"] == "groq"
        assert cat["groq/compound-mini"] == "compound"
        assert cat["gemini-3-pro-preview"] == "gemini"
        assert cat["minimax-m2:free"] == "routeway"

    def test_default_headers(self):
        cfg = build_config({})
        assert cfg.provider("compound").extra_headers == {"Groq-Model-Version": "latest"}
        assert "X-Title" in cfg.provider("openrouter").extra_headers

    def test_unknown_provider(self):
        with pytest.raises(ConfigError, match="nope"):
            build_config({}).provider("nope")


class TestEnvKeys:
    def test_numbered_keys(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY_1", "a")
        monkeypatch.setenv("GROQ_API_KEY_2", "b")
        monkeypatch.setenv("GROQ_API_KEY", "single")
        assert keys_from_env("groq") == ["a", "b"]

    def test_single_key_fallback(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g")
        assert keys_from_env("gemini") == ["g"]

    def test_compound_shares_groq_keys(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "shared")
        cfg = build_config({})
        assert cfg.provider("groq").api_keys == ["shared"]
        assert cfg.provider("compound").api_keys == ["shared"]

    def test_file_keys_win(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "env")
        cfg = build_config({"providers": {"openrouter": {"api_key": "file"}}})
        assert cfg.provider("openrouter").api_keys == ["file"]

    def test_exa_key_from_env(self, monkeypatch):
        monkeypatch.setenv("EXA_API_KEY", "exa")
        assert build_config({}).tools.exa_api_key == "exa"


class TestLoadConfig:
    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MY_ROUTEWAY_KEY", "rk")
        path = tmp_path / "zeta.yaml"
        path.write_text(
            "default_model: 'minimax-m2:free'\n"
            "providers:\n"
            "  routeway:\n"
            "    api_keys: ['${MY_ROUTEWAY_KEY}', '']\n"
            "    models: ['minimax-m2:free', 'deepseek-v3:free']\n"
            "  custom:\n"
            "    base_url: https://llm.example.com/v1\n"
            "engine:\n"
            "  max_iterations: 4\n"
            "  tool_timeout: 7.5\n"
        )
        cfg = load_config(path)
        assert cfg.default_model == "minimax-m2:free"
        assert cfg.provider("routeway").api_keys == ["rk"]
        assert cfg.catalogue()["deepseek-v3:free"] == "routeway"
        assert cfg.provider("custom").base_url == "https://llm.example.com/v1"
        assert cfg.engine.max_iterations == 4
        assert cfg.engine.tool_timeout == 7.5

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("providers: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_no_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setattr("zeta_stream.config._SEARCH_PATHS", [tmp_path / "none.yaml"])
        assert load_config().engine.max_iterations == 10

    def test_unknown_engine_key(self):
        with pytest.raises(ConfigError, match="Unknown engine settings"):
            build_config({"engine": {"max_loops": 3}})

    def test_bad_engine_values(self):
        with pytest.raises(ConfigError):
            build_config({"engine": {"max_iterations": 0}})
        with pytest.raises(ConfigError):
            build_config({"engine": {"tool_timeout": -1}})

    def test_provider_without_url(self):
        with pytest.raises(ConfigError, match="base_url"):
            build_config({"providers": {"custom": {"models": ["x"]}}})
