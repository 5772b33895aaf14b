"""Configuration for zeta-stream.

Config discovery (first match wins):
  1. ``--config`` flag
  2. ``./zeta_stream.yaml``
  3. ``~/.config/zeta-stream/config.yaml``
  4. Built-in defaults

String values may reference environment variables as ``${NAME}``.  API
keys not given in the file are read from ``<PROVIDER>_API_KEY_1`` ...
``<PROVIDER>_API_KEY_N`` or ``<PROVIDER>_API_KEY``.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from zeta_stream.errors import ConfigError

_logger = logging.getLogger(__name__)

_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

# Highest numbered key variable probed per provider
_MAX_ENV_KEYS = 10


# ---------------------------------------------------------------------------
# Config data structures
# ---------------------------------------------------------------------------

@dataclass
class ProviderSpec:
    """One hosted backend: where it lives and which credentials it uses."""

    name: str
    base_url: str
    api_keys: list[str] = field(default_factory=list)
    models: list[str] = field(default_factory=list)
    extra_headers: dict[str, str] = field(default_factory=dict)


@dataclass
class EngineConfig:
    """Limits for the tool loop and provider calls."""

    max_iterations: int = 10
    tool_timeout: float = 15.0
    network_retries: int = 2
    backoff_base: float = 1.0
    request_timeout: float = 120.0


@dataclass
class ToolsSpec:
    exa_api_key: str = ""
    exa_base_url: str = "https://api.exa.ai"


_DEFAULT_PROVIDERS: dict[str, dict[str, Any]] = {
    "groq": {
        "base_url": "https://api.groq.com/openai/v1",
        "models": ["moonshotai/kimi-k2-instruct-0905"],
    },
    "compound": {
        "base_url": "https://api.groq.com/openai/v1",
        "models": ["groq/compound", "groq/compound-mini"],
        "extra_headers": {"Groq-Model-Version": "latest"},
        "key_env": "GROQ",
    },
    "openrouter": {
        "base_url": "https://openrouter.ai/api/v1",
        "models": ["nex-agi/deepseek-v3.1-nex-n1:free"],
        "extra_headers": {"HTTP-Referer": "https://zeta.chat", "X-Title": "Zeta"},
    },
    "routeway": {
        "base_url": "https://api.routeway.ai/v1",
        "models": ["minimax-m2:free"],
    },
    "gemini": {
        "base_url": "https://generativelanguage.googleapis.com/v1beta",
        "models": ["gemini-3-flash-preview", "gemini-3-pro-preview"],
    },
}


@dataclass
class ZetaConfig:
    """Top-level config."""

    default_model: str = "moonshotai/kimi-k2-instruct-0905"
    providers: dict[str, ProviderSpec] = field(default_factory=dict)
    engine: EngineConfig = field(default_factory=EngineConfig)
    tools: ToolsSpec = field(default_factory=ToolsSpec)

    def provider(self, name: str) -> ProviderSpec:
        try:
            return self.providers[name]
        except KeyError:
            raise ConfigError(f"Provider not configured: {name}") from None

    def catalogue(self) -> dict[str, str]:
        """Map every configured model id to its provider name."""
        table: dict[str, str] = {}
        for name, spec in self.providers.items():
            for model in spec.models:
                table.setdefault(model, name)
        return table


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

_SEARCH_PATHS = [
    Path("./zeta_stream.yaml"),
    Path.home() / ".config" / "zeta-stream" / "config.yaml",
]


def _interpolate(value: Any) -> Any:
    """Replace ``${VAR}`` references in strings, recursively."""
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, list):
        return [_interpolate(v) for v in value]
    if isinstance(value, dict):
        return {k: _interpolate(v) for k, v in value.items()}
    return value


def keys_from_env(prefix: str) -> list[str]:
    """Collect ``<PREFIX>_API_KEY_1..N``, falling back to ``<PREFIX>_API_KEY``."""
    prefix = prefix.upper()
    keys = []
    for i in range(1, _MAX_ENV_KEYS + 1):
        value = os.environ.get(f"{prefix}_API_KEY_{i}")
        if value:
            keys.append(value)
    if not keys:
        single = os.environ.get(f"{prefix}_API_KEY")
        if single:
            keys.append(single)
    return keys


def _parse_provider(name: str, raw: dict[str, Any]) -> ProviderSpec:
    if not isinstance(raw, dict):
        raise ConfigError(f"Provider '{name}' must be a mapping")
    defaults = _DEFAULT_PROVIDERS.get(name, {})
    base_url = raw.get("base_url", defaults.get("base_url"))
    if not base_url:
        raise ConfigError(f"Provider '{name}' has no base_url")

    keys = raw.get("api_keys")
    if keys is None and raw.get("api_key"):
        keys = [raw["api_key"]]
    if isinstance(keys, str):
        keys = [keys]
    keys = [k for k in (keys or []) if k]
    if not keys:
        keys = keys_from_env(defaults.get("key_env", name))

    models = raw.get("models", defaults.get("models", []))
    if not isinstance(models, list):
        raise ConfigError(f"Provider '{name}': models must be a list")

    headers = dict(defaults.get("extra_headers", {}))
    headers.update(raw.get("extra_headers") or {})

    return ProviderSpec(
        name=name,
        base_url=base_url,
        api_keys=keys,
        models=models,
        extra_headers=headers,
    )


def _parse_engine(raw: dict[str, Any] | None) -> EngineConfig:
    if not raw:
        return EngineConfig()
    unknown = set(raw) - set(EngineConfig.__dataclass_fields__)
    if unknown:
        raise ConfigError(f"Unknown engine settings: {', '.join(sorted(unknown))}")
    engine = EngineConfig(**raw)
    if engine.max_iterations < 1:
        raise ConfigError("engine.max_iterations must be at least 1")
    if engine.tool_timeout <= 0:
        raise ConfigError("engine.tool_timeout must be positive")
    return engine


def _parse_tools(raw: dict[str, Any] | None) -> ToolsSpec:
    raw = raw or {}
    return ToolsSpec(
        exa_api_key=raw.get("exa_api_key") or os.environ.get("EXA_API_KEY", ""),
        exa_base_url=raw.get("exa_base_url", ToolsSpec.exa_base_url),
    )


def build_config(raw: dict[str, Any]) -> ZetaConfig:
    """Build a ``ZetaConfig`` from an already-parsed mapping."""
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    raw = _interpolate(raw)

    provider_raw = dict.fromkeys(_DEFAULT_PROVIDERS, None)
    provider_raw.update(raw.get("providers") or {})
    providers = {
        name: _parse_provider(name, praw or {})
        for name, praw in provider_raw.items()
    }

    return ZetaConfig(
        default_model=raw.get("default_model", ZetaConfig.default_model),
        providers=providers,
        engine=_parse_engine(raw.get("engine")),
        tools=_parse_tools(raw.get("tools")),
    )


def load_config(path: str | Path | None = None) -> ZetaConfig:
    """Load configuration from YAML.

    Parameters
    ----------
    path:
        Explicit config path.  If *None*, search default locations.

    Returns
    -------
    ZetaConfig
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {path}")
    else:
        for candidate in _SEARCH_PATHS:
            if candidate.exists():
                config_path = candidate
                break

    if config_path is None:
        _logger.info("No config file found, using defaults")
        return build_config({})

    _logger.info("Loading config from %s", config_path)
    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    return build_config(raw)
