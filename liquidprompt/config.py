"""
Engine configuration.

Loaded from a YAML file (``liquidprompt.yaml`` by default). Every key
is optional; user values are laid over the defaults below.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError

SCHEMA_VERSION = 1
DEFAULT_CFG_FILE = "liquidprompt.yaml"
DEBUG_ENV_VAR = "LIQUIDPROMPT_DEBUG"

# --------------------------------------------------------------------------- #
# DEFAULTS
# --------------------------------------------------------------------------- #
_DEFAULT_CFG: Dict[str, Any] = {
    "schema_version": SCHEMA_VERSION,
    "cache_size": 256,
    "strict_filters": True,
    "plugins": ["standard", "control", "prompt", "composition"],
    "tokenizer": {
        "lib": "tiktoken",
        "encoder": "cl100k_base",
    },
}

# --------------------------------------------------------------------------- #
# YAML loader
# --------------------------------------------------------------------------- #
_yaml = YAML(typ="safe")


@dataclass
class EngineConfig:
    """Typed view of the configuration file."""
    cache_size: int = 256
    strict_filters: bool = True
    plugins: List[str] = field(default_factory=lambda: list(_DEFAULT_CFG["plugins"]))
    tokenizer_lib: str = "tiktoken"
    tokenizer_encoder: str = "cl100k_base"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "EngineConfig":
        """
        Builds a config from a merged dictionary.

        Raises:
            ConfigError: On values of the wrong type
        """
        cfg = _merge_defaults(raw)

        cache_size = cfg["cache_size"]
        if isinstance(cache_size, bool) or not isinstance(cache_size, int) or cache_size < 0:
            raise ConfigError(f"cache_size: expected a non-negative integer, got {cache_size!r}")

        strict = cfg["strict_filters"]
        if not isinstance(strict, bool):
            raise ConfigError(f"strict_filters: expected true/false, got {strict!r}")

        plugins = cfg["plugins"]
        if not isinstance(plugins, list) or not all(isinstance(p, str) for p in plugins):
            raise ConfigError(f"plugins: expected a list of plugin names, got {plugins!r}")

        tokenizer = cfg["tokenizer"]
        if not isinstance(tokenizer, dict):
            raise ConfigError(f"tokenizer: expected a mapping, got {tokenizer!r}")

        return cls(
            cache_size=cache_size,
            strict_filters=strict,
            plugins=list(plugins),
            tokenizer_lib=str(tokenizer.get("lib", "tiktoken")),
            tokenizer_encoder=str(tokenizer.get("encoder", "cl100k_base")),
        )


# --------------------------------------------------------------------------- #
# HELPERS
# --------------------------------------------------------------------------- #
def _merge_defaults(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Lay user values over the defaults; ``tokenizer`` is merged key by key."""
    cfg = dict(_DEFAULT_CFG)
    cfg.update(raw)
    user_tokenizer = raw.get("tokenizer")
    if isinstance(user_tokenizer, dict):
        cfg["tokenizer"] = {**_DEFAULT_CFG["tokenizer"], **user_tokenizer}
    return cfg


def debug_enabled() -> bool:
    """True when LIQUIDPROMPT_DEBUG is set to a non-empty, non-zero value."""
    return os.environ.get(DEBUG_ENV_VAR, "") not in ("", "0", "false")


def setup_logging(verbose: bool = False) -> None:
    """
    Configures root logging for command-line use.

    DEBUG when ``verbose`` or LIQUIDPROMPT_DEBUG is set, WARNING otherwise.
    """
    level = logging.DEBUG if (verbose or debug_enabled()) else logging.WARNING
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s", force=True)


# --------------------------------------------------------------------------- #
# PUBLIC API
# --------------------------------------------------------------------------- #
def load_config(path: Optional[Path] = None) -> EngineConfig:
    """
    Load the configuration file.

    • If the file does not exist, return defaults.
    • A missing schema_version means the current version.
    • An incompatible schema version is an error.

    Raises:
        ConfigError: On unreadable YAML, a foreign schema or bad values
    """
    path = Path(path) if path is not None else Path(DEFAULT_CFG_FILE)
    if not path.exists():
        return EngineConfig()

    try:
        with path.open(encoding="utf-8") as f:
            raw = _yaml.load(f) or {}
    except YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    if raw.get("schema_version", SCHEMA_VERSION) != SCHEMA_VERSION:
        raise ConfigError(
            f"Unsupported config schema {raw.get('schema_version')} "
            f"(tool expects {SCHEMA_VERSION})"
        )

    return EngineConfig.from_dict(raw)


__all__ = [
    "SCHEMA_VERSION",
    "DEFAULT_CFG_FILE",
    "EngineConfig",
    "load_config",
    "setup_logging",
    "debug_enabled",
]
