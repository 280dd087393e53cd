"""
Tests for engine configuration loading.
"""

import logging
from pathlib import Path

import pytest

from liquidprompt.config import EngineConfig, debug_enabled, load_config, setup_logging
from liquidprompt.errors import ConfigError

from tests.infrastructure.file_utils import write, write_dedent


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        cfg = load_config(tmp_path / "absent.yaml")
        assert cfg == EngineConfig()
        assert cfg.plugins == ["standard", "control", "prompt", "composition"]
        assert (cfg.tokenizer_lib, cfg.tokenizer_encoder) == ("tiktoken", "cl100k_base")

    def test_user_values_over_defaults(self, tmp_path: Path):
        path = write_dedent(
            tmp_path / "liquidprompt.yaml",
            """
            schema_version: 1
            cache_size: 10
            strict_filters: false
            plugins: [standard, control]
            tokenizer:
              lib: words
            """,
        )
        cfg = load_config(path)
        assert cfg.cache_size == 10
        assert cfg.strict_filters is False
        assert cfg.plugins == ["standard", "control"]
        assert cfg.tokenizer_lib == "words"
        assert cfg.tokenizer_encoder == "cl100k_base"

    def test_missing_schema_version_is_current(self, tmp_path: Path):
        cfg = load_config(write(tmp_path / "c.yaml", "cache_size: 5\n"))
        assert cfg.cache_size == 5

    def test_empty_file(self, tmp_path: Path):
        assert load_config(write(tmp_path / "c.yaml", "")) == EngineConfig()

    def test_foreign_schema(self, tmp_path: Path):
        with pytest.raises(ConfigError) as exc:
            load_config(write(tmp_path / "c.yaml", "schema_version: 2\n"))
        assert "Unsupported config schema" in str(exc.value)

    def test_invalid_yaml(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(write(tmp_path / "c.yaml", "plugins: [unclosed\n"))

    def test_top_level_must_be_mapping(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(write(tmp_path / "c.yaml", "- a\n- b\n"))

    @pytest.mark.parametrize(
        "body",
        [
            "cache_size: -1\n",
            "cache_size: true\n",
            "strict_filters: 'yes'\n",
            "plugins: standard\n",
            "plugins: [1, 2]\n",
            "tokenizer: words\n",
        ],
    )
    def test_bad_values(self, tmp_path: Path, body):
        with pytest.raises(ConfigError):
            load_config(write(tmp_path / "c.yaml", body))

    def test_default_path_is_cwd(self, tmp_path: Path, monkeypatch):
        write(tmp_path / "liquidprompt.yaml", "cache_size: 7\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().cache_size == 7


class TestLogging:

    def test_debug_env(self, monkeypatch):
        assert debug_enabled() is False
        monkeypatch.setenv("LIQUIDPROMPT_DEBUG", "1")
        assert debug_enabled() is True
        monkeypatch.setenv("LIQUIDPROMPT_DEBUG", "0")
        assert debug_enabled() is False

    def test_setup_logging_levels(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        setup_logging(verbose=True)
        setup_logging(verbose=False)
        monkeypatch.setenv("LIQUIDPROMPT_DEBUG", "1")
        setup_logging(verbose=False)

        assert [c["level"] for c in calls] == [logging.DEBUG, logging.WARNING, logging.DEBUG]
        assert calls[0]["format"] == "[%(levelname)s] %(message)s"
