from pathlib import Path

import pytest

from liquidprompt.template import TemplateEngine

from tests.infrastructure.cli_utils import write_offline_config
from tests.infrastructure.testing_utils import make_engine


@pytest.fixture
def engine() -> TemplateEngine:
    """Engine with all built-in plugins and an offline tokenizer."""
    return make_engine()


@pytest.fixture
def cliproj(tmp_path: Path) -> Path:
    """Working directory with an offline liquidprompt.yaml."""
    write_offline_config(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def _no_debug_env(monkeypatch):
    monkeypatch.delenv("LIQUIDPROMPT_DEBUG", raising=False)
