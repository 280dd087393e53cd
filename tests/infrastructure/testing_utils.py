"""
Testing utilities: stubs and engine factories shared across tests.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from liquidprompt.config import EngineConfig
from liquidprompt.stats import BaseTokenizer, TokenService
from liquidprompt.template import TemplateEngine, create_engine


class TokenizerStub(BaseTokenizer):
    """Deterministic offline tokenizer: one token per whitespace-separated word."""

    def __init__(self, encoder: str = "stub"):
        super().__init__(encoder)

    def count_tokens(self, text: str) -> int:
        return len(text.split())

    @staticmethod
    def list_available_encoders() -> List[str]:
        return ["stub"]


def stub_token_service() -> TokenService:
    """TokenService backed by TokenizerStub."""
    return TokenService(tokenizer=TokenizerStub())


def make_engine(**overrides: Any) -> TemplateEngine:
    """
    Engine with all built-in plugins and the offline ``words`` tokenizer.

    Keyword overrides are applied to EngineConfig.
    """
    params: Dict[str, Any] = {"tokenizer_lib": "words", "tokenizer_encoder": "default"}
    params.update(overrides)
    return create_engine(EngineConfig(**params))


def render(template: str, context: Optional[Dict[str, Any]] = None, **overrides: Any) -> str:
    """Renders a template with a fresh engine."""
    return make_engine(**overrides).render(template, context or {})


__all__ = ["TokenizerStub", "stub_token_service", "make_engine", "render"]
