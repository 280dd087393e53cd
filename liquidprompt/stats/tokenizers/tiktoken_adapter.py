from __future__ import annotations

import logging
from typing import List

import tiktoken

from .base import BaseTokenizer

logger = logging.getLogger(__name__)


class TiktokenAdapter(BaseTokenizer):
    """Adapter for the tiktoken library (OpenAI BPE encodings)."""

    def __init__(self, encoder: str):
        super().__init__(encoder)
        self._enc = None

    def _get_encoding(self) -> "tiktoken.Encoding":
        # Resolved lazily: the first call may download the BPE ranks
        if self._enc is None:
            try:
                self._enc = tiktoken.get_encoding(self.encoder)
            except ValueError:
                try:
                    self._enc = tiktoken.encoding_for_model(self.encoder)
                except KeyError as e:
                    raise ValueError(
                        f"Unknown tiktoken encoder: '{self.encoder}'. "
                        f"Available: {', '.join(self.list_available_encoders())}"
                    ) from e
            logger.debug(f"Loaded tiktoken encoding '{self._enc.name}'")
        return self._enc

    def count_tokens(self, text: str) -> int:
        if not text:
            return 0
        return len(self._get_encoding().encode(text, disallowed_special=()))

    @staticmethod
    def list_available_encoders() -> List[str]:
        return sorted(tiktoken.list_encoding_names())
