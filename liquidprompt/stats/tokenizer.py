"""
Token counting service.

Created once per engine and provides a unified API over the
configured tokenizer, with an in-memory cache of text counts.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Optional

from .tokenizers import BaseTokenizer, create_tokenizer


class TokenService:
    """
    Wrapper around BaseTokenizer with built-in caching.
    """

    def __init__(
        self,
        lib: str = "tiktoken",
        encoder: str = "cl100k_base",
        *,
        tokenizer: Optional[BaseTokenizer] = None,
        cache_size: int = 1024,
    ):
        """
        Args:
            lib: Library name (tiktoken, words)
            encoder: Encoder name
            tokenizer: Ready tokenizer instance (overrides lib/encoder)
            cache_size: Maximum number of cached text counts (0 disables)
        """
        self._tokenizer = tokenizer or create_tokenizer(lib, encoder)
        self.lib = self._tokenizer.lib_name if tokenizer else lib
        self.encoder = self._tokenizer.encoder
        self.cache_size = cache_size

        self._cache: "OrderedDict[str, int]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def tokenizer(self) -> BaseTokenizer:
        """Return the base tokenizer."""
        return self._tokenizer

    @property
    def encoder_name(self) -> str:
        """Encoder name."""
        return self.encoder

    def count_text(self, text: str) -> int:
        """Count tokens in text."""
        return self._tokenizer.count_tokens(text)

    def count_text_cached(self, text: str) -> int:
        """
        Count tokens in text using cache.

        Args:
            text: Text to count tokens for

        Returns:
            Number of tokens
        """
        if not text:
            return 0

        if self.cache_size <= 0:
            return self.count_text(text)

        with self._lock:
            cached = self._cache.get(text)
            if cached is not None:
                self._cache.move_to_end(text)
                return cached

        token_count = self.count_text(text)

        with self._lock:
            self._cache[text] = token_count
            if len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)

        return token_count

    def truncate_to_tokens(self, text: str, max_tokens: int, ellipsis: str = "...") -> str:
        """
        Truncate text at a word boundary so that text plus ellipsis fits
        the token limit.

        Args:
            text: Original text to truncate
            max_tokens: Maximum number of tokens
            ellipsis: Marker appended when text is cut

        Returns:
            The original text if it fits, otherwise the longest word
            prefix (followed by the ellipsis) within the limit
        """
        if not text:
            return ""

        if self.count_text_cached(text) <= max_tokens:
            return text

        words = text.split()
        left, right, best = 0, len(words), 0

        # Binary search over the number of kept words
        while left <= right:
            mid = (left + right) // 2
            candidate = " ".join(words[:mid]) + ellipsis
            if self.count_text(candidate) <= max_tokens:
                best = mid
                left = mid + 1
            else:
                right = mid - 1

        return " ".join(words[:best]) + ellipsis

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()


def default_tokenizer() -> TokenService:
    """Quick creation of tokenization service."""
    return TokenService(lib="tiktoken", encoder="cl100k_base")


__all__ = ["TokenService", "default_tokenizer"]
