from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List


class BaseTokenizer(ABC):
    """
    Abstract base class for all tokenizers.

    Unifies the interface over different tokenization libraries.
    """

    def __init__(self, encoder: str):
        """
        Args:
            encoder: Encoder name (for tiktoken) or estimation profile
        """
        self.encoder = encoder

    @abstractmethod
    def count_tokens(self, text: str) -> int:
        """
        Counts tokens in the text.

        Args:
            text: Source text

        Returns:
            Number of tokens
        """
        pass

    @staticmethod
    @abstractmethod
    def list_available_encoders() -> List[str]:
        """
        Returns the encoders available for this library.
        """
        pass

    @property
    def lib_name(self) -> str:
        """Tokenization library name (tiktoken, words)."""
        return self.__class__.__name__.replace("Adapter", "").lower()

    @property
    def full_name(self) -> str:
        """Full tokenizer name in 'lib:encoder' form."""
        return f"{self.lib_name}:{self.encoder}"
