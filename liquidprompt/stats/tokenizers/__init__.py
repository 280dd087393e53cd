from typing import List

from .base import BaseTokenizer
from .tiktoken_adapter import TiktokenAdapter
from .words_adapter import WordsAdapter


def create_tokenizer(lib: str, encoder: str) -> BaseTokenizer:
    """
    Creates a tokenizer from its parameters.

    Args:
        lib: Library name (tiktoken, words)
        encoder: Encoder name

    Returns:
        Tokenizer instance

    Raises:
        ValueError: If the library is unknown
    """
    if lib == "tiktoken":
        return TiktokenAdapter(encoder)
    elif lib == "words":
        return WordsAdapter(encoder)
    else:
        raise ValueError(
            f"Unknown tokenizer library: '{lib}'. "
            f"Supported: tiktoken, words"
        )


def list_tokenizer_libs() -> List[str]:
    """Returns the supported tokenization libraries."""
    return ["tiktoken", "words"]


def list_encoders(lib: str) -> List[str]:
    """
    Returns the available encoders for a library.

    Raises:
        ValueError: If the library is unknown
    """
    if lib == "tiktoken":
        return TiktokenAdapter.list_available_encoders()
    elif lib == "words":
        return WordsAdapter.list_available_encoders()
    else:
        raise ValueError(
            f"Unknown tokenizer library: '{lib}'. "
            f"Supported: tiktoken, words"
        )


__all__ = [
    "BaseTokenizer",
    "TiktokenAdapter",
    "WordsAdapter",
    "create_tokenizer",
    "list_tokenizer_libs",
    "list_encoders",
]
