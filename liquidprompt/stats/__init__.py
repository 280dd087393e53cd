"""
Token statistics: tokenizer adapters and the token counting service.
"""

from .tokenizer import TokenService, default_tokenizer
from .tokenizers import BaseTokenizer, create_tokenizer, list_encoders, list_tokenizer_libs

__all__ = [
    "TokenService",
    "default_tokenizer",
    "BaseTokenizer",
    "create_tokenizer",
    "list_encoders",
    "list_tokenizer_libs",
]
