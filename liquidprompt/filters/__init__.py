"""
Built-in filter libraries.
"""

from .conversation import build_conversation_filters
from .prompt import build_prompt_filters
from .standard import STANDARD_FILTERS

__all__ = ["STANDARD_FILTERS", "build_prompt_filters", "build_conversation_filters"]
