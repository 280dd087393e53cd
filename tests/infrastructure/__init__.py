"""
Shared test infrastructure for liquidprompt.

Modules:
- file_utils: Creating files and directories
- cli_utils: Running the command-line interface
- testing_utils: Tokenizer stubs and engine factories
"""

from .file_utils import write, write_dedent
from .cli_utils import run_cli, jload, write_offline_config, DEFAULT_TOKENIZER_LIB, DEFAULT_ENCODER
from .testing_utils import TokenizerStub, stub_token_service, make_engine, render

__all__ = [
    # File utilities
    "write", "write_dedent",

    # CLI utilities
    "run_cli", "jload", "write_offline_config",
    "DEFAULT_TOKENIZER_LIB", "DEFAULT_ENCODER",

    # Testing utilities
    "TokenizerStub", "stub_token_service", "make_engine", "render",
]
