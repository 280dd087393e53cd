"""
Tests for the command-line interface.
"""

from pathlib import Path

from tests.infrastructure.cli_utils import jload, run_cli
from tests.infrastructure.file_utils import write, write_dedent


class TestRenderCommand:

    def test_render_with_vars(self, cliproj: Path):
        write(cliproj / "t.liquid", "Hello, {{ name }}! {{ n | plus: 1 }}")
        cp = run_cli(cliproj, "render", "t.liquid", "--var", "name=Ann", "--var", "n=41")
        assert cp.returncode == 0, cp.stderr
        assert cp.stdout == "Hello, Ann! 42"

    def test_render_with_context_file(self, cliproj: Path):
        write(cliproj / "t.liquid", "{% for u in users %}{{ u.name }};{% endfor %}")
        write_dedent(
            cliproj / "ctx.yaml",
            """
            users:
              - name: A
              - name: B
            """,
        )
        cp = run_cli(cliproj, "render", "t.liquid", "--context", "ctx.yaml")
        assert cp.returncode == 0, cp.stderr
        assert cp.stdout == "A;B;"

    def test_json_context_and_override(self, cliproj: Path):
        write(cliproj / "ctx.json", '{"who": "file", "flag": true}')
        cp = run_cli(
            cliproj, "render", "-", "--context", "ctx.json", "--var", "who=cli",
            stdin="{% if flag %}{{ who }}{% endif %}",
        )
        assert cp.returncode == 0, cp.stderr
        assert cp.stdout == "cli"

    def test_token_count_on_stderr(self, cliproj: Path):
        cp = run_cli(cliproj, "render", "-", "--tokens", stdin="one two three")
        assert cp.returncode == 0, cp.stderr
        assert cp.stdout == "one two three"
        assert "tokens: 4" in cp.stderr

    def test_parse_error_exit_code(self, cliproj: Path):
        cp = run_cli(cliproj, "render", "-", stdin="{{ invalid")
        assert cp.returncode == 2
        assert "Unclosed" in cp.stderr
        assert "Traceback" not in cp.stderr

    def test_render_error_exit_code(self, cliproj: Path):
        cp = run_cli(cliproj, "render", "-", stdin="{{ 1 | divided_by: 0 }}")
        assert cp.returncode == 2
        assert "Division by zero" in cp.stderr

    def test_bad_var(self, cliproj: Path):
        cp = run_cli(cliproj, "render", "-", "--var", "novalue", stdin="x")
        assert cp.returncode == 2
        assert "KEY=VALUE" in cp.stderr

    def test_missing_template_file(self, cliproj: Path):
        cp = run_cli(cliproj, "render", "absent.liquid")
        assert cp.returncode == 2

    def test_explicit_config(self, cliproj: Path):
        write(cliproj / "strict.yaml", "tokenizer:\n  lib: words\nplugins: [standard]\n")
        cp = run_cli(cliproj, "render", "-", "--config", "strict.yaml", stdin="{% if x %}{% endif %}")
        assert cp.returncode == 2
        assert "Unknown tag" in cp.stderr


class TestParseAndList:

    def test_parse_prints_ast(self, cliproj: Path):
        cp = run_cli(cliproj, "parse", "-", stdin="Hi {{ name | upcase }}{% if a %}x{% endif %}")
        assert cp.returncode == 0, cp.stderr
        ast = jload(cp.stdout)
        assert ast[0] == {"type": "text", "text": "Hi "}
        assert ast[1]["type"] == "variable"
        assert ast[1]["name"] == "name"
        assert ast[1]["filters"] == [{"name": "upcase", "args": []}]
        assert ast[2]["name"] == "if"
        assert ast[2]["body"] == [{"type": "text", "text": "x"}]

    def test_list_filters(self, cliproj: Path):
        cp = run_cli(cliproj, "list", "filters")
        assert cp.returncode == 0, cp.stderr
        names = jload(cp.stdout)["filters"]
        assert "upcase" in names and "tokenCount" in names

    def test_list_tags(self, cliproj: Path):
        cp = run_cli(cliproj, "list", "tags")
        assert cp.returncode == 0, cp.stderr
        assert "for" in jload(cp.stdout)["tags"]

    def test_version(self, cliproj: Path):
        cp = run_cli(cliproj, "--version")
        assert cp.returncode == 0
        assert cp.stdout.startswith("liquidprompt ")
