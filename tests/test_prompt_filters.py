"""
Tests for prompt and conversation filters.
"""

import json

import pytest

from liquidprompt.errors import FilterError
from liquidprompt.filters import build_conversation_filters, build_prompt_filters
from liquidprompt.filters.conversation import format_conversation
from liquidprompt.filters.prompt import json_escape, sanitize, strip_markdown, to_bulleted_list, to_numbered_list

from tests.infrastructure.testing_utils import stub_token_service


@pytest.fixture
def messages():
    return [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Hi there", "name": "ann"},
        {"role": "assistant", "content": "Hello!"},
    ]


class TestTextFilters:

    def test_sanitize(self):
        assert sanitize("  a\x00b   c\x07  ") == "ab c"
        assert sanitize("line1\nline2\tx") == "line1\nline2\tx"
        assert sanitize("ﬁne") == "fine"

    def test_strip_markdown(self):
        text = "# Title\nSome **bold** and _it_ text with [a link](http://x) and `code`.\n![img](p.png)"
        assert strip_markdown(text) == "Title\nSome bold and it text with a link and code.\n"

    def test_strip_markdown_code_fence(self):
        assert strip_markdown("before\n```\ncode\n```\nafter") == "before\n\nafter"

    def test_json_escape(self):
        assert json_escape('say "hi"\nnow') == 'say \\"hi\\"\\nnow'

    def test_lists(self):
        assert to_numbered_list(["a", "b"]) == "1. a\n2. b"
        assert to_numbered_list(["a", "b"], 0) == "0. a\n1. b"
        assert to_bulleted_list(["a", "b"]) == "- a\n- b"
        assert to_bulleted_list(["a"], "*") == "* a"
        assert to_numbered_list("plain") == "plain"

    def test_render_through_engine(self, engine):
        out = engine.render("{{ steps | toNumberedList }}", {"steps": ["Read", "Write"]})
        assert out == "1. Read\n2. Write"


class TestTokenFilters:

    def test_token_count_uses_engine_tokenizer(self, engine):
        # words estimator: ceil(4 * 1.3)
        assert engine.render("{{ text | tokenCount }}", {"text": "one two three four"}) == "6"

    def test_token_count_of_empty(self, engine):
        assert engine.render("{{ missing | tokenCount }}") == "0"

    def test_truncate_to_tokens(self):
        filters = build_prompt_filters(stub_token_service())
        truncate = filters["truncateToTokens"]
        assert truncate("a b c d e", 10) == "a b c d e"
        assert truncate("a b c d e", 3) == "a b c..."
        assert truncate("a b c d e", 3, " [cut]") == "a b [cut]"

    def test_truncate_result_fits_limit(self, engine):
        text = " ".join(f"word{i}" for i in range(50))
        out = engine.render("{{ text | truncateToTokens: 10 }}", {"text": text})
        assert out.endswith("...")
        assert engine.count_tokens(out) <= 10


class TestConversationFilters:

    def test_openai_format(self, messages):
        payload = json.loads(format_conversation(messages, "openai"))
        assert payload[0] == {"role": "system", "content": "Be brief."}
        assert payload[1] == {"role": "user", "content": "Hi there", "name": "ann"}

    def test_default_format_is_openai(self, messages):
        assert format_conversation(messages) == format_conversation(messages, "openai")

    def test_anthropic_format(self, messages):
        assert format_conversation(messages, "anthropic") == (
            "Assistant: Be brief.\n\nHuman: Hi there\n\nAssistant: Hello!"
        )

    def test_plain_format(self, messages):
        assert format_conversation(messages, "plain") == (
            "[SYSTEM]: Be brief.\n\n[USER]: Hi there\n\n[ASSISTANT]: Hello!"
        )

    def test_unknown_format(self, messages):
        with pytest.raises(FilterError) as exc:
            format_conversation(messages, "xml")
        assert "Unknown format: xml" in exc.value.message

    def test_requires_list(self, engine):
        with pytest.raises(FilterError) as exc:
            engine.render("{{ msgs | formatConversation }}", {"msgs": "nope"})
        assert exc.value.filter_name == "formatConversation"

    def test_filter_by_role(self, engine, messages):
        out = engine.render(
            "{% assign users = msgs | filterByRole: 'user' %}{{ users | size }}:{{ users[0].content }}",
            {"msgs": messages},
        )
        assert out == "1:Hi there"

    def test_conversation_tokens(self, messages):
        filters = build_conversation_filters(stub_token_service())
        # 2 + 2 + 1 words plus 4 tokens of overhead per message
        assert filters["conversationTokens"](messages) == 17
        assert filters["conversationTokens"]("x") == 0
