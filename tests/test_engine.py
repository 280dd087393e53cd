"""
Tests for the engine façade, compile cache and plugin registration.
"""

import threading

import pytest

from liquidprompt import create_engine, EngineConfig
from liquidprompt.errors import ParseError
from liquidprompt.plugins import BUILTIN_PLUGINS, ControlFlowPlugin, create_builtin_plugin
from liquidprompt.template import TemplateEngine, TemplatePlugin, TextNode, VariableNode
from liquidprompt.template.base import TagSpec

from tests.infrastructure.testing_utils import make_engine, stub_token_service


class GreetingPlugin(TemplatePlugin):
    def __init__(self):
        super().__init__()
        self.initialized = False

    @property
    def name(self) -> str:
        return "greeting"

    def register_filters(self):
        return {"greet": lambda value: f"Hello, {value}"}

    def register_tags(self):
        def hello(args, body, context, render):
            return self.handlers.apply_filters("x", (), context) + render(body, context)

        return [TagSpec("hello", hello)]

    def initialize(self):
        self.initialized = True


class TestEngineBasics:

    def test_parse_returns_ast(self, engine):
        assert engine.parse("Hello, {{ name }}!") == (
            TextNode("Hello, "),
            VariableNode("name"),
            TextNode("!"),
        )

    def test_parse_invalid(self, engine):
        with pytest.raises(ParseError):
            engine.parse("{{ invalid")

    def test_parse_requires_string(self, engine):
        with pytest.raises(TypeError):
            engine.parse(None)

    def test_render_without_context(self, engine):
        assert engine.render("a{{ x }}b") == "ab"

    def test_render_equals_render_compiled(self, engine):
        template = "{% for i in xs %}{{ i | times: 2 }}{% unless forloop.last %},{% endunless %}{% endfor %}"
        context = {"xs": [1, 2, 3]}
        assert engine.render(template, context) == engine.render_compiled(engine.compile(template), context)
        assert engine.render(template, context) == "2,4,6"

    def test_filter_chain_order(self, engine):
        assert engine.render("{{ name | upcase | strip }}", {"name": " bob "}) == "BOB"

    def test_compiled_template_reusable(self, engine):
        compiled = engine.compile("Hi {{ name }}")
        assert compiled.source == "Hi {{ name }}"
        assert engine.render_compiled(compiled, {"name": "A"}) == "Hi A"
        assert engine.render_compiled(compiled, {"name": "B"}) == "Hi B"

    def test_object_context(self, engine):
        class Ctx:
            title = "T"

        assert engine.render("{{ title }}", Ctx()) == "T"

    def test_count_tokens(self, engine):
        assert engine.count_tokens("") == 0
        assert engine.count_tokens("one two") == 3

    def test_prompt_example(self, engine):
        template = (
            "You are {{ role | default: 'an assistant' }}.\n"
            "{% if examples %}Examples:\n{{ examples | toBulletedList }}\n{% endif %}"
            "Task: {{ task | strip }}"
        )
        context = {"examples": ["a", "b"], "task": "  summarize  "}
        assert engine.render(template, context) == (
            "You are an assistant.\nExamples:\n- a\n- b\nTask: summarize"
        )


class TestCompileCache:

    def test_compile_is_cached(self, engine):
        first = engine.compile("{{ a }}")
        assert engine.compile("{{ a }}") is first

    def test_cache_is_bounded(self):
        engine = make_engine(cache_size=2)
        a = engine.compile("a")
        engine.compile("b")
        engine.compile("c")
        assert engine.compile("a") is not a

    def test_cache_disabled(self):
        engine = make_engine(cache_size=0)
        assert engine.compile("a") is not engine.compile("a")

    def test_clear_cache(self, engine):
        first = engine.compile("x")
        engine.clear_cache()
        assert engine.compile("x") is not first

    def test_register_tag_invalidates_cache(self, engine):
        template = "{% box %}in{% endbox %}"
        # Unregistered tags parse as inline nodes
        before = engine.compile(template)
        assert len(before.ast) == 2

        engine.register_tag("box", lambda args, body, context, render: f"[{render(body, context)}]")
        after = engine.compile(template)
        assert after is not before
        assert len(after.ast) == 1
        assert engine.render(template) == "[in]"

    def test_concurrent_renders(self, engine):
        compiled = engine.compile("{% for x in xs %}{{ x }}{% endfor %}")
        results = []

        def work(n):
            results.append(engine.render_compiled(compiled, {"xs": list(range(n))}))

        threads = [threading.Thread(target=work, args=(n,)) for n in range(1, 9)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(results, key=len) == ["".join(str(i) for i in range(n)) for n in range(1, 9)]


class TestPlugins:

    def test_default_plugins(self, engine):
        stats = engine.registry.get_stats()
        assert stats["plugins"] == len(BUILTIN_PLUGINS)
        assert {"if", "for", "case", "assign", "capture", "comment", "include", "extends"} <= set(engine.tag_names())
        assert {"upcase", "tokenCount", "formatConversation"} <= set(engine.filter_names())

    def test_selected_plugins_only(self):
        engine = make_engine(plugins=["standard"])
        assert engine.tag_names() == []
        assert "upcase" in engine.filter_names()
        assert "tokenCount" not in engine.filter_names()

    def test_register_custom_plugin(self, engine):
        plugin = GreetingPlugin()
        engine.register_plugin(plugin)
        assert plugin.initialized is True
        assert engine.registry.get_plugin_by_name("greeting") is plugin
        assert engine.render("{{ 'Bo' | greet }}") == "Hello, Bo"
        assert engine.render("{% hello %}!{% endhello %}") == "x!"

    def test_duplicate_plugin_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.register_plugin(ControlFlowPlugin())

    def test_handlers_required(self):
        plugin = GreetingPlugin()
        with pytest.raises(RuntimeError):
            _ = plugin.handlers

    def test_unknown_builtin_plugin(self):
        with pytest.raises(ValueError):
            create_builtin_plugin("nope", stub_token_service())
        with pytest.raises(ValueError):
            make_engine(plugins=["standard", "nope"])

    def test_engines_are_isolated(self):
        first = make_engine()
        second = make_engine()
        first.register_filter("only_here", lambda v: v)
        assert "only_here" in first.filter_names()
        assert "only_here" not in second.filter_names()

    def test_bare_engine(self):
        engine = TemplateEngine(token_service=stub_token_service())
        assert engine.filter_names() == []
        assert engine.render("plain {{ x }}", {"x": 1}) == "plain 1"

    def test_create_engine_with_config(self):
        engine = create_engine(EngineConfig(tokenizer_lib="words", tokenizer_encoder="default", strict_filters=False))
        assert engine.renderer.strict_filters is False
        assert engine.token_service.lib == "words"
