"""
Control-flow tags.

``if``/``unless`` with ``elsif``/``else`` branches, ``for`` loops with
``limit``/``offset``/``reversed`` and an ``else`` branch, ``case``/``when``,
variable assignment (``assign``, ``capture``) and ``comment``.

Every handler follows the tag contract
``handler(args, body, context, render) -> str``.
"""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Mapping, MutableMapping
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..conditions import ConditionEvaluator, ConditionParser, ConditionSyntaxError
from ..errors import TagError
from ..template.base import RenderCallback
from ..template.handlers import TemplateHandlers
from ..template.nodes import (
    Argument,
    FilterCall,
    Literal,
    PathRef,
    TagArg,
    TemplateNode,
    split_branches,
)
from ..values import ObjectScope, resolve_variable, strict_equals, to_number

_KEYWORDS = {"true": True, "false": False, "nil": None, "null": None}

IF_BRANCHES = ("elsif", "else")
FOR_BRANCHES = ("else",)
CASE_BRANCHES = ("when", "else")


# ---- Shared helpers ---------------------------------------------------------

def operand_value(arg: TagArg, context: Any, tag_name: str = "") -> Any:
    """Value of a single tag argument: literal or resolved path."""
    if arg.kind in ("STRING", "NUMBER"):
        return arg.value
    if arg.kind == "IDENTIFIER":
        if arg.value in _KEYWORDS:
            return _KEYWORDS[arg.value]
        return resolve_variable(context, arg.value)
    raise TagError(f"Unexpected '{arg.value}' where a value was expected", tag_name)


def _writable_scope(context: Any, tag_name: str) -> MutableMapping:
    if not isinstance(context, MutableMapping):
        raise TagError(f"Tag '{tag_name}' requires a mapping render scope", tag_name)
    return context


def _evaluate_condition(tag_name: str, args: Sequence[TagArg], context: Any) -> bool:
    if not args:
        raise TagError(f"Tag '{tag_name}' requires a condition", tag_name)
    try:
        condition = ConditionParser().parse(args)
    except ConditionSyntaxError as e:
        raise TagError(f"Invalid condition in '{tag_name}': {e.message}", tag_name, cause=e) from e
    return ConditionEvaluator(context).evaluate(condition)


# ---- if / unless ------------------------------------------------------------

def _render_conditional(
    tag_name: str,
    args: Tuple[TagArg, ...],
    body: Tuple[TemplateNode, ...],
    context: Any,
    render: RenderCallback,
    negate_first: bool,
) -> str:
    branches = split_branches(tag_name, args, body, IF_BRANCHES)
    seen_else = False

    for index, branch in enumerate(branches):
        if seen_else:
            raise TagError(f"'{{% {branch.name} %}}' after '{{% else %}}' in '{tag_name}'", tag_name)

        if branch.name == "else":
            seen_else = True
            continue

        result = _evaluate_condition(branch.name, branch.args, context)
        if index == 0 and negate_first:
            result = not result
        if result:
            return render(branch.body, context)

    if seen_else:
        return render(branches[-1].body, context)
    return ""


def if_tag(args, body, context, render) -> str:
    """Renders the first branch whose condition holds."""
    return _render_conditional("if", args, body, context, render, negate_first=False)


def unless_tag(args, body, context, render) -> str:
    """Inverse of ``if`` for the opening condition."""
    return _render_conditional("unless", args, body, context, render, negate_first=True)


# ---- for --------------------------------------------------------------------

def _parse_for_header(args: Sequence[TagArg]) -> Tuple[str, TagArg, Dict[str, Any]]:
    """
    Splits ``item in collection [limit:N] [offset:N] [reversed]``.

    Returns:
        (loop variable, collection argument, options)
    """
    if (
        len(args) < 3
        or args[0].kind != "IDENTIFIER"
        or "." in args[0].value
        or not args[1].is_word("in")
        or args[2].kind not in ("IDENTIFIER", "STRING")
    ):
        raise TagError("Invalid for loop syntax: expected 'item in collection'", "for")

    options: Dict[str, Any] = {}
    rest = list(args[3:])
    i = 0
    while i < len(rest):
        arg = rest[i]
        if arg.is_word("reversed"):
            options["reversed"] = True
            i += 1
        elif arg.kind == "IDENTIFIER" and arg.value in ("limit", "offset"):
            if i + 2 >= len(rest):
                raise TagError(f"Missing value for '{arg.value}' in for loop", "for")
            if rest[i + 1].kind != "PUNCT" or rest[i + 1].value != ":":
                raise TagError(f"Expected ':' after '{arg.value}' in for loop", "for")
            options[arg.value] = rest[i + 2]
            i += 3
        elif arg.kind == "PUNCT" and arg.value == ",":
            i += 1
        else:
            raise TagError(f"Unexpected '{arg.value}' in for loop header", "for")

    return args[0].value, args[2], options


def _int_option(arg: Optional[TagArg], name: str, context: Any) -> Optional[int]:
    if arg is None:
        return None
    number = to_number(operand_value(arg, context, "for"))
    if number is None:
        raise TagError(f"'{name}' must be a number", "for")
    return int(number)


def for_tag(args, body, context, render) -> str:
    """
    Renders the body once per element.

    Each iteration gets a derived scope holding the loop variable and a
    ``forloop`` object layered over the enclosing scope, which is left
    untouched.
    """
    var_name, collection_arg, options = _parse_for_header(args)
    branches = split_branches("for", args, body, FOR_BRANCHES)
    loop_body = branches[0].body
    else_body = branches[1].body if len(branches) > 1 else ()

    collection = operand_value(collection_arg, context, "for")
    if collection is None:
        items: List[Any] = []
    elif isinstance(collection, (list, tuple)):
        items = list(collection)
    else:
        raise TagError(
            f"Cannot iterate over '{collection_arg.value}': expected a list, "
            f"got {type(collection).__name__}",
            "for",
        )

    offset = _int_option(options.get("offset"), "offset", context)
    limit = _int_option(options.get("limit"), "limit", context)
    if offset:
        items = items[max(0, offset):]
    if limit is not None:
        items = items[:max(0, limit)]
    if options.get("reversed"):
        items.reverse()

    if not items:
        return render(else_body, context) if else_body else ""

    parent = context if isinstance(context, Mapping) else ObjectScope(context)
    parent_loop = parent.get("forloop")
    length = len(items)
    parts = []

    for index, item in enumerate(items):
        scope = ChainMap({var_name: item}, parent)
        scope["forloop"] = {
            "index": index + 1,
            "index0": index,
            "rindex": length - index,
            "rindex0": length - index - 1,
            "first": index == 0,
            "last": index == length - 1,
            "length": length,
            "parentloop": parent_loop,
        }
        parts.append(render(loop_body, scope))

    return "".join(parts)


# ---- case / when ------------------------------------------------------------

def _when_values(args: Sequence[TagArg], context: Any) -> List[Any]:
    values = []
    for arg in args:
        if (arg.kind == "PUNCT" and arg.value == ",") or arg.is_word("or"):
            continue
        values.append(operand_value(arg, context, "case"))
    return values


def case_tag(args, body, context, render) -> str:
    """Renders the first ``when`` whose value strictly equals the case value."""
    if len(args) != 1:
        raise TagError("Tag 'case' requires exactly one expression", "case")
    subject = operand_value(args[0], context, "case")

    branches = split_branches("case", args, body, CASE_BRANCHES)
    else_body: Optional[Tuple[TemplateNode, ...]] = None

    # branches[0] holds the text between {% case %} and the first {% when %}
    for branch in branches[1:]:
        if branch.name == "else":
            else_body = branch.body
            continue
        if not branch.args:
            raise TagError("Tag 'when' requires at least one value", "case")
        if any(strict_equals(subject, value) for value in _when_values(branch.args, context)):
            return render(branch.body, context)

    if else_body is not None:
        return render(else_body, context)
    return ""


# ---- assign / capture / comment ---------------------------------------------

def _filter_argument(arg: TagArg) -> Argument:
    if arg.kind in ("STRING", "NUMBER"):
        return Literal(arg.value)
    if arg.kind == "IDENTIFIER":
        if arg.value in _KEYWORDS:
            return Literal(_KEYWORDS[arg.value])
        return PathRef(arg.value)
    raise TagError(f"Invalid filter argument '{arg.value}'", "assign")


def parse_filter_chain(args: Sequence[TagArg], tag_name: str) -> List[FilterCall]:
    """
    Reads ``| name: arg, arg | name ...`` from tag arguments.

    Raises:
        TagError: On a malformed chain
    """
    filters: List[FilterCall] = []
    i = 0
    while i < len(args):
        pipe = args[i]
        if pipe.kind != "PUNCT" or pipe.value != "|":
            raise TagError(f"Unexpected '{pipe.value}' in '{tag_name}'", tag_name)
        if i + 1 >= len(args) or args[i + 1].kind != "IDENTIFIER":
            raise TagError(f"Empty filter name in '{tag_name}'", tag_name)
        name = args[i + 1].value
        i += 2

        call_args: List[Argument] = []
        if i < len(args) and args[i].kind == "PUNCT" and args[i].value == ":":
            i += 1
            while True:
                if i >= len(args):
                    raise TagError(f"Missing argument for filter '{name}'", tag_name)
                call_args.append(_filter_argument(args[i]))
                i += 1
                if i < len(args) and args[i].kind == "PUNCT" and args[i].value == ",":
                    i += 1
                    continue
                break

        filters.append(FilterCall(name, tuple(call_args)))
    return filters


def make_assign_tag(get_handlers: Callable[[], TemplateHandlers]):
    """
    Builds the ``assign`` handler.

    Args:
        get_handlers: Returns the engine handlers used to run filter chains
    """

    def assign_tag(args, body, context, render) -> str:
        if (
            len(args) < 3
            or args[0].kind != "IDENTIFIER"
            or "." in args[0].value
            or args[1].kind != "PUNCT"
            or args[1].value != "="
        ):
            raise TagError("Invalid assign syntax: expected 'name = value'", "assign")

        scope = _writable_scope(context, "assign")
        value = operand_value(args[2], context, "assign")

        filters = parse_filter_chain(args[3:], "assign")
        if filters:
            value = get_handlers().apply_filters(value, filters, context)

        scope[args[0].value] = value
        return ""

    return assign_tag


def capture_tag(args, body, context, render) -> str:
    """Renders the body into a variable instead of the output."""
    if len(args) != 1 or args[0].kind not in ("IDENTIFIER", "STRING") or "." in str(args[0].value):
        raise TagError("Tag 'capture' requires a variable name", "capture")
    scope = _writable_scope(context, "capture")
    scope[args[0].value] = render(body, context)
    return ""


def comment_tag(args, body, context, render) -> str:
    return ""


__all__ = [
    "IF_BRANCHES",
    "FOR_BRANCHES",
    "CASE_BRANCHES",
    "operand_value",
    "parse_filter_chain",
    "if_tag",
    "unless_tag",
    "for_tag",
    "case_tag",
    "make_assign_tag",
    "capture_tag",
    "comment_tag",
]
