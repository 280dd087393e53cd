from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .config import load_config, setup_logging
from .errors import LiquidPromptError
from .template import create_engine, node_to_dict
from .version import tool_version

_yaml = YAML(typ="safe")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="liquidprompt",
        description="Liquid template renderer for structured prompts",
        add_help=True,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_config(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--config",
            metavar="FILE",
            help="YAML engine configuration (default: ./liquidprompt.yaml if present)",
        )

    sp_render = sub.add_parser("render", help="Render a template to stdout")
    sp_render.add_argument("template", help="template file, or - for stdin")
    sp_render.add_argument(
        "--context",
        metavar="FILE",
        help="JSON or YAML file with template variables",
    )
    sp_render.add_argument(
        "--var",
        action="append",
        metavar="KEY=VALUE",
        help="template variable (can be repeated; VALUE is parsed as JSON when possible)",
    )
    sp_render.add_argument(
        "--tokens",
        action="store_true",
        help="write the token count of the rendered text to stderr",
    )
    add_config(sp_render)

    sp_parse = sub.add_parser("parse", help="Print the template AST as JSON")
    sp_parse.add_argument("template", help="template file, or - for stdin")
    add_config(sp_parse)

    sp_list = sub.add_parser("list", help="JSON list of registered filters or tags")
    sp_list.add_argument("what", choices=["filters", "tags"], help="what to list")
    add_config(sp_list)

    return p


def _read_template(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _load_context(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    try:
        with Path(path).open(encoding="utf-8") as f:
            data = _yaml.load(f)
    except YAMLError as e:
        raise ValueError(f"Failed to parse context file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Context file {path} must contain a mapping")
    return data


def _parse_vars(items: Optional[List[str]]) -> Dict[str, Any]:
    """Parses KEY=VALUE pairs; values that are valid JSON are decoded."""
    result: Dict[str, Any] = {}
    for item in items or []:
        if "=" not in item:
            raise ValueError(f"Invalid --var '{item}': expected KEY=VALUE")
        key, raw = item.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"Invalid --var '{item}': empty key")
        try:
            result[key] = json.loads(raw)
        except json.JSONDecodeError:
            result[key] = raw
    return result


def _engine(ns: argparse.Namespace):
    cfg_path = Path(ns.config) if getattr(ns, "config", None) else None
    if cfg_path is not None and not cfg_path.exists():
        raise ValueError(f"Config file not found: {cfg_path}")
    return create_engine(load_config(cfg_path))


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    setup_logging(ns.verbose)

    try:
        if ns.cmd == "render":
            engine = _engine(ns)
            context = _load_context(ns.context)
            context.update(_parse_vars(ns.var))
            text = engine.render(_read_template(ns.template), context)
            sys.stdout.write(text)
            if ns.tokens:
                sys.stderr.write(f"tokens: {engine.count_tokens(text)}\n")
            return 0

        if ns.cmd == "parse":
            engine = _engine(ns)
            ast = engine.parse(_read_template(ns.template))
            sys.stdout.write(_dumps([node_to_dict(node) for node in ast]))
            return 0

        if ns.cmd == "list":
            engine = _engine(ns)
            if ns.what == "filters":
                data = {"filters": engine.filter_names()}
            else:
                data = {"tags": engine.tag_names()}
            sys.stdout.write(_dumps(data))
            return 0

    except LiquidPromptError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except (ValueError, OSError) as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
