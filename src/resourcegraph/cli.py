from __future__ import annotations

import argparse
import importlib
import json
import sys
from pathlib import Path
from typing import Any

from resourcegraph.execution import GraphSchema
from resourcegraph.logging_config import configure_logging
from resourcegraph.settings import Settings, load_settings


def load_factory(spec: str, settings: Settings) -> GraphSchema:
    """Resolve ``module:attr``; ``attr`` is a GraphSchema or a callable taking Settings."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Factory must look like 'module:attribute', got {spec!r}")
    target: Any = importlib.import_module(module_name)
    for part in attr.split("."):
        target = getattr(target, part)
    if callable(target) and not isinstance(target, GraphSchema):
        target = target(settings)
    if not isinstance(target, GraphSchema):
        raise TypeError(f"{spec} did not produce a GraphSchema (got {type(target).__name__})")
    return target


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="resourcegraph utilities")
    parser.add_argument("--config", type=Path, default=None, help="Path to a TOML settings file")
    parser.add_argument("--log-level", default=None, help="Override logging.level")
    sub = parser.add_subparsers(dest="command", required=True)

    sdl = sub.add_parser("sdl", help="Print the synthesized schema in SDL")
    sdl.add_argument("--factory", required=True, help="module:attribute returning a GraphSchema")

    query = sub.add_parser("query", help="Execute a query and print the JSON response")
    query.add_argument("--factory", required=True, help="module:attribute returning a GraphSchema")
    query.add_argument("--query", type=Path, required=True, help="File containing the GraphQL document")
    query.add_argument("--variables", default=None, help="JSON object of variables")
    query.add_argument("--operation", default=None, help="Operation name")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    overrides = {"logging": {"level": args.log_level}} if args.log_level else None
    settings = load_settings(args.config, overrides=overrides)
    configure_logging(
        level=settings.logging.level,
        jsonl=settings.logging.jsonl,
        log_file=settings.logging.log_file,
    )
    graph = load_factory(args.factory, settings)

    if args.command == "sdl":
        print(graph.sdl())
        return 0
    if args.command == "query":
        variables = json.loads(args.variables) if args.variables else None
        document = args.query.read_text(encoding="utf-8")
        result = graph.execute_sync(document, variables, operation_name=args.operation)
        print(json.dumps(result, ensure_ascii=False, indent=2, default=str))
        return 1 if result.get("errors") else 0
    raise SystemExit(f"Unknown command: {args.command}")


if __name__ == "__main__":
    sys.exit(main())
