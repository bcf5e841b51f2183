"""CLI entrypoint for sigen."""

from __future__ import annotations

import argparse
import ast
import importlib
from pathlib import Path
from typing import Any, Dict, List

from .builder import InterfaceBuilder
from .config import load_config
from .exceptions import SIGenError
from .logging import configure_logging


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigen",
        description="Generate proxy classes exposing annotated methods of a service object.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Print the source of the proxy class for a service object.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "target",
        help="Service object as module:attribute; classes are instantiated without arguments.",
    )
    generate_parser.add_argument(
        "--class-name",
        default=None,
        help="Name of the generated class (defaults to <ClassName>Proxy).",
    )
    namespace_group = generate_parser.add_mutually_exclusive_group()
    namespace_group.add_argument(
        "--namespace",
        default=None,
        help="Module the generated class belongs to (defaults to the service's module).",
    )
    namespace_group.add_argument(
        "--no-namespace",
        action="store_true",
        help="Generate the class without a namespace.",
    )
    generate_parser.add_argument(
        "--context",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Context variable for expose expressions and placeholders (repeatable).",
    )
    generate_parser.add_argument(
        "--config",
        default=".",
        help="Path to .sigen.yml or the directory containing it.",
    )
    generate_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for sigen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=getattr(args, "log_file", None))

    if args.command == "generate":
        try:
            config = load_config(Path(args.config))
            config.context.update(_parse_context(args.context))
            builder = InterfaceBuilder.from_config(config)
            template = _load_target(args.target)
            namespace: Any = False
            if args.no_namespace:
                namespace = None
            elif args.namespace:
                namespace = args.namespace
            generated = builder.generate_interface_class_source(
                template, args.class_name or False, namespace
            )
        except (SIGenError, ImportError, AttributeError, ValueError) as exc:
            parser.exit(1, f"sigen generate failed: {exc}\nRun with --verbose for more details.\n")
        if not generated:
            parser.exit(1, "Nothing to expose\n")
        print(generated.source, end="")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _parse_context(pairs: List[str]) -> Dict[str, Any]:
    context: Dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Context entry '{pair}' must look like KEY=VALUE")
        key, raw = pair.split("=", 1)
        try:
            value: Any = ast.literal_eval(raw)
        except (SyntaxError, ValueError):
            value = raw
        context[key.strip()] = value
    return context


def _load_target(target: str) -> Any:
    module_name, separator, attribute = target.partition(":")
    if not separator or not attribute:
        raise ValueError(f"Target '{target}' must look like module:attribute")
    obj: Any = importlib.import_module(module_name)
    for part in attribute.split("."):
        obj = getattr(obj, part)
    if isinstance(obj, type):
        try:
            obj = obj()
        except TypeError as exc:
            raise ValueError(f"Cannot instantiate '{target}' without arguments: {exc}") from exc
    return obj


__all__ = ["main"]


if __name__ == "__main__":  # pragma: no cover
    main()
