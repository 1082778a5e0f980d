"""Command line interface: check, document and audit environment bindings."""
from __future__ import annotations

import argparse
import importlib
import sys
from typing import Any, Mapping, Optional, Sequence

from loguru import logger

from envbind.environment import DEFAULT_ENV_FILENAME, DEFAULT_LAYER, build_environment, source_of
from envbind.errors import EnvBindError
from envbind.fields import find_descriptor, gather_descriptors
from envbind.logger import log_report, setup_logging
from envbind.resolver import find_unknown, resolve
from envbind.settings import ENV_PREFIX, ToolSettings, load_settings
from envbind.usage import LIST_FORMAT, TABLE_FORMAT, usagef


def load_spec(target: str) -> Any:
    """Import ``module:ClassName`` and return a fresh instance."""

    module_name, separator, attribute = target.partition(":")
    if not separator or not module_name or not attribute:
        raise EnvBindError(f"spec must look like 'module:ClassName', got '{target}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise EnvBindError(f"cannot import {module_name}: {exc}") from exc
    try:
        spec_cls = getattr(module, attribute)
    except AttributeError as exc:
        raise EnvBindError(f"{module_name} has no attribute {attribute}") from exc
    if not callable(spec_cls):
        raise EnvBindError(f"{target} is not a class")
    return spec_cls()


def _explain(spec: Any, key: str, environ: Mapping[str, str]) -> str:
    descriptor = find_descriptor(gather_descriptors(spec), key)
    if descriptor is None:
        raise EnvBindError(f"Unknown binding key: {key}")
    if key in environ:
        origin = source_of(environ, key)
    elif descriptor.has_default:
        origin = DEFAULT_LAYER
    else:
        origin = "unset"
    lines = [
        f"{key} -> {descriptor.name} ({descriptor.type_name})",
        f"type: {descriptor.converter.describe()}",
        f"default: {descriptor.default if descriptor.has_default else '<none>'}",
        f"source: {origin}",
    ]
    if descriptor.comment:
        lines.append(f"comment: {descriptor.comment}")
    return "\n".join(lines)


def _warn_unknown_tool_variables(environ: Mapping[str, str]) -> None:
    for name in find_unknown(ENV_PREFIX, ToolSettings(), environ=environ):
        logger.warning("Ignoring unknown setting {}", name)


def main(argv: Sequence[str] | None = None, environ: Optional[Mapping[str, str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="envbind",
        description="Bind environment variables to a pydantic configuration model",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("spec", help="Configuration model as module:ClassName")
    parser.add_argument(
        "--env-file",
        nargs="?",
        const=DEFAULT_ENV_FILENAME,
        help="Layer a .env file under the process environment",
    )
    parser.add_argument("--log-level", help="Override ENVBIND_LOG_LEVEL")
    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument("--check", action="store_true", help="Resolve every field and print a status table")
    actions.add_argument(
        "--usage",
        nargs="?",
        const=TABLE_FORMAT,
        choices=[TABLE_FORMAT, LIST_FORMAT],
        help="Document the variables the model reads",
    )
    actions.add_argument("--unknown", metavar="PREFIX", help="List variables with PREFIX the model does not read")
    actions.add_argument("--explain", metavar="KEY", help="Explain where a binding key gets its value")

    args = parser.parse_args(argv)

    try:
        settings: ToolSettings = load_settings(environ)
        setup_logging(args.log_level or settings.log_level, debug=settings.debug)
        env_file = args.env_file or settings.env_file or None
        lookup = build_environment(environ, env_file)
        _warn_unknown_tool_variables(lookup)

        spec = load_spec(args.spec)
        if args.usage:
            usagef(spec, sys.stdout, args.usage)
            return 0
        if args.explain:
            print(_explain(spec, args.explain, lookup))
            return 0
        if args.unknown is not None:
            unknown = find_unknown(args.unknown, spec, environ=lookup)
            for name in unknown:
                print(name)
            return 1 if unknown else 0
        if args.check:
            report = resolve(spec, environ=lookup)
            report.pretty_print(sys.stdout)
            log_report(report, spec=args.spec)
            if report.error is not None:
                print(f"error: {report.error}", file=sys.stderr)
                return 1
            return 0
    except EnvBindError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI entry point
    raise SystemExit(main())
