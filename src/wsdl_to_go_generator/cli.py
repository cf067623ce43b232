"""Command line interface for WSDL to Go generation."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pydantic import ValidationError

from .config import DEFAULT_NAMESPACE_ALIASES, load_namespace_aliases
from .generator import ConfigError, GenerationError, GeneratorOptions, WriteError, run_generation


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="wsdl-to-go-generator",
        description="Generate Go types and SOAP client stubs from a WSDL or XSD document",
    )
    parser.add_argument("--input", required=True, help="Path or HTTP(S) URL of a WSDL or XSD")
    parser.add_argument("--output", required=True, help="Output directory for the Go package")
    parser.add_argument("--package", default="myservice", help="Go package name")
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification when fetching remote documents",
    )
    parser.add_argument(
        "--no-make-public",
        dest="make_public",
        action="store_false",
        help="Generate unexported type and field names",
    )
    parser.add_argument(
        "--namespace-aliases",
        metavar="FILE",
        help="YAML mapping of namespace URI to a type name prefix",
    )
    parser.add_argument(
        "--strict-imports",
        action="store_true",
        help="Fail when an imported or included schema cannot be fetched",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of concurrent schema fetches",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        aliases = dict(DEFAULT_NAMESPACE_ALIASES)
        if args.namespace_aliases:
            aliases.update(load_namespace_aliases(Path(args.namespace_aliases)))
        options = GeneratorOptions(
            package_name=args.package,
            make_public=args.make_public,
            namespace_aliases=aliases,
            insecure=args.insecure,
            import_failure="error" if args.strict_imports else "warn",
            max_workers=args.workers,
        )
        result = run_generation(
            input_location=args.input,
            output_dir=Path(args.output),
            options=options,
        )
    except ValidationError as exc:
        parser.error(f"Invalid options: {exc}")
        return 2
    except (ConfigError, GenerationError, WriteError) as exc:
        parser.error(str(exc))
        return 2

    for warning in result.warnings:
        print(f"Warning: {warning}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
