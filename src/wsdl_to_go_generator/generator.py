"""High-level generator orchestration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

from .binder import OperationBinder
from .codegen import render_package
from .config import ConfigError, GeneratorOptions
from .errors import GenerationError
from .graph import build_schema_graph, parse_documents
from .loader import load_documents
from .model_types import GeneratedModel, GenerationResult, PortTypeInterface
from .resolver import TypeResolver
from .writer import WriteError, create_output_layout, format_generated_tree, write_package_files

log = logging.getLogger(__name__)


def build_model(
    location: str,
    options: Optional[GeneratorOptions] = None,
    *,
    session: Optional[requests.Session] = None,
) -> GeneratedModel:
    """Load, merge, resolve and bind a WSDL or XSD without writing any file.

    Args:
        location (str): Filesystem path or HTTP(S) URL of the entry document.
        options (Optional[GeneratorOptions]): Generation options; defaults apply when
            omitted.
        session (Optional[requests.Session]): HTTP session used for remote fetches.

    Returns:
        GeneratedModel: Resolved types, bound interfaces and collected warnings.
    """
    options = options or GeneratorOptions()
    loaded = load_documents(
        location,
        insecure=options.insecure,
        import_failure=options.import_failure,
        max_workers=options.max_workers,
        session=session,
    )
    parsed = parse_documents(loaded)
    graph = build_schema_graph(parsed.schemas)
    log.debug(
        "Schema graph: %d types, %d elements, %d attributes",
        len(graph.types),
        len(graph.elements),
        len(graph.attributes),
    )

    resolver = TypeResolver(
        graph,
        make_public=options.make_public,
        namespace_aliases=options.namespace_aliases,
    )
    resolved = resolver.resolve()

    interfaces: tuple[PortTypeInterface, ...] = ()
    binder_warnings: tuple[str, ...] = ()
    if parsed.definitions is not None:
        binder = OperationBinder(parsed.definitions, resolver)
        interfaces = binder.bind()
        binder_warnings = binder.warnings
        target_namespace = parsed.definitions.target_namespace
    else:
        target_namespace = parsed.schemas[0].target_namespace

    return GeneratedModel(
        graph=resolved,
        interfaces=interfaces,
        target_namespace=target_namespace,
        warnings=(*loaded.warnings, *resolver.warnings, *binder_warnings),
    )


def run_generation(
    *,
    input_location: str,
    output_dir: Path,
    options: Optional[GeneratorOptions] = None,
    session: Optional[requests.Session] = None,
) -> GenerationResult:
    """Generate a Go package from a WSDL or XSD document.

    Nothing is written unless the whole input loads, merges and resolves.

    Args:
        input_location (str): Filesystem path or HTTP(S) URL of the entry document.
        output_dir (Path): Directory receiving the ``<package>/`` directory.
        options (Optional[GeneratorOptions]): Generation options.
        session (Optional[requests.Session]): HTTP session used for remote fetches.

    Returns:
        GenerationResult: Package directory, written files and warnings.
    """
    options = options or GeneratorOptions()
    model = build_model(input_location, options, session=session)
    files = render_package(model, package_name=options.package_name)

    package_dir = create_output_layout(output_dir, package_name=options.package_name)
    written = write_package_files(package_dir=package_dir, files=files)
    format_generated_tree(package_dir=package_dir)

    return GenerationResult(
        output_dir=str(package_dir),
        files=tuple(str(path) for path in written),
        warnings=model.warnings,
    )


__all__ = [
    "ConfigError",
    "GenerationError",
    "GenerationResult",
    "GeneratorOptions",
    "WriteError",
    "build_model",
    "run_generation",
]
