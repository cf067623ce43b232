"""Render the resolved model as Go source files with jinja2 templates."""

from __future__ import annotations

from typing import Optional

from jinja2 import Environment, PackageLoader, StrictUndefined

from .model_types import FieldDef, GeneratedModel, Operation, ResolvedType, Shape, TypeRef
from .schema_model import TypeKey
from .xsd_types import go_string_literal

GENERATED_HEADER = "// Code generated by wsdl-to-go-generator. DO NOT EDIT."
SOAP_IMPORT = "github.com/hooklift/gowsdl/soap"

TYPES_FILE = "types.go"
OPERATIONS_FILE = "operations.go"

# soap package types whose XML marshaling must be delegated by named aliases.
_MARSHAL_DELEGATES = frozenset({"soap.XSDDateTime", "soap.XSDDate", "soap.XSDTime"})


def render_package(model: GeneratedModel, *, package_name: str) -> dict[str, str]:
    """Render every Go file of the generated package.

    Args:
        model (GeneratedModel): Resolved types and bound interfaces.
        package_name (str): Go package clause name.

    Returns:
        dict[str, str]: File name to Go source. ``operations.go`` is omitted when
        the input declares no port types.
    """
    files = {TYPES_FILE: render_types_module(model, package_name=package_name)}
    if model.interfaces:
        files[OPERATIONS_FILE] = render_operations_module(model, package_name=package_name)
    return files


def render_types_module(model: GeneratedModel, *, package_name: str) -> str:
    """Render ``types.go``: one declaration per resolved type, in canonical order."""
    types = model.graph.types
    return _ENVIRONMENT.get_template("types.go.j2").render(
        header=GENERATED_HEADER,
        package_name=package_name,
        imports=_types_imports(types),
        types=types,
    )


def render_operations_module(model: GeneratedModel, *, package_name: str) -> str:
    """Render ``operations.go``: an interface and SOAP client stub per port type."""
    return _ENVIRONMENT.get_template("operations.go.j2").render(
        header=GENERATED_HEADER,
        package_name=package_name,
        soap_import=SOAP_IMPORT,
        interfaces=model.interfaces,
    )


def _types_imports(types: tuple[ResolvedType, ...]) -> list[str]:
    uses_xml = False
    uses_soap = False
    for resolved in types:
        if resolved.is_struct and resolved.xml_name is not None:
            uses_xml = True
        if not resolved.is_struct and _marshal_delegate(resolved):
            uses_xml = True
        refs = [field.type_ref for field in resolved.fields]
        if resolved.underlying is not None:
            refs.append(resolved.underlying)
        if any(_mentions_soap(ref) for ref in refs):
            uses_soap = True

    imports = []
    if uses_xml:
        imports.append("encoding/xml")
    if uses_soap:
        imports.append(SOAP_IMPORT)
    return imports


def _mentions_soap(ref: TypeRef) -> bool:
    if ref.item is not None:
        return _mentions_soap(ref.item)
    return ref.name.startswith("soap.")


def _comment(text: str, indent: str = "") -> str:
    lines = text.strip().splitlines() or [""]
    return "\n".join(f"{indent}// {line.strip()}".rstrip() for line in lines)


def _single_line(text: str) -> str:
    return " ".join(text.split())


def _struct_tag(field: FieldDef) -> str:
    return f'`xml:"{field.xml_tag}" json:"{field.json_tag}"`'


def _xml_name_tag(key: TypeKey) -> str:
    if key.namespace:
        return f"{key.namespace} {key.name}"
    return key.name


def _marshal_delegate(resolved: ResolvedType) -> Optional[str]:
    underlying = resolved.underlying
    if underlying is None or underlying.shape is not Shape.SCALAR:
        return None
    return underlying.name if underlying.name in _MARSHAL_DELEGATES else None


def _pointer_to(ref: TypeRef) -> str:
    return f"*{ref.value_expression}"


def _signature(operation: Operation) -> str:
    parameters = "ctx context.Context"
    if operation.request is not None:
        parameters += f", request {_pointer_to(operation.request)}"
    results = "error"
    if operation.response is not None:
        results = f"({_pointer_to(operation.response)}, error)"
    return f"{operation.method_name}({parameters}) {results}"


_ENVIRONMENT = Environment(
    loader=PackageLoader("wsdl_to_go_generator", "templates"),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)
_ENVIRONMENT.filters.update(
    comment=_comment,
    single_line=_single_line,
    go_quote=go_string_literal,
    struct_tag=_struct_tag,
    xml_name_tag=_xml_name_tag,
    marshal_delegate=_marshal_delegate,
    signature=_signature,
)
