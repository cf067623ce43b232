"""Merge parsed schema documents into one namespace-aware declaration graph."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, TypeVar, Union

from .errors import DuplicateTypeDeclarationError
from .loader import LoadedDocuments
from .schema_model import (
    AttributeDecl,
    ComplexTypeDecl,
    ElementDecl,
    SchemaDocument,
    SimpleTypeDecl,
    TypeDeclaration,
    TypeKey,
    WSDLDefinitions,
)
from .schema_parser import parse_schema
from .wsdl_parser import parse_wsdl

_D = TypeVar("_D", bound=Union[SimpleTypeDecl, ComplexTypeDecl, ElementDecl, AttributeDecl])


@dataclass(frozen=True)
class ParsedDocuments:
    """Structured form of every loaded document."""

    definitions: Optional[WSDLDefinitions]
    schemas: tuple[SchemaDocument, ...]


@dataclass(frozen=True, eq=False)
class SchemaGraph:
    """Read-only index of every global declaration keyed by ``TypeKey``.

    Types, elements and attributes live in separate symbol spaces, as in XML Schema.
    Mapping iteration order is the canonical declaration order: entry document first,
    then schemas in load order, declarations in document order.
    """

    documents: tuple[SchemaDocument, ...]
    types: Mapping[TypeKey, TypeDeclaration]
    elements: Mapping[TypeKey, ElementDecl]
    attributes: Mapping[TypeKey, AttributeDecl]

    def element_type_users(self) -> Mapping[TypeKey, tuple[ElementDecl, ...]]:
        """Return, per named type, the global elements declared with that type in order."""
        users: dict[TypeKey, list[ElementDecl]] = {}
        for element in self.elements.values():
            if element.type_ref is not None:
                users.setdefault(element.type_ref, []).append(element)
        return {key: tuple(elements) for key, elements in users.items()}


def parse_documents(loaded: LoadedDocuments) -> ParsedDocuments:
    """Parse the loaded entry document and schemas.

    Args:
        loaded (LoadedDocuments): Output of the document loader.

    Returns:
        ParsedDocuments: WSDL definitions (``None`` for a bare XSD entry) and every
        schema document, embedded ones first.
    """
    root = loaded.root
    definitions: Optional[WSDLDefinitions] = None
    schemas: list[SchemaDocument] = []
    if root.is_schema:
        schemas.append(parse_schema(root.element, location=root.location))
    else:
        definitions = parse_wsdl(root.element, location=root.location)
        schemas.extend(definitions.schemas)

    for document in loaded.schemas:
        schemas.append(
            parse_schema(
                document.element,
                location=document.location,
                inherited_namespace=document.inherited_namespace,
            )
        )
    return ParsedDocuments(definitions=definitions, schemas=tuple(schemas))


def build_schema_graph(documents: Iterable[SchemaDocument]) -> SchemaGraph:
    """Merge schema documents into one graph, rejecting duplicate declarations.

    Args:
        documents (Iterable[SchemaDocument]): Schemas in canonical order.

    Returns:
        SchemaGraph: Immutable merged index.
    """
    ordered = tuple(documents)
    types: dict[TypeKey, TypeDeclaration] = {}
    elements: dict[TypeKey, ElementDecl] = {}
    attributes: dict[TypeKey, AttributeDecl] = {}

    for document in ordered:
        for simple_type in document.simple_types:
            _register(types, simple_type, "type")
        for complex_type in document.complex_types:
            _register(types, complex_type, "type")
        for element in document.elements:
            _register(elements, element, "element")
        for attribute in document.attributes:
            _register(attributes, attribute, "attribute")

    return SchemaGraph(
        documents=ordered,
        types=MappingProxyType(types),
        elements=MappingProxyType(elements),
        attributes=MappingProxyType(attributes),
    )


def _register(table: dict[TypeKey, _D], declaration: _D, kind: str) -> None:
    key = declaration.key
    if key is None:
        return
    existing = table.get(key)
    if existing is not None:
        raise DuplicateTypeDeclarationError(key, kind, existing.location, declaration.location)
    table[key] = declaration
