"""Parsed XML Schema and WSDL declarations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union


@dataclass(frozen=True, order=True)
class TypeKey:
    """Identity of a schema declaration: namespace URI plus local name."""

    namespace: str
    name: str

    def __str__(self) -> str:
        if self.namespace:
            return f"{{{self.namespace}}}{self.name}"
        return self.name


@dataclass(frozen=True)
class EnumerationValue:
    """One ``xsd:enumeration`` facet."""

    value: str
    doc: Optional[str] = None


@dataclass(frozen=True)
class SimpleTypeDecl:
    """A named or anonymous ``xsd:simpleType``."""

    name: Optional[str]
    namespace: str
    location: str
    variant: Literal["restriction", "list", "union", "empty"]
    base: Optional[TypeKey] = None
    inline_base: Optional[SimpleTypeDecl] = None
    enumerations: tuple[EnumerationValue, ...] = ()
    item_type: Optional[TypeKey] = None
    inline_item: Optional[SimpleTypeDecl] = None
    member_types: tuple[TypeKey, ...] = ()
    doc: Optional[str] = None

    @property
    def key(self) -> Optional[TypeKey]:
        return TypeKey(self.namespace, self.name) if self.name else None


@dataclass(frozen=True)
class AttributeDecl:
    """An ``xsd:attribute`` declaration or reference."""

    name: Optional[str]
    namespace: str
    location: str
    ref: Optional[TypeKey] = None
    type_ref: Optional[TypeKey] = None
    inline_type: Optional[SimpleTypeDecl] = None
    use: str = "optional"
    doc: Optional[str] = None

    @property
    def key(self) -> Optional[TypeKey]:
        return TypeKey(self.namespace, self.name) if self.name else None


@dataclass(frozen=True)
class SimpleContent:
    """Character data content of a complex type plus its attributes."""

    base: TypeKey
    attributes: tuple[AttributeDecl, ...] = ()


@dataclass(frozen=True)
class ElementDecl:
    """An ``xsd:element`` declaration, global or local."""

    name: Optional[str]
    namespace: str
    location: str
    ref: Optional[TypeKey] = None
    type_ref: Optional[TypeKey] = None
    inline_type: Optional[TypeDeclaration] = None
    min_occurs: int = 1
    max_occurs: Optional[int] = 1
    nillable: bool = False
    doc: Optional[str] = None

    @property
    def key(self) -> Optional[TypeKey]:
        return TypeKey(self.namespace, self.name) if self.name else None

    @property
    def is_sequence(self) -> bool:
        return self.max_occurs is None or self.max_occurs > 1


@dataclass(frozen=True)
class ParticleGroup:
    """An ordered ``sequence``, ``choice`` or ``all`` group of elements."""

    kind: Literal["sequence", "choice", "all"]
    elements: tuple[ElementDecl, ...]
    optional: bool = False


@dataclass(frozen=True)
class ComplexTypeDecl:
    """A named or anonymous ``xsd:complexType``."""

    name: Optional[str]
    namespace: str
    location: str
    extension_base: Optional[TypeKey] = None
    restriction_base: Optional[TypeKey] = None
    groups: tuple[ParticleGroup, ...] = ()
    attributes: tuple[AttributeDecl, ...] = ()
    simple_content: Optional[SimpleContent] = None
    has_any: bool = False
    doc: Optional[str] = None

    @property
    def key(self) -> Optional[TypeKey]:
        return TypeKey(self.namespace, self.name) if self.name else None


type TypeDeclaration = Union[SimpleTypeDecl, ComplexTypeDecl]


@dataclass(frozen=True)
class SchemaReference:
    """An ``xsd:import`` or ``xsd:include`` pointer."""

    kind: Literal["import", "include"]
    namespace: Optional[str]
    location: Optional[str]


@dataclass(frozen=True)
class SchemaDocument:
    """One parsed schema, standalone or embedded in a WSDL document."""

    location: str
    target_namespace: str
    simple_types: tuple[SimpleTypeDecl, ...] = ()
    complex_types: tuple[ComplexTypeDecl, ...] = ()
    elements: tuple[ElementDecl, ...] = ()
    attributes: tuple[AttributeDecl, ...] = ()
    references: tuple[SchemaReference, ...] = ()


@dataclass(frozen=True)
class MessagePart:
    """A ``wsdl:part``; document style parts carry ``element``, rpc style ``type``."""

    name: str
    element: Optional[TypeKey] = None
    type_ref: Optional[TypeKey] = None


@dataclass(frozen=True)
class MessageDecl:
    """A ``wsdl:message``."""

    key: TypeKey
    parts: tuple[MessagePart, ...]
    location: str


@dataclass(frozen=True)
class FaultDecl:
    """A ``wsdl:fault`` inside a port type operation."""

    name: str
    message: TypeKey
    doc: Optional[str] = None


@dataclass(frozen=True)
class OperationDecl:
    """A ``wsdl:operation`` inside a port type."""

    name: str
    location: str
    input_message: Optional[TypeKey] = None
    output_message: Optional[TypeKey] = None
    faults: tuple[FaultDecl, ...] = ()
    doc: Optional[str] = None


@dataclass(frozen=True)
class PortTypeDecl:
    """A ``wsdl:portType``."""

    key: TypeKey
    operations: tuple[OperationDecl, ...]
    doc: Optional[str] = None


@dataclass(frozen=True)
class BindingDecl:
    """A ``wsdl:binding`` with the SOAP action declared for each operation."""

    key: TypeKey
    port_type: TypeKey
    location: str
    operations: tuple[tuple[str, Optional[str]], ...] = ()

    def declares(self, operation_name: str) -> bool:
        return any(name == operation_name for name, _ in self.operations)

    def soap_action(self, operation_name: str) -> Optional[str]:
        """Return the declared SOAP action of an operation, if any."""
        for name, action in self.operations:
            if name == operation_name:
                return action
        return None


@dataclass(frozen=True)
class PortDecl:
    """A ``wsdl:port`` inside a service."""

    name: str
    binding: TypeKey
    address: Optional[str] = None


@dataclass(frozen=True)
class ServiceDecl:
    """A ``wsdl:service``."""

    name: str
    ports: tuple[PortDecl, ...]


@dataclass(frozen=True)
class WSDLDefinitions:
    """Parsed ``wsdl:definitions`` root."""

    location: str
    target_namespace: str
    name: Optional[str] = None
    schemas: tuple[SchemaDocument, ...] = ()
    messages: tuple[MessageDecl, ...] = ()
    port_types: tuple[PortTypeDecl, ...] = ()
    bindings: tuple[BindingDecl, ...] = ()
    services: tuple[ServiceDecl, ...] = ()
