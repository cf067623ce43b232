"""Resolved Go-facing datatypes produced by the resolver and binder."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

from .schema_model import TypeKey


class Shape(str, Enum):
    """How a Go type is spelled where it is used."""

    SCALAR = "scalar"
    POINTER = "pointer"
    SEQUENCE = "sequence"
    STRUCT = "struct"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class TypeRef:
    """A Go type expression for a field, alias target, request or response."""

    shape: Shape
    name: str = ""
    item: Optional[TypeRef] = None

    @classmethod
    def scalar(cls, name: str) -> TypeRef:
        return cls(Shape.SCALAR, name)

    @classmethod
    def pointer(cls, name: str) -> TypeRef:
        return cls(Shape.POINTER, name)

    @classmethod
    def struct(cls, name: str) -> TypeRef:
        return cls(Shape.STRUCT, name)

    @classmethod
    def sequence(cls, item: TypeRef) -> TypeRef:
        return cls(Shape.SEQUENCE, item.name, item)

    @classmethod
    def opaque(cls) -> TypeRef:
        return cls(Shape.OPAQUE, "interface{}")

    @property
    def expression(self) -> str:
        """Go spelling at a use site: structs and nillable scalars by pointer."""
        if self.shape is Shape.SEQUENCE and self.item is not None:
            return f"[]{self.item.expression}"
        if self.shape in (Shape.STRUCT, Shape.POINTER):
            return f"*{self.name}"
        return self.name

    @property
    def value_expression(self) -> str:
        """Go spelling without the outer pointer, as used on the right of ``type X ...``."""
        if self.shape in (Shape.STRUCT, Shape.POINTER):
            return self.name
        return self.expression


@dataclass(frozen=True)
class FieldDef:
    """Represents a single generated struct field."""

    name: str
    source_name: str
    type_ref: TypeRef
    kind: Literal["element", "attribute", "chardata", "any"]
    optional: bool
    doc: Optional[str] = None
    namespace: Optional[str] = None

    @property
    def xml_tag(self) -> str:
        if self.kind == "chardata":
            return ",chardata"
        if self.kind == "any":
            return ",any"
        if self.kind == "attribute":
            if self.namespace:
                return f"{self.namespace} {self.source_name},attr,omitempty"
            return f"{self.source_name},attr,omitempty"
        return f"{self.source_name},omitempty"

    @property
    def json_tag(self) -> str:
        if self.kind == "chardata":
            return "-"
        if self.kind == "any":
            return "items,omitempty"
        return f"{self.source_name},omitempty"


@dataclass(frozen=True)
class EnumConstant:
    """One Go constant generated for an enumeration facet."""

    name: str
    value: str
    doc: Optional[str] = None
    literal: str = ""


@dataclass(frozen=True)
class ResolvedType:
    """A named Go declaration: a struct, or an alias over a scalar, slice or opaque type."""

    name: str
    kind: Literal["struct", "alias"]
    shape: Shape
    origin: str
    key: Optional[TypeKey] = None
    underlying: Optional[TypeRef] = None
    fields: tuple[FieldDef, ...] = ()
    base: Optional[str] = None
    constants: tuple[EnumConstant, ...] = ()
    xml_name: Optional[TypeKey] = None
    doc: Optional[str] = None

    @property
    def is_struct(self) -> bool:
        return self.kind == "struct"


@dataclass(frozen=True, eq=False)
class ResolvedGraph:
    """Every generated Go declaration in canonical order, with lookups."""

    types: tuple[ResolvedType, ...]
    by_name: Mapping[str, ResolvedType]
    type_refs: Mapping[TypeKey, TypeRef]
    element_refs: Mapping[TypeKey, TypeRef]

    def get(self, name: str) -> ResolvedType:
        return self.by_name[name]

    def for_type(self, key: TypeKey) -> ResolvedType:
        """Return the declaration generated for a named schema type."""
        return self.by_name[self.type_refs[key].name]

    def for_element(self, key: TypeKey) -> Optional[ResolvedType]:
        """Return the declaration a global element resolves to, if it has a named one."""
        ref = self.element_refs[key]
        return self.by_name.get(ref.name)

    def flattened_fields(self, name: str) -> tuple[FieldDef, ...]:
        """Return inherited fields (base chain first) followed by the type's own fields."""
        chain: list[ResolvedType] = []
        visiting: set[str] = set()
        current: Optional[ResolvedType] = self.by_name.get(name)
        while current is not None and current.name not in visiting:
            visiting.add(current.name)
            chain.append(current)
            current = self.by_name.get(current.base) if current.base else None
        fields: list[FieldDef] = []
        for resolved in reversed(chain):
            fields.extend(resolved.fields)
        return tuple(fields)


@dataclass(frozen=True)
class FaultRef:
    """A fault declared by an operation, bound to its detail type."""

    name: str
    type_ref: Optional[TypeRef]
    doc: Optional[str] = None


@dataclass(frozen=True)
class Operation:
    """A port type operation bound to its request and response types."""

    name: str
    method_name: str
    request: Optional[TypeRef]
    response: Optional[TypeRef]
    faults: tuple[FaultRef, ...]
    soap_action: str
    doc: Optional[str] = None


@dataclass(frozen=True)
class PortTypeInterface:
    """One Go interface, implementation struct and constructor per WSDL port type."""

    name: str
    implementation_name: str
    constructor_name: str
    operations: tuple[Operation, ...]
    endpoints: tuple[str, ...] = ()
    doc: Optional[str] = None


@dataclass(frozen=True)
class GeneratedModel:
    """Fully resolved input for the code emitter."""

    graph: ResolvedGraph
    interfaces: tuple[PortTypeInterface, ...]
    target_namespace: str
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class GenerationResult:
    """Generation output metadata."""

    output_dir: str
    files: tuple[str, ...]
    warnings: tuple[str, ...]
