"""Resolve schema declarations to named Go types."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
import logging
from types import MappingProxyType
from typing import Optional

from .errors import (
    EnumNameCollisionError,
    InvalidEnumerationValueError,
    UnresolvableReferenceError,
)
from .graph import SchemaGraph
from .model_types import (
    EnumConstant,
    FieldDef,
    ResolvedGraph,
    ResolvedType,
    Shape,
    TypeRef,
)
from .namespaces import XML_NS
from .naming import (
    NameRegistry,
    apply_casing,
    enum_suffix,
    go_identifier,
    namespaced_identifier,
    pascal_case,
    sanitize_identifier,
    unique_name,
)
from .schema_model import (
    AttributeDecl,
    ComplexTypeDecl,
    ElementDecl,
    SimpleTypeDecl,
    TypeKey,
)
from .xsd_types import (
    BYTE_SEQUENCE,
    builtin_go_type,
    go_constant_literal,
    is_builtin,
    is_constant_type,
)

log = logging.getLogger(__name__)

# Package-level names the emitted Go files already use for imports.
_IMPORTED_PACKAGE_NAMES = ("context", "soap", "xml")

_STRING = TypeRef.scalar("string")


class TypeResolver:
    """Assign Go names to every schema declaration and resolve references between them.

    Names are allocated once, in canonical graph order, when the resolver is created.
    Resolution afterwards is a pure lookup over the immutable graph, so the result
    does not depend on which reference happens to be resolved first.
    """

    def __init__(
        self,
        graph: SchemaGraph,
        *,
        make_public: bool = True,
        namespace_aliases: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._graph = graph
        self._make_public = make_public
        self._aliases = dict(namespace_aliases or {})
        self._registry = NameRegistry(reserved=_IMPORTED_PACKAGE_NAMES)
        self._type_names: dict[TypeKey, str] = {}
        self._element_names: dict[TypeKey, str] = {}
        self._inline_names: dict[int, str] = {}
        self._enum_owners: list[tuple[SimpleTypeDecl, str]] = []
        self._constants: dict[int, tuple[EnumConstant, ...]] = {}
        self._element_users = graph.element_type_users()
        self._warnings: list[str] = []
        self._resolved: Optional[ResolvedGraph] = None
        self._emitted_inline: set[int] = set()
        self._allocate_names()

    @property
    def make_public(self) -> bool:
        return self._make_public

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(self._warnings)

    def name_registry(self) -> NameRegistry:
        """Return a copy of the package-level names taken by generated types and constants."""
        return self._registry.fork()

    def resolve(self) -> ResolvedGraph:
        """Resolve every global declaration of the graph.

        Returns:
            ResolvedGraph: Generated declarations in canonical order.

        Raises:
            UnresolvableReferenceError: If any reference has no declaration.
        """
        if self._resolved is not None:
            return self._resolved

        types: list[ResolvedType] = []
        for key, declaration in self._graph.types.items():
            name = self._type_names[key]
            if isinstance(declaration, SimpleTypeDecl):
                types.append(
                    self._simple_alias(name, declaration, origin=f"simpleType {key}", key=key)
                )
                continue
            users = self._element_users.get(key, ())
            types.extend(
                self._resolve_complex(
                    name,
                    declaration,
                    origin=f"complexType {key}",
                    key=key,
                    xml_name=users[0].key if len(users) == 1 else None,
                )
            )
        for key, element in self._graph.elements.items():
            types.extend(self._resolve_global_element(key, element))

        self._resolved = ResolvedGraph(
            types=tuple(types),
            by_name=MappingProxyType({resolved.name: resolved for resolved in types}),
            type_refs=MappingProxyType(
                {key: self.type_ref(key, referenced_from=str(key)) for key in self._graph.types}
            ),
            element_refs=MappingProxyType(
                {
                    key: self.element_ref(key, referenced_from=str(key))
                    for key in self._graph.elements
                }
            ),
        )
        log.debug("Resolved %d Go declarations", len(types))
        return self._resolved

    def type_ref(
        self,
        key: TypeKey,
        *,
        nillable: bool = False,
        referenced_from: str = "",
    ) -> TypeRef:
        """Return how a named schema type is spelled where it is used.

        Args:
            key (TypeKey): Referenced type.
            referenced_from (str): Location reported when the type does not exist.
            nillable (bool): Whether the use site admits ``xsi:nil``.

        Returns:
            TypeRef: Go type expression for the use site.
        """
        if is_builtin(key):
            go_type = builtin_go_type(key)
            if go_type is None:
                return TypeRef.opaque()
            if nillable and go_type != BYTE_SEQUENCE:
                return TypeRef.pointer(go_type)
            return TypeRef.scalar(go_type)

        declaration = self._graph.types.get(key)
        if declaration is None:
            raise UnresolvableReferenceError(key, "type", referenced_from)
        name = self._type_names[key]
        if isinstance(declaration, ComplexTypeDecl) and not self._is_scalar_complex(declaration):
            return TypeRef.struct(name)
        return TypeRef.pointer(name) if nillable else TypeRef.scalar(name)

    def element_ref(self, key: TypeKey, *, referenced_from: str = "") -> TypeRef:
        """Return the Go type a global element resolves to."""
        element = self._graph.elements.get(key)
        if element is None:
            raise UnresolvableReferenceError(key, "element", referenced_from)
        name = self._element_names.get(key)
        if name is None:
            assert element.type_ref is not None
            return self.type_ref(element.type_ref, referenced_from=element.location)

        inline = element.inline_type
        if isinstance(inline, ComplexTypeDecl):
            if self._is_scalar_complex(inline):
                return TypeRef.scalar(name)
            return TypeRef.struct(name)
        if inline is None and element.type_ref is not None:
            target = self.type_ref(element.type_ref, referenced_from=element.location)
            if target.shape is Shape.STRUCT:
                return TypeRef.struct(name)
        return TypeRef.scalar(name)

    # Naming pass

    def _allocate_names(self) -> None:
        for key in self._graph.types:
            self._type_names[key] = self._registry.claim(
                self._package_identifier(key), owner=f"type {key}"
            )

        for key, element in self._graph.elements.items():
            desired = self._package_identifier(key)
            if (
                element.inline_type is None
                and element.type_ref is not None
                and not is_builtin(element.type_ref)
                and self._type_names.get(element.type_ref) == desired
            ):
                continue
            self._element_names[key] = self._registry.claim(desired, owner=f"element {key}")

        for key, declaration in self._graph.types.items():
            name = self._type_names[key]
            if isinstance(declaration, SimpleTypeDecl):
                self._note_enumeration(declaration, name)
            else:
                self._name_nested(declaration, name)
        for key, element in self._graph.elements.items():
            name = self._element_names.get(key)
            if name is None:
                continue
            if isinstance(element.inline_type, ComplexTypeDecl):
                self._name_nested(element.inline_type, name)
            elif isinstance(element.inline_type, SimpleTypeDecl):
                self._note_enumeration(element.inline_type, name)

        for declaration, type_name in self._enum_owners:
            self._constants[id(declaration)] = self._allocate_constants(declaration, type_name)

    def _package_identifier(self, key: TypeKey) -> str:
        return namespaced_identifier(
            key.name, key.namespace, self._aliases, make_public=self._make_public
        )

    def _name_nested(self, declaration: ComplexTypeDecl, owner_name: str) -> None:
        for group in declaration.groups:
            for element in group.elements:
                inline = element.inline_type
                if element.name is None or inline is None:
                    continue
                if isinstance(inline, ComplexTypeDecl):
                    nested_name = self._claim_inline(owner_name, element.name)
                    self._inline_names[id(inline)] = nested_name
                    self._name_nested(inline, nested_name)
                elif inline.enumerations:
                    nested_name = self._claim_inline(owner_name, element.name)
                    self._inline_names[id(inline)] = nested_name
                    self._note_enumeration(inline, nested_name)
        for attribute in _declared_attributes(declaration):
            inline = attribute.inline_type
            if attribute.name and inline is not None and inline.enumerations:
                nested_name = self._claim_inline(owner_name, attribute.name)
                self._inline_names[id(inline)] = nested_name
                self._note_enumeration(inline, nested_name)

    def _claim_inline(self, owner_name: str, member_name: str) -> str:
        suffix = pascal_case(sanitize_identifier(member_name)) or "Value"
        return self._registry.claim(
            f"{owner_name}{suffix}", owner=f"anonymous type of {owner_name}.{member_name}"
        )

    def _note_enumeration(self, declaration: SimpleTypeDecl, type_name: str) -> None:
        if declaration.variant == "restriction" and declaration.enumerations:
            self._enum_owners.append((declaration, type_name))

    def _allocate_constants(
        self,
        declaration: SimpleTypeDecl,
        type_name: str,
    ) -> tuple[EnumConstant, ...]:
        constants: list[EnumConstant] = []
        seen_values: set[str] = set()
        for facet in declaration.enumerations:
            if facet.value in seen_values:
                continue
            seen_values.add(facet.value)
            name = apply_casing(
                f"{type_name}{enum_suffix(facet.value)}", make_public=self._make_public
            )
            existing = self._registry.claim_exact(
                name, owner=f"enumeration value {facet.value!r} of {type_name}"
            )
            if existing is not None:
                raise EnumNameCollisionError(name, facet.value, existing)
            constants.append(EnumConstant(name=name, value=facet.value, doc=facet.doc))
        return tuple(constants)

    # Resolution

    def _resolve_global_element(self, key: TypeKey, element: ElementDecl) -> list[ResolvedType]:
        name = self._element_names.get(key)
        if name is None:
            return []
        origin = f"element {key}"
        inline = element.inline_type
        if isinstance(inline, ComplexTypeDecl):
            return self._resolve_complex(
                name, inline, origin=origin, xml_name=key, doc=element.doc or inline.doc
            )
        if isinstance(inline, SimpleTypeDecl):
            return [self._simple_alias(name, inline, origin=origin, doc=element.doc)]
        if element.type_ref is None:
            target = TypeRef.opaque()
        else:
            target = self.type_ref(element.type_ref, referenced_from=element.location)
        return [
            ResolvedType(
                name=name,
                kind="alias",
                shape=target.shape,
                origin=origin,
                underlying=target,
                xml_name=key,
                doc=element.doc,
            )
        ]

    def _simple_alias(
        self,
        name: str,
        declaration: SimpleTypeDecl,
        *,
        origin: str,
        key: Optional[TypeKey] = None,
        doc: Optional[str] = None,
    ) -> ResolvedType:
        underlying = self._simple_underlying(declaration, start=key)
        return ResolvedType(
            name=name,
            kind="alias",
            shape=underlying.shape,
            origin=origin,
            key=key,
            underlying=underlying,
            constants=self._typed_constants(
                name, underlying, self._constants.get(id(declaration), ())
            ),
            doc=doc or declaration.doc,
        )

    def _typed_constants(
        self,
        type_name: str,
        underlying: TypeRef,
        constants: tuple[EnumConstant, ...],
    ) -> tuple[EnumConstant, ...]:
        """Spell each constant as a literal of the enumeration's terminal scalar."""
        if not constants:
            return ()
        go_type = underlying.name
        if underlying.shape is not Shape.SCALAR or not is_constant_type(go_type):
            message = (
                f"Enumeration {type_name} over {underlying.expression} cannot be declared "
                "as Go constants; constants omitted"
            )
            log.warning(message)
            self._warnings.append(message)
            return ()
        typed: list[EnumConstant] = []
        for constant in constants:
            try:
                literal = go_constant_literal(constant.value, go_type)
            except ValueError as exc:
                raise InvalidEnumerationValueError(
                    type_name, constant.value, go_type, str(exc)
                ) from exc
            typed.append(replace(constant, literal=literal))
        return tuple(typed)

    def _simple_underlying(
        self,
        declaration: SimpleTypeDecl,
        *,
        start: Optional[TypeKey] = None,
    ) -> TypeRef:
        if declaration.variant == "restriction":
            if declaration.base is not None:
                return self._terminal(
                    declaration.base,
                    referenced_from=declaration.location,
                    visiting=[start] if start is not None else [],
                )
            if declaration.inline_base is not None:
                return self._simple_underlying(declaration.inline_base)
            return TypeRef.opaque()
        if declaration.variant == "list":
            if declaration.item_type is not None:
                item = self.type_ref(declaration.item_type, referenced_from=declaration.location)
            elif declaration.inline_item is not None:
                item = self._simple_underlying(declaration.inline_item)
            else:
                item = _STRING
            return TypeRef.sequence(item)
        if declaration.variant == "union":
            return _STRING
        return TypeRef.opaque()

    def _terminal(
        self,
        key: TypeKey,
        *,
        referenced_from: str,
        visiting: list[TypeKey],
    ) -> TypeRef:
        """Follow an alias chain to a built-in, a list, a struct or a cycle."""
        current = key
        while True:
            if is_builtin(current):
                return self.type_ref(current, referenced_from=referenced_from)
            if current in visiting:
                message = (
                    f"Alias cycle through {current} (from {referenced_from}); "
                    "using interface{}"
                )
                log.warning(message)
                self._warnings.append(message)
                return TypeRef.opaque()
            visiting.append(current)

            declaration = self._graph.types.get(current)
            if declaration is None:
                raise UnresolvableReferenceError(current, "type", referenced_from)
            referenced_from = declaration.location
            if isinstance(declaration, ComplexTypeDecl):
                if declaration.simple_content is None:
                    return TypeRef.struct(self._type_names[current])
                current = declaration.simple_content.base
            elif declaration.variant == "restriction" and declaration.base is not None:
                current = declaration.base
            else:
                return self._simple_underlying(declaration)

    def _is_scalar_complex(self, declaration: ComplexTypeDecl) -> bool:
        if declaration.simple_content is None:
            return False
        return not self._simple_content_attributes(declaration)

    def _simple_content_attributes(self, declaration: ComplexTypeDecl) -> list[AttributeDecl]:
        """Collect attributes along a simple-content derivation chain, base first."""
        chain: list[ComplexTypeDecl] = []
        seen: set[TypeKey] = set()
        current: Optional[ComplexTypeDecl] = declaration
        while current is not None and current.simple_content is not None:
            chain.append(current)
            base = current.simple_content.base
            candidate = self._graph.types.get(base)
            if base in seen or not isinstance(candidate, ComplexTypeDecl):
                break
            seen.add(base)
            current = candidate

        attributes: dict[str, AttributeDecl] = {}
        for item in reversed(chain):
            assert item.simple_content is not None
            for attribute in item.simple_content.attributes:
                attributes[_attribute_name(attribute)] = attribute
        return list(attributes.values())

    def _resolve_complex(
        self,
        name: str,
        declaration: ComplexTypeDecl,
        *,
        origin: str,
        key: Optional[TypeKey] = None,
        xml_name: Optional[TypeKey] = None,
        doc: Optional[str] = None,
    ) -> list[ResolvedType]:
        """Resolve a complex type to a struct, followed by its anonymous nested types."""
        doc = doc or declaration.doc
        nested: list[ResolvedType] = []
        fields: list[FieldDef] = []
        used: set[str] = {"XMLName"} if xml_name is not None else set()
        base_name: Optional[str] = None

        if declaration.simple_content is not None:
            value = self._terminal(
                declaration.simple_content.base,
                referenced_from=declaration.location,
                visiting=[key] if key is not None else [],
            )
            attributes = self._simple_content_attributes(declaration)
            if not attributes:
                return [
                    ResolvedType(
                        name=name,
                        kind="alias",
                        shape=value.shape,
                        origin=origin,
                        key=key,
                        underlying=value,
                        xml_name=xml_name,
                        doc=doc,
                    )
                ]
            fields.append(self._value_field(value, used))
        else:
            attributes = list(declaration.attributes)
            if declaration.restriction_base is not None:
                self.type_ref(declaration.restriction_base, referenced_from=declaration.location)
            if declaration.extension_base is not None:
                base_ref = self.type_ref(
                    declaration.extension_base, referenced_from=declaration.location
                )
                if base_ref.shape is Shape.STRUCT:
                    base_name = base_ref.name
                elif base_ref.shape is not Shape.OPAQUE:
                    value = self._terminal(
                        declaration.extension_base,
                        referenced_from=declaration.location,
                        visiting=[key] if key is not None else [],
                    )
                    fields.append(self._value_field(value, used))
            for group in declaration.groups:
                for element in group.elements:
                    fields.append(
                        self._element_field(
                            element,
                            owner=name,
                            group_optional=group.optional,
                            used=used,
                            nested=nested,
                        )
                    )
            if declaration.has_any:
                items_name = unique_name(apply_casing("Items", make_public=self._make_public), used)
                used.add(items_name)
                fields.append(
                    FieldDef(
                        name=items_name,
                        source_name="",
                        type_ref=TypeRef.sequence(_STRING),
                        kind="any",
                        optional=True,
                    )
                )

        for attribute in attributes:
            fields.append(
                self._attribute_field(attribute, owner=name, used=used, nested=nested)
            )

        struct = ResolvedType(
            name=name,
            kind="struct",
            shape=Shape.STRUCT,
            origin=origin,
            key=key,
            fields=tuple(fields),
            base=base_name,
            xml_name=xml_name,
            doc=doc,
        )
        return [struct, *nested]

    def _value_field(self, value: TypeRef, used: set[str]) -> FieldDef:
        field_name = unique_name(apply_casing("Value", make_public=self._make_public), used)
        used.add(field_name)
        return FieldDef(
            name=field_name,
            source_name="",
            type_ref=value,
            kind="chardata",
            optional=False,
        )

    def _element_field(
        self,
        element: ElementDecl,
        *,
        owner: str,
        group_optional: bool,
        used: set[str],
        nested: list[ResolvedType],
    ) -> FieldDef:
        doc = element.doc
        if element.ref is not None:
            target = self._graph.elements.get(element.ref)
            if target is None:
                raise UnresolvableReferenceError(element.ref, "element", element.location)
            source_name = element.ref.name
            value = self.element_ref(element.ref, referenced_from=element.location)
            doc = doc or target.doc
        else:
            source_name = element.name or ""
            value = self._local_element_ref(element, owner=owner, nested=nested)

        if (
            element.nillable
            and value.shape is Shape.SCALAR
            and value.name != BYTE_SEQUENCE
        ):
            value = TypeRef.pointer(value.name)
        if element.is_sequence:
            value = TypeRef.sequence(value)

        field_name = unique_name(go_identifier(source_name, make_public=self._make_public), used)
        used.add(field_name)
        return FieldDef(
            name=field_name,
            source_name=source_name,
            type_ref=value,
            kind="element",
            optional=group_optional or element.min_occurs == 0 or element.nillable,
            doc=doc,
        )

    def _local_element_ref(
        self,
        element: ElementDecl,
        *,
        owner: str,
        nested: list[ResolvedType],
    ) -> TypeRef:
        if element.type_ref is not None:
            return self.type_ref(element.type_ref, referenced_from=element.location)
        inline = element.inline_type
        if isinstance(inline, ComplexTypeDecl):
            nested_name = self._inline_names[id(inline)]
            resolved = self._resolve_complex(
                nested_name,
                inline,
                origin=f"anonymous complexType of {owner}.{element.name}",
            )
            nested.extend(resolved)
            if resolved[0].is_struct:
                return TypeRef.struct(nested_name)
            return TypeRef.scalar(nested_name)
        if isinstance(inline, SimpleTypeDecl):
            return self._inline_simple_ref(inline, owner=owner, member=element.name, nested=nested)
        return TypeRef.opaque()

    def _inline_simple_ref(
        self,
        declaration: SimpleTypeDecl,
        *,
        owner: str,
        member: Optional[str],
        nested: list[ResolvedType],
    ) -> TypeRef:
        nested_name = self._inline_names.get(id(declaration))
        if nested_name is None:
            return self._simple_underlying(declaration)
        if id(declaration) not in self._emitted_inline:
            self._emitted_inline.add(id(declaration))
            nested.append(
                self._simple_alias(
                    nested_name, declaration, origin=f"anonymous simpleType of {owner}.{member}"
                )
            )
        return TypeRef.scalar(nested_name)

    def _attribute_field(
        self,
        attribute: AttributeDecl,
        *,
        owner: str,
        used: set[str],
        nested: list[ResolvedType],
    ) -> FieldDef:
        declaration = attribute
        if attribute.ref is not None and attribute.ref.namespace != XML_NS:
            target = self._graph.attributes.get(attribute.ref)
            if target is None:
                raise UnresolvableReferenceError(attribute.ref, "attribute", attribute.location)
            declaration = target

        source_name = _attribute_name(attribute)
        namespace: Optional[str] = None
        if attribute.ref is not None and attribute.ref.namespace == XML_NS:
            namespace = XML_NS
            value = _STRING
        elif declaration.type_ref is not None:
            value = self.type_ref(declaration.type_ref, referenced_from=declaration.location)
        elif declaration.inline_type is not None:
            value = self._inline_simple_ref(
                declaration.inline_type, owner=owner, member=source_name, nested=nested
            )
        else:
            value = _STRING

        field_name = unique_name(go_identifier(source_name, make_public=self._make_public), used)
        used.add(field_name)
        return FieldDef(
            name=field_name,
            source_name=source_name,
            type_ref=value,
            kind="attribute",
            optional=attribute.use != "required",
            doc=attribute.doc or declaration.doc,
            namespace=namespace,
        )


def _declared_attributes(declaration: ComplexTypeDecl) -> tuple[AttributeDecl, ...]:
    if declaration.simple_content is not None:
        return declaration.simple_content.attributes
    return declaration.attributes


def _attribute_name(attribute: AttributeDecl) -> str:
    if attribute.ref is not None:
        return attribute.ref.name
    return attribute.name or ""
