"""Parse ``xsd:schema`` elements into schema declarations."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Literal, Optional

from lxml import etree

from .errors import MalformedDocumentError
from .namespaces import XSD_NS, local_name, split_qname, xsd
from .schema_model import (
    AttributeDecl,
    ComplexTypeDecl,
    ElementDecl,
    EnumerationValue,
    ParticleGroup,
    SchemaDocument,
    SchemaReference,
    SimpleContent,
    SimpleTypeDecl,
    TypeKey,
)

log = logging.getLogger(__name__)

_COMPOSITORS: dict[str, Literal["sequence", "choice", "all"]] = {
    "sequence": "sequence",
    "choice": "choice",
    "all": "all",
}


@dataclass(frozen=True)
class _SchemaContext:
    location: str
    namespace: str
    unprefixed_namespace: str

    def where(self, element: etree._Element) -> str:
        return f"{self.location}:{element.sourceline}"

    def malformed(self, element: etree._Element, reason: str) -> MalformedDocumentError:
        return MalformedDocumentError(self.location, reason, line=element.sourceline)


def parse_schema(
    element: etree._Element,
    *,
    location: str,
    inherited_namespace: Optional[str] = None,
) -> SchemaDocument:
    """Parse one ``xsd:schema`` element.

    Args:
        element (etree._Element): The ``xsd:schema`` element.
        location (str): Location of the document that holds the schema.
        inherited_namespace (Optional[str]): Namespace adopted when the schema declares
            no ``targetNamespace`` (chameleon include or WSDL-embedded fragment).

    Returns:
        SchemaDocument: Top-level declarations in document order.
    """
    if element.tag != xsd("schema"):
        raise MalformedDocumentError(
            location, f"expected xsd:schema, found {element.tag}", line=element.sourceline
        )
    own_namespace = element.get("targetNamespace")
    namespace = own_namespace or inherited_namespace or ""
    context = _SchemaContext(
        location=location,
        namespace=namespace,
        unprefixed_namespace="" if own_namespace else namespace,
    )

    simple_types: list[SimpleTypeDecl] = []
    complex_types: list[ComplexTypeDecl] = []
    elements: list[ElementDecl] = []
    attributes: list[AttributeDecl] = []
    references: list[SchemaReference] = []

    for child in _xsd_children(element):
        kind = local_name(child.tag)
        if kind == "simpleType":
            simple_types.append(
                _parse_simple_type(child, context, name=_required_name(child, context))
            )
        elif kind == "complexType":
            complex_types.append(
                _parse_complex_type(child, context, name=_required_name(child, context))
            )
        elif kind == "element":
            elements.append(_parse_element(child, context, is_global=True))
        elif kind == "attribute":
            attributes.append(_parse_attribute(child, context, is_global=True))
        elif kind == "import":
            references.append(
                SchemaReference("import", child.get("namespace"), child.get("schemaLocation"))
            )
        elif kind in ("include", "redefine"):
            references.append(SchemaReference("include", namespace, child.get("schemaLocation")))

    return SchemaDocument(
        location=location,
        target_namespace=namespace,
        simple_types=tuple(simple_types),
        complex_types=tuple(complex_types),
        elements=tuple(elements),
        attributes=tuple(attributes),
        references=tuple(references),
    )


def _xsd_children(element: etree._Element) -> list[etree._Element]:
    return [
        child
        for child in element
        if isinstance(child.tag, str) and child.tag.startswith(f"{{{XSD_NS}}}")
    ]


def _required_name(element: etree._Element, context: _SchemaContext) -> str:
    name = element.get("name")
    if not name:
        raise context.malformed(element, f"top-level {local_name(element.tag)} without a name")
    return name


def _qname(
    element: etree._Element,
    attribute: str,
    context: _SchemaContext,
) -> Optional[TypeKey]:
    value = element.get(attribute)
    if not value:
        return None
    return _qname_value(element, value, context)


def _qname_value(element: etree._Element, value: str, context: _SchemaContext) -> TypeKey:
    namespace, name = split_qname(
        value, element.nsmap, default_namespace=context.unprefixed_namespace
    )
    if namespace is None:
        raise context.malformed(element, f"unknown namespace prefix in {value!r}")
    return TypeKey(namespace, name)


def _documentation(element: etree._Element) -> Optional[str]:
    texts: list[str] = []
    for annotation in element.iterchildren(xsd("annotation")):
        for doc in annotation.iterchildren(xsd("documentation")):
            text = "".join(doc.itertext()).strip()
            if text:
                texts.append(text)
    return "\n".join(texts) or None


def _parse_occurs(
    element: etree._Element,
    attribute: str,
    context: _SchemaContext,
) -> Optional[int]:
    raw = element.get(attribute)
    if raw is None:
        return 1
    if raw == "unbounded":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise context.malformed(element, f"invalid {attribute} value {raw!r}") from exc


def _parse_simple_type(
    element: etree._Element,
    context: _SchemaContext,
    *,
    name: Optional[str],
) -> SimpleTypeDecl:
    doc = _documentation(element)
    where = context.where(element)
    for child in _xsd_children(element):
        kind = local_name(child.tag)
        if kind == "restriction":
            inline = child.find(xsd("simpleType"))
            enumerations = tuple(
                EnumerationValue(value=facet.get("value", ""), doc=_documentation(facet))
                for facet in child.iterchildren(xsd("enumeration"))
            )
            return SimpleTypeDecl(
                name=name,
                namespace=context.namespace,
                location=where,
                variant="restriction",
                base=_qname(child, "base", context),
                inline_base=(
                    _parse_simple_type(inline, context, name=None) if inline is not None else None
                ),
                enumerations=enumerations,
                doc=doc,
            )
        if kind == "list":
            inline = child.find(xsd("simpleType"))
            return SimpleTypeDecl(
                name=name,
                namespace=context.namespace,
                location=where,
                variant="list",
                item_type=_qname(child, "itemType", context),
                inline_item=(
                    _parse_simple_type(inline, context, name=None) if inline is not None else None
                ),
                doc=doc,
            )
        if kind == "union":
            members = tuple(
                _qname_value(child, value, context)
                for value in (child.get("memberTypes") or "").split()
            )
            return SimpleTypeDecl(
                name=name,
                namespace=context.namespace,
                location=where,
                variant="union",
                member_types=members,
                doc=doc,
            )
    return SimpleTypeDecl(
        name=name, namespace=context.namespace, location=where, variant="empty", doc=doc
    )


def _parse_complex_type(
    element: etree._Element,
    context: _SchemaContext,
    *,
    name: Optional[str],
) -> ComplexTypeDecl:
    extension_base: Optional[TypeKey] = None
    restriction_base: Optional[TypeKey] = None
    simple_content: Optional[SimpleContent] = None
    body = element

    for child in _xsd_children(element):
        kind = local_name(child.tag)
        if kind == "complexContent":
            derivation = _derivation(child, context)
            if local_name(derivation.tag) == "extension":
                extension_base = _qname(derivation, "base", context)
            else:
                restriction_base = _qname(derivation, "base", context)
            body = derivation
        elif kind == "simpleContent":
            derivation = _derivation(child, context)
            base = _qname(derivation, "base", context)
            if base is None:
                raise context.malformed(derivation, "simpleContent derivation without base")
            simple_content = SimpleContent(
                base=base, attributes=tuple(_parse_attributes(derivation, context))
            )

    groups: list[ParticleGroup] = []
    has_any = False
    for child in _xsd_children(body):
        kind = local_name(child.tag)
        if kind in _COMPOSITORS:
            child_groups, child_any = _parse_particles(child, context, optional=False)
            groups.extend(child_groups)
            has_any = has_any or child_any
        elif kind == "group":
            log.warning("Model group reference at %s is not expanded", context.where(child))

    return ComplexTypeDecl(
        name=name,
        namespace=context.namespace,
        location=context.where(element),
        extension_base=extension_base,
        restriction_base=restriction_base,
        groups=tuple(groups),
        attributes=() if simple_content else tuple(_parse_attributes(body, context)),
        simple_content=simple_content,
        has_any=has_any,
        doc=_documentation(element),
    )


def _derivation(element: etree._Element, context: _SchemaContext) -> etree._Element:
    for child in _xsd_children(element):
        if local_name(child.tag) in ("extension", "restriction"):
            return child
    raise context.malformed(element, f"{local_name(element.tag)} without extension or restriction")


def _parse_particles(
    element: etree._Element,
    context: _SchemaContext,
    *,
    optional: bool,
) -> tuple[list[ParticleGroup], bool]:
    kind = _COMPOSITORS[local_name(element.tag)]
    optional = optional or kind == "choice" or element.get("minOccurs") == "0"
    groups: list[ParticleGroup] = []
    current: list[ElementDecl] = []
    has_any = False

    def flush() -> None:
        if current:
            groups.append(ParticleGroup(kind=kind, elements=tuple(current), optional=optional))
            current.clear()

    for child in _xsd_children(element):
        child_kind = local_name(child.tag)
        if child_kind == "element":
            current.append(_parse_element(child, context, is_global=False))
        elif child_kind in _COMPOSITORS:
            flush()
            nested, nested_any = _parse_particles(child, context, optional=optional)
            groups.extend(nested)
            has_any = has_any or nested_any
        elif child_kind == "any":
            has_any = True
        elif child_kind == "group":
            log.warning("Model group reference at %s is not expanded", context.where(child))
    flush()
    return groups, has_any


def _parse_element(
    element: etree._Element,
    context: _SchemaContext,
    *,
    is_global: bool,
) -> ElementDecl:
    name = element.get("name")
    ref = None if is_global else _qname(element, "ref", context)
    if not name and ref is None:
        scope = "top-level" if is_global else "local"
        raise context.malformed(element, f"{scope} element without name or ref")

    inline_type = None
    inline_complex = element.find(xsd("complexType"))
    inline_simple = element.find(xsd("simpleType"))
    if inline_complex is not None:
        inline_type = _parse_complex_type(inline_complex, context, name=None)
    elif inline_simple is not None:
        inline_type = _parse_simple_type(inline_simple, context, name=None)

    return ElementDecl(
        name=name,
        namespace=context.namespace,
        location=context.where(element),
        ref=ref,
        type_ref=_qname(element, "type", context),
        inline_type=inline_type,
        min_occurs=_parse_occurs(element, "minOccurs", context) or 0,
        max_occurs=_parse_occurs(element, "maxOccurs", context),
        nillable=element.get("nillable") in ("true", "1"),
        doc=_documentation(element),
    )


def _parse_attributes(element: etree._Element, context: _SchemaContext) -> list[AttributeDecl]:
    attributes: list[AttributeDecl] = []
    for child in _xsd_children(element):
        kind = local_name(child.tag)
        if kind == "attribute":
            attributes.append(_parse_attribute(child, context, is_global=False))
        elif kind == "attributeGroup":
            log.warning("Attribute group reference at %s is not expanded", context.where(child))
    return attributes


def _parse_attribute(
    element: etree._Element,
    context: _SchemaContext,
    *,
    is_global: bool,
) -> AttributeDecl:
    name = element.get("name")
    ref = None if is_global else _qname(element, "ref", context)
    if not name and ref is None:
        raise context.malformed(element, "attribute without name or ref")
    inline = element.find(xsd("simpleType"))
    return AttributeDecl(
        name=name,
        namespace=context.namespace,
        location=context.where(element),
        ref=ref,
        type_ref=_qname(element, "type", context),
        inline_type=_parse_simple_type(inline, context, name=None) if inline is not None else None,
        use=element.get("use", "optional"),
        doc=_documentation(element),
    )
