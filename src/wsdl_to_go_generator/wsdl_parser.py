"""Parse ``wsdl:definitions`` into messages, port types, bindings and services."""

from __future__ import annotations

from typing import Optional

from lxml import etree

from .errors import MalformedDocumentError
from .namespaces import SOAP_BINDING_NAMESPACES, WSDL_NS, split_qname, wsdl, xsd
from .schema_model import (
    BindingDecl,
    FaultDecl,
    MessageDecl,
    MessagePart,
    OperationDecl,
    PortDecl,
    PortTypeDecl,
    ServiceDecl,
    TypeKey,
    WSDLDefinitions,
)
from .schema_parser import parse_schema


def parse_wsdl(element: etree._Element, *, location: str) -> WSDLDefinitions:
    """Parse a WSDL 1.1 ``definitions`` element.

    Args:
        element (etree._Element): Root ``wsdl:definitions`` element.
        location (str): Location the document was loaded from.

    Returns:
        WSDLDefinitions: Embedded schemas and service description in document order.
    """
    if element.tag != wsdl("definitions"):
        raise MalformedDocumentError(
            location,
            f"expected wsdl:definitions (WSDL 1.1), found {element.tag}",
            line=element.sourceline,
        )
    namespace = element.get("targetNamespace", "")

    schemas = tuple(
        parse_schema(schema, location=location, inherited_namespace=namespace)
        for types in element.iterchildren(wsdl("types"))
        for schema in types.iterchildren(xsd("schema"))
    )
    return WSDLDefinitions(
        location=location,
        target_namespace=namespace,
        name=element.get("name"),
        schemas=schemas,
        messages=tuple(
            _parse_message(child, location, namespace)
            for child in element.iterchildren(wsdl("message"))
        ),
        port_types=tuple(
            _parse_port_type(child, location, namespace)
            for child in element.iterchildren(wsdl("portType"))
        ),
        bindings=tuple(
            _parse_binding(child, location, namespace)
            for child in element.iterchildren(wsdl("binding"))
        ),
        services=tuple(
            _parse_service(child, location, namespace)
            for child in element.iterchildren(wsdl("service"))
        ),
    )


def _name(element: etree._Element, location: str) -> str:
    name = element.get("name")
    if not name:
        raise MalformedDocumentError(
            location,
            f"{etree.QName(element).localname} without a name",
            line=element.sourceline,
        )
    return name


def _qname(
    element: etree._Element,
    attribute: str,
    location: str,
    namespace: str,
) -> Optional[TypeKey]:
    value = element.get(attribute)
    if not value:
        return None
    resolved_namespace, local = split_qname(value, element.nsmap, default_namespace=namespace)
    if resolved_namespace is None:
        raise MalformedDocumentError(
            location, f"unknown namespace prefix in {value!r}", line=element.sourceline
        )
    return TypeKey(resolved_namespace, local)


def _required_qname(
    element: etree._Element,
    attribute: str,
    location: str,
    namespace: str,
) -> TypeKey:
    key = _qname(element, attribute, location, namespace)
    if key is None:
        raise MalformedDocumentError(
            location,
            f"{etree.QName(element).localname} without {attribute}",
            line=element.sourceline,
        )
    return key


def _documentation(element: etree._Element) -> Optional[str]:
    texts = [
        "".join(doc.itertext()).strip() for doc in element.iterchildren(wsdl("documentation"))
    ]
    return "\n".join(text for text in texts if text) or None


def _parse_message(element: etree._Element, location: str, namespace: str) -> MessageDecl:
    parts = tuple(
        MessagePart(
            name=_name(part, location),
            element=_qname(part, "element", location, namespace),
            type_ref=_qname(part, "type", location, namespace),
        )
        for part in element.iterchildren(wsdl("part"))
    )
    return MessageDecl(
        key=TypeKey(namespace, _name(element, location)),
        parts=parts,
        location=f"{location}:{element.sourceline}",
    )


def _parse_port_type(element: etree._Element, location: str, namespace: str) -> PortTypeDecl:
    operations: list[OperationDecl] = []
    for operation in element.iterchildren(wsdl("operation")):
        input_node = operation.find(wsdl("input"))
        output_node = operation.find(wsdl("output"))
        operations.append(
            OperationDecl(
                name=_name(operation, location),
                location=f"{location}:{operation.sourceline}",
                input_message=(
                    _required_qname(input_node, "message", location, namespace)
                    if input_node is not None
                    else None
                ),
                output_message=(
                    _required_qname(output_node, "message", location, namespace)
                    if output_node is not None
                    else None
                ),
                faults=tuple(
                    FaultDecl(
                        name=_name(fault, location),
                        message=_required_qname(fault, "message", location, namespace),
                        doc=_documentation(fault),
                    )
                    for fault in operation.iterchildren(wsdl("fault"))
                ),
                doc=_documentation(operation),
            )
        )
    return PortTypeDecl(
        key=TypeKey(namespace, _name(element, location)),
        operations=tuple(operations),
        doc=_documentation(element),
    )


def _parse_binding(element: etree._Element, location: str, namespace: str) -> BindingDecl:
    operations: list[tuple[str, Optional[str]]] = []
    for operation in element.iterchildren(wsdl("operation")):
        soap_action: Optional[str] = None
        for child in operation:
            if not isinstance(child.tag, str):
                continue
            qname = etree.QName(child)
            if qname.namespace in SOAP_BINDING_NAMESPACES and qname.localname == "operation":
                soap_action = child.get("soapAction")
                break
        operations.append((_name(operation, location), soap_action))
    return BindingDecl(
        key=TypeKey(namespace, _name(element, location)),
        port_type=_required_qname(element, "type", location, namespace),
        location=f"{location}:{element.sourceline}",
        operations=tuple(operations),
    )


def _parse_service(element: etree._Element, location: str, namespace: str) -> ServiceDecl:
    ports: list[PortDecl] = []
    for port in element.iterchildren(wsdl("port")):
        address: Optional[str] = None
        for child in port:
            if not isinstance(child.tag, str):
                continue
            qname = etree.QName(child)
            if qname.namespace != WSDL_NS and qname.localname == "address":
                address = child.get("location")
                break
        ports.append(
            PortDecl(
                name=_name(port, location),
                binding=_required_qname(port, "binding", location, namespace),
                address=address,
            )
        )
    return ServiceDecl(name=_name(element, location), ports=tuple(ports))
