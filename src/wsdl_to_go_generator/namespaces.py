"""Well-known XML namespaces and qualified-name helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

XSD_NS = "http://www.w3.org/2001/XMLSchema"
XML_NS = "http://www.w3.org/XML/1998/namespace"
WSDL_NS = "http://schemas.xmlsoap.org/wsdl/"
SOAP11_NS = "http://schemas.xmlsoap.org/wsdl/soap/"
SOAP12_NS = "http://schemas.xmlsoap.org/wsdl/soap12/"
SOAP_ENCODING_NS = "http://schemas.xmlsoap.org/soap/encoding/"

SOAP_BINDING_NAMESPACES: tuple[str, ...] = (SOAP11_NS, SOAP12_NS)


def xsd(local_name: str) -> str:
    """Return the Clark-notation tag for an XML Schema element."""
    return f"{{{XSD_NS}}}{local_name}"


def wsdl(local_name: str) -> str:
    """Return the Clark-notation tag for a WSDL 1.1 element."""
    return f"{{{WSDL_NS}}}{local_name}"


def split_qname(
    value: str,
    nsmap: Mapping[Optional[str], str],
    *,
    default_namespace: Optional[str] = None,
) -> tuple[Optional[str], str]:
    """Split ``prefix:local`` into ``(namespace, local)`` using an in-scope prefix map.

    Args:
        value (str): QName text as written in the document.
        nsmap (Mapping[Optional[str], str]): In-scope prefix to URI table; ``None`` keys
            the default namespace.
        default_namespace (Optional[str]): Namespace used for unprefixed names when the
            document declares no default namespace.

    Returns:
        tuple[Optional[str], str]: Namespace URI (``None`` when the prefix is unknown)
        and local name.
    """
    text = value.strip()
    if ":" in text:
        prefix, local = text.split(":", maxsplit=1)
        if prefix == "xml":
            return XML_NS, local
        return nsmap.get(prefix), local
    namespace = nsmap.get(None)
    if namespace is None:
        namespace = default_namespace
    return namespace, text


def local_name(tag: str) -> str:
    """Strip the namespace part of a Clark-notation tag."""
    if tag.startswith("{"):
        return tag.split("}", maxsplit=1)[1]
    return tag

