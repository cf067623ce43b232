"""Tests for type resolution and Go naming."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from wsdl_to_go_generator.errors import (
    EnumNameCollisionError,
    InvalidEnumerationValueError,
    UnresolvableReferenceError,
)
from wsdl_to_go_generator.graph import build_schema_graph, parse_documents
from wsdl_to_go_generator.loader import load_documents
from wsdl_to_go_generator.model_types import FieldDef, ResolvedGraph, ResolvedType, Shape
from wsdl_to_go_generator.namespaces import XML_NS
from wsdl_to_go_generator.resolver import TypeResolver
from wsdl_to_go_generator.schema_model import TypeKey
from .fixture_helpers import fixture_path, write_document

_XSD_HEADER = (
    '<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema" '
    'targetNamespace="urn:t" xmlns:t="urn:t">'
)


def _resolver(path: Path, aliases: Optional[dict[str, str]] = None, **kwargs: bool) -> TypeResolver:
    parsed = parse_documents(load_documents(str(path)))
    graph = build_schema_graph(parsed.schemas)
    return TypeResolver(graph, namespace_aliases=aliases, **kwargs)


def _resolve_inline(tmp_path: Path, body: str, **kwargs: bool) -> ResolvedGraph:
    entry = write_document(tmp_path, "inline.xsd", f"{_XSD_HEADER}{body}</xsd:schema>")
    return _resolver(entry, **kwargs).resolve()


def _fields(resolved: ResolvedType) -> dict[str, FieldDef]:
    return {field.name: field for field in resolved.fields}


def test_person_declarations_in_canonical_order() -> None:
    """Global types come first, nested anonymous types follow their owner, then elements."""
    graph = _resolver(fixture_path("person_service.wsdl")).resolve()

    assert [resolved.name for resolved in graph.types] == [
        "Status",
        "Person",
        "PersonAddress",
        "Money",
        "Code",
        "BaseRecord",
        "DerivedRecord",
        "Identifier",
        "Note",
        "GetPerson",
        "GetPersonResponse",
        "PersonNotFound",
        "Heartbeat",
    ]


def test_person_fields_map_cardinality_and_nillable() -> None:
    """Field shapes follow occurrence constraints, nillable flags and built-in mapping."""
    graph = _resolver(fixture_path("person_service.wsdl")).resolve()
    person = graph.get("Person")
    fields = _fields(person)

    expressions = {name: field.type_ref.expression for name, field in fields.items()}
    assert expressions == {
        "Name": "string",
        "Age": "int32",
        "Nickname": "*string",
        "Emails": "[]string",
        "Status": "Status",
        "Birthday": "soap.XSDDate",
        "Balance": "*Money",
        "Address": "*PersonAddress",
        "Type_": "string",
        "Note": "[]Note",
        "Id": "Identifier",
        "Lang": "string",
    }
    assert fields["Age"].optional
    assert not fields["Name"].optional
    assert fields["Nickname"].optional
    assert fields["Id"].kind == "attribute"
    assert not fields["Id"].optional
    assert fields["Lang"].xml_tag == f"{XML_NS} lang,attr,omitempty"
    assert fields["Type_"].xml_tag == "type,omitempty"
    assert person.xml_name == TypeKey("urn:example", "Person")


def test_type_shared_by_several_elements_has_no_xml_name(tmp_path: Path) -> None:
    """Only a type used by exactly one global element pins its XML element name."""
    graph = _resolve_inline(
        tmp_path,
        '<xsd:complexType name="Payload"><xsd:sequence>'
        '<xsd:element name="body" type="xsd:string"/>'
        "</xsd:sequence></xsd:complexType>"
        '<xsd:complexType name="Receipt"><xsd:sequence/></xsd:complexType>'
        '<xsd:element name="Request" type="t:Payload"/>'
        '<xsd:element name="Response" type="t:Payload"/>'
        '<xsd:element name="Ack" type="t:Receipt"/>',
    )

    assert graph.get("Payload").xml_name is None
    assert graph.get("Receipt").xml_name == TypeKey("urn:t", "Ack")


def test_enumeration_constants_skip_duplicate_values() -> None:
    """One constant per distinct facet value, named after the type and sanitized value."""
    status = _resolver(fixture_path("person_service.wsdl")).resolve().get("Status")

    assert status.underlying is not None
    assert status.underlying.expression == "string"
    assert [(constant.name, constant.value) for constant in status.constants] == [
        ("StatusActive", "Active"),
        ("StatusInactive", "Inactive"),
        ("StatusOnHold", "on-hold"),
    ]
    assert status.doc == "Lifecycle state of a person record."


def test_numeric_enumeration_constants_are_bare_literals(tmp_path: Path) -> None:
    """Integer and boolean enumerations spell their constants as untyped Go literals."""
    graph = _resolve_inline(
        tmp_path,
        '<xsd:simpleType name="Level"><xsd:restriction base="xsd:int">'
        '<xsd:enumeration value="1"/><xsd:enumeration value="02"/>'
        "</xsd:restriction></xsd:simpleType>"
        '<xsd:simpleType name="Flag"><xsd:restriction base="xsd:boolean">'
        '<xsd:enumeration value="true"/><xsd:enumeration value="0"/>'
        "</xsd:restriction></xsd:simpleType>"
        '<xsd:simpleType name="Ratio"><xsd:restriction base="xsd:decimal">'
        '<xsd:enumeration value="+0.5"/>'
        "</xsd:restriction></xsd:simpleType>",
    )

    assert [(constant.name, constant.literal) for constant in graph.get("Level").constants] == [
        ("Level1", "1"),
        ("Level02", "2"),
    ]
    assert [constant.literal for constant in graph.get("Flag").constants] == ["true", "false"]
    assert [constant.literal for constant in graph.get("Ratio").constants] == ["0.5"]


def test_enumeration_value_outside_lexical_space_is_rejected(tmp_path: Path) -> None:
    """A facet value that is not a literal of the underlying Go type aborts resolution."""
    with pytest.raises(InvalidEnumerationValueError) as exc_info:
        _resolve_inline(
            tmp_path,
            '<xsd:simpleType name="Level"><xsd:restriction base="xsd:int">'
            '<xsd:enumeration value="1"/><xsd:enumeration value="abc"/>'
            "</xsd:restriction></xsd:simpleType>",
        )
    assert exc_info.value.type_name == "Level"
    assert exc_info.value.value == "abc"
    assert exc_info.value.go_type == "int32"


def test_enumeration_out_of_range_for_byte_is_rejected(tmp_path: Path) -> None:
    """Integer facet values must fit the width of the mapped Go type."""
    with pytest.raises(InvalidEnumerationValueError) as exc_info:
        _resolve_inline(
            tmp_path,
            '<xsd:simpleType name="Small"><xsd:restriction base="xsd:byte">'
            '<xsd:enumeration value="300"/>'
            "</xsd:restriction></xsd:simpleType>",
        )
    assert "out of range" in exc_info.value.reason


def test_enumeration_over_date_omits_constants(tmp_path: Path) -> None:
    """Enumerations of types Go cannot declare as constants keep only the alias."""
    resolver = _resolver(
        write_document(
            tmp_path,
            "dates.xsd",
            f"{_XSD_HEADER}"
            '<xsd:simpleType name="Holiday"><xsd:restriction base="xsd:date">'
            '<xsd:enumeration value="2024-12-25"/>'
            "</xsd:restriction></xsd:simpleType>"
            "</xsd:schema>",
        )
    )

    holiday = resolver.resolve().get("Holiday")

    assert holiday.constants == ()
    assert holiday.underlying is not None
    assert holiday.underlying.expression == "soap.XSDDate"
    assert len(resolver.warnings) == 1
    assert "Holiday" in resolver.warnings[0]


def test_simple_content_synthesizes_value_field() -> None:
    """Simple content with attributes becomes a struct with a chardata Value field."""
    graph = _resolver(fixture_path("person_service.wsdl")).resolve()
    money = graph.get("Money")

    assert money.is_struct
    assert [(field.name, field.kind, field.type_ref.expression) for field in money.fields] == [
        ("Value", "chardata", "float64"),
        ("Currency", "attribute", "string"),
    ]
    assert money.fields[0].xml_tag == ",chardata"
    assert money.fields[0].json_tag == "-"


def test_simple_content_without_attributes_is_scalar_alias() -> None:
    """A simple-content type with no attributes resolves to its terminal scalar."""
    resolver = _resolver(fixture_path("person_service.wsdl"))
    code = resolver.resolve().get("Code")

    assert code.kind == "alias"
    assert code.underlying is not None
    assert code.underlying.expression == "string"
    assert resolver.type_ref(TypeKey("urn:example:common", "Code")).expression == "Code"


def test_extension_embeds_base_and_flattens_fields() -> None:
    """Complex-content extension embeds the base; flattened fields list base fields first."""
    graph = _resolver(fixture_path("person_service.wsdl")).resolve()
    derived = graph.get("DerivedRecord")

    assert graph.for_type(TypeKey("urn:example:common", "DerivedRecord")) is derived
    assert derived.base == "BaseRecord"
    assert [field.name for field in derived.fields] == ["Label"]
    assert [field.name for field in graph.flattened_fields("DerivedRecord")] == [
        "Created",
        "Label",
    ]
    assert graph.flattened_fields("DerivedRecord")[0].type_ref.expression == "soap.XSDDateTime"


def test_global_elements_alias_or_share_their_type() -> None:
    """Elements get their own declaration unless they share their type's Go name."""
    graph = _resolver(fixture_path("person_service.wsdl")).resolve()

    assert graph.for_element(TypeKey("urn:example", "Person")) is graph.get("Person")
    get_person = graph.get("GetPerson")
    assert get_person.is_struct
    assert get_person.xml_name == TypeKey("urn:example", "GetPerson")
    heartbeat = graph.get("Heartbeat")
    assert heartbeat.kind == "alias"
    assert heartbeat.underlying is not None
    assert heartbeat.underlying.expression == "soap.XSDDateTime"


def test_self_and_mutual_references_resolve_by_name() -> None:
    """Recursive types terminate and refer to each other through named pointers."""
    graph = _resolver(fixture_path("cycle_a.xsd")).resolve()

    assert [resolved.name for resolved in graph.types] == ["Node", "Node2"]
    node = _fields(graph.get("Node"))
    assert node["Peer"].type_ref.expression == "*Node2"
    assert node["Self"].type_ref.expression == "*Node"
    assert _fields(graph.get("Node2"))["Peer"].type_ref.expression == "*Node"


def test_namespace_alias_prefixes_type_names() -> None:
    """Namespaces in the alias table prefix their type names instead of numbering them."""
    graph = _resolver(fixture_path("cycle_a.xsd"), aliases={"urn:cycle:b": "B"}).resolve()

    assert [resolved.name for resolved in graph.types] == ["Node", "BNode"]
    assert _fields(graph.get("Node"))["Peer"].type_ref.expression == "*BNode"


def test_unexported_casing_applies_to_types_and_fields() -> None:
    """With exported names disabled every generated identifier starts lower-case."""
    graph = _resolver(fixture_path("cycle_a.xsd"), make_public=False).resolve()

    assert [resolved.name for resolved in graph.types] == ["node", "node2"]
    assert [field.name for field in graph.get("node").fields] == ["peer", "self"]


def test_alias_cycle_terminates_with_warning(tmp_path: Path) -> None:
    """Simple types restricting each other fall back to the opaque type."""
    entry = write_document(
        tmp_path,
        "alias_cycle.xsd",
        f"{_XSD_HEADER}"
        '<xsd:simpleType name="A"><xsd:restriction base="t:B"/></xsd:simpleType>'
        '<xsd:simpleType name="B"><xsd:restriction base="t:A"/></xsd:simpleType>'
        "</xsd:schema>",
    )
    resolver = _resolver(entry)

    graph = resolver.resolve()

    assert [resolved.name for resolved in graph.types] == ["A", "B"]
    for name in ("A", "B"):
        underlying = graph.get(name).underlying
        assert underlying is not None
        assert underlying.shape is Shape.OPAQUE
    assert resolver.warnings
    assert "Alias cycle" in resolver.warnings[0]


def test_alias_chain_resolves_to_terminal_scalar(tmp_path: Path) -> None:
    """Restriction chains collapse to the built-in scalar at their end."""
    graph = _resolve_inline(
        tmp_path,
        '<xsd:simpleType name="Outer"><xsd:restriction base="t:Middle"/></xsd:simpleType>'
        '<xsd:simpleType name="Middle"><xsd:restriction base="t:Inner"/></xsd:simpleType>'
        '<xsd:simpleType name="Inner"><xsd:restriction base="xsd:long"/></xsd:simpleType>',
    )

    for name in ("Outer", "Middle", "Inner"):
        underlying = graph.get(name).underlying
        assert underlying is not None
        assert underlying.expression == "int64"


def test_unresolvable_type_reports_key_and_location(tmp_path: Path) -> None:
    """A reference to an undeclared type aborts with the key and referencing location."""
    entry = write_document(
        tmp_path,
        "missing.xsd",
        f"{_XSD_HEADER}"
        '<xsd:complexType name="Holder"><xsd:sequence>'
        '<xsd:element name="thing" type="t:Missing"/>'
        "</xsd:sequence></xsd:complexType>"
        "</xsd:schema>",
    )

    with pytest.raises(UnresolvableReferenceError) as exc_info:
        _resolver(entry).resolve()
    assert exc_info.value.key == TypeKey("urn:t", "Missing")
    assert "missing.xsd" in exc_info.value.referenced_from


def test_unresolvable_element_ref(tmp_path: Path) -> None:
    """An element ref to an undeclared global element aborts resolution."""
    with pytest.raises(UnresolvableReferenceError) as exc_info:
        _resolve_inline(
            tmp_path,
            '<xsd:complexType name="Holder"><xsd:sequence>'
            '<xsd:element ref="t:Ghost"/>'
            "</xsd:sequence></xsd:complexType>",
        )
    assert exc_info.value.kind == "element"


def test_enumeration_values_colliding_after_sanitizing(tmp_path: Path) -> None:
    """Distinct values that sanitize to the same constant name are rejected."""
    with pytest.raises(EnumNameCollisionError) as exc_info:
        _resolve_inline(
            tmp_path,
            '<xsd:simpleType name="Mode"><xsd:restriction base="xsd:string">'
            '<xsd:enumeration value="a-b"/><xsd:enumeration value="a_b"/>'
            "</xsd:restriction></xsd:simpleType>",
        )
    assert exc_info.value.constant_name == "ModeAB"
    assert exc_info.value.value == "a_b"


def test_enumeration_constant_colliding_with_type_name(tmp_path: Path) -> None:
    """An enumeration constant may not reuse the name of another declaration."""
    with pytest.raises(EnumNameCollisionError) as exc_info:
        _resolve_inline(
            tmp_path,
            '<xsd:simpleType name="Color"><xsd:restriction base="xsd:string">'
            '<xsd:enumeration value="Red"/>'
            "</xsd:restriction></xsd:simpleType>"
            '<xsd:complexType name="ColorRed"><xsd:sequence/></xsd:complexType>',
        )
    assert "ColorRed" in exc_info.value.existing


def test_unmodeled_constructs_become_opaque(tmp_path: Path) -> None:
    """Untyped elements and anyType map to the explicit opaque type."""
    graph = _resolve_inline(
        tmp_path,
        '<xsd:complexType name="Envelope"><xsd:sequence>'
        '<xsd:element name="blob"/>'
        '<xsd:element name="anything" type="xsd:anyType"/>'
        "<xsd:any/>"
        "</xsd:sequence></xsd:complexType>",
    )
    fields = _fields(graph.get("Envelope"))

    assert fields["Blob"].type_ref.shape is Shape.OPAQUE
    assert fields["Anything"].type_ref.expression == "interface{}"
    assert fields["Items"].kind == "any"
    assert fields["Items"].type_ref.expression == "[]string"
    assert fields["Items"].xml_tag == ",any"


def test_inline_enumeration_gets_named_type(tmp_path: Path) -> None:
    """An anonymous enumerated simple type is named after its owner and member."""
    graph = _resolve_inline(
        tmp_path,
        '<xsd:complexType name="Order"><xsd:sequence>'
        '<xsd:element name="state"><xsd:simpleType><xsd:restriction base="xsd:string">'
        '<xsd:enumeration value="open"/><xsd:enumeration value="closed"/>'
        "</xsd:restriction></xsd:simpleType></xsd:element>"
        '<xsd:element name="note"><xsd:simpleType><xsd:restriction base="xsd:int"/>'
        "</xsd:simpleType></xsd:element>"
        "</xsd:sequence></xsd:complexType>",
    )

    fields = _fields(graph.get("Order"))
    assert fields["State"].type_ref.expression == "OrderState"
    assert fields["Note"].type_ref.expression == "int32"
    state = graph.get("OrderState")
    assert [constant.name for constant in state.constants] == ["OrderStateOpen", "OrderStateClosed"]


def test_list_and_union_simple_types(tmp_path: Path) -> None:
    """Lists become slices of their item type and unions fall back to string."""
    graph = _resolve_inline(
        tmp_path,
        '<xsd:simpleType name="Numbers"><xsd:list itemType="xsd:int"/></xsd:simpleType>'
        '<xsd:simpleType name="Either"><xsd:union memberTypes="xsd:int xsd:date"/></xsd:simpleType>'
        '<xsd:simpleType name="Nothing"/>',
    )

    numbers = graph.get("Numbers").underlying
    assert numbers is not None
    assert numbers.expression == "[]int32"
    either = graph.get("Either").underlying
    assert either is not None
    assert either.expression == "string"
    assert graph.get("Nothing").shape is Shape.OPAQUE


def test_simple_content_extension_inherits_attributes(tmp_path: Path) -> None:
    """A simple-content derivation of a simple-content type carries the base attributes."""
    graph = _resolve_inline(
        tmp_path,
        '<xsd:complexType name="Amount"><xsd:simpleContent>'
        '<xsd:extension base="xsd:decimal">'
        '<xsd:attribute name="currency" type="xsd:string"/>'
        "</xsd:extension></xsd:simpleContent></xsd:complexType>"
        '<xsd:complexType name="TaxedAmount"><xsd:simpleContent>'
        '<xsd:extension base="t:Amount">'
        '<xsd:attribute name="rate" type="xsd:float"/>'
        "</xsd:extension></xsd:simpleContent></xsd:complexType>",
    )

    taxed = graph.get("TaxedAmount")
    assert [(field.name, field.type_ref.expression) for field in taxed.fields] == [
        ("Value", "float64"),
        ("Currency", "string"),
        ("Rate", "float32"),
    ]


def test_nillable_binary_is_not_a_pointer(tmp_path: Path) -> None:
    """Byte slices are already nillable and never wrapped in a pointer."""
    graph = _resolve_inline(
        tmp_path,
        '<xsd:complexType name="Attachment"><xsd:sequence>'
        '<xsd:element name="data" type="xsd:base64Binary" nillable="true"/>'
        '<xsd:element name="size" type="xsd:long" nillable="true"/>'
        "</xsd:sequence></xsd:complexType>",
    )

    fields = _fields(graph.get("Attachment"))
    assert fields["Data"].type_ref.expression == "[]byte"
    assert fields["Size"].type_ref.expression == "*int64"


def test_reserved_words_are_suffixed(tmp_path: Path) -> None:
    """Go keywords and predeclared identifiers never leak into generated names."""
    graph = _resolve_inline(
        tmp_path,
        '<xsd:complexType name="string"><xsd:sequence>'
        '<xsd:element name="func" type="xsd:string"/>'
        '<xsd:element name="range" type="xsd:string"/>'
        "</xsd:sequence></xsd:complexType>",
        make_public=False,
    )

    assert [resolved.name for resolved in graph.types] == ["string_"]
    assert [field.name for field in graph.get("string_").fields] == ["func_", "range_"]


def test_resolution_is_independent_of_lookup_order() -> None:
    """Looking up references before resolving must not change any generated name."""
    path = fixture_path("person_service.wsdl")
    baseline = _resolver(path).resolve()

    probed = _resolver(path)
    for key in reversed(list(baseline.element_refs)):
        probed.element_ref(key)
    for key in reversed(list(baseline.type_refs)):
        probed.type_ref(key)
    reordered = probed.resolve()

    assert [(resolved.name, resolved.fields) for resolved in reordered.types] == [
        (resolved.name, resolved.fields) for resolved in baseline.types
    ]
