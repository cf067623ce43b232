"""Bind WSDL port type operations to resolved request, response and fault types."""

from __future__ import annotations

import logging
from typing import Optional

from .errors import UnresolvableReferenceError
from .model_types import FaultRef, Operation, PortTypeInterface, TypeRef
from .naming import NameRegistry, apply_casing, go_identifier, pascal_case, unique_name
from .resolver import TypeResolver
from .schema_model import (
    BindingDecl,
    MessageDecl,
    OperationDecl,
    PortTypeDecl,
    TypeKey,
    WSDLDefinitions,
)

log = logging.getLogger(__name__)


class OperationBinder:
    """Turn each ``wsdl:portType`` into a Go interface description."""

    def __init__(self, definitions: WSDLDefinitions, resolver: TypeResolver) -> None:
        self._definitions = definitions
        self._resolver = resolver
        self._make_public = resolver.make_public
        self._messages: dict[TypeKey, MessageDecl] = {
            message.key: message for message in definitions.messages
        }
        self._bindings: dict[TypeKey, BindingDecl] = {
            binding.key: binding for binding in definitions.bindings
        }
        self._warnings: list[str] = []

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(self._warnings)

    def bind(self) -> tuple[PortTypeInterface, ...]:
        """Bind every port type in document order.

        Returns:
            tuple[PortTypeInterface, ...]: One interface per port type.

        Raises:
            UnresolvableReferenceError: If a message, binding port type or port
                binding does not exist.
        """
        port_type_keys = {port_type.key for port_type in self._definitions.port_types}
        for binding in self._definitions.bindings:
            if binding.port_type not in port_type_keys:
                raise UnresolvableReferenceError(binding.port_type, "portType", binding.location)

        registry = self._resolver.name_registry()
        return tuple(
            self._bind_port_type(port_type, registry)
            for port_type in self._definitions.port_types
        )

    def _bind_port_type(self, port_type: PortTypeDecl, registry: NameRegistry) -> PortTypeInterface:
        owner = f"portType {port_type.key}"
        name = registry.claim(
            go_identifier(port_type.key.name, make_public=self._make_public), owner=owner
        )
        implementation = apply_casing(name, make_public=False)
        if implementation == name:
            implementation = f"{implementation}Impl"
        implementation = registry.claim(implementation, owner=owner)
        constructor = registry.claim(
            apply_casing(f"New{pascal_case(name)}", make_public=self._make_public), owner=owner
        )

        method_names: set[str] = set()
        operations = []
        for operation in port_type.operations:
            method_name = unique_name(
                go_identifier(operation.name, make_public=self._make_public), method_names
            )
            method_names.add(method_name)
            operations.append(self._bind_operation(port_type, operation, method_name))

        return PortTypeInterface(
            name=name,
            implementation_name=implementation,
            constructor_name=constructor,
            operations=tuple(operations),
            endpoints=self._endpoints(port_type),
            doc=port_type.doc,
        )

    def _bind_operation(
        self,
        port_type: PortTypeDecl,
        operation: OperationDecl,
        method_name: str,
    ) -> Operation:
        faults = tuple(
            FaultRef(
                name=fault.name,
                type_ref=self._message_type(fault.message, operation),
                doc=fault.doc,
            )
            for fault in operation.faults
        )
        return Operation(
            name=operation.name,
            method_name=method_name,
            request=self._message_type(operation.input_message, operation),
            response=self._message_type(operation.output_message, operation),
            faults=faults,
            soap_action=self._soap_action(port_type, operation),
            doc=operation.doc,
        )

    def _message_type(
        self,
        message_key: Optional[TypeKey],
        operation: OperationDecl,
    ) -> Optional[TypeRef]:
        if message_key is None:
            return None
        message = self._messages.get(message_key)
        if message is None:
            raise UnresolvableReferenceError(message_key, "message", operation.location)

        bound: Optional[TypeRef] = None
        for part in message.parts:
            if part.element is not None:
                candidate = self._resolver.element_ref(
                    part.element, referenced_from=message.location
                )
            elif part.type_ref is not None:
                candidate = self._resolver.type_ref(
                    part.type_ref, referenced_from=message.location
                )
            else:
                continue
            if bound is None:
                bound = candidate
                continue
            warning = (
                f"Message {message.key} has more than one part; "
                f"part {part.name!r} is not bound to operation {operation.name}"
            )
            log.warning(warning)
            self._warnings.append(warning)
        return bound

    def _soap_action(self, port_type: PortTypeDecl, operation: OperationDecl) -> str:
        for binding in self._definitions.bindings:
            if binding.port_type == port_type.key and binding.declares(operation.name):
                return binding.soap_action(operation.name) or ""
        return ""

    def _endpoints(self, port_type: PortTypeDecl) -> tuple[str, ...]:
        addresses: list[str] = []
        for service in self._definitions.services:
            for port in service.ports:
                binding = self._bindings.get(port.binding)
                if binding is None:
                    raise UnresolvableReferenceError(
                        port.binding, "binding", f"service {service.name}"
                    )
                if binding.port_type == port_type.key and port.address:
                    addresses.append(port.address)
        return tuple(addresses)
