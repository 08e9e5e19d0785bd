from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from graphql import GraphQLNamedType

from ..descriptors import ResourceDescriptor
from ..errors import DuplicateTypeError
from ..naming import structural_key


@dataclass
class TypeRegistryEntry:
    resource: ResourceDescriptor
    type: GraphQLNamedType
    interface: bool


class TypeRegistry:
    """Name bookkeeping for one schema generation."""

    def __init__(self):
        self._entries: Dict[str, TypeRegistryEntry] = {}
        self._named: Dict[str, GraphQLNamedType] = {}

    def key_for(self, resource: ResourceDescriptor, interface: bool = True) -> str:
        key = resource.graphql_name or structural_key(resource.name)
        if resource.polymorphic_parent_resource and interface:
            key = f"I{key}"
        return key

    def get(self, resource: ResourceDescriptor, interface: bool = True) -> Optional[TypeRegistryEntry]:
        return self._entries.get(self.key_for(resource, interface=interface))

    def set(self, resource: ResourceDescriptor, type_: GraphQLNamedType, interface: bool = True) -> TypeRegistryEntry:
        key = self.key_for(resource, interface=interface)
        existing = self._entries.get(key)
        if existing is not None and existing.resource.name != resource.name:
            raise DuplicateTypeError(key, existing.resource.name, resource.name)
        if key in self._named:
            raise DuplicateTypeError(key, key, resource.name)
        entry = TypeRegistryEntry(resource=resource, type=type_, interface=interface)
        self._entries[key] = entry
        return entry

    def get_named(self, name: str) -> Optional[GraphQLNamedType]:
        return self._named.get(name)

    def set_named(self, name: str, type_: GraphQLNamedType) -> GraphQLNamedType:
        if name in self._entries:
            raise DuplicateTypeError(name, self._entries[name].resource.name, name)
        self._named[name] = type_
        return type_

    def entries(self) -> List[TypeRegistryEntry]:
        return list(self._entries.values())

    def resource_types(self) -> List[TypeRegistryEntry]:
        """One entry per resource; the interface for polymorphic parents."""
        out = []
        for entry in self._entries.values():
            if entry.interface and entry.resource.polymorphic_parent_resource:
                continue
            out.append(self.get(entry.resource) or entry)
        return out

    def all_types(self) -> List[GraphQLNamedType]:
        return [e.type for e in self._entries.values()] + list(self._named.values())


__all__ = ["TypeRegistry", "TypeRegistryEntry"]
