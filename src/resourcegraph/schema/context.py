from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

from graphql import GraphQLInterfaceType

from ..descriptors import AssociationDescriptor, ResourceDescriptor, ResourceSet
from ..settings import Settings
from .registry import TypeRegistry

if TYPE_CHECKING:  # pragma: no cover
    from ..loaders.base import AssociationLoader

logger = logging.getLogger(__name__)


class SynthesisContext:
    """Everything one schema generation owns: descriptors, registry, loaders."""

    def __init__(self, resources: ResourceSet, settings: Optional[Settings] = None):
        self.resources = resources
        self.settings = settings or Settings()
        self.registry = TypeRegistry()
        self.loaders: Dict[str, "AssociationLoader"] = {}
        # resource name -> ad hoc interfaces of polymorphic to-one associations it serves
        self.adhoc_interfaces: Dict[str, List[GraphQLInterfaceType]] = {}
        self.adhoc_type_values: Dict[str, str] = {}

    def loader_for(self, owner: ResourceDescriptor, association: AssociationDescriptor) -> "AssociationLoader":
        from ..loaders import loader_class_for

        identity = f"{owner.name}.{association.name}"
        loader = self.loaders.get(identity)
        if loader is None:
            loader = loader_class_for(association.kind)(owner, association, self.resources)
            self.loaders[identity] = loader
        return loader

    def interfaces_for(self, resource: ResourceDescriptor) -> List[GraphQLInterfaceType]:
        return list(self.adhoc_interfaces.get(resource.name, []))


__all__ = ["SynthesisContext"]
