from __future__ import annotations

"""Object and interface types per resource.

A polymorphic parent yields an ``I``-prefixed interface plus a concrete type
for itself and one per child. Every type's fields are thunks, so associations
may reference each other in cycles.
"""

import logging
from typing import Any

from graphql import (
    GraphQLField,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLResolveInfo,
    GraphQLString,
)

from ..descriptors import AssociationDescriptor, AssociationKind, ResourceDescriptor
from ..errors import DuplicateTypeError
from ..models import Record
from .context import SynthesisContext
from .fields import resource_fields

logger = logging.getLogger(__name__)


def _resolve_type_for(ctx: SynthesisContext):
    def resolve_type(record: Record, _info: GraphQLResolveInfo, _abstract: Any) -> str:
        return ctx.registry.key_for(ctx.resources.get(record.resource), interface=False)

    return resolve_type


def _concrete_type(
    ctx: SynthesisContext,
    resource: ResourceDescriptor,
    implements: GraphQLInterfaceType | None = None,
) -> GraphQLObjectType:
    def interfaces():
        out = [implements] if implements is not None else []
        return out + ctx.interfaces_for(resource)

    obj = GraphQLObjectType(
        ctx.registry.key_for(resource, interface=False),
        fields=lambda: resource_fields(ctx, resource),
        interfaces=interfaces,
        description=resource.description,
    )
    ctx.registry.set(resource, obj, interface=False)
    logger.debug("synthesized type %s for %s", obj.name, resource.name)
    return obj


def build_resource_type(ctx: SynthesisContext, resource: ResourceDescriptor) -> GraphQLNamedType:
    """Return (building once) the type fields pointing at ``resource`` use."""
    entry = ctx.registry.get(resource)
    if entry is not None:
        if entry.resource.name != resource.name:
            raise DuplicateTypeError(entry.type.name, entry.resource.name, resource.name)
        return entry.type

    if resource.polymorphic_parent_resource:
        interface = GraphQLInterfaceType(
            ctx.registry.key_for(resource),
            fields=lambda: resource_fields(ctx, resource),
            resolve_type=_resolve_type_for(ctx),
            description=resource.description,
        )
        ctx.registry.set(resource, interface, interface=True)
        logger.debug("synthesized interface %s for %s", interface.name, resource.name)
        _concrete_type(ctx, resource, implements=interface)
        for child in ctx.resources.children_of(resource):
            if ctx.registry.get(child, interface=False) is None:
                _concrete_type(ctx, child, implements=interface)
        return interface

    if resource.polymorphic_child:
        # children are built by their parent so they implement its interface
        build_resource_type(ctx, ctx.resources.get(resource.polymorphic_parent))
        return ctx.registry.get(resource, interface=False).type  # type: ignore[union-attr]

    return _concrete_type(ctx, resource)


def declaring_resource(
    ctx: SynthesisContext, owner: ResourceDescriptor, assoc: AssociationDescriptor
) -> ResourceDescriptor:
    """The ancestor that declares ``assoc``; inherited fields keep one type name."""
    current = owner
    while current.polymorphic_parent:
        parent = ctx.resources.get(current.polymorphic_parent)
        if parent.association(assoc.name) != assoc:
            break
        current = parent
    return current


def polymorphic_to_one_interface(
    ctx: SynthesisContext, owner: ResourceDescriptor, assoc: AssociationDescriptor
) -> GraphQLInterfaceType:
    name = f"{ctx.registry.key_for(declaring_resource(ctx, owner, assoc))}__{assoc.name}"
    existing = ctx.registry.get_named(name)
    if existing is not None:
        return existing  # type: ignore[return-value]
    interface = GraphQLInterfaceType(
        name,
        {
            "id": GraphQLField(GraphQLNonNull(GraphQLString)),
            "_type": GraphQLField(GraphQLNonNull(GraphQLString)),
        },
        resolve_type=_resolve_type_for(ctx),
    )
    return ctx.registry.set_named(name, interface)  # type: ignore[return-value]


def prepare_polymorphic_interfaces(ctx: SynthesisContext) -> None:
    """Create the ad hoc interfaces before any object type resolves its interfaces."""
    for resource in ctx.resources:
        for assoc in resource.readable_associations():
            if assoc.kind is not AssociationKind.POLYMORPHIC_BELONGS_TO:
                continue
            interface = polymorphic_to_one_interface(ctx, resource, assoc)
            for type_value, child_name in assoc.children.items():
                members = ctx.adhoc_interfaces.setdefault(child_name, [])
                if interface not in members:
                    members.append(interface)
                ctx.adhoc_type_values.setdefault(child_name, type_value)


__all__ = [
    "build_resource_type",
    "declaring_resource",
    "polymorphic_to_one_interface",
    "prepare_polymorphic_interfaces",
]
