from __future__ import annotations

"""Field builders for resource object types."""

import logging
from typing import Any, Dict

from graphql import GraphQLField, GraphQLNonNull, GraphQLOutputType, GraphQLResolveInfo, GraphQLString

from ..arguments import params_from_args
from ..descriptors import AssociationDescriptor, AssociationKind, AttributeDescriptor, ResourceDescriptor
from ..exception_handler import handle_errors
from ..guards import ensure_readable
from ..lookahead import Lookahead
from ..models import Record
from ..naming import field_name
from ..types import lookup
from .connection import connection_type, edge_type
from .context import SynthesisContext

logger = logging.getLogger(__name__)


def _read(attribute: AttributeDescriptor, value: Any) -> Any:
    if value is None:
        return None
    reader = lookup(attribute.type).read
    if isinstance(value, (list, tuple)):
        return [reader(v) for v in value]
    return reader(value)


def attribute_output_type(attribute: AttributeDescriptor) -> GraphQLOutputType:
    output = attribute.graphql_type or lookup(attribute.type).output_type()
    if not attribute.nullable:
        output = GraphQLNonNull(output)
    return output


def attribute_field(attribute: AttributeDescriptor, *, edge: bool = False) -> GraphQLField:
    """Field reading ``attribute`` from a record, or from a join row when ``edge``."""

    @handle_errors
    def resolve(source: Any, info: GraphQLResolveInfo) -> Any:
        ensure_readable(attribute.readable, info)
        if edge:
            record: Record = source["node"]
            if attribute.resolve is not None:
                return _read(attribute, attribute.resolve(record))
            return _read(attribute, record.edge.get(attribute.source))
        if attribute.resolve is not None:
            return _read(attribute, attribute.resolve(source))
        return _read(attribute, source.get(attribute.source))

    return GraphQLField(
        attribute_output_type(attribute),
        resolve=resolve,
        deprecation_reason=attribute.deprecation_reason,
        description=attribute.description,
    )


def type_field(ctx: SynthesisContext, resource: ResourceDescriptor) -> GraphQLField:
    value = ctx.adhoc_type_values.get(resource.name, resource.type_value)

    def resolve(_record: Record, _info: GraphQLResolveInfo) -> str:
        return value

    return GraphQLField(GraphQLNonNull(GraphQLString), resolve=resolve)


def _to_many_field(ctx: SynthesisContext, owner: ResourceDescriptor, assoc: AssociationDescriptor) -> GraphQLField:
    from .list_arguments import list_arguments
    from .resource_type import build_resource_type, declaring_resource

    target = ctx.resources.get(assoc.resource)
    node_type = build_resource_type(ctx, target)
    if assoc.kind is AssociationKind.MANY_TO_MANY and assoc.edge_attributes:
        declaring = declaring_resource(ctx, owner, assoc)
        prefix = f"{ctx.registry.key_for(declaring, interface=False)}To{node_type.name}"
        edge = edge_type(
            ctx,
            node_type,
            name=f"{prefix}Edge",
            extra_fields={
                field_name(a.name): attribute_field(a, edge=True)
                for a in assoc.edge_attributes
                if a.readable is not False
            },
        )
        conn = connection_type(ctx, target, node_type, name=f"{prefix}Connection", edge=edge)
    else:
        conn = connection_type(ctx, target, node_type)
    loader = ctx.loader_for(owner, assoc)

    @handle_errors
    async def resolve(record: Record, info: GraphQLResolveInfo, **args: Any) -> Any:
        ensure_readable(assoc.readable, info)
        request = info.context
        params = params_from_args(target, args, Lookahead.from_info(info), context=request.context)
        return await loader.load(record, params, request)

    return GraphQLField(
        GraphQLNonNull(conn),
        args=list_arguments(ctx, target, association=assoc),
        resolve=resolve,
        description=assoc.description,
    )


def _to_one_field(ctx: SynthesisContext, owner: ResourceDescriptor, assoc: AssociationDescriptor) -> GraphQLField:
    from .resource_type import build_resource_type, polymorphic_to_one_interface

    if assoc.kind is AssociationKind.POLYMORPHIC_BELONGS_TO:
        output: GraphQLOutputType = polymorphic_to_one_interface(ctx, owner, assoc)
        target = None
    else:
        target = ctx.resources.get(assoc.resource)
        output = build_resource_type(ctx, target)
    loader = ctx.loader_for(owner, assoc)
    simple_id_allowed = assoc.kind in (AssociationKind.BELONGS_TO, AssociationKind.POLYMORPHIC_BELONGS_TO)

    @handle_errors
    async def resolve(record: Record, info: GraphQLResolveInfo) -> Any:
        ensure_readable(assoc.readable, info)
        request = info.context
        lookahead = Lookahead.from_info(info) if simple_id_allowed else None
        params = params_from_args(target or owner, {}, lookahead, context=request.context, to_one=True)
        return await loader.load(record, params, request)

    return GraphQLField(output, resolve=resolve, description=assoc.description)


def association_field(ctx: SynthesisContext, owner: ResourceDescriptor, assoc: AssociationDescriptor) -> GraphQLField:
    if assoc.kind.to_one:
        return _to_one_field(ctx, owner, assoc)
    return _to_many_field(ctx, owner, assoc)


def resource_fields(ctx: SynthesisContext, resource: ResourceDescriptor) -> Dict[str, GraphQLField]:
    fields: Dict[str, GraphQLField] = {}
    for attribute in resource.readable_attributes():
        fields[field_name(attribute.name)] = attribute_field(attribute)
    if ctx.interfaces_for(resource):
        fields["_type"] = type_field(ctx, resource)
    for assoc in resource.readable_associations():
        fields[field_name(assoc.name)] = association_field(ctx, resource, assoc)
    return fields


__all__ = ["attribute_field", "attribute_output_type", "association_field", "resource_fields", "type_field"]
