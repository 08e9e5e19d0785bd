from __future__ import annotations

"""Connection, edge, page-info and stats object types."""

from typing import Any, Dict, Optional

from graphql import (
    GraphQLBoolean,
    GraphQLField,
    GraphQLFloat,
    GraphQLList,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLString,
)

from ..descriptors import ResourceDescriptor
from ..naming import field_name, type_name
from ..provider import NULLABLE_CALCULATIONS
from .context import SynthesisContext


def page_info_type(ctx: SynthesisContext) -> GraphQLObjectType:
    existing = ctx.registry.get_named("PageInfo")
    if existing is not None:
        return existing  # type: ignore[return-value]
    page_info = GraphQLObjectType(
        "PageInfo",
        {
            "hasNextPage": GraphQLField(GraphQLNonNull(GraphQLBoolean)),
            "hasPreviousPage": GraphQLField(GraphQLNonNull(GraphQLBoolean)),
            "startCursor": GraphQLField(GraphQLString),
            "endCursor": GraphQLField(GraphQLString),
        },
    )
    return ctx.registry.set_named("PageInfo", page_info)  # type: ignore[return-value]


def _read_key(key: str):
    def resolve(source: Dict[str, Any], _info) -> Any:
        return (source or {}).get(key)

    return resolve


def _calculation_type(calc: str):
    if calc in NULLABLE_CALCULATIONS:
        return GraphQLFloat
    return GraphQLNonNull(GraphQLFloat)


def stats_type(ctx: SynthesisContext, resource: ResourceDescriptor) -> GraphQLObjectType:
    name = f"{ctx.registry.key_for(resource)}Stats"
    existing = ctx.registry.get_named(name)
    if existing is not None:
        return existing  # type: ignore[return-value]

    fields: Dict[str, GraphQLField] = {}
    for stat, calculations in resource.all_stats().items():
        calc_name = f"{name}{type_name(stat)}Calculations"
        calc_type = GraphQLObjectType(
            calc_name,
            {
                field_name(calc): GraphQLField(_calculation_type(calc), resolve=_read_key(calc))
                for calc in calculations
            },
        )
        ctx.registry.set_named(calc_name, calc_type)
        fields[field_name(stat)] = GraphQLField(GraphQLNonNull(calc_type), resolve=_read_key(stat))
    return ctx.registry.set_named(name, GraphQLObjectType(name, fields))  # type: ignore[return-value]


def edge_type(
    ctx: SynthesisContext,
    node_type: GraphQLNamedType,
    name: Optional[str] = None,
    extra_fields: Optional[Dict[str, GraphQLField]] = None,
) -> GraphQLObjectType:
    name = name or f"{node_type.name}Edge"
    existing = ctx.registry.get_named(name)
    if existing is not None:
        return existing  # type: ignore[return-value]
    fields = {
        "node": GraphQLField(GraphQLNonNull(node_type)),  # type: ignore[arg-type]
        "cursor": GraphQLField(GraphQLNonNull(GraphQLString)),
    }
    fields.update(extra_fields or {})
    return ctx.registry.set_named(name, GraphQLObjectType(name, fields))  # type: ignore[return-value]


def connection_type(
    ctx: SynthesisContext,
    resource: ResourceDescriptor,
    node_type: GraphQLNamedType,
    *,
    name: Optional[str] = None,
    edge: Optional[GraphQLObjectType] = None,
) -> GraphQLObjectType:
    name = name or f"{node_type.name}Connection"
    existing = ctx.registry.get_named(name)
    if existing is not None:
        return existing  # type: ignore[return-value]
    edge = edge or edge_type(ctx, node_type)
    connection = GraphQLObjectType(
        name,
        {
            "edges": GraphQLField(
                GraphQLNonNull(GraphQLList(GraphQLNonNull(edge))),
                resolve=lambda page, _info: page.edges,
            ),
            "nodes": GraphQLField(
                GraphQLNonNull(GraphQLList(GraphQLNonNull(node_type))),  # type: ignore[arg-type]
                resolve=lambda page, _info: page.records,
            ),
            "pageInfo": GraphQLField(
                GraphQLNonNull(page_info_type(ctx)),
                resolve=lambda page, _info: page.page_info,
            ),
            "stats": GraphQLField(
                GraphQLNonNull(stats_type(ctx, resource)),
                resolve=lambda page, _info: page.stats,
            ),
        },
    )
    return ctx.registry.set_named(name, connection)  # type: ignore[return-value]


__all__ = ["page_info_type", "stats_type", "edge_type", "connection_type"]
