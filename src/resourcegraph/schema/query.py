from __future__ import annotations

from typing import Any, Dict

from graphql import GraphQLArgument, GraphQLField, GraphQLID, GraphQLNonNull, GraphQLObjectType, GraphQLResolveInfo

from ..arguments import params_from_args
from ..cursor import ConnectionPage
from ..descriptors import ResourceDescriptor
from ..exception_handler import handle_errors
from ..hooks import ResourceQuery
from ..lookahead import Lookahead
from ..models import PageSpec
from ..naming import field_name, show_field_name
from .connection import connection_type
from .context import SynthesisContext
from .list_arguments import list_arguments
from .resource_type import build_resource_type


def index_field(ctx: SynthesisContext, resource: ResourceDescriptor) -> GraphQLField:
    node_type = build_resource_type(ctx, resource)

    @handle_errors
    async def resolve(_root: Any, info: GraphQLResolveInfo, **args: Any) -> ConnectionPage:
        request = info.context
        params = params_from_args(resource, args, Lookahead.from_info(info), context=request.context)
        query = ResourceQuery(resource, params, settings=request.settings, hooks=request.hooks)
        response = await query.fetch(request.provider)
        return ConnectionPage(
            response.records,
            params,
            item_count=response.pagination.item_count,
            stats=response.stats,
        )

    return GraphQLField(
        GraphQLNonNull(connection_type(ctx, resource, node_type)),
        args=list_arguments(ctx, resource),
        resolve=resolve,
        description=resource.description,
    )


def show_field(ctx: SynthesisContext, resource: ResourceDescriptor) -> GraphQLField:
    node_type = build_resource_type(ctx, resource)
    args = {} if resource.singular else {"id": GraphQLArgument(GraphQLNonNull(GraphQLID))}

    @handle_errors
    async def resolve(_root: Any, info: GraphQLResolveInfo, **args: Any):
        request = info.context
        params = params_from_args(resource, args, context=request.context)
        params.page = PageSpec(size=1)
        query = ResourceQuery(resource, params, settings=request.settings, hooks=request.hooks)
        response = await query.fetch(request.provider)
        return response.records[0] if response.records else None

    return GraphQLField(node_type, args=args, resolve=resolve)  # type: ignore[arg-type]


def query_type(ctx: SynthesisContext) -> GraphQLObjectType:
    fields: Dict[str, GraphQLField] = {}
    for resource in ctx.resources:
        if not resource.entrypoint:
            continue
        fields[field_name(resource.entrypoint)] = index_field(ctx, resource)
        fields[show_field_name(resource.entrypoint)] = show_field(ctx, resource)
    return GraphQLObjectType("Query", fields)


__all__ = ["index_field", "show_field", "query_type"]
