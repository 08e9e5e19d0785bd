from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple, Union

from graphql import GraphQLSchema, validate_schema

from ..descriptors import ResourceDescriptor, ResourceSet
from ..errors import SchemaError
from ..settings import Settings
from .context import SynthesisContext
from .query import query_type
from .resource_type import build_resource_type, prepare_polymorphic_interfaces

logger = logging.getLogger(__name__)


def synthesize_schema(
    resources: Union[ResourceSet, Iterable[ResourceDescriptor]],
    settings: Optional[Settings] = None,
) -> Tuple[GraphQLSchema, SynthesisContext]:
    """Build a fresh GraphQL schema for ``resources``.

    Every call starts from an empty registry. Schema construction problems are
    raised as :class:`SchemaError` instead of surfacing at the first query.
    """
    if not isinstance(resources, ResourceSet):
        resources = ResourceSet(resources)
    ctx = SynthesisContext(resources, settings)

    prepare_polymorphic_interfaces(ctx)
    for resource in resources:
        build_resource_type(ctx, resource)
    query = query_type(ctx)
    if not query.fields:
        raise SchemaError("No resource declares an entrypoint; the Query type would be empty")

    schema = GraphQLSchema(query=query, types=ctx.registry.all_types())
    errors = validate_schema(schema)
    if errors:
        raise SchemaError("; ".join(e.message for e in errors))
    logger.info(
        "synthesized schema: %d resources, %d types",
        len(resources),
        len(schema.type_map),
    )
    return schema, ctx


__all__ = ["synthesize_schema"]
