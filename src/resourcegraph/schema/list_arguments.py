from __future__ import annotations

"""Filter and sort argument types for list and to-many fields."""

import logging
import re
from typing import Dict, Optional, Sequence

from graphql import (
    GraphQLArgument,
    GraphQLEnumType,
    GraphQLEnumValue,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInputType,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLString,
)

from ..descriptors import AssociationDescriptor, FilterDescriptor, ResourceDescriptor
from ..naming import field_name, type_name
from ..types import lookup
from .context import SynthesisContext

logger = logging.getLogger(__name__)

SortDir = GraphQLEnumType(
    "SortDir",
    {
        "asc": GraphQLEnumValue("asc", description="Ascending"),
        "desc": GraphQLEnumValue("desc", description="Descending"),
    },
)


def _enum_value_name(value: object) -> str:
    name = re.sub(r"[^_a-zA-Z0-9]", "_", str(value))
    if not name or name[0].isdigit():
        name = f"_{name}"
    return name


def _allow_type(ctx: SynthesisContext, name: str, allow: Sequence[object]) -> GraphQLEnumType:
    existing = ctx.registry.get_named(name)
    if existing is not None:
        return existing  # type: ignore[return-value]
    values = {_enum_value_name(v): GraphQLEnumValue(v) for v in allow}
    return ctx.registry.set_named(name, GraphQLEnumType(name, values))  # type: ignore[return-value]


def _filter_attribute_type(ctx: SynthesisContext, filter_type_name: str, flt: FilterDescriptor) -> GraphQLInputObjectType:
    name = f"{filter_type_name}{type_name(flt.name)}"
    existing = ctx.registry.get_named(name)
    if existing is not None:
        return existing  # type: ignore[return-value]

    operand: GraphQLInputType = lookup(flt.type).graphql_type  # type: ignore[assignment]
    if flt.allow:
        operand = _allow_type(ctx, f"{name}Allow", flt.allow)
    if not flt.single:
        operand = GraphQLList(GraphQLNonNull(operand))
    fields = {field_name(op): GraphQLInputField(operand, out_name=op) for op in flt.operators}
    return ctx.registry.set_named(name, GraphQLInputObjectType(name, fields))  # type: ignore[return-value]


def filter_type(ctx: SynthesisContext, resource: ResourceDescriptor) -> GraphQLInputObjectType:
    name = f"{ctx.registry.key_for(resource)}Filter"
    existing = ctx.registry.get_named(name)
    if existing is not None:
        return existing  # type: ignore[return-value]

    required_via_group = set()
    group = resource.filter_group
    if group is not None and group.required == "all":
        required_via_group = set(group.names)

    fields: Dict[str, GraphQLInputField] = {}
    for flt in resource.all_filters():
        if not flt.schema:
            continue
        attr_type: GraphQLInputType = _filter_attribute_type(ctx, name, flt)
        if flt.required or flt.name in required_via_group:
            attr_type = GraphQLNonNull(attr_type)
        fields[field_name(flt.name)] = GraphQLInputField(attr_type, out_name=flt.name)
    logger.debug("synthesized %s with %d filters", name, len(fields))
    return ctx.registry.set_named(name, GraphQLInputObjectType(name, fields))  # type: ignore[return-value]


def sort_type(ctx: SynthesisContext, resource: ResourceDescriptor) -> GraphQLInputObjectType:
    key = ctx.registry.key_for(resource)
    name = f"{key}Sort"
    existing = ctx.registry.get_named(name)
    if existing is not None:
        return existing  # type: ignore[return-value]
    att_name = f"{key}SortAtt"
    att_type = GraphQLEnumType(
        att_name,
        {
            field_name(attr.name): GraphQLEnumValue(attr.name, description=f"Sort by {attr.name}")
            for attr in resource.sortable_attributes()
        },
    )
    ctx.registry.set_named(att_name, att_type)
    sort = GraphQLInputObjectType(
        name,
        {
            "att": GraphQLInputField(GraphQLNonNull(att_type)),
            "dir": GraphQLInputField(GraphQLNonNull(SortDir)),
        },
    )
    return ctx.registry.set_named(name, sort)  # type: ignore[return-value]


def filter_required(resource: ResourceDescriptor, association: Optional[AssociationDescriptor] = None) -> bool:
    filters = [f for f in resource.all_filters() if f.schema]
    if association is not None:
        fk = association.join_column
        return any(f.required and f.name != fk for f in filters)
    if any(f.required for f in filters):
        return True
    return resource.filter_group is not None


def list_arguments(
    ctx: SynthesisContext,
    resource: ResourceDescriptor,
    association: Optional[AssociationDescriptor] = None,
) -> Dict[str, GraphQLArgument]:
    args: Dict[str, GraphQLArgument] = {}
    if any(f.schema for f in resource.all_filters()):
        ftype = filter_type(ctx, resource)
        required = filter_required(resource, association)
        args["filter"] = GraphQLArgument(GraphQLNonNull(ftype) if required else ftype)
    if resource.sortable_attributes():
        args["sort"] = GraphQLArgument(GraphQLList(GraphQLNonNull(sort_type(ctx, resource))))
    args["first"] = GraphQLArgument(GraphQLInt)
    args["last"] = GraphQLArgument(GraphQLInt)
    args["before"] = GraphQLArgument(GraphQLString)
    args["after"] = GraphQLArgument(GraphQLString)
    return args


__all__ = ["SortDir", "filter_type", "sort_type", "filter_required", "list_arguments"]
