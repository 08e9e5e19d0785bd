from __future__ import annotations

from typing import Any

from graphql import GraphQLResolveInfo

from .descriptors import Guardable
from .errors import UnauthorizedField


def allowed(guard: Guardable, context: Any) -> bool:
    """Evaluate a readable/filterable/sortable flag against the request context."""
    if guard is True or guard is False:
        return guard
    return bool(guard(context))


def field_path(info: GraphQLResolveInfo) -> str:
    return ".".join(str(part) for part in info.path.as_list())


def ensure_readable(guard: Guardable, info: GraphQLResolveInfo) -> None:
    if guard is True:
        return
    context = getattr(info.context, "context", info.context)
    if not allowed(guard, context):
        raise UnauthorizedField(field_path(info))


__all__ = ["allowed", "field_path", "ensure_readable"]
