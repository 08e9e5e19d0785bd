from __future__ import annotations

"""Error taxonomy.

Schema construction errors abort synthesis. Everything else is raised while a
query runs and is turned into a GraphQL error by
:class:`resourcegraph.exception_handler.ExceptionHandler`; ``code`` ends up in
``extensions.code``.
"""

from typing import Any, Dict, Optional


class ResourceGraphError(Exception):
    code: int = 500

    @property
    def message(self) -> str:
        return str(self)

    @property
    def extensions(self) -> Dict[str, Any]:
        return {"code": self.code}


# --- schema construction ---
class SchemaError(ResourceGraphError):
    """Invalid resource model; raised at boot."""


class DuplicateTypeError(SchemaError):
    def __init__(self, key: str, existing: str, incoming: str):
        self.key = key
        super().__init__(
            f"Type name {key!r} is derived by both {existing!r} and {incoming!r}; "
            "set a distinct graphql_name on one of them"
        )


class UnknownResourceError(SchemaError):
    def __init__(self, name: str, referenced_by: Optional[str] = None):
        self.name = name
        where = f" (referenced by {referenced_by})" if referenced_by else ""
        super().__init__(f"Unknown resource {name!r}{where}")


# --- query time ---
class UnauthorizedField(ResourceGraphError):
    code = 403

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"You are not authorized to read field {path}")


class UnauthorizedFilter(ResourceGraphError):
    code = 403

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"You are not authorized to filter on {name}")


class UnauthorizedSort(ResourceGraphError):
    code = 403

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"You are not authorized to sort on {name}")


class UnsupportedPagination(ResourceGraphError):
    code = 400

    def __init__(self, association: str, parents: int):
        self.association = association
        self.parents = parents
        super().__init__(
            f"Pagination arguments on {association!r} are only supported for a single parent "
            f"node, but {parents} parents were requested together"
        )


class UnsupportedStats(ResourceGraphError):
    code = 400

    def __init__(self) -> None:
        super().__init__(
            "You're requesting stats for multiple parent nodes. Currently, we only support this "
            "when there is a single parent node, or when the provider supports grouping."
        )


class UnsupportedLast(ResourceGraphError):
    code = 400

    def __init__(self) -> None:
        super().__init__("We do not currently support combining 'last' with 'before' or 'after'")


class InvalidCursor(ResourceGraphError):
    code = 400

    def __init__(self, cursor: Any):
        self.cursor = cursor
        super().__init__(f"Invalid cursor: {cursor!r}")


class NullFilter(ResourceGraphError):
    code = 400

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Filter '{name}' does not support null")


class InvalidFilterValue(ResourceGraphError):
    code = 400

    def __init__(self, name: str, value: Any):
        self.name = name
        self.value = value
        super().__init__(f"Filter '{name}' does not accept value {value!r}")


__all__ = [
    "ResourceGraphError",
    "SchemaError",
    "DuplicateTypeError",
    "UnknownResourceError",
    "UnauthorizedField",
    "UnauthorizedFilter",
    "UnauthorizedSort",
    "UnsupportedPagination",
    "UnsupportedStats",
    "UnsupportedLast",
    "InvalidCursor",
    "NullFilter",
    "InvalidFilterValue",
]
