from __future__ import annotations

"""Semantic attribute types.

Each semantic type knows its GraphQL scalar, how to cast incoming filter
values, how to serialize outgoing values and which filter operators it
supports by default.
"""

import datetime as _dt
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from graphql import (
    GraphQLBoolean,
    GraphQLFloat,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLOutputType,
    GraphQLScalarType,
    GraphQLString,
    ValueNode,
)
from graphql.language import StringValueNode
from graphql.utilities import value_from_ast_untyped

from .errors import SchemaError

STRING_OPERATORS: Tuple[str, ...] = (
    "eq",
    "not_eq",
    "eql",
    "not_eql",
    "prefix",
    "not_prefix",
    "suffix",
    "not_suffix",
    "match",
    "not_match",
)
COMPARISON_OPERATORS: Tuple[str, ...] = ("eq", "not_eq", "gt", "gte", "lt", "lte")
EQUALITY_OPERATORS: Tuple[str, ...] = ("eq", "not_eq")


# --- custom scalars ---
def _serialize_date(value: Any) -> str:
    if isinstance(value, _dt.datetime):
        return value.date().isoformat()
    if isinstance(value, _dt.date):
        return value.isoformat()
    return _dt.date.fromisoformat(str(value)).isoformat()


def _parse_date(value: Any) -> _dt.date:
    if isinstance(value, _dt.date):
        return value
    return _dt.date.fromisoformat(str(value))


def _parse_date_literal(node: ValueNode, _variables: Any = None) -> _dt.date:
    if not isinstance(node, StringValueNode):
        raise TypeError("ISO8601Date must be a string")
    return _parse_date(node.value)


def _serialize_datetime(value: Any) -> str:
    if isinstance(value, _dt.datetime):
        return value.isoformat()
    return _dt.datetime.fromisoformat(str(value)).isoformat()


def _parse_datetime(value: Any) -> _dt.datetime:
    if isinstance(value, _dt.datetime):
        return value
    return _dt.datetime.fromisoformat(str(value))


def _parse_datetime_literal(node: ValueNode, _variables: Any = None) -> _dt.datetime:
    if not isinstance(node, StringValueNode):
        raise TypeError("ISO8601DateTime must be a string")
    return _parse_datetime(node.value)


def _serialize_json(value: Any) -> Any:
    # graphql-core hands the value through as-is; make sure it is JSON-clean
    return json.loads(json.dumps(value, default=str))


GraphQLISO8601Date = GraphQLScalarType(
    name="ISO8601Date",
    description="An ISO 8601-encoded date",
    serialize=_serialize_date,
    parse_value=_parse_date,
    parse_literal=_parse_date_literal,
)

GraphQLISO8601DateTime = GraphQLScalarType(
    name="ISO8601DateTime",
    description="An ISO 8601-encoded datetime",
    serialize=_serialize_datetime,
    parse_value=_parse_datetime,
    parse_literal=_parse_datetime_literal,
)

GraphQLJSON = GraphQLScalarType(
    name="JSON",
    description="Arbitrary JSON value",
    serialize=_serialize_json,
    parse_value=lambda value: value,
    parse_literal=value_from_ast_untyped,
)


# --- casts ---
def _cast_int(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError(f"Cannot cast {value!r} to integer")
    return int(value)


def _cast_float(value: Any) -> Any:
    return float(value)


def _cast_bool(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
        raise ValueError(f"Cannot cast {value!r} to boolean")
    return bool(value)


def _identity(value: Any) -> Any:
    return value


def _read_id(value: Any) -> Any:
    return str(value)


@dataclass(frozen=True)
class SemanticType:
    name: str
    graphql_type: GraphQLOutputType
    cast: Callable[[Any], Any] = _identity
    read: Callable[[Any], Any] = _identity
    operators: Tuple[str, ...] = EQUALITY_OPERATORS
    array: bool = False

    def output_type(self) -> GraphQLOutputType:
        if self.array:
            return GraphQLList(GraphQLNonNull(self.graphql_type))
        return self.graphql_type


TYPES: Dict[str, SemanticType] = {
    "integer_id": SemanticType("integer_id", GraphQLString, _cast_int, _read_id, EQUALITY_OPERATORS),
    "uuid": SemanticType("uuid", GraphQLString, str, _read_id, EQUALITY_OPERATORS),
    "string": SemanticType("string", GraphQLString, str, _identity, STRING_OPERATORS),
    "integer": SemanticType("integer", GraphQLInt, _cast_int, _identity, COMPARISON_OPERATORS),
    "big_decimal": SemanticType("big_decimal", GraphQLFloat, _cast_float, float, COMPARISON_OPERATORS),
    "float": SemanticType("float", GraphQLFloat, _cast_float, _identity, COMPARISON_OPERATORS),
    "boolean": SemanticType("boolean", GraphQLBoolean, _cast_bool, _identity, ("eq",)),
    "date": SemanticType("date", GraphQLISO8601Date, _parse_date, _identity, COMPARISON_OPERATORS),
    "datetime": SemanticType(
        "datetime", GraphQLISO8601DateTime, _parse_datetime, _identity, COMPARISON_OPERATORS
    ),
    "hash": SemanticType("hash", GraphQLJSON, _identity, _identity, ("eq",)),
    "array": SemanticType("array", GraphQLJSON, _identity, _identity, ("eq",), array=True),
    "array_of_strings": SemanticType(
        "array_of_strings", GraphQLString, str, _identity, EQUALITY_OPERATORS, array=True
    ),
    "array_of_integers": SemanticType(
        "array_of_integers", GraphQLInt, _cast_int, _identity, EQUALITY_OPERATORS, array=True
    ),
    "array_of_floats": SemanticType(
        "array_of_floats", GraphQLFloat, _cast_float, _identity, EQUALITY_OPERATORS, array=True
    ),
    "array_of_dates": SemanticType(
        "array_of_dates", GraphQLISO8601Date, _parse_date, _identity, EQUALITY_OPERATORS, array=True
    ),
    "array_of_datetimes": SemanticType(
        "array_of_datetimes",
        GraphQLISO8601DateTime,
        _parse_datetime,
        _identity,
        EQUALITY_OPERATORS,
        array=True,
    ),
}

ALIASES: Dict[str, str] = {
    "id": "integer_id",
    "str": "string",
    "text": "string",
    "int": "integer",
    "bool": "boolean",
    "decimal": "big_decimal",
    "dict": "hash",
}


def lookup(name: str) -> SemanticType:
    key = ALIASES.get(name, name)
    try:
        return TYPES[key]
    except KeyError:
        raise SchemaError(f"Unknown attribute type {name!r}") from None


def register_type(semantic_type: SemanticType, *, replace: bool = False) -> None:
    """Register an additional semantic type (e.g. a custom scalar)."""
    if semantic_type.name in TYPES and not replace:
        raise SchemaError(f"Attribute type {semantic_type.name!r} is already registered")
    TYPES[semantic_type.name] = semantic_type


def cast_value(type_name: Optional[str], value: Any) -> Any:
    if type_name is None or value is None:
        return value
    semantic = lookup(type_name)
    if isinstance(value, (list, tuple)):
        return [semantic.cast(v) for v in value]
    return semantic.cast(value)


__all__ = [
    "SemanticType",
    "TYPES",
    "lookup",
    "register_type",
    "cast_value",
    "GraphQLISO8601Date",
    "GraphQLISO8601DateTime",
    "GraphQLJSON",
    "STRING_OPERATORS",
    "COMPARISON_OPERATORS",
    "EQUALITY_OPERATORS",
]
