from __future__ import annotations

"""Translate GraphQL field arguments into :class:`QueryParams`."""

from typing import Any, Dict, Iterable, Mapping, Optional

from .cursor import decode_cursor
from .descriptors import ResourceDescriptor
from .errors import InvalidFilterValue, NullFilter, UnauthorizedFilter, UnauthorizedSort, UnsupportedLast
from .guards import allowed
from .lookahead import Lookahead
from .models import PageSpec, QueryParams, SortTerm
from .naming import field_name

SIMPLE_ID_SELECTIONS = frozenset({"id", "__typename"})


def _values(value: Any) -> Iterable[Any]:
    if isinstance(value, (list, tuple)):
        return value
    return (value,)


def normalize_filter(
    resource: ResourceDescriptor,
    raw: Optional[Mapping[str, Any]],
    context: Any = None,
) -> Dict[str, Dict[str, Any]]:
    out: Dict[str, Dict[str, Any]] = {}
    for name, ops in (raw or {}).items():
        if ops is None:
            continue
        flt = resource.filter(name)
        if flt is not None and not allowed(flt.guard, context):
            raise UnauthorizedFilter(name)
        for op, value in ops.items():
            if value is None or (isinstance(value, (list, tuple)) and None in value):
                if flt is None or not flt.allow_nil:
                    raise NullFilter(name)
            if flt is not None and flt.deny:
                for v in _values(value):
                    if v in flt.deny:
                        raise InvalidFilterValue(name, v)
            out.setdefault(name, {})[op] = value
    return out


def normalize_sort(resource: ResourceDescriptor, raw: Optional[Iterable[Mapping[str, Any]]], context: Any = None):
    terms = []
    for item in raw or []:
        name = item["att"]
        attr = resource.attribute(name)
        if attr is not None and not allowed(attr.sortable, context):
            raise UnauthorizedSort(name)
        terms.append(SortTerm(attribute=name, direction=item.get("dir") or "asc"))
    return terms


def stats_request(resource: ResourceDescriptor, lookahead: Lookahead) -> Dict[str, list]:
    if not lookahead.selects("stats"):
        return {}
    by_field = {field_name(name): name for name in resource.all_stats()}
    stats = lookahead.selection("stats")
    payload: Dict[str, list] = {}
    for group in stats.names():
        if group == "__typename":
            continue
        calcs = [c for c in stats.selection(group).names() if c != "__typename"]
        payload[by_field.get(group, group)] = calcs
    return payload


def is_simple_id(lookahead: Lookahead) -> bool:
    names = set(lookahead.names())
    return "id" in names and names <= SIMPLE_ID_SELECTIONS


def params_from_args(
    resource: ResourceDescriptor,
    args: Mapping[str, Any],
    lookahead: Optional[Lookahead] = None,
    *,
    context: Any = None,
    to_one: bool = False,
) -> QueryParams:
    """Build query params for a list, show or association field.

    ``first``/``last`` set the page size (``last`` also reverses), cursors
    become offsets, a bare ``id`` becomes an equality filter. Selection of
    only ``stats`` forces an empty page.
    """
    args = dict(args)
    filter_tree = normalize_filter(resource, args.pop("filter", None), context)
    sort = normalize_sort(resource, args.pop("sort", None), context)
    page = PageSpec()
    reverse = False

    first = args.pop("first", None)
    last = args.pop("last", None)
    after = args.pop("after", None)
    before = args.pop("before", None)
    if last is not None and (after is not None or before is not None):
        raise UnsupportedLast()
    if first is not None:
        page.size = first
    if last is not None:
        page.size = last
        reverse = True
    if after is not None:
        page.after = decode_cursor(after)
    if before is not None:
        page.before = decode_cursor(before)

    if "id" in args and args["id"] is not None:
        filter_tree.setdefault("id", {})["eq"] = args.pop("id")

    params = QueryParams(filter=filter_tree, sort=sort, page=page, reverse=reverse)
    if lookahead is None:
        return params

    if to_one:
        params.simple_id = is_simple_id(lookahead)
        return params

    params.stats = stats_request(resource, lookahead)
    if params.stats and [n for n in lookahead.names() if n != "__typename"] == ["stats"]:
        params.page = PageSpec(size=0)
    return params


__all__ = [
    "params_from_args",
    "normalize_filter",
    "normalize_sort",
    "stats_request",
    "is_simple_id",
]
