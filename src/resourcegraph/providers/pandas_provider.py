from __future__ import annotations

"""Reference Resource Provider evaluating requests over in-memory DataFrames."""

import logging
import math
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from ..models import JoinSpec, Pagination, ProviderRequest, ProviderResponse, Record, SortTerm
from ..provider import empty_calculation

logger = logging.getLogger(__name__)

EDGE_PREFIX = "_edge_"
RESOURCE_COLUMN = "_resource"


def _missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, (list, tuple, dict, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _native(value: Any) -> Any:
    if isinstance(value, (list, tuple, dict)):
        return value
    if _missing(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            return value.item()
        except (ValueError, AttributeError):
            return value
    return value


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def _string_op(fn: Callable[[str, str], bool]) -> Callable[[Any, Any], bool]:
    def op(cell: Any, operand: Any) -> bool:
        if _missing(cell) or _missing(operand):
            return False
        return fn(str(cell).lower(), str(operand).lower())

    return op


def _compare(fn: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def op(cell: Any, operand: Any) -> bool:
        if _missing(cell) or _missing(operand):
            return False
        try:
            return bool(fn(cell, operand))
        except TypeError:
            return False

    return op


def _eq(cell: Any, operand: Any) -> bool:
    if _missing(operand):
        return _missing(cell)
    if _missing(cell):
        return False
    return _lower(cell) == _lower(operand)


def _eql(cell: Any, operand: Any) -> bool:
    if _missing(operand):
        return _missing(cell)
    return cell == operand


# positive operators; every one has a ``not_`` counterpart
OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "eq": _eq,
    "eql": _eql,
    "prefix": _string_op(lambda cell, operand: cell.startswith(operand)),
    "suffix": _string_op(lambda cell, operand: cell.endswith(operand)),
    "match": _string_op(lambda cell, operand: operand in cell),
    "gt": _compare(lambda cell, operand: cell > operand),
    "gte": _compare(lambda cell, operand: cell >= operand),
    "lt": _compare(lambda cell, operand: cell < operand),
    "lte": _compare(lambda cell, operand: cell <= operand),
}


def _numbers(series: pd.Series) -> List[Any]:
    return [_native(v) for v in series if not _missing(v)]


CALCULATIONS: Dict[str, Callable[[List[Any]], Any]] = {
    "sum": sum,
    "average": lambda values: sum(values) / len(values),
    "maximum": max,
    "minimum": min,
}


def _calculate(frame: pd.DataFrame, column: Optional[str], calc: str) -> Any:
    if calc == "count":
        return len(frame)
    values = _numbers(frame[column]) if column is not None and column in frame.columns else []
    if calc not in CALCULATIONS:
        raise ValueError(f"Unsupported calculation: {calc}")
    if not values:
        return empty_calculation(calc)
    return CALCULATIONS[calc](values)


class PandasResourceProvider:
    """Resource Provider over ``{resource_or_table_name: DataFrame}``.

    ``polymorphic`` maps a parent resource to its child resources; fetching
    the parent concatenates the child tables and stamps each row with the
    child it came from.
    """

    def __init__(
        self,
        tables: Mapping[str, pd.DataFrame],
        *,
        polymorphic: Optional[Mapping[str, Sequence[str]]] = None,
        can_group: bool = True,
        name: str = "pandas",
    ):
        self.name = name
        self.tables = dict(tables)
        self.polymorphic = {parent: list(children) for parent, children in (polymorphic or {}).items()}
        self.can_group = can_group

    # --- frames ---
    def _table(self, name: str) -> pd.DataFrame:
        try:
            return self.tables[name]
        except KeyError:
            raise KeyError(f"No table registered for {name!r}") from None

    def _frame(self, resource: str) -> pd.DataFrame:
        children = self.polymorphic.get(resource)
        if not children:
            return self._table(resource).assign(**{RESOURCE_COLUMN: resource})
        parts = []
        if resource in self.tables:
            parts.append(self.tables[resource].assign(**{RESOURCE_COLUMN: resource}))
        for child in children:
            parts.append(self._table(child).assign(**{RESOURCE_COLUMN: child}))
        return pd.concat(parts, ignore_index=True).astype(object)

    def _join(self, frame: pd.DataFrame, through: JoinSpec) -> pd.DataFrame:
        join = self._table(through.table).add_prefix(EDGE_PREFIX)
        merged = join.merge(
            frame,
            left_on=f"{EDGE_PREFIX}{through.target_key}",
            right_on=through.target_primary_key,
            how="inner",
            sort=False,
        )
        return merged.astype(object)

    @staticmethod
    def _column(frame: pd.DataFrame, name: str) -> str:
        if name in frame.columns:
            return name
        if f"{EDGE_PREFIX}{name}" in frame.columns:
            return f"{EDGE_PREFIX}{name}"
        raise KeyError(f"Unknown column {name!r}")

    # --- request steps ---
    def _filter(self, frame: pd.DataFrame, filters: Dict[str, Dict[str, Any]]) -> pd.DataFrame:
        for name, ops in filters.items():
            column = self._column(frame, name)
            series = frame[column]
            for op, value in ops.items():
                negate = op.startswith("not_")
                base = op[4:] if negate else op
                fn = OPERATORS.get(base)
                if fn is None:
                    raise ValueError(f"Unsupported filter operator: {op}")
                operands = _as_list(value)
                mask = series.map(lambda cell: any(fn(cell, operand) for operand in operands)).astype(bool)
                if negate:
                    mask = ~mask
                frame = frame[mask.values]
                series = frame[column]
        return frame

    def _sort(self, frame: pd.DataFrame, sort: Iterable[SortTerm]) -> pd.DataFrame:
        terms = list(sort)
        if not terms or frame.empty:
            return frame
        # stable sorts applied from the last key to the first
        for term in reversed(terms):
            column = self._column(frame, term.attribute)
            frame = frame.sort_values(
                by=column,
                ascending=term.direction == "asc",
                kind="mergesort",
                na_position="last",
                key=lambda s: s.map(_lower),
            )
        return frame

    @staticmethod
    def _window(frame: pd.DataFrame, request: ProviderRequest) -> pd.DataFrame:
        page = request.page
        if page.size == 0:
            return frame.iloc[0:0]
        start, end = 0, len(frame)
        if page.after is not None:
            start = page.after
        if page.before is not None:
            end = max(page.before - 1, 0)
        if page.number and page.size and page.after is None and page.before is None:
            start = (page.number - 1) * page.size
        if page.size is not None:
            if page.before is not None and page.after is None:
                start = max(start, end - page.size)
            else:
                end = min(end, start + page.size)
        return frame.iloc[start:max(start, end)]

    def _stats(self, frame: pd.DataFrame, request: ProviderRequest) -> Dict[str, Dict[str, Any]]:
        out: Dict[str, Dict[str, Any]] = {}
        for attr, calcs in request.stats.items():
            column = None
            if attr in frame.columns or f"{EDGE_PREFIX}{attr}" in frame.columns:
                column = self._column(frame, attr)
            out[attr] = {}
            for calc in calcs:
                if request.group_by is None:
                    out[attr][calc] = _calculate(frame, column, calc)
                    continue
                group_column = self._column(frame, request.group_by)
                grouped: Dict[Any, Any] = {}
                for group, sub in frame.groupby(group_column, sort=False):
                    grouped[_native(group)] = _calculate(sub, column, calc)
                out[attr][calc] = grouped
        return out

    @staticmethod
    def _record(row: Dict[str, Any], resource: str) -> Record:
        attributes: Dict[str, Any] = {}
        edge: Dict[str, Any] = {}
        for key, value in row.items():
            if key == RESOURCE_COLUMN:
                continue
            if key.startswith(EDGE_PREFIX):
                edge[key[len(EDGE_PREFIX):]] = _native(value)
            else:
                attributes[key] = _native(value)
        return Record(resource=row.get(RESOURCE_COLUMN) or resource, attributes=attributes, edge=edge)

    # --- ResourceProvider API ---
    def fetch(self, resource: str, request: ProviderRequest) -> ProviderResponse:
        frame = self._frame(resource)
        if request.through is not None:
            frame = self._join(frame, request.through)
        frame = self._filter(frame, request.filter)
        item_count = len(frame)
        stats = self._stats(frame, request) if request.stats else {}
        frame = self._window(self._sort(frame, request.sort), request)
        records = [self._record(row, resource) for row in frame.to_dict(orient="records")]
        logger.debug("pandas fetch %s: %d of %d rows", resource, len(records), item_count)
        return ProviderResponse(
            records=records,
            pagination=Pagination(item_count=item_count),
            stats=stats,
        )


__all__ = ["PandasResourceProvider", "OPERATORS"]
