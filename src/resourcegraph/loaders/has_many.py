from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Hashable, List, Optional

from ..cursor import ConnectionPage
from ..errors import UnsupportedPagination, UnsupportedStats
from ..hooks import ResourceQuery
from ..models import JoinSpec, PageSpec, PolymorphicKey, ProviderResponse, QueryParams, Record
from ..provider import empty_calculation, provider_can_group
from .base import AssociationLoader

if TYPE_CHECKING:  # pragma: no cover
    from ..execution import RequestContext


def _pick(values: Dict[Any, Any], key: Any) -> Any:
    if key in values:
        return values[key]
    return values.get(str(key))


class ManyLoader(AssociationLoader):
    """Filters the target by the batch's parent keys and groups the results."""

    def compute_key(self, parent: Record) -> Optional[Hashable]:
        return parent.get(self.association.primary_key)

    def empty(self, params: QueryParams) -> Any:
        return ConnectionPage([], params, item_count=0, stats=self._empty_stats(params))

    @property
    def group_column(self) -> str:
        return self.association.join_column  # type: ignore[return-value]

    def base_filter(self, keys: List[Hashable]) -> Dict[str, Dict[str, Any]]:
        return {self.group_column: {"eq": list(keys)}}

    def through(self) -> Optional[JoinSpec]:
        return None

    def group_key(self, record: Record) -> Hashable:
        return record.get(self.group_column)

    def stats_key(self, key: Hashable) -> Any:
        return key

    def prepare(self, keys: List[Hashable], params: QueryParams, request: "RequestContext") -> QueryParams:
        if params.paginating and len(keys) > 1:
            raise UnsupportedPagination(self.identity, len(keys))
        if params.stats and len(keys) > 1:
            if not provider_can_group(request.provider):
                raise UnsupportedStats()
            params = params.model_copy(update={"group_by": self.group_column})
        return params

    async def fetch_batch(
        self, keys: List[Hashable], params: QueryParams, request: "RequestContext"
    ) -> Dict[Hashable, Any]:
        params = self.prepare(keys, params, request)
        query = ResourceQuery(
            self.target,
            params,
            settings=request.settings,
            association=True,
            base_filter=self.base_filter(keys),
            through=self.through(),
            hooks=request.hooks,
        )
        provider_request = self.customize(query.build(), keys)
        response = await query.fetch(request.provider, provider_request)
        return self.match(keys, response, params)

    def _empty_stats(self, params: QueryParams) -> Dict[str, Dict[str, Any]]:
        return {attr: {calc: empty_calculation(calc) for calc in calcs} for attr, calcs in params.stats.items()}

    def stats_for(self, key: Hashable, response: ProviderResponse, params: QueryParams) -> Dict[str, Dict[str, Any]]:
        if params.group_by is None:
            return response.stats
        out: Dict[str, Dict[str, Any]] = {}
        for attr, calcs in response.stats.items():
            out[attr] = {}
            for calc, value in calcs.items():
                if isinstance(value, dict):
                    picked = _pick(value, self.stats_key(key))
                    out[attr][calc] = empty_calculation(calc) if picked is None else picked
                else:
                    out[attr][calc] = value
        return out

    def match(self, keys: List[Hashable], response: ProviderResponse, params: QueryParams) -> Dict[Hashable, Any]:
        buckets: Dict[Hashable, List[Record]] = {k: [] for k in keys}
        for record in response.records:
            k = self.group_key(record)
            if k in buckets:
                buckets[k].append(record)
        single = len(keys) == 1
        return {
            k: ConnectionPage(
                buckets[k],
                params,
                item_count=response.pagination.item_count if single else len(buckets[k]),
                stats=self.stats_for(k, response, params),
                parent_key=k,
            )
            for k in keys
        }


class HasManyLoader(ManyLoader):
    pass


class HasOneLoader(ManyLoader):
    def empty(self, params: QueryParams) -> Any:
        return None

    def prepare(self, keys: List[Hashable], params: QueryParams, request: "RequestContext") -> QueryParams:
        params = params.model_copy(update={"simple_id": False, "stats": {}})
        if len(keys) == 1 and params.page.size is None:
            params = params.model_copy(update={"page": PageSpec(size=1)})
        return params

    def match(self, keys: List[Hashable], response: ProviderResponse, params: QueryParams) -> Dict[Hashable, Any]:
        first: Dict[Hashable, Record] = {}
        for record in response.records:
            k = self.group_key(record)
            if k in keys and k not in first:
                first[k] = record
        return {k: first.get(k) for k in keys}


class PolymorphicHasManyLoader(ManyLoader):
    """Targets rows pointing back at the parent through ``<as>_id``/``<as>_type``."""

    @property
    def type_column(self) -> str:
        return self.association.discriminator_column  # type: ignore[return-value]

    def compute_key(self, parent: Record) -> Optional[Hashable]:
        value = parent.get(self.association.primary_key)
        if value is None:
            return None
        parent_resource = self.resources.get(parent.resource) if parent.resource in self.resources else self.owner
        return PolymorphicKey(value, parent_resource.type_value)

    def base_filter(self, keys: List[Hashable]) -> Dict[str, Dict[str, Any]]:
        ids = list(dict.fromkeys(k.id for k in keys))  # type: ignore[attr-defined]
        types = list(dict.fromkeys(k.type for k in keys))  # type: ignore[attr-defined]
        return {self.group_column: {"eq": ids}, self.type_column: {"eq": types}}

    def group_key(self, record: Record) -> Hashable:
        return PolymorphicKey(record.get(self.group_column), record.get(self.type_column))

    def stats_key(self, key: Hashable) -> Any:
        return key.id  # type: ignore[attr-defined]


class ManyToManyLoader(ManyLoader):
    """Reaches the target through a join table; join-row columns land on ``record.edge``."""

    def through(self) -> Optional[JoinSpec]:
        assoc = self.association
        return JoinSpec(
            table=assoc.through,  # type: ignore[arg-type]
            parent_key=assoc.join_column,  # type: ignore[arg-type]
            target_key=assoc.through_target_key,  # type: ignore[arg-type]
            target_primary_key=assoc.target_primary_key,
        )

    def group_key(self, record: Record) -> Hashable:
        return record.edge.get(self.group_column)


__all__ = ["ManyLoader", "HasManyLoader", "HasOneLoader", "PolymorphicHasManyLoader", "ManyToManyLoader"]
