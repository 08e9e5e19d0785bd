from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Dict, Hashable, List, Optional, Tuple

from ..descriptors import ResourceDescriptor
from ..hooks import ResourceQuery
from ..models import PageSpec, PolymorphicKey, QueryParams, Record
from .base import AssociationLoader

if TYPE_CHECKING:  # pragma: no cover
    from ..execution import RequestContext

logger = logging.getLogger(__name__)

SINGULAR_KEY = "__singular__"


async def _fetch_by_ids(
    target: ResourceDescriptor,
    primary_key: str,
    ids: List[Any],
    request: "RequestContext",
    loader: AssociationLoader,
) -> Dict[Any, Record]:
    query = ResourceQuery(
        target,
        QueryParams(),
        settings=request.settings,
        association=True,
        base_filter={primary_key: {"eq": list(ids)}},
        hooks=request.hooks,
    )
    response = await query.fetch(request.provider, loader.customize(query.build(), list(ids)))
    return {record.get(primary_key): record for record in response.records}


class BelongsToLoader(AssociationLoader):
    def compute_key(self, parent: Record) -> Optional[Hashable]:
        if self.target.singular:
            return SINGULAR_KEY
        return parent.get(self.association.foreign_key)  # type: ignore[arg-type]

    async def fetch_batch(
        self, keys: List[Hashable], params: QueryParams, request: "RequestContext"
    ) -> Dict[Hashable, Any]:
        target = self.target
        pk = self.association.primary_key
        if params.simple_id and not target.singular and not target.polymorphic_parent_resource:
            return {k: Record(resource=target.name, attributes={pk: k}) for k in keys}

        if target.singular:
            query = ResourceQuery(
                target,
                QueryParams(page=PageSpec(size=1)),
                settings=request.settings,
                hooks=request.hooks,
            )
            response = await query.fetch(request.provider)
            record = response.records[0] if response.records else None
            return {k: record for k in keys}

        found = await _fetch_by_ids(target, pk, keys, request, self)
        return {k: found.get(k) for k in keys}


class PolymorphicBelongsToLoader(AssociationLoader):
    """One provider call per concrete type present in the batch."""

    @property
    def foreign_key(self) -> str:
        return self.association.foreign_key or f"{self.association.name}_id"  # type: ignore[return-value]

    def compute_key(self, parent: Record) -> Optional[Hashable]:
        value = parent.get(self.foreign_key)
        if value is None:
            return None
        return PolymorphicKey(value, parent.get(self.association.discriminator))  # type: ignore[arg-type]

    def child_for(self, type_value: Any) -> Optional[ResourceDescriptor]:
        name = self.association.children.get(type_value)
        if name is None:
            logger.debug("%s: no child resource for type %r", self.identity, type_value)
            return None
        return self.resources.get(name)

    async def fetch_batch(
        self, keys: List[Hashable], params: QueryParams, request: "RequestContext"
    ) -> Dict[Hashable, Any]:
        pk = self.association.primary_key
        if params.simple_id:
            out: Dict[Hashable, Any] = {}
            for key in keys:
                child = self.child_for(key.type)  # type: ignore[attr-defined]
                out[key] = Record(resource=child.name, attributes={pk: key.id}) if child else None  # type: ignore[attr-defined]
            return out

        by_type: Dict[Any, List[Any]] = defaultdict(list)
        for key in keys:
            by_type[key.type].append(key.id)  # type: ignore[attr-defined]

        async def fetch_one(type_value: Any, ids: List[Any]) -> Tuple[Any, Dict[Any, Record]]:
            child = self.child_for(type_value)
            if child is None:
                return type_value, {}
            return type_value, await _fetch_by_ids(child, pk, ids, request, self)

        partitions = dict(await asyncio.gather(*(fetch_one(t, ids) for t, ids in by_type.items())))
        return {key: partitions.get(key.type, {}).get(key.id) for key in keys}  # type: ignore[attr-defined]


__all__ = ["BelongsToLoader", "PolymorphicBelongsToLoader", "SINGULAR_KEY"]
