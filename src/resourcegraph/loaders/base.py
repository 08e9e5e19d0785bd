from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Hashable, List, Optional

from ..descriptors import AssociationDescriptor, ResourceDescriptor, ResourceSet
from ..models import ProviderRequest, QueryParams, Record

if TYPE_CHECKING:  # pragma: no cover
    from ..execution import RequestContext

logger = logging.getLogger(__name__)


class AssociationLoader(ABC):
    """Batch contract shared by every association kind.

    ``compute_key`` turns a parent record into a lookup key; ``perform`` is the
    DataLoader batch function: it receives every key registered for one
    (association, params) pair, issues the provider call(s) and hands back
    one value per key in the same order.
    """

    def __init__(self, owner: ResourceDescriptor, association: AssociationDescriptor, resources: ResourceSet):
        self.owner = owner
        self.association = association
        self.resources = resources

    @property
    def identity(self) -> str:
        return f"{self.owner.name}.{self.association.name}"

    @property
    def target(self) -> ResourceDescriptor:
        return self.resources.get(self.association.resource)  # type: ignore[arg-type]

    @abstractmethod
    def compute_key(self, parent: Record) -> Optional[Hashable]:
        ...

    def empty(self, params: QueryParams) -> Any:
        return None

    @abstractmethod
    async def fetch_batch(
        self, keys: List[Hashable], params: QueryParams, request: "RequestContext"
    ) -> Dict[Hashable, Any]:
        ...

    def customize(self, provider_request: ProviderRequest, keys: List[Hashable]) -> ProviderRequest:
        if self.association.params is None:
            return provider_request
        customized = self.association.params(provider_request, keys)
        return customized if customized is not None else provider_request

    async def load(self, parent: Record, params: QueryParams, request: "RequestContext") -> Any:
        key = self.compute_key(parent)
        if key is None:
            return self.empty(params)
        return await request.loaders.get(self, params).load(key)

    async def perform(self, keys: List[Hashable], params: QueryParams, request: "RequestContext") -> List[Any]:
        unique = list(dict.fromkeys(k for k in keys if k is not None))
        logger.debug("dispatching %s for %d keys", self.identity, len(unique))
        results = await self.fetch_batch(unique, params, request) if unique else {}
        return [results.get(k, self.empty(params)) if k is not None else self.empty(params) for k in keys]


__all__ = ["AssociationLoader"]
