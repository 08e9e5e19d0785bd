from __future__ import annotations

"""Request hooks applied between normalized arguments and the provider call.

Each hook receives the :class:`ResourceQuery` and mutates the draft
:class:`ProviderRequest` in place. They run in list order; applications can
pass their own list (usually ``[*DEFAULT_HOOKS, my_hook]``).
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from .descriptors import ResourceDescriptor
from .errors import InvalidFilterValue
from .models import FilterTree, JoinSpec, ProviderRequest, ProviderResponse, QueryParams, SortTerm
from .provider import ResourceProvider, call_provider
from .settings import Settings
from .types import cast_value

logger = logging.getLogger(__name__)

RequestHook = Callable[["ResourceQuery", ProviderRequest], None]


def apply_default_filter(query: "ResourceQuery", request: ProviderRequest) -> None:
    for name, ops in query.resource.default_filter.items():
        if name not in request.filter:
            request.filter[name] = dict(ops)


def apply_default_sort(query: "ResourceQuery", request: ProviderRequest) -> None:
    if not request.sort and query.resource.default_sort:
        request.sort = [
            SortTerm(attribute=term.attribute, direction=term.direction)
            for term in query.resource.default_sort
        ]


def apply_reverse(query: "ResourceQuery", request: ProviderRequest) -> None:
    """Invert the ordering for ``last`` so the provider can serve "first N"."""
    if not query.params.reverse:
        return
    if not request.sort:
        request.sort = [SortTerm(attribute="id", direction="asc")]
    request.sort = [term.inverted() for term in request.sort]


def apply_type_casts(query: "ResourceQuery", request: ProviderRequest) -> None:
    for name, ops in request.filter.items():
        flt = query.resource.filter(name)
        if flt is None:
            continue
        for op, value in list(ops.items()):
            try:
                ops[op] = cast_value(flt.type, value)
            except (TypeError, ValueError):
                raise InvalidFilterValue(name, value) from None


def apply_aliases(query: "ResourceQuery", request: ProviderRequest) -> None:
    res = query.resource
    if not query.aliases:
        return
    request.filter = {query.aliases.get(name, name): ops for name, ops in request.filter.items()}
    request.sort = [
        SortTerm(attribute=query.aliases.get(t.attribute, t.attribute), direction=t.direction)
        for t in request.sort
    ]
    request.stats = {query.aliases.get(name, name): calcs for name, calcs in request.stats.items()}
    logger.debug("applied aliases for %s: %s", res.name, query.aliases)


def apply_default_page_size(query: "ResourceQuery", request: ProviderRequest) -> None:
    pagination = query.settings.pagination
    if request.page.size is None:
        if query.association:
            request.page.size = pagination.association_page_size
        elif pagination.default_page_size is not None:
            request.page.size = pagination.default_page_size
    if pagination.max_page_size is not None and request.page.size is not None:
        request.page.size = min(request.page.size, pagination.max_page_size)


DEFAULT_HOOKS: List[RequestHook] = [
    apply_default_filter,
    apply_default_sort,
    apply_reverse,
    apply_type_casts,
    apply_aliases,
    apply_default_page_size,
]


class ResourceQuery:
    """Turns :class:`QueryParams` for one resource into a provider call."""

    def __init__(
        self,
        resource: ResourceDescriptor,
        params: QueryParams,
        *,
        settings: Optional[Settings] = None,
        association: bool = False,
        base_filter: Optional[FilterTree] = None,
        through: Optional[JoinSpec] = None,
        hooks: Optional[Sequence[RequestHook]] = None,
    ):
        self.resource = resource
        self.params = params
        self.settings = settings or Settings()
        self.association = association
        self.base_filter = base_filter or {}
        self.through = through
        self.hooks = list(DEFAULT_HOOKS if hooks is None else hooks)
        self.aliases: Dict[str, str] = {}
        for attr in resource.attributes:
            if attr.alias:
                self.aliases[attr.name] = attr.alias
        for flt in resource.filters:
            if flt.alias:
                self.aliases[flt.name] = flt.alias

    def build(self) -> ProviderRequest:
        filter_tree: FilterTree = {name: dict(ops) for name, ops in self.params.filter.items()}
        for name, ops in self.base_filter.items():
            filter_tree.setdefault(name, {}).update(ops)
        request = ProviderRequest(
            filter=filter_tree,
            sort=[term.model_copy() for term in self.params.sort],
            page=self.params.page.model_copy(),
            stats={name: list(calcs) for name, calcs in self.params.stats.items()},
            group_by=self.params.group_by,
            through=self.through,
        )
        for hook in self.hooks:
            hook(self, request)
        return request

    def _unalias_stats(self, stats: Dict[str, Any]) -> Dict[str, Any]:
        if not self.aliases:
            return stats
        reverse = {source: name for name, source in self.aliases.items()}
        return {reverse.get(name, name): value for name, value in stats.items()}

    async def fetch(
        self, provider: ResourceProvider, request: Optional[ProviderRequest] = None
    ) -> ProviderResponse:
        request = request or self.build()
        response = await call_provider(provider, self.resource.name, request)
        if self.params.reverse:
            response.records.reverse()
        if response.stats:
            response.stats = self._unalias_stats(response.stats)
        return response


__all__ = [
    "RequestHook",
    "DEFAULT_HOOKS",
    "ResourceQuery",
    "apply_default_filter",
    "apply_default_sort",
    "apply_reverse",
    "apply_type_casts",
    "apply_aliases",
    "apply_default_page_size",
]
