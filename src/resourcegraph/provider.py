from __future__ import annotations

import inspect
import logging
import time
from typing import Any, Awaitable, Protocol, Union, runtime_checkable

from .models import ProviderRequest, ProviderResponse

logger = logging.getLogger(__name__)

# value of each calculation over an empty record set
EMPTY_CALCULATIONS = {"count": 0, "sum": 0, "average": 0, "maximum": None, "minimum": None}

NULLABLE_CALCULATIONS = frozenset(calc for calc, value in EMPTY_CALCULATIONS.items() if value is None)


@runtime_checkable
class ResourceProvider(Protocol):
    """Data-access collaborator: filters, sorts, paginates and aggregates records.

    ``fetch`` may be a plain or a coroutine function. It may return a
    :class:`ProviderResponse` or a mapping of the same shape.
    """

    can_group: bool

    def fetch(
        self, resource: str, request: ProviderRequest
    ) -> Union[ProviderResponse, Awaitable[ProviderResponse], Any]: ...


async def call_provider(provider: ResourceProvider, resource: str, request: ProviderRequest) -> ProviderResponse:
    started = time.perf_counter()
    result = provider.fetch(resource, request)
    if inspect.isawaitable(result):
        result = await result
    response = result if isinstance(result, ProviderResponse) else ProviderResponse.model_validate(result)
    logger.debug(
        "provider fetch resource=%s filter=%s page=%s records=%d elapsed_ms=%.1f",
        resource,
        sorted(request.filter),
        request.page.model_dump(exclude_none=True),
        len(response.records),
        (time.perf_counter() - started) * 1000,
    )
    return response


def empty_calculation(calc: str) -> Any:
    return EMPTY_CALCULATIONS.get(calc)


def provider_can_group(provider: ResourceProvider) -> bool:
    return bool(getattr(provider, "can_group", False))


__all__ = [
    "EMPTY_CALCULATIONS",
    "NULLABLE_CALCULATIONS",
    "ResourceProvider",
    "call_provider",
    "empty_calculation",
    "provider_can_group",
]
