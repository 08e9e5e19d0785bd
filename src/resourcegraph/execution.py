from __future__ import annotations

"""Query execution entry points."""

import asyncio
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from graphql import ExecutionResult, graphql, print_schema

from .descriptors import ResourceDescriptor, ResourceSet
from .exception_handler import ExceptionHandler
from .hooks import DEFAULT_HOOKS, RequestHook
from .loaders import LoaderRegistry
from .logging_config import reset_request_id, set_request_id
from .provider import ResourceProvider
from .schema import synthesize_schema
from .settings import Settings

logger = logging.getLogger(__name__)


class RequestContext:
    """Per-execution state handed to resolvers as ``info.context``.

    ``context`` is whatever the caller passed (current user, ...); guards
    receive it.
    """

    def __init__(
        self,
        *,
        provider: ResourceProvider,
        settings: Settings,
        exception_handler: ExceptionHandler,
        hooks: Sequence[RequestHook],
        context: Any = None,
    ):
        self.provider = provider
        self.settings = settings
        self.exception_handler = exception_handler
        self.hooks = list(hooks)
        self.context = context
        self.request_id = uuid.uuid4().hex[:12]
        self.loaders = LoaderRegistry(self)


def format_result(result: ExecutionResult) -> Dict[str, Any]:
    return dict(result.formatted)


class GraphSchema:
    """A synthesized schema bound to a Resource Provider."""

    def __init__(
        self,
        resources: Union[ResourceSet, Iterable[ResourceDescriptor]],
        provider: ResourceProvider,
        *,
        settings: Optional[Settings] = None,
        exception_handler: Optional[ExceptionHandler] = None,
        hooks: Optional[Sequence[RequestHook]] = None,
    ):
        self.settings = settings or Settings()
        self.provider = provider
        self.exception_handler = exception_handler or ExceptionHandler(
            default_message=self.settings.errors.default_message,
            default_code=self.settings.errors.default_code,
        )
        self.hooks: List[RequestHook] = list(DEFAULT_HOOKS if hooks is None else hooks)
        self.schema, self.synthesis = synthesize_schema(resources, self.settings)

    def sdl(self) -> str:
        return print_schema(self.schema)

    def new_request(self, context: Any = None) -> RequestContext:
        return RequestContext(
            provider=self.provider,
            settings=self.settings,
            exception_handler=self.exception_handler,
            hooks=self.hooks,
            context=context,
        )

    async def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        context: Any = None,
        operation_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        request = self.new_request(context)
        token = set_request_id(request.request_id)
        try:
            result = await graphql(
                self.schema,
                query,
                context_value=request,
                variable_values=variables,
                operation_name=operation_name,
            )
        finally:
            reset_request_id(token)
        if result.errors:
            logger.debug("query finished with %d errors", len(result.errors))
        return format_result(result)

    def execute_sync(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        context: Any = None,
        operation_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        return asyncio.run(self.execute(query, variables, context, operation_name))


__all__ = ["RequestContext", "GraphSchema", "format_result"]
