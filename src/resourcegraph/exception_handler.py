from __future__ import annotations

"""Maps exceptions raised while resolving into GraphQL errors.

Registered exception types decide the ``extensions.code`` and whether their own
message is exposed. Anything unregistered is logged and reported with the
default message and code.
"""

import functools
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type

from graphql import GraphQLError, GraphQLResolveInfo

from .errors import ResourceGraphError

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "We're sorry, something went wrong."
DEFAULT_CODE = 500


@dataclass(frozen=True)
class ExceptionConfig:
    code: Optional[int] = None
    # True exposes str(exc); a string replaces it
    message: Any = False
    log: bool = True
    notify: bool = True


class ExceptionHandler:
    def __init__(
        self,
        *,
        default_message: str = DEFAULT_MESSAGE,
        default_code: int = DEFAULT_CODE,
        notify: Optional[Callable[[BaseException, GraphQLResolveInfo], None]] = None,
    ):
        self.default_message = default_message
        self.default_code = default_code
        self._notify = notify
        self._registry: Dict[Type[BaseException], ExceptionConfig] = {}
        self.register(ResourceGraphError, message=True, log=False)

    def register(
        self,
        exc_type: Type[BaseException],
        *,
        code: Optional[int] = None,
        message: Any = False,
        log: bool = True,
        notify: bool = True,
    ) -> None:
        self._registry[exc_type] = ExceptionConfig(code=code, message=message, log=log, notify=notify)

    def config_for(self, exc: BaseException) -> Optional[ExceptionConfig]:
        # most specific registration wins
        for klass in type(exc).__mro__:
            if klass in self._registry:
                return self._registry[klass]
        return None

    def classify(self, exc: BaseException) -> Tuple[str, int]:
        config = self.config_for(exc)
        if config is None:
            return self.default_message, self.default_code
        if config.message is True:
            message = getattr(exc, "message", None) or str(exc)
        elif isinstance(config.message, str):
            message = config.message
        else:
            message = self.default_message
        code = config.code
        if code is None:
            code = getattr(exc, "code", None) if isinstance(exc, ResourceGraphError) else None
        return message, code if code is not None else self.default_code

    def handle(self, exc: BaseException, info: Optional[GraphQLResolveInfo] = None) -> GraphQLError:
        config = self.config_for(exc)
        path = ".".join(str(p) for p in info.path.as_list()) if info is not None else "-"
        if config is None or config.log:
            logger.exception("Error resolving %s", path, exc_info=exc)
        if self._notify is not None and (config is None or config.notify):
            self._notify(exc, info)
        message, code = self.classify(exc)
        return GraphQLError(message, original_error=exc, extensions={"code": code})


def handle_errors(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a resolver so raised exceptions go through the request's handler."""

    def _convert(exc: Exception, info: GraphQLResolveInfo) -> GraphQLError:
        handler = getattr(info.context, "exception_handler", None) or ExceptionHandler()
        return handler.handle(exc, info)

    if inspect.iscoroutinefunction(fn):

        @functools.wraps(fn)
        async def async_wrapper(source: Any, info: GraphQLResolveInfo, **kwargs: Any) -> Any:
            try:
                return await fn(source, info, **kwargs)
            except GraphQLError:
                raise
            except Exception as exc:
                raise _convert(exc, info) from exc

        return async_wrapper

    @functools.wraps(fn)
    def wrapper(source: Any, info: GraphQLResolveInfo, **kwargs: Any) -> Any:
        try:
            return fn(source, info, **kwargs)
        except GraphQLError:
            raise
        except Exception as exc:
            raise _convert(exc, info) from exc

    return wrapper


__all__ = ["ExceptionHandler", "ExceptionConfig", "handle_errors", "DEFAULT_MESSAGE", "DEFAULT_CODE"]
