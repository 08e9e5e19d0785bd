from pydantic import __version__ as _pydantic_version

# resourcegraph relies on the Pydantic v2 API (model_validate/model_dump, etc.).
if not _pydantic_version.startswith("2"):
    raise ImportError(
        "resourcegraph requires pydantic>=2.0; detected version %s" % _pydantic_version
    )

from .descriptors import (
    AssociationDescriptor,
    AssociationKind,
    AttributeDescriptor,
    FilterDescriptor,
    FilterGroup,
    ResourceDescriptor,
    ResourceSet,
    SortTermDescriptor,
)
from .errors import (
    DuplicateTypeError,
    InvalidCursor,
    InvalidFilterValue,
    NullFilter,
    ResourceGraphError,
    SchemaError,
    UnauthorizedField,
    UnauthorizedFilter,
    UnauthorizedSort,
    UnknownResourceError,
    UnsupportedLast,
    UnsupportedPagination,
    UnsupportedStats,
)
from .exception_handler import ExceptionHandler
from .execution import GraphSchema, RequestContext
from .hooks import DEFAULT_HOOKS, ResourceQuery
from .models import (
    JoinSpec,
    PageSpec,
    Pagination,
    PolymorphicKey,
    ProviderRequest,
    ProviderResponse,
    QueryParams,
    Record,
    SortTerm,
)
from .provider import ResourceProvider
from .schema import synthesize_schema
from .settings import Settings, load_settings

__all__ = [
    # descriptors
    "AssociationDescriptor",
    "AssociationKind",
    "AttributeDescriptor",
    "FilterDescriptor",
    "FilterGroup",
    "ResourceDescriptor",
    "ResourceSet",
    "SortTermDescriptor",
    # errors
    "ResourceGraphError",
    "SchemaError",
    "DuplicateTypeError",
    "UnknownResourceError",
    "UnauthorizedField",
    "UnauthorizedFilter",
    "UnauthorizedSort",
    "UnsupportedPagination",
    "UnsupportedStats",
    "UnsupportedLast",
    "InvalidCursor",
    "NullFilter",
    "InvalidFilterValue",
    # wire models
    "JoinSpec",
    "PageSpec",
    "Pagination",
    "PolymorphicKey",
    "ProviderRequest",
    "ProviderResponse",
    "QueryParams",
    "Record",
    "SortTerm",
    # engine
    "ExceptionHandler",
    "GraphSchema",
    "RequestContext",
    "ResourceProvider",
    "ResourceQuery",
    "DEFAULT_HOOKS",
    "synthesize_schema",
    "Settings",
    "load_settings",
]
