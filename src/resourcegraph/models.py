from __future__ import annotations

"""Wire models shared by the resolution engine and Resource Providers."""

import json
from typing import Any, Dict, List, Literal, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FilterTree = Dict[str, Dict[str, Any]]
StatsRequest = Dict[str, List[str]]


class PageSpec(BaseModel):
    model_config = ConfigDict(extra="ignore")

    size: Optional[int] = None
    number: Optional[int] = None
    before: Optional[int] = None
    after: Optional[int] = None

    @field_validator("size", "number", "before", "after")
    @classmethod
    def _non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("page values must be non-negative")
        return v


class SortTerm(BaseModel):
    attribute: str
    direction: Literal["asc", "desc"] = "asc"

    def inverted(self) -> "SortTerm":
        return SortTerm(
            attribute=self.attribute,
            direction="asc" if self.direction == "desc" else "desc",
        )


class QueryParams(BaseModel):
    """Normalized arguments of one field resolution."""

    model_config = ConfigDict(extra="ignore")

    filter: FilterTree = Field(default_factory=dict)
    sort: List[SortTerm] = Field(default_factory=list)
    page: PageSpec = Field(default_factory=PageSpec)
    reverse: bool = False
    stats: StatsRequest = Field(default_factory=dict)
    group_by: Optional[str] = None
    simple_id: bool = False

    @property
    def paginating(self) -> bool:
        """Whether the caller asked for a specific window.

        A zero page size requested for stats-only selections does not count.
        """
        page = self.page
        if page.size not in (None, 0):
            return True
        return page.number is not None or page.before is not None or page.after is not None or self.reverse

    def signature(self) -> str:
        return json.dumps(self.model_dump(mode="json"), sort_keys=True, default=str)


class JoinSpec(BaseModel):
    """Join table description sent along with many-to-many requests."""

    table: str
    parent_key: str
    target_key: str
    target_primary_key: str = "id"


class ProviderRequest(BaseModel):
    filter: FilterTree = Field(default_factory=dict)
    sort: List[SortTerm] = Field(default_factory=list)
    page: PageSpec = Field(default_factory=PageSpec)
    stats: StatsRequest = Field(default_factory=dict)
    group_by: Optional[str] = None
    through: Optional[JoinSpec] = None


class Pagination(BaseModel):
    item_count: Optional[int] = None


class Record(BaseModel):
    resource: str
    attributes: Dict[str, Any] = Field(default_factory=dict)
    edge: Dict[str, Any] = Field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)


class ProviderResponse(BaseModel):
    records: List[Record] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)
    # {attribute: {calculation: value}}, or {attribute: {calculation: {group: value}}}
    stats: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class PolymorphicKey(NamedTuple):
    id: Any
    type: Any


__all__ = [
    "FilterTree",
    "StatsRequest",
    "PageSpec",
    "SortTerm",
    "QueryParams",
    "JoinSpec",
    "ProviderRequest",
    "Pagination",
    "Record",
    "ProviderResponse",
    "PolymorphicKey",
]
