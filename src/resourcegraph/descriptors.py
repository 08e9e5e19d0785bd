from __future__ import annotations

"""Declarative resource model.

Descriptors are plain frozen dataclasses built once at boot. A
:class:`ResourceSet` validates the graph and resolves polymorphic inheritance
before schema synthesis walks it.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from graphql import GraphQLOutputType

from .errors import SchemaError, UnknownResourceError
from .types import lookup

# ``True``/``False`` or a guard called with the request context
Guard = Callable[[Any], bool]
Guardable = Union[bool, Guard]


class AssociationKind(str, Enum):
    BELONGS_TO = "belongs_to"
    POLYMORPHIC_BELONGS_TO = "polymorphic_belongs_to"
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    POLYMORPHIC_HAS_MANY = "polymorphic_has_many"
    MANY_TO_MANY = "many_to_many"

    @property
    def to_one(self) -> bool:
        return self in (
            AssociationKind.BELONGS_TO,
            AssociationKind.POLYMORPHIC_BELONGS_TO,
            AssociationKind.HAS_ONE,
        )


@dataclass(frozen=True)
class AttributeDescriptor:
    name: str
    type: str = "string"
    readable: Guardable = True
    filterable: Guardable = True
    sortable: Guardable = True
    null: Optional[bool] = None
    deprecation_reason: Optional[str] = None
    resolve: Optional[Callable[[Any], Any]] = None
    alias: Optional[str] = None
    description: Optional[str] = None
    graphql_type: Optional[GraphQLOutputType] = None
    # filter options
    operators: Optional[Tuple[str, ...]] = None
    allow: Optional[Tuple[Any, ...]] = None
    deny: Optional[Tuple[Any, ...]] = None
    single: bool = False
    allow_nil: bool = False
    required: bool = False

    @property
    def nullable(self) -> bool:
        if self.null is None:
            return self.name != "id"
        return self.null

    @property
    def source(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True)
class FilterDescriptor:
    name: str
    type: str = "string"
    operators: Tuple[str, ...] = ()
    guard: Guardable = True
    allow: Optional[Tuple[Any, ...]] = None
    deny: Optional[Tuple[Any, ...]] = None
    single: bool = False
    allow_nil: bool = False
    required: bool = False
    schema: bool = True
    alias: Optional[str] = None

    @property
    def source(self) -> str:
        return self.alias or self.name

    @classmethod
    def from_attribute(cls, attribute: AttributeDescriptor) -> "FilterDescriptor":
        semantic = lookup(attribute.type)
        operators = attribute.operators or semantic.operators
        if attribute.single and attribute.type == "boolean":
            operators = ("eq",)
        return cls(
            name=attribute.name,
            type=attribute.type,
            operators=tuple(operators),
            guard=attribute.filterable,
            allow=attribute.allow,
            deny=attribute.deny,
            single=attribute.single or attribute.type == "boolean",
            allow_nil=attribute.allow_nil,
            required=attribute.required,
            alias=attribute.alias,
        )


@dataclass(frozen=True)
class FilterGroup:
    names: Tuple[str, ...]
    required: str = "any"  # "any" | "all"


@dataclass(frozen=True)
class SortTermDescriptor:
    attribute: str
    direction: str = "asc"


@dataclass(frozen=True)
class AssociationDescriptor:
    """A typed edge between two resources.

    ``foreign_key`` is a column on the target for ``has_many``/``has_one``,
    on the owner for ``belongs_to``, and a ``{join_table: column}`` map for
    ``many_to_many``, where ``target_primary_key`` is the target column the
    join table's ``through_target_key`` points at.
    """

    name: str
    kind: AssociationKind
    resource: Optional[str] = None
    children: Mapping[str, str] = field(default_factory=dict)
    primary_key: str = "id"
    foreign_key: Union[str, Mapping[str, str], None] = None
    discriminator: Optional[str] = None
    polymorphic_as: Optional[str] = None
    through_target_key: Optional[str] = None
    target_primary_key: str = "id"
    edge_attributes: Tuple[AttributeDescriptor, ...] = ()
    readable: Guardable = True
    params: Optional[Callable[[Any, List[Any]], Any]] = None
    description: Optional[str] = None

    @property
    def through(self) -> Optional[str]:
        if isinstance(self.foreign_key, Mapping):
            return next(iter(self.foreign_key))
        return None

    @property
    def join_column(self) -> Optional[str]:
        """Column used to match target rows back to parents."""
        if isinstance(self.foreign_key, Mapping):
            return next(iter(self.foreign_key.values()))
        return self.foreign_key

    @property
    def discriminator_column(self) -> Optional[str]:
        if self.kind is AssociationKind.POLYMORPHIC_HAS_MANY:
            return f"{self.polymorphic_as}_type"
        return self.discriminator

    def targets(self) -> Tuple[str, ...]:
        if self.kind is AssociationKind.POLYMORPHIC_BELONGS_TO:
            return tuple(self.children.values())
        return (self.resource,) if self.resource else ()


@dataclass(frozen=True)
class ResourceDescriptor:
    name: str
    attributes: Tuple[AttributeDescriptor, ...] = ()
    associations: Tuple[AssociationDescriptor, ...] = ()
    entrypoint: Optional[str] = None
    graphql_name: Optional[str] = None
    description: Optional[str] = None
    stats: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    filters: Tuple[FilterDescriptor, ...] = ()
    filter_group: Optional[FilterGroup] = None
    default_filter: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    default_sort: Tuple[SortTermDescriptor, ...] = ()
    singular: bool = False
    # polymorphism
    polymorphic_children: Tuple[str, ...] = ()
    polymorphic_parent: Optional[str] = None
    discriminator_value: Optional[str] = None

    @property
    def polymorphic(self) -> bool:
        return bool(self.polymorphic_children) or self.polymorphic_parent is not None

    @property
    def polymorphic_child(self) -> bool:
        return self.polymorphic_parent is not None

    @property
    def polymorphic_parent_resource(self) -> bool:
        return bool(self.polymorphic_children) and not self.polymorphic_child

    @property
    def type_value(self) -> str:
        return self.discriminator_value or self.name

    def attribute(self, name: str) -> Optional[AttributeDescriptor]:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

    def association(self, name: str) -> Optional[AssociationDescriptor]:
        for assoc in self.associations:
            if assoc.name == name:
                return assoc
        return None

    def readable_attributes(self) -> List[AttributeDescriptor]:
        return [a for a in self.attributes if a.readable is not False]

    def readable_associations(self) -> List[AssociationDescriptor]:
        return [a for a in self.associations if a.readable is not False]

    def all_filters(self) -> List[FilterDescriptor]:
        out: Dict[str, FilterDescriptor] = {}
        for attr in self.attributes:
            if attr.filterable is not False:
                out[attr.name] = FilterDescriptor.from_attribute(attr)
        for flt in self.filters:
            operators = flt.operators or lookup(flt.type).operators
            out[flt.name] = replace(flt, operators=tuple(operators))
        return list(out.values())

    def filter(self, name: str) -> Optional[FilterDescriptor]:
        for flt in self.all_filters():
            if flt.name == name:
                return flt
        return None

    def sortable_attributes(self) -> List[AttributeDescriptor]:
        return [a for a in self.attributes if a.sortable is not False]

    def all_stats(self) -> Dict[str, Tuple[str, ...]]:
        stats: Dict[str, Tuple[str, ...]] = {"total": ("count",)}
        for name, calcs in self.stats.items():
            stats[name] = tuple(calcs)
        return stats


def _merge(parent: Iterable[Any], child: Iterable[Any]) -> Tuple[Any, ...]:
    merged: Dict[str, Any] = {item.name: item for item in parent}
    for item in child:
        merged[item.name] = item
    return tuple(merged.values())


class ResourceSet:
    """All descriptors of one schema generation."""

    def __init__(self, resources: Iterable[ResourceDescriptor]):
        raw: Dict[str, ResourceDescriptor] = {}
        for res in resources:
            if res.name in raw:
                raise SchemaError(f"Duplicate resource name: {res.name}")
            raw[res.name] = res
        self._resources = self._resolve_inheritance(raw)
        self._validate()

    @staticmethod
    def _resolve_inheritance(raw: Dict[str, ResourceDescriptor]) -> Dict[str, ResourceDescriptor]:
        resolved: Dict[str, ResourceDescriptor] = {}

        def resolve(name: str) -> ResourceDescriptor:
            if name in resolved:
                return resolved[name]
            res = raw[name]
            if res.polymorphic_parent:
                if res.polymorphic_parent not in raw:
                    raise UnknownResourceError(res.polymorphic_parent, referenced_by=name)
                parent = resolve(res.polymorphic_parent)
                res = replace(
                    res,
                    attributes=_merge(parent.attributes, res.attributes),
                    associations=_merge(parent.associations, res.associations),
                    filters=_merge(parent.filters, res.filters),
                    stats={**parent.stats, **res.stats},
                )
            resolved[name] = res
            return res

        for name in raw:
            resolve(name)
        return resolved

    def _validate(self) -> None:
        for res in self._resources.values():
            for child in res.polymorphic_children:
                if child not in self._resources:
                    raise UnknownResourceError(child, referenced_by=res.name)
                if self._resources[child].polymorphic_parent != res.name:
                    raise SchemaError(
                        f"Resource {child!r} is listed as a child of {res.name!r} "
                        "but does not declare it as polymorphic_parent"
                    )
            for assoc in res.associations:
                label = f"{res.name}.{assoc.name}"
                targets = assoc.targets()
                if not targets:
                    raise SchemaError(f"Association {label} declares no target resource")
                for target in targets:
                    if target not in self._resources:
                        raise UnknownResourceError(target, referenced_by=label)
                if assoc.kind is AssociationKind.POLYMORPHIC_BELONGS_TO and not assoc.discriminator:
                    raise SchemaError(f"Association {label} requires a discriminator field")
                if assoc.kind is AssociationKind.POLYMORPHIC_HAS_MANY and not assoc.polymorphic_as:
                    raise SchemaError(f"Association {label} requires polymorphic_as")
                if assoc.kind is AssociationKind.MANY_TO_MANY:
                    if not isinstance(assoc.foreign_key, Mapping) or len(assoc.foreign_key) != 1:
                        raise SchemaError(
                            f"Association {label} requires foreign_key={{join_table: column}}"
                        )
                    if not assoc.through_target_key:
                        raise SchemaError(f"Association {label} requires through_target_key")
                elif assoc.kind is not AssociationKind.POLYMORPHIC_BELONGS_TO and not assoc.foreign_key:
                    raise SchemaError(f"Association {label} requires a foreign_key")

    def __iter__(self):
        return iter(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, name: object) -> bool:
        return name in self._resources

    def get(self, name: str) -> ResourceDescriptor:
        try:
            return self._resources[name]
        except KeyError:
            raise UnknownResourceError(name) from None

    def children_of(self, res: ResourceDescriptor) -> List[ResourceDescriptor]:
        return [self.get(name) for name in res.polymorphic_children]

    def resource_for_type_value(self, parent: ResourceDescriptor, value: Any) -> ResourceDescriptor:
        for child in self.children_of(parent):
            if child.type_value == value:
                return child
        return parent


__all__ = [
    "Guard",
    "Guardable",
    "AssociationKind",
    "AttributeDescriptor",
    "FilterDescriptor",
    "FilterGroup",
    "SortTermDescriptor",
    "AssociationDescriptor",
    "ResourceDescriptor",
    "ResourceSet",
]
