"""Per-association batch loaders and the per-request loader registry."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Dict, Tuple, Type

from strawberry.dataloader import DataLoader

from ..descriptors import AssociationKind
from ..models import QueryParams
from .base import AssociationLoader
from .belongs_to import BelongsToLoader, PolymorphicBelongsToLoader
from .has_many import HasManyLoader, HasOneLoader, ManyLoader, ManyToManyLoader, PolymorphicHasManyLoader

if TYPE_CHECKING:  # pragma: no cover
    from ..execution import RequestContext

LOADER_CLASSES: Dict[AssociationKind, Type[AssociationLoader]] = {
    AssociationKind.BELONGS_TO: BelongsToLoader,
    AssociationKind.POLYMORPHIC_BELONGS_TO: PolymorphicBelongsToLoader,
    AssociationKind.HAS_ONE: HasOneLoader,
    AssociationKind.HAS_MANY: HasManyLoader,
    AssociationKind.POLYMORPHIC_HAS_MANY: PolymorphicHasManyLoader,
    AssociationKind.MANY_TO_MANY: ManyToManyLoader,
}


def loader_class_for(kind: AssociationKind) -> Type[AssociationLoader]:
    return LOADER_CLASSES[kind]


class LoaderRegistry:
    """One DataLoader per (association, params signature) within a request."""

    def __init__(self, request: "RequestContext"):
        self.request = request
        self._loaders: Dict[Tuple[str, str], DataLoader] = {}

    def get(self, loader: AssociationLoader, params: QueryParams) -> DataLoader:
        batch_key = (loader.identity, params.signature())
        data_loader = self._loaders.get(batch_key)
        if data_loader is None:
            data_loader = DataLoader(load_fn=partial(loader.perform, params=params, request=self.request))
            self._loaders[batch_key] = data_loader
        return data_loader

    def __len__(self) -> int:
        return len(self._loaders)


__all__ = [
    "AssociationLoader",
    "BelongsToLoader",
    "PolymorphicBelongsToLoader",
    "ManyLoader",
    "HasManyLoader",
    "HasOneLoader",
    "PolymorphicHasManyLoader",
    "ManyToManyLoader",
    "LoaderRegistry",
    "loader_class_for",
]
