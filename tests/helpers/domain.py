from __future__ import annotations

from typing import Any, List, Tuple

import pandas as pd

from resourcegraph import (
    AssociationDescriptor,
    AssociationKind,
    AttributeDescriptor,
    GraphSchema,
    ProviderRequest,
    ResourceDescriptor,
    Settings,
)
from resourcegraph.providers import PandasResourceProvider


def _is_admin(ctx: Any) -> bool:
    return bool(ctx and ctx.get("admin"))


EMPLOYEES = ResourceDescriptor(
    name="employees",
    entrypoint="employees",
    discriminator_value="Employee",
    attributes=(
        AttributeDescriptor("id", "integer_id"),
        AttributeDescriptor("first_name", "string"),
        AttributeDescriptor("last_name", "string"),
        AttributeDescriptor("age", "integer"),
        AttributeDescriptor("salary", "integer", readable=_is_admin),
        AttributeDescriptor("classification_id", "integer", readable=False),
    ),
    stats={"age": ("sum", "average", "maximum", "minimum")},
    associations=(
        AssociationDescriptor("positions", AssociationKind.HAS_MANY, resource="positions", foreign_key="employee_id"),
        AssociationDescriptor(
            "current_position", AssociationKind.HAS_ONE, resource="positions", foreign_key="employee_id"
        ),
        AssociationDescriptor(
            "classification",
            AssociationKind.BELONGS_TO,
            resource="classifications",
            foreign_key="classification_id",
        ),
        AssociationDescriptor(
            "teams",
            AssociationKind.MANY_TO_MANY,
            resource="teams",
            foreign_key={"employee_teams": "employee_id"},
            through_target_key="team_id",
            edge_attributes=(AttributeDescriptor("role", "string"),),
        ),
        AssociationDescriptor(
            "notes",
            AssociationKind.POLYMORPHIC_HAS_MANY,
            resource="notes",
            foreign_key="notable_id",
            polymorphic_as="notable",
        ),
        AssociationDescriptor(
            "credit_cards", AssociationKind.HAS_MANY, resource="credit_cards", foreign_key="employee_id"
        ),
    ),
)

POSITIONS = ResourceDescriptor(
    name="positions",
    entrypoint="positions",
    stats={"rank": ("sum", "average", "maximum", "minimum")},
    attributes=(
        AttributeDescriptor("id", "integer_id"),
        AttributeDescriptor("title", "string"),
        AttributeDescriptor("rank", "integer"),
        AttributeDescriptor("employee_id", "integer"),
    ),
    associations=(
        AssociationDescriptor("employee", AssociationKind.BELONGS_TO, resource="employees", foreign_key="employee_id"),
    ),
)

CLASSIFICATIONS = ResourceDescriptor(
    name="classifications",
    attributes=(
        AttributeDescriptor("id", "integer_id"),
        AttributeDescriptor("description", "string"),
    ),
)

TEAMS = ResourceDescriptor(
    name="teams",
    entrypoint="teams",
    discriminator_value="Team",
    attributes=(
        AttributeDescriptor("id", "integer_id"),
        AttributeDescriptor("name", "string"),
    ),
    associations=(
        AssociationDescriptor(
            "notes",
            AssociationKind.POLYMORPHIC_HAS_MANY,
            resource="notes",
            foreign_key="notable_id",
            polymorphic_as="notable",
        ),
    ),
)

NOTES = ResourceDescriptor(
    name="notes",
    entrypoint="notes",
    attributes=(
        AttributeDescriptor("id", "integer_id"),
        AttributeDescriptor("body", "string"),
        AttributeDescriptor("notable_id", "integer"),
        AttributeDescriptor("notable_type", "string"),
    ),
    associations=(
        AssociationDescriptor(
            "notable",
            AssociationKind.POLYMORPHIC_BELONGS_TO,
            foreign_key="notable_id",
            discriminator="notable_type",
            children={"Employee": "employees", "Team": "teams"},
        ),
    ),
)

CREDIT_CARDS = ResourceDescriptor(
    name="credit_cards",
    entrypoint="credit_cards",
    polymorphic_children=("visas", "mastercards"),
    attributes=(
        AttributeDescriptor("id", "integer_id"),
        AttributeDescriptor("number", "integer"),
        AttributeDescriptor("employee_id", "integer"),
    ),
)

VISAS = ResourceDescriptor(
    name="visas",
    polymorphic_parent="credit_cards",
    discriminator_value="Visa",
    attributes=(AttributeDescriptor("visa_only_attr", "string"),),
)

MASTERCARDS = ResourceDescriptor(
    name="mastercards",
    polymorphic_parent="credit_cards",
    discriminator_value="Mastercard",
)

RESOURCES = (EMPLOYEES, POSITIONS, CLASSIFICATIONS, TEAMS, NOTES, CREDIT_CARDS, VISAS, MASTERCARDS)


def make_tables() -> dict:
    return {
        "employees": pd.DataFrame(
            {
                "id": [1, 2, 3],
                "first_name": ["Stephen", "Agatha", "JK"],
                "last_name": ["King", "Christie", "Rowling"],
                "age": [60, 70, 50],
                "salary": [100_000, 200_000, 300_000],
                "classification_id": [1, None, 2],
            },
            dtype=object,
        ),
        "positions": pd.DataFrame(
            {
                "id": [1, 2, 3, 4, 5, 6, 7],
                "title": ["a", "b", "c", "d", "e", "f", "g"],
                "rank": [1, 2, 3, 4, 5, 1, 2],
                "employee_id": [1, 1, 1, 1, 1, 2, 2],
            },
            dtype=object,
        ),
        "classifications": pd.DataFrame({"id": [1, 2], "description": ["senior", "junior"]}, dtype=object),
        "teams": pd.DataFrame({"id": [1, 2], "name": ["Writers", "Editors"]}, dtype=object),
        "employee_teams": pd.DataFrame(
            {
                "id": [1, 2, 3],
                "employee_id": [1, 1, 2],
                "team_id": [1, 2, 1],
                "role": ["lead", "member", "member"],
            },
            dtype=object,
        ),
        "notes": pd.DataFrame(
            {
                "id": [1, 2, 3],
                "body": ["n1", "n2", "n3"],
                "notable_id": [1, 2, 1],
                "notable_type": ["Employee", "Employee", "Team"],
            },
            dtype=object,
        ),
        "visas": pd.DataFrame(
            {"id": [1], "number": [4111], "employee_id": [1], "visa_only_attr": ["visa!"]}, dtype=object
        ),
        "mastercards": pd.DataFrame({"id": [2], "number": [5500], "employee_id": [1]}, dtype=object),
    }


class RecordingProvider:
    """Delegates to a pandas provider and remembers every call."""

    def __init__(self, inner: PandasResourceProvider):
        self.inner = inner
        self.calls: List[Tuple[str, ProviderRequest]] = []

    @property
    def can_group(self) -> bool:
        return self.inner.can_group

    def fetch(self, resource: str, request: ProviderRequest):
        self.calls.append((resource, request.model_copy(deep=True)))
        return self.inner.fetch(resource, request)

    def calls_for(self, resource: str) -> List[ProviderRequest]:
        return [request for name, request in self.calls if name == resource]


def make_provider(*, can_group: bool = True) -> RecordingProvider:
    inner = PandasResourceProvider(
        make_tables(),
        polymorphic={"credit_cards": ["visas", "mastercards"]},
        can_group=can_group,
    )
    return RecordingProvider(inner)


def make_graph(*, can_group: bool = True, resources=RESOURCES, settings: Settings | None = None):
    provider = make_provider(can_group=can_group)
    return GraphSchema(resources, provider, settings=settings), provider


def build_graph(settings: Settings) -> GraphSchema:
    """CLI factory."""
    graph, _ = make_graph(settings=settings)
    return graph
