from __future__ import annotations

import pytest
from graphql import GraphQLField, GraphQLObjectType, GraphQLString

from resourcegraph import DuplicateTypeError, ResourceDescriptor
from resourcegraph.naming import field_name, show_field_name, structural_key
from resourcegraph.schema import TypeRegistry


def _object(name: str) -> GraphQLObjectType:
    return GraphQLObjectType(name, {"id": GraphQLField(GraphQLString)})


@pytest.mark.parametrize(
    "name, key",
    [
        ("employees", "Employee"),
        ("credit_cards", "CreditCard"),
        ("EmployeeResource", "Employee"),
        ("PORO::EmployeeResource", "POROEmployee"),
    ],
)
def test_structural_keys(name, key):
    assert structural_key(name) == key


def test_field_names():
    assert field_name("first_name") == "firstName"
    assert show_field_name("credit_cards") == "creditCard"


def test_polymorphic_parents_get_interface_prefix():
    registry = TypeRegistry()
    parent = ResourceDescriptor(name="credit_cards", polymorphic_children=("visas",))
    assert registry.key_for(parent) == "ICreditCard"
    assert registry.key_for(parent, interface=False) == "CreditCard"
    assert registry.key_for(ResourceDescriptor(name="people", graphql_name="Human")) == "Human"


def test_set_and_get():
    registry = TypeRegistry()
    employees = ResourceDescriptor(name="employees")
    obj = _object("Employee")
    registry.set(employees, obj)
    assert registry.get(employees).type is obj
    assert registry.resource_types()[0].resource is employees
    assert obj in registry.all_types()


def test_collisions_raise():
    registry = TypeRegistry()
    registry.set(ResourceDescriptor(name="employees"), _object("Employee"))
    with pytest.raises(DuplicateTypeError):
        registry.set(ResourceDescriptor(name="employee"), _object("Employee"))
    with pytest.raises(DuplicateTypeError):
        registry.set_named("Employee", _object("Employee"))
