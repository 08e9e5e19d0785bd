from __future__ import annotations

import pytest

pd = pytest.importorskip("pandas")

from resourcegraph import GraphSchema
from resourcegraph.providers import PandasResourceProvider
from tests.helpers.domain import RESOURCES, RecordingProvider, make_graph, make_tables


def _data(result):
    assert "errors" not in result, result.get("errors")
    return result["data"]


CARDS_QUERY = """
{
  creditCards {
    nodes {
      __typename
      number
      ... on Visa { visaOnlyAttr }
    }
  }
}
"""


def test_polymorphic_list_resolves_concrete_types():
    graph, provider = make_graph()
    data = _data(graph.execute_sync(CARDS_QUERY))
    assert data["creditCards"]["nodes"] == [
        {"__typename": "Visa", "number": 4111, "visaOnlyAttr": "visa!"},
        {"__typename": "Mastercard", "number": 5500},
    ]
    assert len(provider.calls_for("credit_cards")) == 1


def test_has_many_into_polymorphic_resource():
    graph, _ = make_graph()
    data = _data(
        graph.execute_sync("{ employees { nodes { creditCards { nodes { __typename number } } } } }")
    )
    cards = [[c["__typename"] for c in e["creditCards"]["nodes"]] for e in data["employees"]["nodes"]]
    assert cards == [["Visa", "Mastercard"], [], []]


NOTABLE_QUERY = """
{
  notes {
    nodes {
      body
      notable {
        __typename
        id
        _type
        ... on Employee { firstName }
        ... on Team { name }
      }
    }
  }
}
"""


def test_polymorphic_belongs_to_fetches_once_per_type():
    graph, provider = make_graph()
    data = _data(graph.execute_sync(NOTABLE_QUERY))
    assert [n["notable"] for n in data["notes"]["nodes"]] == [
        {"__typename": "Employee", "id": "1", "_type": "Employee", "firstName": "Stephen"},
        {"__typename": "Employee", "id": "2", "_type": "Employee", "firstName": "Agatha"},
        {"__typename": "Team", "id": "1", "_type": "Team", "name": "Writers"},
    ]
    assert len(provider.calls_for("employees")) == 1
    assert len(provider.calls_for("teams")) == 1
    assert provider.calls_for("employees")[0].filter == {"id": {"eq": [1, 2]}}


def test_polymorphic_belongs_to_id_only_skips_the_provider():
    graph, provider = make_graph()
    data = _data(graph.execute_sync("{ notes { nodes { notable { id __typename } } } }"))
    assert [n["notable"] for n in data["notes"]["nodes"]] == [
        {"id": "1", "__typename": "Employee"},
        {"id": "2", "__typename": "Employee"},
        {"id": "1", "__typename": "Team"},
    ]
    assert provider.calls_for("employees") == []
    assert provider.calls_for("teams") == []


def test_selecting_type_field_loads_the_targets():
    graph, provider = make_graph()
    data = _data(graph.execute_sync("{ notes { nodes { notable { id _type } } } }"))
    assert [n["notable"] for n in data["notes"]["nodes"]] == [
        {"id": "1", "_type": "Employee"},
        {"id": "2", "_type": "Employee"},
        {"id": "1", "_type": "Team"},
    ]
    assert len(provider.calls_for("employees")) == 1
    assert len(provider.calls_for("teams")) == 1


def test_unknown_discriminator_value_resolves_to_null():
    tables = make_tables()
    tables["notes"] = pd.DataFrame(
        {"id": [1], "body": ["orphan"], "notable_id": [1], "notable_type": ["Ghost"]}, dtype=object
    )
    provider = RecordingProvider(
        PandasResourceProvider(tables, polymorphic={"credit_cards": ["visas", "mastercards"]})
    )
    graph = GraphSchema(RESOURCES, provider)
    data = _data(graph.execute_sync("{ notes { nodes { body notable { id } } } }"))
    assert data["notes"]["nodes"] == [{"body": "orphan", "notable": None}]


def test_polymorphic_has_many_filters_on_owner_type():
    graph, provider = make_graph()
    data = _data(graph.execute_sync("{ employees { nodes { notes { nodes { body } } } } }"))
    assert [[n["body"] for n in e["notes"]["nodes"]] for e in data["employees"]["nodes"]] == [["n1"], ["n2"], []]
    request = provider.calls_for("notes")[0]
    assert request.filter == {"notable_id": {"eq": [1, 2, 3]}, "notable_type": {"eq": ["Employee"]}}

    graph, provider = make_graph()
    data = _data(graph.execute_sync("{ teams { nodes { name notes { nodes { body } } } } }"))
    assert [[n["body"] for n in t["notes"]["nodes"]] for t in data["teams"]["nodes"]] == [["n3"], []]
