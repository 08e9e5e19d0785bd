from __future__ import annotations

import pytest

pytest.importorskip("pandas")

from tests.helpers.domain import make_graph


def _data(result):
    assert "errors" not in result, result.get("errors")
    return result["data"]


def test_top_level_stats():
    graph, provider = make_graph()
    data = _data(
        graph.execute_sync(
            "{ employees { stats { total { count } age { sum average maximum minimum } } } }"
        )
    )
    assert data["employees"]["stats"] == {
        "total": {"count": 3},
        "age": {"sum": 180, "average": 60, "maximum": 70, "minimum": 50},
    }
    request = provider.calls_for("employees")[0]
    assert request.stats == {"total": ["count"], "age": ["sum", "average", "maximum", "minimum"]}
    # stats-only selections do not load records
    assert request.page.size == 0


def test_stats_respect_filters_and_come_with_nodes():
    graph, provider = make_graph()
    data = _data(
        graph.execute_sync(
            "{ employees(filter: {age: {gt: 55}}) { nodes { firstName } stats { total { count } } } }"
        )
    )
    assert [n["firstName"] for n in data["employees"]["nodes"]] == ["Stephen", "Agatha"]
    assert data["employees"]["stats"]["total"]["count"] == 2
    assert provider.calls_for("employees")[0].page.size is None


def test_nested_stats_are_grouped_per_parent():
    graph, provider = make_graph()
    data = _data(graph.execute_sync("{ employees { nodes { positions { stats { total { count } } } } } }"))
    counts = [e["positions"]["stats"]["total"]["count"] for e in data["employees"]["nodes"]]
    assert counts == [5, 2, 0]
    calls = provider.calls_for("positions")
    assert len(calls) == 1
    assert calls[0].group_by == "employee_id"


def test_nested_stats_need_grouping_for_many_parents():
    graph, _ = make_graph(can_group=False)
    result = graph.execute_sync("{ employees { nodes { positions { stats { total { count } } } } } }")
    assert result["errors"]
    assert result["errors"][0]["extensions"]["code"] == 400
    assert "multiple parent nodes" in result["errors"][0]["message"]


def test_nested_stats_for_single_parent_do_not_need_grouping():
    graph, provider = make_graph(can_group=False)
    data = _data(graph.execute_sync('{ employee(id: "1") { positions { stats { total { count } } } } }'))
    assert data["employee"]["positions"]["stats"]["total"]["count"] == 5
    assert provider.calls_for("positions")[0].group_by is None


RANK_STATS = "positions { stats { rank { sum average maximum minimum } } }"


def test_grouped_stats_for_childless_parent_match_single_parent():
    graph, _ = make_graph()
    data = _data(graph.execute_sync("{ employees { nodes { id %s } } }" % RANK_STATS))
    batched = {e["id"]: e["positions"]["stats"]["rank"] for e in data["employees"]["nodes"]}
    assert batched["1"] == {"sum": 15, "average": 3, "maximum": 5, "minimum": 1}
    assert batched["3"] == {"sum": 0, "average": 0, "maximum": None, "minimum": None}

    for employee_id, expected in batched.items():
        single = _data(
            graph.execute_sync("query($id: ID!) { employee(id: $id) { %s } }" % RANK_STATS, {"id": employee_id})
        )
        assert single["employee"]["positions"]["stats"]["rank"] == expected
