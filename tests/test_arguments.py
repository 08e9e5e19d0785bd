from __future__ import annotations

import pytest

from resourcegraph import (
    AttributeDescriptor,
    InvalidFilterValue,
    NullFilter,
    ResourceDescriptor,
    UnauthorizedFilter,
    UnauthorizedSort,
    UnsupportedLast,
)
from resourcegraph.arguments import normalize_filter, normalize_sort, params_from_args
from resourcegraph.cursor import encode_cursor


def _make_resource() -> ResourceDescriptor:
    return ResourceDescriptor(
        name="employees",
        attributes=(
            AttributeDescriptor("id", "integer_id"),
            AttributeDescriptor("first_name"),
            AttributeDescriptor("nickname", allow_nil=True),
            AttributeDescriptor("status", deny=("archived",)),
            AttributeDescriptor("salary", "integer", filterable=lambda ctx: bool(ctx), sortable=lambda ctx: bool(ctx)),
        ),
    )


def test_first_sets_page_size():
    params = params_from_args(_make_resource(), {"first": 2})
    assert params.page.size == 2
    assert params.reverse is False
    assert params.paginating is True


def test_last_sets_size_and_reverses():
    params = params_from_args(_make_resource(), {"last": 3})
    assert params.page.size == 3
    assert params.reverse is True


@pytest.mark.parametrize("cursor_arg", ["after", "before"])
def test_last_cannot_be_combined_with_cursors(cursor_arg):
    with pytest.raises(UnsupportedLast):
        params_from_args(_make_resource(), {"last": 1, cursor_arg: encode_cursor(2)})


def test_cursors_become_offsets():
    params = params_from_args(_make_resource(), {"first": 2, "after": encode_cursor(4), "before": encode_cursor(9)})
    assert params.page.after == 4
    assert params.page.before == 9


def test_id_argument_becomes_equality_filter():
    params = params_from_args(_make_resource(), {"id": "7"})
    assert params.filter == {"id": {"eq": "7"}}


def test_no_arguments_is_not_paginating():
    assert params_from_args(_make_resource(), {}).paginating is False


def test_null_filter_values_are_rejected_unless_allowed():
    resource = _make_resource()
    with pytest.raises(NullFilter):
        normalize_filter(resource, {"first_name": {"eq": None}})
    assert normalize_filter(resource, {"nickname": {"eq": None}}) == {"nickname": {"eq": None}}


def test_denied_values_are_rejected():
    with pytest.raises(InvalidFilterValue):
        normalize_filter(_make_resource(), {"status": {"eq": ["active", "archived"]}})


def test_guarded_filter_and_sort_check_the_context():
    resource = _make_resource()
    with pytest.raises(UnauthorizedFilter):
        normalize_filter(resource, {"salary": {"gt": 10}}, context=None)
    assert normalize_filter(resource, {"salary": {"gt": 10}}, context={"admin": True}) == {"salary": {"gt": 10}}

    with pytest.raises(UnauthorizedSort):
        normalize_sort(resource, [{"att": "salary", "dir": "desc"}], context=None)
    terms = normalize_sort(resource, [{"att": "salary", "dir": "desc"}], context={"admin": True})
    assert [(t.attribute, t.direction) for t in terms] == [("salary", "desc")]


def test_unset_filter_entries_are_skipped():
    assert normalize_filter(_make_resource(), {"first_name": None}) == {}
