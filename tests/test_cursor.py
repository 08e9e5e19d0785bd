from __future__ import annotations

import base64
import json

import pytest

from resourcegraph import InvalidCursor, PageSpec, QueryParams, Record
from resourcegraph.cursor import ConnectionPage, decode_cursor, encode_cursor


def _records(*ids: int) -> list[Record]:
    return [Record(resource="employees", attributes={"id": i}) for i in ids]


def _raw(payload) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def test_cursor_is_base64_json_offset():
    cursor = encode_cursor(3)
    assert json.loads(base64.b64decode(cursor)) == {"offset": 3}
    assert decode_cursor(cursor) == 3


@pytest.mark.parametrize(
    "cursor",
    ["", "not-a-cursor!", _raw({"page": 1}), _raw({"offset": -1}), _raw({"offset": True}), _raw([1]), None],
)
def test_malformed_cursors_are_rejected(cursor):
    with pytest.raises(InvalidCursor):
        decode_cursor(cursor)


def test_first_page_offsets_start_at_one():
    page = ConnectionPage(_records(1, 2), QueryParams(page=PageSpec(size=2)), item_count=5)
    assert [page.offset_for(i) for i in range(2)] == [1, 2]
    assert page.page_info["hasNextPage"] is True
    assert page.page_info["hasPreviousPage"] is False
    assert decode_cursor(page.page_info["endCursor"]) == 2


def test_after_cursor_continues_offsets():
    page = ConnectionPage(_records(3, 4), QueryParams(page=PageSpec(size=2, after=2)), item_count=5)
    assert [decode_cursor(edge["cursor"]) for edge in page.edges] == [3, 4]
    assert page.has_next_page is True
    assert page.has_previous_page is True


def test_reverse_page_counts_back_from_total():
    params = QueryParams(page=PageSpec(size=2), reverse=True)
    page = ConnectionPage(_records(4, 5), params, item_count=5)
    assert [page.offset_for(i) for i in range(2)] == [4, 5]
    assert page.has_next_page is False
    assert page.has_previous_page is True


def test_before_cursor_ends_just_before_it():
    page = ConnectionPage(_records(2, 3), QueryParams(page=PageSpec(before=4)), item_count=5)
    assert [page.offset_for(i) for i in range(2)] == [2, 3]


def test_numbered_page_offsets():
    page = ConnectionPage(_records(5, 6), QueryParams(page=PageSpec(size=2, number=3)), item_count=6)
    assert page.start_offset == 4
    assert page.has_next_page is False


def test_empty_page_has_no_cursors():
    page = ConnectionPage([], QueryParams(), item_count=0)
    assert page.page_info == {
        "hasNextPage": False,
        "hasPreviousPage": False,
        "startCursor": None,
        "endCursor": None,
    }


def test_unknown_total_assumes_more_when_page_is_full():
    params = QueryParams(page=PageSpec(size=2))
    assert ConnectionPage(_records(1, 2), params).has_next_page is True
    assert ConnectionPage(_records(1), params).has_next_page is False


def test_empty_page_past_the_end_still_has_previous_page():
    page = ConnectionPage([], QueryParams(page=PageSpec(size=2, after=3)), item_count=3)
    assert page.has_next_page is False
    assert page.has_previous_page is True
    assert page.page_info["startCursor"] is None

    page = ConnectionPage([], QueryParams(page=PageSpec(size=2, number=4)), item_count=3)
    assert page.has_previous_page is True
