from __future__ import annotations

"""Opaque offset cursors and connection pages."""

import base64
import binascii
import json
from typing import Any, Dict, List, Optional

from .errors import InvalidCursor
from .models import QueryParams, Record


def encode_cursor(offset: int) -> str:
    return base64.b64encode(json.dumps({"offset": offset}).encode("utf-8")).decode("ascii")


def decode_cursor(cursor: Any) -> int:
    if not isinstance(cursor, str) or not cursor:
        raise InvalidCursor(cursor)
    try:
        payload = json.loads(base64.b64decode(cursor.encode("ascii"), validate=True))
        offset = payload["offset"]
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError):
        raise InvalidCursor(cursor) from None
    if not isinstance(offset, int) or isinstance(offset, bool) or offset < 0:
        raise InvalidCursor(cursor)
    return offset


class ConnectionPage:
    """One resolved window of a to-many field.

    ``stats`` holds the already-unwrapped ``{attribute: {calculation: value}}``
    for this page's parent.
    """

    def __init__(
        self,
        records: List[Record],
        params: QueryParams,
        *,
        item_count: Optional[int] = None,
        stats: Optional[Dict[str, Dict[str, Any]]] = None,
        parent_key: Any = None,
    ):
        self.records = records
        self.params = params
        self.item_count = item_count
        self.stats = stats or {}
        self.parent_key = parent_key

    @property
    def start_offset(self) -> int:
        page = self.params.page
        count = len(self.records)
        if self.params.reverse and self.item_count is not None:
            return max(self.item_count - count, 0)
        if page.after is not None:
            return page.after
        if page.before is not None:
            return max(page.before - 1 - count, 0)
        if page.number and page.size:
            return (page.number - 1) * page.size
        return 0

    def offset_for(self, index: int) -> int:
        # 1-based position of the item in the full ordered result set
        return self.start_offset + index + 1

    def cursor_for(self, index: int) -> str:
        return encode_cursor(self.offset_for(index))

    @property
    def edges(self) -> List[Dict[str, Any]]:
        return [
            {"node": record, "cursor": self.cursor_for(i)}
            for i, record in enumerate(self.records)
        ]

    @property
    def has_next_page(self) -> bool:
        if not self.records:
            return False
        last = self.offset_for(len(self.records) - 1)
        if self.item_count is not None:
            return last < self.item_count
        size = self.params.page.size
        return bool(size) and len(self.records) >= size

    @property
    def has_previous_page(self) -> bool:
        return self.start_offset > 0

    @property
    def page_info(self) -> Dict[str, Any]:
        return {
            "hasNextPage": self.has_next_page,
            "hasPreviousPage": self.has_previous_page,
            "startCursor": self.cursor_for(0) if self.records else None,
            "endCursor": self.cursor_for(len(self.records) - 1) if self.records else None,
        }


__all__ = ["encode_cursor", "decode_cursor", "ConnectionPage"]
