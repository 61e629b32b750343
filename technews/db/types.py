from __future__ import annotations

import json
from typing import Any, List

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator


def decode_json_list(value: Any) -> List[Any]:
    """Decode a JSON-encoded array; anything that isn't one decodes to ``[]``."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return []
        return decoded if isinstance(decoded, list) else []
    return []


class JSONList(TypeDecorator):
    """Ordered list stored as JSON text.

    Encoding keeps non-ASCII characters as-is so that ``ILIKE`` over the raw
    column matches Chinese tags the same way it matches English ones.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return "[]"
        return json.dumps(list(value), ensure_ascii=False)

    def process_result_value(self, value, dialect):
        return decode_json_list(value)
