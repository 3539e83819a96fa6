"""JSON helpers shared by the generator backends, server and CLI (orjson)."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def loads_json(raw: str | bytes) -> Any:
    """Parse a JSON document. Raises ``orjson.JSONDecodeError`` (a ValueError)."""
    return orjson.loads(raw)


def dumps_json(obj: Any, *, pretty: bool = False) -> bytes:
    """Serialize *obj*; dataclasses are handled natively by orjson."""
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else 0
    return orjson.dumps(obj, option=opts)


def extract_rows(payload: Any, keys: tuple[str, ...]) -> list[dict[str, Any]]:
    """Pull a list of row dicts out of a model's JSON payload.

    Chat models in JSON mode must return an object, so arrays arrive wrapped
    under an arbitrary key. Accepts a bare list, a dict holding a list under
    one of *keys*, or a dict whose only list value is the rows.
    """
    if isinstance(payload, list):
        return [row for row in payload if isinstance(row, dict)]
    if isinstance(payload, dict):
        for key in keys:
            val = payload.get(key)
            if isinstance(val, list):
                return [row for row in val if isinstance(row, dict)]
        lists = [val for val in payload.values() if isinstance(val, list)]
        if len(lists) == 1:
            return [row for row in lists[0] if isinstance(row, dict)]
    return []
