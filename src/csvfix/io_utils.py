"""JSON I/O for repair reports, backed by orjson."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def dumps_json(obj: Any, *, pretty: bool = True) -> bytes:
    """Serialize to JSON bytes with sorted keys (indented when ``pretty``)."""
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else orjson.OPT_SORT_KEYS
    return orjson.dumps(obj, option=opts, default=str)


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps_json(obj, pretty=pretty) + b"\n")
