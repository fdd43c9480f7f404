"""
orjson helpers for the store snapshot.
- read_json(Path)  -> Any | None (None when the file is missing)
- write_json(Path, data) -> writes bytes atomically (parent dirs created)

orjson works on bytes, so files are opened in binary mode.
"""
import orjson as json
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any:
    """Read a JSON file, or None when it does not exist."""
    if not path.exists():
        return None
    with path.open("rb") as f:
        return json.loads(f.read())


def write_json(path: Path, data: Any) -> None:
    """Write `data` next to `path` then swap it in, so readers never see half a file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("wb") as f:
        f.write(json.dumps(data, option=json.OPT_INDENT_2 | json.OPT_NON_STR_KEYS))
    tmp.replace(path)
