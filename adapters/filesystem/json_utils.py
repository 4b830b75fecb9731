from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def strip_line_comments(content: str) -> str:
    """Drop ``//`` comments that sit outside string literals."""
    result_lines: list[str] = []
    for line in content.splitlines():
        in_string = False
        escaped = False
        cut = len(line)
        for idx, char in enumerate(line):
            if char == '"' and not escaped:
                in_string = not in_string
            elif not in_string and line.startswith("//", idx):
                cut = idx
                break
            escaped = char == "\\" and not escaped
        result_lines.append(line[:cut])
    return "\n".join(result_lines)


def load_json_document(path: Path) -> Any:
    return orjson.loads(strip_line_comments(path.read_text(encoding="utf-8")))


def load_json(path: Path) -> dict[str, Any]:
    data = orjson.loads(path.read_bytes())
    return data if isinstance(data, dict) else {}


def dump_json_bytes(payload: Any) -> bytes:
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE)


def write_json_atomic(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    tmp_path.write_bytes(dump_json_bytes(payload))
    tmp_path.replace(path)
