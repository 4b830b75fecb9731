from __future__ import annotations

import json
from typing import Any, cast

from lzstring import LZString  # type: ignore[import-untyped]

from domain.models import ExcalidrawDocument

DEFAULT_MAX_URL_LENGTH = 8000


def encode_scene_payload(scene: dict[str, Any]) -> str:
    """LZString-compress a scene into the form Excalidraw reads from ``#json=``."""
    payload = json.dumps(
        {"elements": scene.get("elements", []), "appState": scene.get("appState", {})},
        ensure_ascii=True,
        separators=(",", ":"),
    )
    return cast(str, LZString().compressToEncodedURIComponent(payload))


def decode_scene_payload(encoded: str) -> dict[str, Any]:
    payload = LZString().decompressFromEncodedURIComponent(encoded)
    if not payload:
        msg = "Encoded scene payload could not be decompressed"
        raise ValueError(msg)
    return cast(dict[str, Any], json.loads(payload))


def build_excalidraw_url(
    base_url: str,
    document: ExcalidrawDocument,
    max_length: int | None = DEFAULT_MAX_URL_LENGTH,
) -> str:
    clean_base = base_url.split("#", 1)[0].rstrip("/")
    url = f"{clean_base}/#json={encode_scene_payload(document.to_dict())}"
    if max_length is not None and len(url) > max_length:
        msg = f"Excalidraw URL is {len(url)} characters, limit is {max_length}"
        raise ValueError(msg)
    return url
