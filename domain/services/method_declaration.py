from __future__ import annotations

import re

from domain.models import MethodModel

_VISIBILITY_BY_TOKEN: dict[str, str] = {
    "+": "public",
    "public": "public",
    "-": "private",
    "private": "private",
    "#": "protected",
    "protected": "protected",
}
_PARAMS_RE = re.compile(r"\((.*)\)")


def normalize_visibility(visibility: str | None) -> str:
    return _VISIBILITY_BY_TOKEN.get(str(visibility or "").strip(), "")


def format_params(method: MethodModel) -> str:
    if not method.params:
        match = _PARAMS_RE.search(method.signature)
        return match.group(1).strip() if match else ""
    rendered: list[str] = []
    for index, param in enumerate(method.params):
        param_type = param.type.strip()
        name = param.name.strip()
        if param_type and name:
            rendered.append(f"{param_type} {name}")
        elif param_type or name:
            rendered.append(param_type or name)
        else:
            rendered.append(f"arg{index}")
    return ", ".join(rendered)


def to_method_declaration(method: MethodModel) -> str:
    """Build the header line shown above a structogram, e.g. ``public static void main(String[] args)``."""
    visibility = normalize_visibility(method.visibility)
    static_token = "static" if method.is_static else ""
    return_type = str(method.return_type or "").strip() or "void"
    prefix = " ".join(token for token in (visibility, static_token, return_type) if token)
    return f"{prefix} {method.display_name()}({format_params(method)})".strip()
