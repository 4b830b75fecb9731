from __future__ import annotations

import html

from domain.models import (
    LayoutConfig,
    LinePrimitive,
    Primitive,
    RectPrimitive,
    StructogramView,
    TextPrimitive,
)

CAPTION_TOP_PADDING = 10
CAPTION_BOTTOM_PADDING = 10
CAPTION_COLOR = "#1e1e1e"


def _fmt(value: float) -> str:
    rounded = round(float(value), 2)
    if rounded.is_integer():
        return str(int(rounded))
    return f"{rounded:g}"


class StructogramToSvgConverter:
    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def caption_height(self) -> int:
        return CAPTION_TOP_PADDING + self.config.font_size + CAPTION_BOTTOM_PADDING

    def convert(self, view: StructogramView, include_declaration: bool = True) -> str:
        offset_y = self.caption_height() if include_declaration else 0
        width = view.width
        height = view.height + offset_y
        if not view.has_diagram:
            width = max(width, len(view.message or "") * self.config.char_width + 2 * self.config.canvas_padding)
            height = offset_y + self.config.row_height + 2 * self.config.canvas_padding

        lines = [
            (
                f'<svg xmlns="http://www.w3.org/2000/svg" width="{_fmt(width)}" '
                f'height="{_fmt(height)}" viewBox="0 0 {_fmt(width)} {_fmt(height)}" '
                f'stroke-width="{self.config.stroke_width}" role="img" '
                f'aria-label="Nassi-Shneiderman structogram">'
            ),
            f"  <title>{html.escape(view.declaration)}</title>",
        ]
        if include_declaration:
            lines.append(
                f'  <text x="{_fmt(self.config.canvas_padding)}" '
                f'y="{_fmt(CAPTION_TOP_PADDING + self.config.font_size)}" '
                f'font-size="{self.config.font_size}" font-weight="bold" fill="{CAPTION_COLOR}">'
                f"{html.escape(view.declaration)}</text>"
            )
        if view.has_diagram:
            lines.append(f'  <g transform="translate(0 {_fmt(offset_y)})">')
            lines.extend(f"    {self._element(primitive)}" for primitive in view.primitives)
            lines.append("  </g>")
        else:
            lines.append(
                f'  <text x="{_fmt(self.config.canvas_padding)}" '
                f'y="{_fmt(offset_y + self.config.canvas_padding + self.config.row_height / 2)}" '
                f'font-size="{self.config.font_size}" fill="{CAPTION_COLOR}">'
                f"{html.escape(view.message or '')}</text>"
            )
        lines.append("</svg>")
        return "\n".join(lines) + "\n"

    def _element(self, primitive: Primitive) -> str:
        if isinstance(primitive, RectPrimitive):
            stroke = primitive.stroke or "none"
            return (
                f'<rect x="{_fmt(primitive.x)}" y="{_fmt(primitive.y)}" '
                f'width="{_fmt(primitive.width)}" height="{_fmt(primitive.height)}" '
                f'fill="{primitive.fill}" stroke="{stroke}" data-role="{primitive.role}"/>'
            )
        if isinstance(primitive, LinePrimitive):
            return (
                f'<line x1="{_fmt(primitive.x1)}" y1="{_fmt(primitive.y1)}" '
                f'x2="{_fmt(primitive.x2)}" y2="{_fmt(primitive.y2)}" '
                f'stroke="{primitive.stroke}" data-role="{primitive.role}"/>'
            )
        if isinstance(primitive, TextPrimitive):
            return (
                f'<text x="{_fmt(primitive.x)}" y="{_fmt(primitive.y)}" '
                f'text-anchor="{primitive.anchor}" font-size="{primitive.font_size}" '
                f'fill="{primitive.fill}" data-role="{primitive.role}">'
                f"{html.escape(primitive.text)}</text>"
            )
        raise TypeError(f"Unsupported primitive: {type(primitive).__name__}")
