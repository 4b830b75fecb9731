from __future__ import annotations

from dataclasses import replace
from typing import List

from domain.models import (
    DEFAULT_PALETTE,
    NO_ELSE_LABEL,
    IfLayout,
    LayoutConfig,
    LayoutNode,
    LinePrimitive,
    LoopLayout,
    Primitive,
    RectPrimitive,
    SequenceLayout,
    StatementLayout,
    StructogramPalette,
    SwitchLayout,
    TextAnchor,
    TextPrimitive,
    TryLayout,
)
from domain.services.column_fit import fit_column_widths


class StructogramRenderer:
    """Paint pass: places a measured layout tree and emits draw primitives.

    Every recursive call receives the width its parent allotted, so widths
    redistributed by :func:`fit_column_widths` reach the leaves without a
    second measurement.
    """

    def __init__(
        self,
        config: LayoutConfig | None = None,
        palette: StructogramPalette | None = None,
    ) -> None:
        self.config = config or LayoutConfig()
        self.palette = palette or DEFAULT_PALETTE

    def paint(
        self,
        node: LayoutNode,
        x: float,
        y: float,
        forced_width: float | None = None,
    ) -> List[Primitive]:
        primitives: List[Primitive] = []
        width = node.width if forced_width is None else forced_width
        self._paint_node(node, x, y, width, primitives)
        return primitives

    def _paint_node(
        self,
        node: LayoutNode,
        x: float,
        y: float,
        width: float,
        out: List[Primitive],
    ) -> None:
        if isinstance(node, StatementLayout):
            self._paint_statement(node, x, y, width, out)
        elif isinstance(node, SequenceLayout):
            offset_y = y
            for child in node.children:
                self._paint_node(child, x, offset_y, width, out)
                offset_y += child.height
        elif isinstance(node, IfLayout):
            self._paint_if(node, x, y, width, out)
        elif isinstance(node, LoopLayout):
            self._paint_loop(node, x, y, width, out)
        elif isinstance(node, SwitchLayout):
            self._paint_switch(node, x, y, width, out)
        elif isinstance(node, TryLayout):
            self._paint_try(node, x, y, width, out)
        else:
            raise TypeError(f"Unsupported layout node: {type(node).__name__}")

    def _paint_statement(
        self, node: StatementLayout, x: float, y: float, width: float, out: List[Primitive]
    ) -> None:
        out.append(self._rect(x, y, width, node.height, self.palette.body, "statement"))
        if node.text.strip() == NO_ELSE_LABEL:
            out.append(
                self._centered_text(node.text, x, y, width, node.height, "statement_text")
            )
        else:
            out.append(
                self._left_text(node.text, x, y, node.height, self.palette.text, "statement_text")
            )

    def _paint_if(
        self, node: IfLayout, x: float, y: float, width: float, out: List[Primitive]
    ) -> None:
        config = self.config
        branch_top = y + node.header_height
        branch_height = node.branch_height
        left_width, right_width = fit_column_widths(
            [node.then_branch.width, node.else_branch.width], width
        )
        split_x = x + left_width
        bottom = y + node.height
        border = self.palette.border

        out.append(self._rect(x, y, width, node.height, self.palette.body, "if"))
        out.append(self._rect(x, y, width, node.header_height, self.palette.if_header, "if_header"))
        out.append(LinePrimitive(x, y, split_x, branch_top, border, "if_diagonal"))
        out.append(LinePrimitive(x + width, y, split_x, branch_top, border, "if_diagonal"))
        out.append(LinePrimitive(split_x, branch_top, split_x, bottom, border, "if_split"))
        out.append(LinePrimitive(x, branch_top, x + width, branch_top, border, "if_header_bottom"))
        out.append(
            self._text(
                f"if ({node.condition})",
                split_x,
                y + config.font_size + config.condition_top_padding,
                "middle",
                self.palette.text,
                "if_condition",
            )
        )
        out.append(
            self._text(
                "T",
                x + config.text_padding_x,
                branch_top - config.label_text_offset_y,
                "start",
                self.palette.muted_text,
                "if_true_label",
            )
        )
        out.append(
            self._text(
                "F",
                x + width - config.text_padding_x,
                branch_top - config.label_text_offset_y,
                "end",
                self.palette.muted_text,
                "if_false_label",
            )
        )

        out.append(self._rect(x, branch_top, left_width, branch_height, self.palette.branch, "branch"))
        out.append(
            self._rect(split_x, branch_top, right_width, branch_height, self.palette.branch, "branch")
        )
        self._paint_node(node.then_branch, x, branch_top, left_width, out)
        self._padded_remainder(
            x, branch_top, left_width, node.then_branch.height, branch_height, out
        )
        self._paint_node(node.else_branch, split_x, branch_top, right_width, out)
        self._padded_remainder(
            split_x, branch_top, right_width, node.else_branch.height, branch_height, out
        )

    def _paint_loop(
        self, node: LoopLayout, x: float, y: float, width: float, out: List[Primitive]
    ) -> None:
        header_height = node.header_height
        body_y = y + header_height
        body_height = node.body_band_height
        footer_y = body_y + body_height
        inset = node.body_inset_width
        content_x = x + inset
        content_width = width - inset
        palette = self.palette

        out.append(self._rect(x, y, width, node.height, palette.body, "loop"))
        if inset > 0:
            out.append(
                self._rect(x, y, width, header_height, palette.loop_header, "loop_header", outlined=False)
            )
        else:
            out.append(self._rect(x, y, width, header_height, palette.condition, "loop_header"))
        out.append(self._left_text(node.header, x, y, header_height, palette.text, "loop_header_text"))

        if inset > 0:
            out.append(self._rect(x, body_y, width, body_height, palette.branch, "loop_band", outlined=False))
            out.append(
                self._rect(x, body_y, inset, body_height, palette.loop_header, "loop_inset", outlined=False)
            )
            out.append(LinePrimitive(content_x, body_y, x + width, body_y, palette.border, "loop_inset_top"))
            out.append(
                LinePrimitive(content_x, body_y, content_x, footer_y, palette.border, "loop_inset_side")
            )
            self._paint_node(node.body, content_x, body_y, content_width, out)
            self._padded_remainder(content_x, body_y, content_width, node.body.height, body_height, out)
        else:
            self._paint_node(node.body, x, body_y, width, out)
            self._padded_remainder(x, body_y, width, node.body.height, body_height, out)

        if node.footer is not None:
            out.append(self._rect(x, footer_y, width, header_height, palette.condition, "loop_footer"))
            out.append(
                self._left_text(node.footer, x, footer_y, header_height, palette.text, "loop_footer_text")
            )

    def _paint_switch(
        self, node: SwitchLayout, x: float, y: float, width: float, out: List[Primitive]
    ) -> None:
        palette = self.palette
        header_height = node.selector_band_height + node.label_band_height
        header_bottom = y + header_height
        apex_y = y + node.selector_band_height
        branch_height = node.branch_height
        case_widths = fit_column_widths([entry.width for entry in node.cases], width)

        column_starts: list[float] = []
        cursor = x
        for case_width in case_widths:
            column_starts.append(cursor)
            cursor += case_width
        multiple_columns = len(case_widths) >= 2
        apex_x = column_starts[-1] if multiple_columns else x + width / 2
        diagonal_run = max(apex_x - x, 1)

        out.append(self._rect(x, y, width, node.height, palette.body, "switch"))
        out.append(self._rect(x, y, width, header_height, palette.switch_header, "switch_header"))
        out.append(LinePrimitive(x, y, apex_x, apex_y, palette.border, "switch_diagonal"))
        out.append(LinePrimitive(x + width, y, apex_x, apex_y, palette.border, "switch_diagonal"))
        out.append(LinePrimitive(apex_x, apex_y, apex_x, header_bottom, palette.border, "switch_drop"))
        if multiple_columns:
            for column_x in column_starts[1:-1]:
                diagonal_y = y + (column_x - x) * (apex_y - y) / diagonal_run
                out.append(
                    LinePrimitive(column_x, diagonal_y, column_x, header_bottom, palette.border, "switch_drop")
                )
        out.append(
            self._text(
                node.expression,
                apex_x,
                y + self.config.font_size + self.config.condition_top_padding,
                "middle",
                palette.text,
                "switch_expression",
            )
        )

        for index, (entry, column_x, case_width) in enumerate(
            zip(node.cases, column_starts, case_widths)
        ):
            body = self._stretch_loop_body(entry.body, branch_height)
            out.append(
                self._centered_text(
                    entry.caption, column_x, apex_y, case_width, node.label_band_height, "case_label"
                )
            )
            out.append(
                self._rect(column_x, header_bottom, case_width, branch_height, palette.branch, "branch")
            )
            self._paint_node(body, column_x, header_bottom, case_width, out)
            self._padded_remainder(column_x, header_bottom, case_width, body.height, branch_height, out)
            if index > 0:
                out.append(
                    LinePrimitive(
                        column_x, header_bottom, column_x, y + node.height, palette.border, "case_divider"
                    )
                )

    def _paint_try(
        self, node: TryLayout, x: float, y: float, width: float, out: List[Primitive]
    ) -> None:
        out.append(self._rect(x, y, width, node.height, self.palette.body, "try"))
        self._section_header("try", x, y, width, node.header_height, "try_header", out)
        offset_y = y + node.header_height
        self._paint_node(node.body, x, offset_y, width, out)
        offset_y += node.body.height

        for entry in node.catches:
            self._section_header(
                entry.caption, x, offset_y, width, node.section_header_height, "catch_header", out
            )
            offset_y += node.section_header_height
            self._paint_node(entry.body, x, offset_y, width, out)
            offset_y += entry.body.height

        if node.finally_branch is not None:
            self._section_header(
                "finally", x, offset_y, width, node.section_header_height, "finally_header", out
            )
            offset_y += node.section_header_height
            self._paint_node(node.finally_branch, x, offset_y, width, out)

    def _section_header(
        self,
        label: str,
        x: float,
        y: float,
        width: float,
        height: float,
        role: str,
        out: List[Primitive],
    ) -> None:
        out.append(self._rect(x, y, width, height, self.palette.try_wrapper, role))
        out.append(self._left_text(label, x, y, height, self.palette.text, f"{role}_text"))

    def _stretch_loop_body(self, body: LayoutNode, target_height: int) -> LayoutNode:
        # Lets the side bar of a trailing pre-test loop reach the bottom of its column.
        if body.height >= target_height:
            return body
        if isinstance(body, LoopLayout) and body.footer is None:
            return replace(body, height=target_height)
        if isinstance(body, SequenceLayout) and body.children:
            last = body.children[-1]
            if isinstance(last, LoopLayout) and last.footer is None:
                stretched = replace(last, height=last.height + target_height - body.height)
                return replace(body, children=(*body.children[:-1], stretched), height=target_height)
        return body

    def _padded_remainder(
        self,
        x: float,
        y: float,
        width: float,
        content_height: float,
        full_height: float,
        out: List[Primitive],
    ) -> None:
        if content_height >= full_height:
            return
        out.append(
            self._rect(x, y + content_height, width, full_height - content_height, self.palette.body, "remainder")
        )

    def _rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        fill: str,
        role: str,
        outlined: bool = True,
    ) -> RectPrimitive:
        return RectPrimitive(
            x=x,
            y=y,
            width=width,
            height=height,
            fill=fill,
            stroke=self.palette.border if outlined else None,
            role=role,
        )

    def _baseline(self, top: float, row_height: float) -> float:
        return top + row_height / 2 + self.config.text_baseline_offset / 2

    def _left_text(
        self, value: str, x: float, y: float, row_height: float, fill: str, role: str
    ) -> TextPrimitive:
        return self._text(
            value, x + self.config.text_padding_x, self._baseline(y, row_height), "start", fill, role
        )

    def _centered_text(
        self, value: str, x: float, y: float, width: float, row_height: float, role: str
    ) -> TextPrimitive:
        return self._text(
            value, x + width / 2, self._baseline(y, row_height), "middle", self.palette.text, role
        )

    def _text(
        self, value: str, x: float, y: float, anchor: TextAnchor, fill: str, role: str
    ) -> TextPrimitive:
        return TextPrimitive(
            x=x,
            y=y,
            text=value,
            anchor=anchor,
            fill=fill,
            font_size=self.config.font_size,
            role=role,
        )
