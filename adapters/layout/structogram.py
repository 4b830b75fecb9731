from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import List, Optional

from domain.models import (
    DEFAULT_CASE_LABEL,
    EMPTY_BODY_LABEL,
    NO_ELSE_LABEL,
    POST_CONDITION_LOOP_KIND,
    CatchLayout,
    ControlTreeNode,
    IfLayout,
    LayoutConfig,
    LayoutNode,
    LoopLayout,
    SequenceLayout,
    StatementLayout,
    SwitchCase,
    SwitchCaseLayout,
    SwitchLayout,
    TryLayout,
)
from domain.ports.layout import LayoutEngine
from domain.services.column_fit import fit_column_widths
from domain.services.normalize_statement import normalize_label, normalize_statement

logger = logging.getLogger(__name__)

SWITCH_CASE_TERMINATORS = {"break", "return", "throw", "continue", "yield"}


@dataclass(frozen=True)
class CaseGroup:
    labels: List[str]
    nodes: List[ControlTreeNode]
    terminates: bool


class StructogramLayoutEngine(LayoutEngine):
    """Measurement pass: sizes every box of a control tree bottom-up."""

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def build(self, node: ControlTreeNode | None) -> LayoutNode | None:
        if node is None:
            return None
        return self._layout_node(node) or self._statement(EMPTY_BODY_LABEL)

    def text_width(self, value: str) -> int:
        return max(self.config.min_content_width, self.inline_text_width(value))

    def inline_text_width(self, value: str) -> int:
        return len(value) * self.config.char_width + self.config.text_padding_x * 2

    def _layout_node(self, node: ControlTreeNode) -> Optional[LayoutNode]:
        if node.kind == "statement":
            text = normalize_statement(node.text)
            return self._statement(text) if text else None
        if node.kind == "sequence":
            return self._sequence(node.children)
        if node.kind == "if":
            return self._if(node)
        if node.kind == "loop":
            return self._loop(node)
        if node.kind == "switch":
            return self._switch(node)
        if node.kind == "try":
            return self._try(node)

        logger.debug("Unknown control-tree kind %r rendered as a statement row", node.kind)
        return self._statement(normalize_label(node.text, node.kind))

    def _statement(self, text: str) -> StatementLayout:
        return StatementLayout(
            text=text,
            width=self.text_width(text),
            height=self.config.row_height,
        )

    def _sequence(
        self,
        nodes: Sequence[ControlTreeNode],
        empty_label: str = EMPTY_BODY_LABEL,
    ) -> SequenceLayout:
        children = [
            layout for layout in (self._layout_node(entry) for entry in nodes) if layout is not None
        ]
        if not children:
            children = [self._statement(empty_label)]
        return SequenceLayout(
            children=tuple(children),
            width=max(child.width for child in children),
            height=sum(child.height for child in children),
        )

    def _if(self, node: ControlTreeNode) -> IfLayout:
        condition = normalize_label(node.condition, "condition")
        then_branch = self._sequence(node.then_branch)
        else_branch: LayoutNode
        if node.else_branch:
            else_branch = self._sequence(node.else_branch, empty_label=NO_ELSE_LABEL)
        else:
            else_branch = self._statement(NO_ELSE_LABEL)
        header_height = self.config.if_header_height
        width = max(
            self.text_width(f"if ({condition})"),
            then_branch.width + else_branch.width,
        )
        return IfLayout(
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch,
            header_height=header_height,
            width=width,
            height=header_height + max(then_branch.height, else_branch.height),
        )

    def _loop(self, node: ControlTreeNode) -> LoopLayout:
        body = self._sequence(node.children)
        condition = normalize_label(node.condition, "condition")
        loop_kind = str(node.loop_kind or "").strip() or "loop"
        header_height = self.config.header_height

        if loop_kind == POST_CONDITION_LOOP_KIND:
            header = "do"
            footer = f"while ({condition})"
            return LoopLayout(
                header=header,
                footer=footer,
                body_inset_width=0,
                body=body,
                header_height=header_height,
                width=max(self.text_width(header), self.text_width(footer), body.width),
                height=header_height + body.height + header_height,
            )

        header = f"{loop_kind} ({condition})"
        inset = self.config.loop_body_inset_width
        return LoopLayout(
            header=header,
            footer=None,
            body_inset_width=inset,
            body=body,
            header_height=header_height,
            width=max(self.text_width(header), body.width + inset),
            height=header_height + body.height,
        )

    def _switch(self, node: ControlTreeNode) -> SwitchLayout:
        expression = normalize_label(node.condition, "selector")
        columns = self._switch_columns(node.switch_cases)
        base_widths = [
            max(body.width, self.text_width(self._case_caption(label))) for label, body in columns
        ]
        case_widths = [
            int(width)
            for width in fit_column_widths(base_widths, self.text_width(expression))
        ]
        cases = tuple(
            SwitchCaseLayout(
                label=label,
                caption=self._case_caption(label),
                body=body,
                width=width,
            )
            for (label, body), width in zip(columns, case_widths)
        )
        selector_band_height = self.config.header_height
        label_band_height = self.config.section_header_height
        branch_height = max(
            self.config.row_height, max(entry.body.height for entry in cases)
        )
        return SwitchLayout(
            expression=expression,
            cases=cases,
            selector_band_height=selector_band_height,
            label_band_height=label_band_height,
            width=sum(case_widths),
            height=selector_band_height + label_band_height + branch_height,
        )

    def _case_caption(self, label: str) -> str:
        if label == DEFAULT_CASE_LABEL:
            return label
        return f"case {label}"

    def _switch_columns(self, cases: Sequence[SwitchCase]) -> list[tuple[str, LayoutNode]]:
        groups: list[CaseGroup] = []
        pending_labels: list[str] = []
        for entry in cases:
            label = normalize_label(entry.label, DEFAULT_CASE_LABEL)
            own_nodes = self._strip_trailing_breaks(entry.body)
            terminates = self._ends_with_terminator(entry.body)
            if not self._has_renderable_body(own_nodes) and not terminates:
                # Empty label without a terminator falls through into the next case.
                pending_labels.append(label)
                continue
            groups.append(
                CaseGroup(labels=[*pending_labels, label], nodes=own_nodes, terminates=terminates)
            )
            pending_labels = []
        if pending_labels:
            groups.append(CaseGroup(labels=pending_labels, nodes=[], terminates=False))

        if not groups:
            return [(DEFAULT_CASE_LABEL, self._statement(EMPTY_BODY_LABEL))]

        # Non-terminating groups also run the statements of every following group.
        propagated: list[list[ControlTreeNode]] = [[] for _ in groups]
        for index in range(len(groups) - 1, -1, -1):
            group = groups[index]
            follow = (
                propagated[index + 1]
                if not group.terminates and index + 1 < len(groups)
                else []
            )
            propagated[index] = [*group.nodes, *follow]

        columns: list[tuple[str, LayoutNode]] = []
        for group, nodes in zip(groups, propagated):
            body: LayoutNode
            if self._has_renderable_body(nodes):
                body = self._sequence(nodes)
            else:
                body = self._statement(EMPTY_BODY_LABEL)
            columns.append((", ".join(group.labels), body))
        return columns

    def _strip_trailing_breaks(self, nodes: Sequence[ControlTreeNode]) -> list[ControlTreeNode]:
        end = len(nodes)
        while end > 0:
            last = nodes[end - 1]
            if last.kind != "statement" or normalize_statement(last.text) != "break":
                break
            end -= 1
        return list(nodes[:end])

    def _has_renderable(self, node: ControlTreeNode) -> bool:
        if node.kind == "statement":
            return normalize_statement(node.text) is not None
        if node.kind == "sequence":
            return self._has_renderable_body(node.children)
        return True

    def _has_renderable_body(self, nodes: Sequence[ControlTreeNode]) -> bool:
        return any(self._has_renderable(entry) for entry in nodes)

    def _ends_with_terminator(self, nodes: Sequence[ControlTreeNode]) -> bool:
        last = next((entry for entry in reversed(nodes) if self._has_renderable(entry)), None)
        if last is None or last.kind != "statement":
            return False
        text = normalize_statement(last.text) or ""
        keyword = text.split(" ", 1)[0].lower()
        return keyword in SWITCH_CASE_TERMINATORS

    def _try(self, node: ControlTreeNode) -> TryLayout:
        body = self._sequence(node.children)
        catches = tuple(
            CatchLayout(
                exception=normalize_label(entry.exception, "Exception"),
                body=self._sequence(entry.body),
            )
            for entry in node.catches
        )
        finally_branch = self._sequence(node.finally_branch) if node.finally_branch else None
        header_height = self.config.header_height
        section_height = self.config.section_header_height

        section_widths = [self.text_width("try"), body.width]
        height = header_height + body.height
        for entry in catches:
            section_widths.append(max(self.text_width(entry.caption), entry.body.width))
            height += section_height + entry.body.height
        if finally_branch is not None:
            section_widths.append(max(self.text_width("finally"), finally_branch.width))
            height += section_height + finally_branch.height

        return TryLayout(
            body=body,
            catches=catches,
            finally_branch=finally_branch,
            header_height=header_height,
            section_header_height=section_height,
            width=max(section_widths),
            height=height,
        )
