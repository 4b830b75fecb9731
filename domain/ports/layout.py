from __future__ import annotations

from typing import Protocol

from domain.models import ControlTreeNode, LayoutConfig, LayoutNode


class LayoutEngine(Protocol):
    config: LayoutConfig

    def build(self, node: ControlTreeNode | None) -> LayoutNode | None:
        ...
