from __future__ import annotations

import logging

from domain.models import NO_CONTROL_TREE_MESSAGE, MethodModel, StructogramView
from domain.ports.layout import LayoutEngine
from domain.services.method_declaration import to_method_declaration
from domain.services.render_structogram import StructogramRenderer

logger = logging.getLogger(__name__)


class StructogramPresenter:
    def __init__(self, layout_engine: LayoutEngine, renderer: StructogramRenderer) -> None:
        self.layout_engine = layout_engine
        self.renderer = renderer

    def present(self, method: MethodModel) -> StructogramView:
        declaration = to_method_declaration(method)
        method_name = method.display_name()
        if method.control_tree is None:
            logger.info("Method %s has no control tree; showing fallback message", method_name)
            return StructogramView(
                method_name=method_name,
                declaration=declaration,
                primitives=(),
                width=0,
                height=0,
                message=NO_CONTROL_TREE_MESSAGE,
            )

        layout = self.layout_engine.build(method.control_tree)
        if layout is None:
            msg = f"Layout engine returned no layout for method {method_name}"
            raise RuntimeError(msg)
        padding = self.renderer.config.canvas_padding
        primitives = self.renderer.paint(layout, padding, padding, layout.width)
        return StructogramView(
            method_name=method_name,
            declaration=declaration,
            primitives=tuple(primitives),
            width=layout.width + padding * 2,
            height=layout.height + padding * 2,
        )
