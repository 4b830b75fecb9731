from __future__ import annotations

import pytest

from domain.models import (
    NO_CONTROL_TREE_MESSAGE,
    ControlTreeNode,
    LayoutConfig,
    MethodModel,
    RectPrimitive,
)
from domain.services.present_structogram import StructogramPresenter
from domain.services.render_structogram import StructogramRenderer
from tests.helpers.control_trees import load_class_model, seq, stmt


class _NoLayoutEngine:
    config = LayoutConfig()

    def __init__(self) -> None:
        self.calls = 0

    def build(self, node: ControlTreeNode | None) -> None:
        self.calls += 1
        return None


def test_method_without_tree_gets_fallback_message() -> None:
    engine = _NoLayoutEngine()
    presenter = StructogramPresenter(engine, StructogramRenderer())
    method = next(
        entry for entry in load_class_model("Calculator.json").methods if entry.name == "area"
    )

    view = presenter.present(method)

    assert engine.calls == 0
    assert not view.has_diagram
    assert view.message == NO_CONTROL_TREE_MESSAGE
    assert view.primitives == ()
    assert view.declaration == "public double area()"


def test_canvas_adds_padding_around_layout(presenter: StructogramPresenter) -> None:
    method = MethodModel.model_validate(
        {
            "signature": "void run()",
            "name": "run",
            "controlTree": seq(stmt("a();"), stmt("b();")),
        }
    )

    view = presenter.present(method)

    assert view.has_diagram
    assert view.method_name == "run"
    assert view.declaration == "void run()"
    assert (view.width, view.height) == (64 + 24, 60 + 24)
    first = view.primitives[0]
    assert isinstance(first, RectPrimitive)
    assert (first.x, first.y) == (12, 12)


def test_missing_layout_for_existing_tree_is_an_error() -> None:
    presenter = StructogramPresenter(_NoLayoutEngine(), StructogramRenderer())
    method = MethodModel.model_validate({"signature": "void f()", "controlTree": stmt("a();")})

    with pytest.raises(RuntimeError):
        presenter.present(method)


def test_view_serializes_primitives(presenter: StructogramPresenter) -> None:
    method = MethodModel.model_validate(
        {"signature": "void f()", "name": "f", "controlTree": stmt("x = 1;")}
    )

    payload = presenter.present(method).to_dict()

    assert payload["method"] == "f"
    assert payload["message"] is None
    assert [item["type"] for item in payload["primitives"]] == ["rect", "text"]
    assert payload["primitives"][1]["text"] == "x ← 1"
    assert payload["primitives"][0]["role"] == "statement"
