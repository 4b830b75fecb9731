from __future__ import annotations

from adapters.layout.structogram import StructogramLayoutEngine
from domain.models import (
    EMPTY_BODY_LABEL,
    NO_ELSE_LABEL,
    ControlTreeNode,
    IfLayout,
    LayoutConfig,
    LoopLayout,
    SequenceLayout,
    StatementLayout,
    SwitchLayout,
    TryLayout,
)
from tests.helpers.control_trees import (
    if_node,
    load_class_model,
    loop,
    seq,
    stmt,
    switch,
    tree,
    try_node,
)


def _statement_texts(node: object) -> list[str]:
    if isinstance(node, StatementLayout):
        return [node.text]
    if isinstance(node, SequenceLayout):
        return [text for child in node.children for text in _statement_texts(child)]
    raise AssertionError(f"Unexpected layout node {node!r}")


def test_build_without_tree_returns_none(layout_engine: StructogramLayoutEngine) -> None:
    assert layout_engine.build(None) is None


def test_statement_is_normalized_and_sized(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(tree(stmt("int counter = start + 1;")))

    assert isinstance(layout, StatementLayout)
    assert layout.text == "counter ← start + 1"
    assert layout.width == len("counter ← start + 1") * 7 + 20
    assert layout.height == 30


def test_short_statement_gets_minimum_width(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(tree(stmt("i++;")))

    assert layout is not None
    assert layout.width == 64


def test_comment_only_root_becomes_empty_row(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(tree(stmt("// nothing")))

    assert isinstance(layout, StatementLayout)
    assert layout.text == EMPTY_BODY_LABEL


def test_sequence_width_is_max_and_height_is_sum(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(
        tree(seq(stmt("a();"), stmt("// skipped"), stmt("System.out.println(total);")))
    )

    assert isinstance(layout, SequenceLayout)
    assert len(layout.children) == 2
    assert layout.width == max(child.width for child in layout.children)
    assert layout.height == 60


def test_empty_sequence_shows_placeholder(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(tree(seq()))

    assert isinstance(layout, SequenceLayout)
    assert _statement_texts(layout) == [EMPTY_BODY_LABEL]


def test_build_is_deterministic(layout_engine: StructogramLayoutEngine) -> None:
    model = load_class_model("Calculator.json")
    for method in model.methods:
        if method.control_tree is None:
            continue
        assert layout_engine.build(method.control_tree) == layout_engine.build(method.control_tree)


def test_if_without_else_uses_placeholder(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(tree(if_node("b > a", [stmt("result = b;")])))

    assert isinstance(layout, IfLayout)
    assert isinstance(layout.else_branch, StatementLayout)
    assert layout.else_branch.text == NO_ELSE_LABEL
    assert _statement_texts(layout.then_branch) == ["result ← b"]
    assert layout.width == layout.then_branch.width + layout.else_branch.width
    assert layout.height == 40 + 30


def test_if_width_covers_long_condition(layout_engine: StructogramLayoutEngine) -> None:
    condition = "customer.isActive() && customer.balance() > threshold"
    layout = layout_engine.build(tree(if_node(condition, [stmt("a();")], [stmt("b();")])))

    assert isinstance(layout, IfLayout)
    assert layout.width == len(f"if ({condition})") * 7 + 20
    assert layout.width > layout.then_branch.width + layout.else_branch.width


def test_if_height_follows_taller_branch(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(
        tree(if_node("ok", [stmt("a();"), stmt("b();"), stmt("c();")], [stmt("d();")]))
    )

    assert isinstance(layout, IfLayout)
    assert layout.branch_height == 90
    assert layout.height == 130


def test_pre_test_loop_reserves_inset(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(tree(loop("while", "n > 0", stmt("n--;"))))

    assert isinstance(layout, LoopLayout)
    assert layout.header == "while (n > 0)"
    assert layout.footer is None
    assert layout.body_inset_width == 28
    assert layout.width == max(len("while (n > 0)") * 7 + 20, 64 + 28)
    assert layout.height == 30 + 30


def test_post_test_loop_has_footer(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(
        tree(loop("doWhile", "n > 0", stmt("print(n);"), stmt("n--;")))
    )

    assert isinstance(layout, LoopLayout)
    assert layout.is_post_condition
    assert layout.header == "do"
    assert layout.footer == "while (n > 0)"
    assert layout.body_inset_width == 0
    assert layout.body_band_height == 60
    assert layout.height == 30 + 60 + 30


def test_loop_without_kind_or_condition(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(ControlTreeNode(kind="loop"))

    assert isinstance(layout, LoopLayout)
    assert layout.header == "loop (condition)"
    assert _statement_texts(layout.body) == [EMPTY_BODY_LABEL]


def test_switch_without_cases_has_default_column(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(tree(switch("x")))

    assert isinstance(layout, SwitchLayout)
    assert [entry.caption for entry in layout.cases] == ["default"]
    assert _statement_texts(layout.cases[0].body) == [EMPTY_BODY_LABEL]
    assert layout.width == len("default") * 7 + 20
    assert layout.height == 30 + 24 + 30


def test_switch_merges_empty_labels_and_propagates_fall_through(
    layout_engine: StructogramLayoutEngine,
) -> None:
    method = next(
        entry for entry in load_class_model("Calculator.json").methods if entry.name == "describe"
    )
    layout = layout_engine.build(method.control_tree)

    assert isinstance(layout, SwitchLayout)
    assert layout.expression == "day"
    assert [entry.caption for entry in layout.cases] == ["case 1, 7", "case 5", "default"]
    assert _statement_texts(layout.cases[0].body) == ['return "weekend"']
    assert _statement_texts(layout.cases[1].body) == ['log("friday")', 'return "weekday"']
    assert _statement_texts(layout.cases[2].body) == ['return "weekday"']
    assert layout.branch_height == 60
    assert layout.height == 30 + 24 + 60


def test_switch_strips_trailing_breaks(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(
        tree(
            switch(
                "mode",
                ("1", [stmt("x = 1;"), stmt("break;")]),
                ("2", [stmt("break;")]),
                ("3", [stmt("x = 3;"), stmt("break;")]),
            )
        )
    )

    assert isinstance(layout, SwitchLayout)
    assert [entry.label for entry in layout.cases] == ["1", "2", "3"]
    assert _statement_texts(layout.cases[0].body) == ["x ← 1"]
    assert _statement_texts(layout.cases[1].body) == [EMPTY_BODY_LABEL]
    assert _statement_texts(layout.cases[2].body) == ["x ← 3"]


def test_switch_columns_fill_wide_expression(layout_engine: StructogramLayoutEngine) -> None:
    expression = "computeTheSelectorValueFromManyInputs(alpha, beta, gamma)"
    layout = layout_engine.build(
        tree(switch(expression, ("1", [stmt("a();")]), ("2", [stmt("b();")])))
    )

    assert isinstance(layout, SwitchLayout)
    assert layout.width == len(expression) * 7 + 20
    assert sum(entry.width for entry in layout.cases) == layout.width


def test_try_with_catch_and_finally(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(
        tree(
            try_node(
                [stmt("reader = open(path);")],
                [("IOException e", [stmt("report(e);")])],
                [stmt("close(reader);")],
            )
        )
    )

    assert isinstance(layout, TryLayout)
    assert [entry.caption for entry in layout.catches] == ["catch (IOException e)"]
    assert layout.finally_branch is not None
    assert layout.height == (30 + 30) + (24 + 30) + (24 + 30)


def test_try_with_empty_finally_list_omits_section(layout_engine: StructogramLayoutEngine) -> None:
    layout = layout_engine.build(
        tree(try_node([stmt("a();")], [(None, [])], finally_branch=[]))
    )

    assert isinstance(layout, TryLayout)
    assert layout.finally_branch is None
    assert layout.catches[0].exception == "Exception"
    assert _statement_texts(layout.catches[0].body) == [EMPTY_BODY_LABEL]
    assert layout.height == (30 + 30) + (24 + 30)


def test_unknown_kind_falls_back_to_statement(layout_engine: StructogramLayoutEngine) -> None:
    labeled = layout_engine.build(ControlTreeNode(kind="labeled", text="outer:"))
    bare = layout_engine.build(ControlTreeNode(kind="synchronized"))

    assert isinstance(labeled, StatementLayout)
    assert labeled.text == "outer:"
    assert isinstance(bare, StatementLayout)
    assert bare.text == "synchronized"


def test_custom_config_changes_measurements() -> None:
    engine = StructogramLayoutEngine(LayoutConfig(char_width=10, row_height=40, min_content_width=0))
    layout = engine.build(tree(stmt("i++;")))

    assert layout is not None
    assert layout.width == len("i++") * 10 + 20
    assert layout.height == 40
