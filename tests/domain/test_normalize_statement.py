from __future__ import annotations

import pytest

from domain.services.normalize_statement import normalize_label, normalize_statement


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("x = 5;", "x ← 5"),
        ("x = 5; // note", "x ← 5"),
        ("int x = 5;", "x ← 5"),
        ("final String name = \"a = b\";", 'name ← "a = b"'),
        ("List<String> items = new ArrayList<>();", "items ← new ArrayList<>()"),
        ("int[] values = new int[3];", "values ← new int[3]"),
        ("this.count = count + 1;", "this.count ← count + 1"),
        ("values[i] = 0;", "values[i] ← 0"),
    ],
)
def test_assignments_use_arrow(raw: str, expected: str) -> None:
    assert normalize_statement(raw) == expected


def test_multi_variable_declaration_rewrites_every_declarator() -> None:
    assert normalize_statement("int a = 1, b = 2;") == "a ← 1, b ← 2"
    assert normalize_statement("int a, b = 2;") == "a, b ← 2"


def test_declaration_initializer_with_nested_commas() -> None:
    assert normalize_statement("int m = Math.max(a, b), n = 1;") == "m ← Math.max(a, b), n ← 1"


@pytest.mark.parametrize(
    "raw",
    [
        "total += values[i]",
        "a == b",
        "count++",
        "return result",
        "System.out.println(n)",
        "int counter",
    ],
)
def test_non_assignments_are_kept(raw: str) -> None:
    assert normalize_statement(raw + ";") == raw


def test_return_with_comparison_is_not_rewritten() -> None:
    assert normalize_statement("return a == b;") == "return a == b"


def test_comments_and_line_breaks_are_removed() -> None:
    raw = "int total =\n    0; // running sum"
    assert normalize_statement(raw) == "total ← 0"
    assert normalize_statement("foo(/* inline */ bar);") == "foo( bar)"


def test_comment_only_fragment_is_dropped() -> None:
    assert normalize_statement("// nothing here") is None
    assert normalize_statement("  ;; ") is None
    assert normalize_statement(None) is None


def test_normalize_label_falls_back() -> None:
    assert normalize_label("  a   >\n b ", "condition") == "a > b"
    assert normalize_label("/* todo */", "condition") == "condition"
    assert normalize_label(None, "selector") == "selector"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('url = "http://example.com";', 'url ← "http://example.com"'),
        ('log("/* keep */"); // drop', 'log("/* keep */")'),
        ("sep = '\"'; // quote", "sep ← '\"'"),
        ('s = "a\\"//b";', 's ← "a\\"//b"'),
        ("char slash = '/';", "slash ← '/'"),
    ],
)
def test_comment_markers_inside_literals_are_kept(raw: str, expected: str) -> None:
    assert normalize_statement(raw) == expected


def test_every_trailing_terminator_is_removed() -> None:
    assert normalize_statement("x = 5; ;") == "x ← 5"
    assert normalize_statement("count++ ;;  ") == "count++"
