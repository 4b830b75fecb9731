from __future__ import annotations

from domain.models import MethodModel
from domain.services.method_declaration import normalize_visibility, to_method_declaration


def test_declaration_from_structured_fields() -> None:
    method = MethodModel.model_validate(
        {
            "signature": "main(String[])",
            "name": "main",
            "visibility": "+",
            "isStatic": True,
            "params": [{"name": "args", "type": "String[]"}],
        }
    )

    assert to_method_declaration(method) == "public static void main(String[] args)"


def test_declaration_uses_return_type_and_visibility_word() -> None:
    method = MethodModel.model_validate(
        {
            "signature": "int max(int a, int b)",
            "name": "max",
            "returnType": "int",
            "visibility": "protected",
            "params": [{"name": "a", "type": "int"}, {"name": "b", "type": "int"}],
        }
    )

    assert to_method_declaration(method) == "protected int max(int a, int b)"


def test_params_fall_back_to_signature_text() -> None:
    method = MethodModel(signature="void greet(String who, int times)")

    assert method.display_name() == "greet"
    assert to_method_declaration(method) == "void greet(String who, int times)"


def test_unknown_visibility_is_omitted() -> None:
    assert normalize_visibility("~") == ""
    assert normalize_visibility(None) == ""
    assert normalize_visibility("-") == "private"
