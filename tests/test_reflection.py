"""Tests for sigen.reflection."""

from __future__ import annotations

import inspect

import pytest

from sigen.reflection import describe_method, is_template_object, reflect_class
from tests._fixtures.services import Calculator, Derived, Empty, Variadic


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Calculator(), True),
        (Empty(), True),
        (object(), True),
        (None, False),
        (Calculator, False),
        (True, False),
        (3.5, False),
        ("text", False),
        (b"bytes", False),
        ([Calculator()], False),
        ({"key": "value"}, False),
    ],
)
def test_is_template_object(value, expected) -> None:
    assert is_template_object(value) is expected


def test_reflect_class_collects_public_methods_in_declaration_order() -> None:
    descriptor = reflect_class(Calculator())

    assert descriptor.name == "Calculator"
    assert descriptor.module == "tests._fixtures.services"
    assert descriptor.doc == "Arithmetic service."
    assert [method.name for method in descriptor.methods] == ["add", "multiply", "reset"]


def test_reflect_class_walks_bases_without_duplicates() -> None:
    descriptor = reflect_class(Derived())

    names = [method.name for method in descriptor.methods]
    assert names == ["own", "overridden", "shared"]
    overridden = descriptor.methods[1]
    assert overridden.doc == "Not exposed in the subclass."


def test_reflect_class_without_methods() -> None:
    assert reflect_class(Empty()).methods == []


def test_describe_method_strips_bound_instance() -> None:
    method = describe_method("add", Calculator.add)

    assert [parameter.name for parameter in method.parameters] == ["a", "b"]
    assert not method.parameters[0].has_default
    assert method.parameters[1].has_default
    assert method.parameters[1].default == 1
    assert "@expose ##True##" in method.doc


def test_describe_method_marks_variadic_parameters() -> None:
    method = describe_method("collect", Variadic.collect)

    markers = {parameter.name: parameter.marker for parameter in method.parameters}
    assert markers == {"first": "", "rest": "*", "sep": "", "options": "**"}
    kinds = [parameter.kind for parameter in method.parameters]
    assert kinds == [
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.VAR_POSITIONAL,
        inspect.Parameter.KEYWORD_ONLY,
        inspect.Parameter.VAR_KEYWORD,
    ]
    assert [parameter.is_keyword for parameter in method.parameters] == [False, False, True, True]
