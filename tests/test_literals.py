"""
Литералы аргументов директив и их сериализация в Jinja.
"""

import pytest

from flare.errors import DeclarationParseError
from flare.support.literals import (
    MISSING,
    match_balanced,
    parse_declarations,
    parse_literal,
    parse_parameters,
    split_top_level,
    to_literal,
)


class TestParseLiteral:
    @pytest.mark.parametrize("source, expected", [
        ("['a', {'b': 1}]", ["a", {"b": 1}]),
        ("true", True),
        ("False", False),
        ("none", None),
        ("null", None),
        ("-1", -1),
        ("('x', 'y')", ["x", "y"]),
    ])
    def test_values(self, source, expected):
        assert parse_literal(source) == expected

    @pytest.mark.parametrize("source", ["foo", "a +", "f(1)", "", "{**x}"])
    def test_rejects_non_literals(self, source):
        with pytest.raises(DeclarationParseError):
            parse_literal(source)


class TestDeclarations:
    def test_mixed_list(self):
        assert parse_declarations("['label', {'variant': 'primary'}]") == {
            "label": MISSING,
            "variant": "primary",
        }

    def test_dict_form(self):
        assert parse_declarations("{'a': 1, 'b': none}") == {"a": 1, "b": None}

    def test_scalar_is_rejected(self):
        with pytest.raises(DeclarationParseError) as exc:
            parse_declarations("'label'")
        assert exc.value.expression == "'label'"

    def test_missing_is_falsy(self):
        assert not MISSING


class TestParameters:
    def test_blaze_parameters(self):
        assert parse_parameters("fold: true, safe: ['type'], unsafe: []") == {
            "fold": True,
            "safe": ["type"],
            "unsafe": [],
        }

    def test_invalid_parameter(self):
        with pytest.raises(DeclarationParseError):
            parse_parameters("fold")


def test_match_balanced_skips_strings():
    assert match_balanced("f(a, ')', (b))", 1) == 13
    assert match_balanced("f(a", 1) is None


def test_split_top_level():
    assert split_top_level("a: [1, 2], b: {'c': 3}", ",") == ["a: [1, 2]", " b: {'c': 3}"]
    assert split_top_level("scope: {'a': b}", ":", maxsplit=1) == ["scope", " {'a': b}"]


class TestToLiteral:
    def test_nested(self):
        assert to_literal({"a": [1, None, True]}) == "{'a': [1, none, true]}"

    def test_non_finite_number(self):
        with pytest.raises(TypeError):
            to_literal(float("nan"))

    def test_object(self):
        with pytest.raises(TypeError):
            to_literal(object())
