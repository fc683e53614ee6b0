"""
Разбор строки атрибутов тега компонента и её сериализация.
"""

import pytest

from flare.errors import UnsupportedDirectiveError
from flare.support.attributes import Attribute, AttributeParser, compile_echoes


@pytest.fixture
def ap() -> AttributeParser:
    return AttributeParser()


class TestParse:
    def test_literal(self, ap):
        assert ap.parse('label="Save"') == {"label": Attribute("label", "Save", "label")}

    def test_single_quotes_and_bare_value(self, ap):
        attrs = ap.parse("a='x' b=y")
        assert attrs["a"].value == "x"
        assert attrs["a"].quotes == "'"
        assert attrs["b"].value == "y"
        assert attrs["b"].quotes == ""

    def test_bound_expression(self, ap):
        attr = ap.parse(':count="n + 1"')["count"]
        assert attr.dynamic
        assert attr.bound()
        assert attr.value == "n + 1"

    def test_short_bound_form(self, ap):
        attr = ap.parse(":$user")["user"]
        assert attr.prefix == ":$"
        assert attr.value == "user"
        assert attr.bound()

    def test_escaped_colon_is_literal(self, ap):
        attr = ap.parse('::class="raw"')[":class"]
        assert not attr.dynamic
        assert attr.value == "raw"

    def test_valueless_is_true(self, ap):
        assert ap.parse("disabled")["disabled"].value is True

    def test_echo_in_literal_is_dynamic(self, ap):
        attr = ap.parse('title="Hi {{ name }}"')["title"]
        assert attr.dynamic
        assert attr.is_echo()
        assert not attr.bound()

    def test_attribute_bag_forwarding(self, ap):
        attr = ap.parse("{{ attributes }}")["attributes"]
        assert attr.bound()
        assert attr.value == "attributes"

    def test_kebab_prop_name(self, ap):
        assert ap.parse('icon-trailing="x"')["icon_trailing"].name == "icon-trailing"

    def test_first_occurrence_wins(self, ap):
        assert ap.parse('a="1" a="2"')["a"].value == "1"

    def test_static_bound_values(self, ap):
        attrs = ap.parse(':a="true" :b="none" :c="user"')
        assert attrs["a"].is_static_value()
        assert attrs["b"].is_static_value()
        assert not attrs["c"].is_static_value()

    def test_conditional_class_directive(self, ap):
        attr = ap.parse("@class(['p-4', {'bold': active}])")["class"]
        assert attr.bound()
        assert attr.value == "__blaze.classes(['p-4', {'bold': active}])"

    @pytest.mark.parametrize("directive", ["disabled", "checked", "selected", "readonly", "required"])
    def test_unsupported_directives(self, ap, directive):
        with pytest.raises(UnsupportedDirectiveError) as exc:
            ap.parse(f"@{directive}(flag)")
        assert "not supported on component tags" in str(exc.value)


class TestSerialize:
    def test_runtime_dict(self, ap):
        attrs = ap.parse('label="Save" :count="n + 1" title="a {{ b }}" disabled')
        assert ap.to_runtime_dict(attrs) == "{'label': 'Save', 'count': (n + 1), 'title': 'a ' ~ ((b)|e), 'disabled': true}"

    def test_runtime_dict_exclude(self, ap):
        attrs = ap.parse('name="footer" class="f"')
        assert ap.to_runtime_dict(attrs, exclude=("name",)) == "{'class': 'f'}"

    def test_simple_expression_is_not_wrapped(self, ap):
        assert ap.to_runtime_dict(ap.parse(":$user")) == "{'user': user}"

    def test_bound_null_becomes_none(self, ap):
        attrs = ap.parse(':label="null" :other="none"')
        assert ap.to_runtime_dict(attrs) == "{'label': none, 'other': none}"

    def test_bound_keys(self, ap):
        attrs = ap.parse('a="1" :b="x" :$c data-id="{{ id }}"')
        assert ap.bound_keys(attrs) == ["b", "c"]

    def test_render_round_trip(self, ap):
        source = 'label="Save" :count="n" :$user ::class="raw" disabled'
        assert ap.render(ap.parse(source)) == source


def test_compile_echoes():
    assert compile_echoes("btn-{{ color }}") == "'btn-' ~ ((color)|e)"
    assert compile_echoes("{{ a }}{{ b }}") == "((a)|e) ~ ((b)|e)"
    assert compile_echoes("") == "''"
