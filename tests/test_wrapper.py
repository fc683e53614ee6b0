"""
Генерация модуля-артефакта компонента и поведение сгенерированной функции.
"""

import pytest
from markupsafe import Markup

from flare.compiler import AwareCompiler, PropsCompiler, Wrapper
from flare.errors import InvalidAwareDefinitionError, InvalidPropsDefinitionError
from flare.runtime import AttributeBag
from flare.support.literals import MISSING


def _function(flare, body, props=None, aware=None, name="_test"):
    code = flare.wrapper.wrap(
        name=name,
        source_path="/components/test.jinja",
        body=body,
        props=props or {},
        aware=aware or {},
    )
    namespace = {}
    exec(compile(code, "<component>", "exec"), namespace)
    return code, namespace[name]


class TestModuleSource:
    def test_header_and_signature(self, flare):
        code, _ = _function(flare, "<b>{{ label }}</b>", props={"label": MISSING, "variant": "primary"})

        assert code.startswith("# Generated by flare ")
        assert "def _test(__blaze, __data, __slots, __bound):" in code
        assert "PROPS = ('label', 'variant',)" in code
        assert "PROP_DEFAULTS = {'variant': 'primary'}" in code
        assert "SOURCE = '/components/test.jinja'" in code

    def test_shared_names_exclude_declared(self, flare):
        code = Wrapper(flare.env).wrap(
            name="_x", source_path="/c.jinja", body="{{ label }} {{ app_name }} {{ attributes }}",
            props={"label": MISSING}, aware={},
        )
        assert "SHARED = ('app_name',)" in code


class TestRenderFunction:
    def test_props_defaults_and_attributes(self, flare):
        _, render = _function(
            flare,
            '<button class="btn-{{ variant }}" {{ attributes }}>{{ label }}</button>',
            props={"label": MISSING, "variant": "primary"},
        )
        runtime = flare.create_runtime()

        result = render(runtime, {"label": "Save", "data-id": "7"}, {}, [])

        assert isinstance(result, Markup)
        assert result == '<button class="btn-primary" data-id="7">Save</button>'

    def test_explicit_none_beats_default(self, flare):
        _, render = _function(flare, "[{{ variant }}]", props={"variant": "primary"})
        assert render(flare.create_runtime(), {"variant": None}, {}, []) == "[None]"

    def test_bound_attribute_values_are_escaped(self, flare):
        _, render = _function(flare, "<a {{ attributes }}>x</a>")
        result = render(flare.create_runtime(), {"title": '"><script>'}, {}, ["title"])
        assert "<script>" not in result

    def test_forwarded_attribute_bag_is_merged(self, flare):
        _, render = _function(flare, "{{ type }}|{{ attributes }}", props={"type": MISSING})
        bag = AttributeBag({"type": "email", "id": "a"})

        result = render(flare.create_runtime(), {"attributes": bag, "id": "b"}, {}, [])

        assert result == 'email|id="b"'

    def test_slots_win_over_data(self, flare):
        _, render = _function(flare, "{{ footer }}")
        runtime = flare.create_runtime()
        slots = {"footer": runtime.slot("from slot")}
        assert render(runtime, {"footer": "from data"}, slots, []) == "from slot"

    def test_shared_value(self, flare):
        flare.env.share("app_name", "Flare")
        _, render = _function(flare, "{{ app_name }}")
        assert render(flare.create_runtime(), {}, {}, []) == "Flare"

    def test_aware_reads_ancestor_data(self, flare):
        _, render = _function(flare, "{{ color }}", aware={"color": "gray"})
        runtime = flare.create_runtime()

        assert render(runtime, {}, {}, []) == "gray"

        runtime.push_data({"color": "red"})
        assert render(runtime, {}, {}, []) == "red"
        assert render(runtime, {"color": "blue"}, {}, []) == "blue"


class TestDeclarations:
    def test_props_extract(self):
        body, props = PropsCompiler().extract("@props(['label', {'icon-trailing': none}])\n<b></b>", "/c.jinja")
        assert body == "<b></b>"
        assert props == {"label": MISSING, "icon_trailing": None}

    def test_invalid_props(self):
        with pytest.raises(InvalidPropsDefinitionError) as exc:
            PropsCompiler().extract("@props(['a', variant])", "/c.jinja")
        assert exc.value.component_path == "/c.jinja"

    def test_invalid_aware(self):
        with pytest.raises(InvalidAwareDefinitionError):
            AwareCompiler().extract("@aware(color)", "/c.jinja")
