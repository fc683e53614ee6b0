"""
Сквозные проверки: компиляция шаблона страницы и рендер через Jinja2.
"""

import pytest

from flare import ComponentNotFoundError, Flare, FlareConfig, ComponentPath
from flare.config import OptimizeConfig
from tests.infrastructure import make_flare, render, touch_later, write_component

BUTTON = """
@props(['label', {'variant': 'primary'}])
<button class="btn-{{ variant }}">{{ label }}</button>
"""

BADGE = "<span>{{ text }}</span>"


class TestProps:
    def test_defaults_and_explicit_values(self, flare, component):
        component("button", BUTTON)

        assert render(flare, '<x-button label="Save" />') == '<button class="btn-primary">Save</button>'
        assert render(flare, '<x-button label="Save" variant="danger" />') == '<button class="btn-danger">Save</button>'

    def test_bound_expression(self, flare, component):
        component("button", BUTTON)
        assert render(flare, '<x-button :label="item.title" />', {"item": {"title": "Open"}}) == (
            '<button class="btn-primary">Open</button>'
        )

    def test_kebab_attribute_fills_prop(self, flare, component):
        component("alert", "@props(['alert_type'])\n<p class=\"{{ alert_type }}\">!</p>")
        assert render(flare, '<x-alert alert-type="warn" />') == '<p class="warn">!</p>'

    def test_bound_null_is_none(self, flare, component):
        component("btn", "@props({'label': 'x'})\n<b>{{ label is none }}</b>")
        assert render(flare, '<x-btn :label="null" />') == "<b>True</b>"

    def test_bound_strings_are_escaped(self, flare, component):
        component("badge", BADGE)
        component("link", "<a {{ attributes }}>x</a>")

        assert render(flare, '<x-badge :text="v" />', {"v": "<b>"}) == "<span>&lt;b&gt;</span>"
        assert render(flare, '<x-link :title="t" />', {"t": '"x"<'}) == '<a title="&#34;x&#34;&lt;">x</a>'


class TestSlots:
    CARD = (
        '<div class="card">{{ slot }}'
        "{% if footer is defined %}<footer {{ footer.attributes }}>{{ footer }}</footer>{% endif %}</div>"
    )

    def test_default_and_named_slots(self, flare, component):
        component("card", self.CARD)

        html = render(flare, '<x-card>Body<x-slot:footer class="muted">F</x-slot:footer></x-card>')

        assert html == '<div class="card">Body<footer class="muted">F</footer></div>'

    def test_standard_slot_syntax(self, flare, component):
        component("card", self.CARD)
        html = render(flare, '<x-card>Body<x-slot name="footer">F</x-slot></x-card>')
        assert html == '<div class="card">Body<footer >F</footer></div>'

    def test_bound_slot_name(self, flare, component):
        component("card", "<div>{{ slot }}|{{ footer }}</div>")
        assert render(flare, '<x-card>body<x-slot :name="n">FOOT</x-slot></x-card>', {"n": "footer"}) == (
            "<div>body|FOOT</div>"
        )

    def test_slot_helpers(self, flare, component):
        component("panel", "{% if slot.has_actual_content() %}<p>{{ slot }}</p>{% else %}<p>empty</p>{% endif %}")

        assert render(flare, "<x-panel>{# note #}</x-panel>") == "<p>empty</p>"
        assert render(flare, "<x-panel>Hi</x-panel>") == "<p>Hi</p>"


class TestComposition:
    def test_component_inside_slot(self, flare, component):
        component("layout", "<section>{{ slot }}</section>")
        component("badge", BADGE)

        assert render(flare, '<x-layout><x-badge text="A" /></x-layout>') == "<section><span>A</span></section>"

    def test_component_inside_component(self, flare, component):
        component("badge", BADGE)
        component("profile", "@props(['user'])\n<div><x-badge :text=\"user.name\" /></div>")

        assert render(flare, '<x-profile :user="u" />', {"u": {"name": "Ann"}}) == "<div><span>Ann</span></div>"

    def test_attribute_bag_forwarding(self, flare, component):
        component("input", "<input {{ attributes }}>")
        component("field", "<x-input {{ attributes }} />")

        assert render(flare, '<x-field type="email" name="e" />') == '<input type="email" name="e">'

    def test_attribute_merge(self, flare, component):
        component("btn", "<button {{ attributes.merge({'class': 'btn'}) }}>{{ slot }}</button>")

        assert render(flare, '<x-btn class="wide" type="submit">Go</x-btn>') == (
            '<button class="btn wide" type="submit">Go</button>'
        )

    def test_conditional_class_directive(self, flare, component):
        component("btn", "<button {{ attributes }}>x</button>")
        html = render(flare, "<x-btn @class(['p-4', {'bold': active}]) />", {"active": True})
        assert html == '<button class="p-4 bold">x</button>'

    def test_namespaced_component(self, tmp_path, flare):
        write_component(tmp_path / "ui", "card", "<article>{{ slot }}</article>")
        flare.add_path(tmp_path / "ui", "ui")

        assert render(flare, "<x-ui::card>X</x-ui::card>") == "<article>X</article>"


class TestAware:
    ITEM = "@aware({'color': 'gray'})\n<li class=\"text-{{ color }}\">x</li>"

    def test_reads_ancestor_data(self, flare, component):
        component("menu", "<ul>{{ slot }}</ul>")
        component("item", self.ITEM)

        assert render(flare, '<x-menu color="red"><x-item /></x-menu>') == '<ul><li class="text-red">x</li></ul>'

    def test_default_without_ancestor(self, flare, component):
        component("item", self.ITEM)
        assert render(flare, "<x-item />") == '<li class="text-gray">x</li>'

    def test_explicit_value_wins(self, flare, component):
        component("menu", "<ul>{{ slot }}</ul>")
        component("item", self.ITEM)

        html = render(flare, '<x-menu color="red"><x-item color="blue" /></x-menu>')

        assert html == '<ul><li class="text-blue">x</li></ul>'


class TestHostData:
    def test_shared_values(self, flare, component):
        component("note", "<p>{{ site }}</p>")
        flare.env.share("site", "Flare")

        assert render(flare, "<x-note />") == "<p>Flare</p>"

    def test_call_data_beats_shared(self, flare, component):
        component("note", "<p>{{ site }}</p>")
        flare.env.share("site", "Flare")

        assert render(flare, '<x-note site="Other" />') == "<p>Other</p>"

    def test_composer(self, flare, component):
        component("profile", "<p>{{ role }}</p>")
        flare.env.composer("**/profile.jinja", lambda data: {"role": "admin"})

        assert render(flare, "<x-profile />") == "<p>admin</p>"
        assert render(flare, '<x-profile role="guest" />') == "<p>guest</p>"


class TestUnblaze:
    PANEL = """
        @props(['label'])
        <div>
        @unblaze(scope: {'label': label})
        <span>{{ scope.label }} {{ request.path }}</span>
        @endunblaze
        </div>
    """

    def test_runtime_block_inside_component(self, flare, component):
        component("panel", self.PANEL)
        flare.env.share("request", {"path": "/x"})

        assert render(flare, '<x-panel label="T" />') == "<div><span>T /x</span></div>"

    def test_folded_component_keeps_runtime_block(self, flare, component):
        component("panel", "@blaze(fold: true, safe: ['label'])" + self.PANEL)

        html = render(flare, '<x-panel :label="title" />', {"title": "T", "request": {"path": "/y"}})

        assert html == "<div><span>T /y</span></div>"
        assert len(flare.folded) == 1


class TestManager:
    def test_render_component(self, flare, component):
        component("button", BUTTON)
        component("card", "<div>{{ slot }}|{{ footer }}</div>")

        assert str(flare.render_component("button", {"label": "Go"})) == '<button class="btn-primary">Go</button>'
        assert str(flare.render_component("card", slots={"footer": "F"})) == "<div>|F</div>"

    def test_render_component_not_found(self, flare):
        with pytest.raises(ComponentNotFoundError) as exc:
            flare.render_component("missing")
        assert str(exc.value) == "Unable to locate component [missing]"

    def test_recompiles_changed_source(self, flare, component):
        path = component("badge", BADGE)
        assert render(flare, '<x-badge text="A" />') == "<span>A</span>"

        write_component(path.parent, "badge", "<em>{{ text }}</em>")
        touch_later(path)

        assert render(flare, '<x-badge text="A" />') == "<em>A</em>"

    def test_artifacts_are_written(self, tmp_path, flare, component):
        component("badge", BADGE)
        render(flare, '<x-badge text="A" />')

        artifacts = list((tmp_path / "compiled").glob("*.py"))
        assert len(artifacts) == 1
        assert artifacts[0].read_text(encoding="utf-8").startswith("# Generated by flare")

    def test_unknown_components_pass_through(self, flare):
        assert render(flare, '<x-missing a="1" />') == '<x-missing a="1" />'

    def test_dynamic_component_is_left_verbatim(self, flare, component):
        component("button", BUTTON)
        source = "<x-dynamic-component :component=\"'button'\" label=\"Go\" />"
        assert flare.compile(source) == source

    def test_folded_and_compiled_output_match(self, tmp_path, component):
        component("button", BUTTON)
        plain = make_flare(tmp_path)
        folded = make_flare(tmp_path, optimize=OptimizeConfig().add(tmp_path / "components", fold=True))

        page = '<x-button label="Save" variant="danger" />'
        assert render(plain, page) == render(folded, page)
        assert folded.compile(page) == '<button class="btn-danger">Save</button>'

    def test_file_memo_store_survives_manager(self, tmp_path, component):
        path = component("badge", "@blaze(memo: true)\n" + BADGE)
        config = FlareConfig(
            component_paths=[ComponentPath(tmp_path / "components")],
            compiled_path=tmp_path / "compiled",
            memo_path=tmp_path / "memo",
        )

        assert render(Flare(config), '<x-badge text="A" />') == "<span>A</span>"
        assert len(list((tmp_path / "memo").rglob("*.json"))) == 1

        write_component(path.parent, "badge", "@blaze(memo: true)\n<em>{{ text }}</em>")
        assert render(Flare(config), '<x-badge text="A" />') == "<span>A</span>"
