"""
Проход мемоизации: выбор вызовов и поведение кэша при рендере.
"""

from flare.config import OptimizeConfig
from tests.infrastructure import make_flare, render


class TestSelection:
    def test_opt_in_by_directive(self, flare, component):
        component("badge", "@blaze(memo: true)\n<span>{{ text }}</span>")
        compiled = flare.compile('<x-badge text="A" />')

        assert compiled.startswith("{% set __memo_key_0 = __blaze.memo.key('badge', {'text': 'A'}) %}")
        assert "{% if __memo_key_0 is not none and __blaze.memo.has(__memo_key_0) %}" in compiled
        assert "{{ __blaze.memo.hit(__memo_key_0) }}" in compiled
        assert "{% do __blaze.memo.put(__memo_key_0, __memo_output_0) %}" in compiled

    def test_opt_in_by_path(self, tmp_path, component):
        component("badge", "<span>{{ text }}</span>")
        flare = make_flare(tmp_path, optimize=OptimizeConfig().add(tmp_path / "components", memo=True))
        assert "__blaze.memo.key" in flare.compile("<x-badge />")

    def test_directive_overrides_path_default(self, tmp_path, component):
        component("badge", "@blaze(memo: false)\n<span></span>")
        flare = make_flare(tmp_path, optimize=OptimizeConfig().add(tmp_path / "components", memo=True))
        assert "__blaze.memo" not in flare.compile("<x-badge />")

    def test_containered_invocations_are_not_memoized(self, flare, component):
        component("badge", "@blaze(memo: true)\n<span>{{ slot }}</span>")
        assert "__blaze.memo" not in flare.compile("<x-badge>x</x-badge>")

    def test_unresolved_is_untouched(self, flare):
        assert flare.compile("<x-nothing />") == "<x-nothing />"


class TestRender:
    def test_second_identical_call_is_a_hit(self, flare, component):
        component("badge", "@blaze(memo: true)\n<span>{{ text }}</span>")
        hits = []
        flare.memo.on_hit = hits.append

        output = render(flare, '<x-badge text="A" /><x-badge text="A" /><x-badge text="B" />')

        assert output == "<span>A</span><span>A</span><span>B</span>"
        assert len(hits) == 1

    def test_cache_is_shared_between_renders(self, flare, component):
        component("badge", "@blaze(memo: true)\n<span>{{ text }}</span>")
        hits = []
        flare.memo.on_hit = hits.append

        render(flare, '<x-badge :text="t" />', {"t": "A"})
        assert render(flare, '<x-badge :text="t" />', {"t": "A"}) == "<span>A</span>"
        assert len(hits) == 1

    def test_unserializable_parameters_always_render(self, flare, component):
        component("badge", "@blaze(memo: true)\n<span>{{ item.name }}</span>")
        hits = []
        flare.memo.on_hit = hits.append

        class Item:
            name = "obj"

        output = render(flare, '<x-badge :item="item" /><x-badge :item="item" />', {"item": Item()})

        assert output == "<span>obj</span><span>obj</span>"
        assert hits == []
