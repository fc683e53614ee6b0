"""
Лексер компонентных тегов: состояния автомата, слоты, блоки хоста и откат
незавершённых конструкций в текст.
"""

from flare.parser.tokenizer import Tokenizer, tokenize
from flare.parser.tokens import SlotStyle, SlotToken, TagToken, TextToken, TokenType


class TestComponentTags:
    def test_plain_text_is_single_token(self):
        assert tokenize("hello <div class=\"a\">x</div>") == [TextToken("hello <div class=\"a\">x</div>")]

    def test_self_closing_tag(self):
        tokens = tokenize('<x-button label="Save" />')
        assert tokens == [TagToken(TokenType.TAG_SELF_CLOSE, "x-", "", "button", 'label="Save"')]

    def test_open_text_close(self):
        tokens = tokenize('<x-card title="A"><p>x</p></x-card>')
        assert tokens == [
            TagToken(TokenType.TAG_OPEN, "x-", "", "card", 'title="A"'),
            TextToken("<p>x</p>"),
            TagToken(TokenType.TAG_CLOSE, "x-", "", "card"),
        ]

    def test_colon_prefix_and_dotted_name(self):
        tokens = tokenize("<x:forms.input />")
        assert tokens == [TagToken(TokenType.TAG_SELF_CLOSE, "x:", "", "forms.input")]

    def test_registered_prefix_carries_namespace(self):
        tokenizer = Tokenizer()
        tokenizer.register_prefix("ui:", "ui::")
        assert tokenizer.tokenize("<ui:card />") == [TagToken(TokenType.TAG_SELF_CLOSE, "ui:", "ui::", "card")]

    def test_greater_than_inside_quotes_and_brackets(self):
        tokens = tokenize("""<x-a :items="[1, 2] if a > b else []" title='x > y' />""")
        assert len(tokens) == 1
        assert tokens[0].attributes == """:items="[1, 2] if a > b else []" title='x > y'"""

    def test_echo_inside_attribute_does_not_break_quotes(self):
        tokens = tokenize('<x-a title="{{ "x>y" }}" />')
        assert tokens == [TagToken(TokenType.TAG_SELF_CLOSE, "x-", "", "a", 'title="{{ "x>y" }}"')]


class TestSlots:
    def test_short_slot(self):
        tokens = tokenize('<x-slot:footer class="f">Bye</x-slot:footer>')
        assert tokens == [
            SlotToken(TokenType.SLOT_OPEN, "x-slot", SlotStyle.SHORT, "footer", 'class="f"'),
            TextToken("Bye"),
            SlotToken(TokenType.SLOT_CLOSE, "x-slot", name="footer"),
        ]

    def test_standard_slot_name_from_attribute(self):
        tokens = tokenize('<x-slot name="footer">F</x-slot>')
        assert tokens[0] == SlotToken(TokenType.SLOT_OPEN, "x-slot", SlotStyle.STANDARD, "footer", 'name="footer"')
        assert tokens[-1] == SlotToken(TokenType.SLOT_CLOSE, "x-slot")

    def test_bound_slot_name_is_marked_dynamic(self):
        tokens = tokenize('<x-slot :name="which">F</x-slot>')
        assert tokens[0].name == "$which"

    def test_slot_lookalike_component_is_not_a_slot(self):
        tokens = tokenize("<x-slots />")
        assert tokens == [TagToken(TokenType.TAG_SELF_CLOSE, "x-", "", "slots")]


class TestRollback:
    def test_unterminated_tag_becomes_text(self):
        assert tokenize('<x-button label="Save"') == [TextToken('<x-button label="Save"')]

    def test_unterminated_quote_becomes_text(self):
        source = '<x-button label="Save />after'
        assert tokenize(source) == [TextToken(source)]

    def test_self_closing_slot_is_text(self):
        source = "<x-card><x-slot:footer /></x-card>"
        tokens = tokenize(source)
        assert tokens[1] == TextToken("<x-slot:footer />")
        assert tokens[0].type is TokenType.TAG_OPEN
        assert tokens[2].type is TokenType.TAG_CLOSE

    def test_malformed_close_tag(self):
        assert tokenize("</x-card oops") == [TextToken("</x-card oops")]

    def test_lone_brackets_are_text(self):
        assert tokenize("a < b { c") == [TextToken("a < b { c")]


class TestHostBlocks:
    def test_echo_is_opaque(self):
        source = '{{ "<x-button />" }}'
        assert tokenize(source) == [TextToken(source)]

    def test_comment_is_opaque(self):
        source = "{# <x-button /> #}"
        assert tokenize(source) == [TextToken(source)]

    def test_statement_is_opaque(self):
        source = "{% if a < b %}<x-button />{% endif %}"
        tokens = tokenize(source)
        assert tokens[0] == TextToken("{% if a < b %}")
        assert tokens[1].name == "button"
        assert tokens[2] == TextToken("{% endif %}")

    def test_raw_block_is_opaque(self):
        source = "{% raw %}<x-button />{% endraw %}"
        assert tokenize(source) == [TextToken(source)]

    def test_unterminated_block_runs_to_end(self):
        source = "{{ broken <x-button />"
        assert tokenize(source) == [TextToken(source)]


def test_tokenizer_is_reusable():
    """Повторный вызов начинает с чистого состояния."""
    tokenizer = Tokenizer()
    tokenizer.tokenize("<x-a")
    assert tokenizer.tokenize("<x-b />") == [TagToken(TokenType.TAG_SELF_CLOSE, "x-", "", "b")]
