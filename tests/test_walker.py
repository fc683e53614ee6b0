"""
Обходчик дерева: замена, удаление и порядок вызова обработчиков.
"""

from flare.parser import DELETE, ComponentNode, Parser, SlotNode, TextNode, Walker


def test_none_keeps_node():
    nodes = Parser().parse("a<x-b />c")
    assert Walker().walk(nodes, pre=lambda n: None, post=lambda n: None) == nodes


def test_replacement_and_delete():
    nodes = Parser().parse("a<x-b />c<x-d />")

    def post(node):
        if isinstance(node, ComponentNode):
            return TextNode("[B]") if node.name == "b" else DELETE
        return None

    assert Walker().walk(nodes, post=post) == [TextNode("a"), TextNode("[B]"), TextNode("c")]


def test_post_order_sees_processed_children():
    """Дети обрабатываются раньше родителя и переприсваиваются."""
    nodes = Parser().parse("<x-outer><x-slot:s><x-inner /></x-slot:s></x-outer>")
    seen = []

    def post(node):
        if isinstance(node, ComponentNode):
            seen.append(node.name)
            if node.name == "inner":
                return TextNode("INNER")
        return None

    result = Walker().walk(nodes, post=post)

    assert seen == ["inner", "outer"]
    slot = result[0].children[0]
    assert isinstance(slot, SlotNode)
    assert slot.children == [TextNode("INNER")]


def test_pre_runs_before_children():
    nodes = Parser().parse("<x-outer><x-inner /></x-outer>")
    order = []
    Walker().walk(
        nodes,
        pre=lambda n: order.append(("pre", n.name)) if isinstance(n, ComponentNode) else None,
        post=lambda n: order.append(("post", n.name)) if isinstance(n, ComponentNode) else None,
    )
    assert order == [("pre", "outer"), ("pre", "inner"), ("post", "inner"), ("post", "outer")]


def test_delete_in_pre_skips_children():
    nodes = Parser().parse("<x-outer><x-inner /></x-outer>tail")
    visited = []

    def pre(node):
        if isinstance(node, ComponentNode):
            visited.append(node.name)
            return DELETE
        return None

    assert Walker().walk(nodes, pre=pre) == [TextNode("tail")]
    assert visited == ["outer"]
