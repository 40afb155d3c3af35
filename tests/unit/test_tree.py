# tests/unit/test_tree.py

from jestlens.parsing import ParsedBlock, Position
from jestlens.tree import ROOT_PARENT, DeclarationTree, NodeType


def _block(block_type: str, name: str, start: int, end: int, children=None) -> ParsedBlock:
    return ParsedBlock(
        type=block_type,
        name=name,
        start=Position(start, 1),
        end=Position(end, 1),
        children=children or [],
    )


def _forest() -> list[ParsedBlock]:
    return [
        _block("describe", "outer", 1, 10, [
            _block("it", "first", 2, 4, [_block("expect", "x", 3, 3)]),
            _block("test", "second", 5, 9),
        ]),
        _block("it", "loose", 12, 14),
    ]


class TestDeclarationTree:
    def test_nodes_are_indexed_in_pre_order(self):
        tree = DeclarationTree.from_blocks(_forest())

        assert [n.name for n in tree.walk()] == ["outer", "first", "x", "second", "loose"]
        assert [n.index for n in tree.nodes] == [0, 1, 2, 3, 4]
        assert tree.roots == (0, 4)
        assert len(tree) == 5

    def test_parent_and_child_indices(self):
        tree = DeclarationTree.from_blocks(_forest())

        assert tree.node(0).parent == ROOT_PARENT
        assert tree.node(0).is_root
        assert tree.node(0).children == (1, 3)
        assert tree.node(2).parent == 1
        assert tree.node(4).is_root
        assert [c.name for c in tree.children_of(tree.node(0))] == ["first", "second"]

    def test_ancestry_runs_from_root_to_node(self):
        tree = DeclarationTree.from_blocks(_forest())
        assert [n.name for n in tree.ancestry(2)] == ["outer", "first", "x"]
        assert [n.name for n in tree.ancestry(4)] == ["loose"]

    def test_node_types(self):
        tree = DeclarationTree.from_blocks(_forest())
        assert [n.type for n in tree.nodes] == [
            NodeType.SUITE,
            NodeType.TEST,
            NodeType.ASSERTION,
            NodeType.TEST,
            NodeType.TEST,
        ]

    def test_unknown_block_types_map_to_other(self):
        assert NodeType.from_block_type("beforeEach") is NodeType.OTHER
        assert NodeType.from_block_type("SUITE") is NodeType.SUITE

    def test_contains_line_is_inclusive(self):
        node = DeclarationTree.from_blocks(_forest()).node(1)
        assert node.contains_line(2)
        assert node.contains_line(4)
        assert not node.contains_line(5)

    def test_empty_forest(self):
        tree = DeclarationTree.from_blocks([])
        assert len(tree) == 0
        assert tree.roots == ()
