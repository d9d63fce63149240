"""树结构调试视图测试"""

from io import StringIO

from rich.console import Console
from rich.tree import Tree

from panetree.pane import Pane, Window, WindowInsertPanePosition
from panetree.render import build_tree_view, format_pane_tree, print_pane_tree
from panetree.timer import Timer


def make_tree(timer: Timer | None = None) -> Pane:
    root = Pane("root")
    root.insert_window(Window(window_id="w1", timer=timer))
    root.insert_window(Window(window_id="w2", timer=timer))
    split = root.split_pane(WindowInsertPanePosition.BOTTOM)
    split.new_pane.insert_window(Window(window_id="w3"))
    return root


class TestBuildTreeView:
    """Rich Tree 构建"""

    def test_returns_tree(self):
        view = build_tree_view(make_tree())

        assert isinstance(view, Tree)
        assert len(view.children) == 2

    def test_leaf_children_are_windows(self):
        """leaf 节点下挂窗口"""
        view = build_tree_view(make_tree())

        original = view.children[0]
        assert len(original.children) == 2


class TestFormatPaneTree:
    """文本输出"""

    def test_container_label(self):
        text = format_pane_tree(make_tree())

        assert "Container root Vertical size=[100, 100]" in text

    def test_active_window_marked(self):
        """active 窗口带 * 标记"""
        text = format_pane_tree(make_tree())

        assert "* w2 (open)" in text
        assert "* w3 (open)" in text
        assert "* w1" not in text

    def test_closing_window_state(self, clock):
        """关闭中的窗口显示状态"""
        root = make_tree(Timer(clock=clock))
        root.children[0].close_window("w1")

        assert "w1 (closing)" in format_pane_tree(root)

    def test_window_order(self):
        """窗口按树顺序输出"""
        text = format_pane_tree(make_tree())

        assert text.index("w1") < text.index("w2") < text.index("w3")

    def test_empty_root(self):
        text = format_pane_tree(Pane("solo"))

        assert "Leaf solo" in text


class TestPrintPaneTree:
    """终端输出"""

    def test_custom_console(self):
        buffer = StringIO()
        console = Console(file=buffer, color_system=None, width=100)

        print_pane_tree(make_tree(), console=console)

        assert "w3" in buffer.getvalue()
