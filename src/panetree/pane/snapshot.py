"""快照 - 整棵 pane 树的序列化契约

快照结构（键名为对外契约）：
    { id, direction: "Horizontal" | "Vertical", activeWindowId, size: [number],
      windows: [{ id, data }], children: [<同结构>] }

往返保证：id、direction、size、activeWindowId、窗口 id 和 data 保持不变；
对象身份不保留，窗口一律以 OPEN 状态重建。
"""

from typing import Any, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_serializer, model_validator

from .types import PaneDirection
from .window import Window
from .pane import Pane

if TYPE_CHECKING:
    from ..timer import Timer


class WindowData(BaseModel):
    """窗口快照"""

    id: str
    data: Any = None


class PaneData(BaseModel):
    """Pane 快照

    校验按节点进行（见 parse_snapshot），children 由遍历逐层挂入，
    因此树的深度不受递归深度限制。
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    direction: PaneDirection = PaneDirection.HORIZONTAL
    active_window_id: str = Field(default="", alias="activeWindowId")
    size: list[int | float] = Field(default_factory=list)
    windows: list[WindowData] = Field(default_factory=list)
    children: list["PaneData"] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_size_matches_children(self, info: ValidationInfo) -> "PaneData":
        # 逐节点校验时 children 尚未挂入，子节点数量由 context 给出
        child_count = len(self.children)
        if info.context and "child_count" in info.context:
            child_count = info.context["child_count"]
        if child_count and len(self.size) != child_count:
            raise ValueError(
                f"pane {self.id}: size has {len(self.size)} entries "
                f"for {child_count} children"
            )
        return self

    @field_serializer("direction")
    def _serialize_direction(self, direction: PaneDirection) -> str:
        return direction.value

    def to_dict(self) -> dict:
        """转换为快照字典（camelCase 键）"""
        root = self._node_dict()
        stack: list[tuple[PaneData, dict]] = [(self, root)]
        while stack:
            node, out = stack.pop()
            for child in node.children:
                child_out = child._node_dict()
                out["children"].append(child_out)
                stack.append((child, child_out))
        return root

    def _node_dict(self) -> dict:
        out = self.model_dump(by_alias=True, exclude={"children"})
        out["children"] = []
        return out


def _split_node(raw: Any) -> tuple[Any, list]:
    """把原始节点拆成（自身字段, 原始子节点）"""
    if isinstance(raw, PaneData):
        return raw.model_dump(by_alias=True, exclude={"children"}), list(raw.children)
    if isinstance(raw, dict):
        children = raw.get("children", [])
        if not isinstance(children, list):
            # 交给 pydantic 报告类型错误
            return raw, []
        return {k: v for k, v in raw.items() if k != "children"}, children
    return raw, []


def _validate_node(raw: Any) -> tuple[PaneData, list]:
    fields, children = _split_node(raw)
    node = PaneData.model_validate(fields, context={"child_count": len(children)})
    return node, children


def parse_snapshot(snapshot: "PaneData | dict") -> PaneData:
    """校验快照

    自顶向下逐个节点校验并挂入父节点的 children。

    Raises:
        pydantic.ValidationError: 快照结构不合法
    """
    if isinstance(snapshot, PaneData):
        return snapshot

    root, raw_children = _validate_node(snapshot)
    stack: list[tuple[PaneData, list]] = [(root, raw_children)]
    while stack:
        parent, pending = stack.pop()
        for raw_child in pending:
            child, grandchildren = _validate_node(raw_child)
            parent.children.append(child)
            stack.append((child, grandchildren))
    return root


def snapshot_of(pane: Pane) -> PaneData:
    """从现有树生成快照模型"""
    return parse_snapshot(pane.get_data())


def build_pane_tree(data: PaneData, timer: "Timer | None" = None) -> Pane:
    """按快照重建一棵全新的 pane 树

    自顶向下重建，每个 pane 和窗口保留快照中的 id，parent 引用全部重新建立。

    Args:
        data: 已校验的快照
        timer: 绑定到新窗口的 Timer

    Returns:
        新树的根
    """
    root: Pane | None = None
    stack: list[tuple[PaneData, Pane | None]] = [(data, None)]
    while stack:
        node, parent = stack.pop()

        pane = Pane(node.id)
        pane.direction = node.direction
        pane.size = list(node.size)
        pane.active_window_id = node.active_window_id
        pane.set_windows([
            Window(window_data.data, window_id=window_data.id, timer=timer)
            for window_data in node.windows
        ])

        if parent is None:
            root = pane
        else:
            pane.parent_pane = parent
            parent.children.append(pane)

        for child in reversed(node.children):
            stack.append((child, pane))

    return root
