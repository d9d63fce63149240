"""Layout - 比例尺寸到具体尺寸的换算

size 中保存的是比例权重（split 后为 [100, 100]），布局时按容器在 direction
方向上的尺寸缩放，舍入误差全部补到最后一项，保证总和精确等于容器尺寸。
"""

from typing import TYPE_CHECKING

from .types import PaneDirection

if TYPE_CHECKING:
    from .pane import Pane


def axis_extent(pane: "Pane") -> float | None:
    """pane 在自身 direction 方向上的容器尺寸"""
    if pane.direction == PaneDirection.HORIZONTAL:
        return pane.width
    return pane.height


def rescale_sizes(size: list[float], extent: float) -> list[float] | None:
    """把比例尺寸缩放到 extent

    Args:
        size: 比例尺寸
        extent: 容器尺寸

    Returns:
        缩放后的尺寸（总和等于 extent），size 总和为 0 时返回 None
    """
    total = sum(size)
    if not total:
        return None
    ratio = extent / total
    new_size = [s * ratio for s in size]
    delta = extent - sum(new_size)
    new_size[-1] += delta
    return new_size


def layout_tree(root: "Pane") -> None:
    """从 root 开始逐层换算尺寸

    每个容器按自身尺寸缩放 size，然后把结果作为子节点在该方向上的尺寸，
    另一个方向沿用容器尺寸。未测量或 size 总和为 0 的 pane 保持原样，
    但仍继续处理其子节点。
    """
    stack: list["Pane"] = [root]
    while stack:
        pane = stack.pop()
        _layout_pane(pane)
        stack.extend(reversed(pane.children))


def _layout_pane(pane: "Pane") -> None:
    extent = axis_extent(pane)
    if extent is None or not pane.size:
        return

    new_size = rescale_sizes(pane.size, extent)
    if new_size is None:
        return
    pane.size = new_size

    if len(pane.children) != len(new_size):
        return
    for child, child_extent in zip(pane.children, new_size):
        if pane.direction == PaneDirection.HORIZONTAL:
            child.width = child_extent
            child.height = pane.height
        else:
            child.width = pane.width
            child.height = child_extent
