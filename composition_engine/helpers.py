"""
Layout Helpers

Builders for the common horizontal split layouts, plus conversions between
render nodes and render-order items.
"""

from typing import Dict, Optional
import time

from .config import EngineConfig
from .types import (
    FlexPosition, GroupConfig, RenderNode, RenderOrderItem,
    GROUP_MODULE_ID, SPACER_MODULE_ID, NODE_GROUP, NODE_MODULE,
)


SPLIT_TYPES: Dict[str, str] = {
    '50-50': '50% / 50%',
    '30-70': '30% / 70%',
    '70-30': '70% / 30%',
    '40-60': '40% / 60%',
    '60-40': '60% / 40%',
}


def render_node_to_order_item(node: RenderNode) -> RenderOrderItem:
    """Convert a render node (and its children) back into a render-order item"""
    if node.type == NODE_MODULE:
        return RenderOrderItem(
            module_id=node.module_id,
            submodule_id=node.submodule_id,
            id=node.id,
            flex=node.flex,
            margin_top=node.margin_top,
            margin_bottom=node.margin_bottom,
        )

    if node.type == NODE_GROUP:
        return RenderOrderItem(
            module_id=GROUP_MODULE_ID,
            id=node.id,
            margin_top=node.margin_top,
            margin_bottom=node.margin_bottom,
            group_config=GroupConfig(
                direction=node.direction or 'column',
                gap=node.gap,
                align_items=node.align_items,
                justify_content=node.justify_content,
                children=[render_node_to_order_item(child) for child in node.children or []],
            ),
        )

    return RenderOrderItem(module_id=SPACER_MODULE_ID, id=node.id, margin_top=node.margin_top)


def _split_child(module_id: str, submodule_id: Optional[str], side: str,
                 flex: FlexPosition) -> RenderOrderItem:
    return RenderOrderItem(
        module_id=module_id,
        submodule_id=submodule_id,
        id=f"{module_id}-{submodule_id or 'main'}-{side}",
        flex=flex,
    )


def _split_group(left: RenderOrderItem, right: RenderOrderItem, gap: Optional[str],
                 align_items: Optional[str], justify_content: Optional[str],
                 config: Optional[EngineConfig]) -> RenderOrderItem:
    config = config or EngineConfig()
    return RenderOrderItem(
        module_id=GROUP_MODULE_ID,
        id=f"horizontal-group-{int(time.time() * 1000)}",
        group_config=GroupConfig(
            direction='row',
            gap=gap or config.default_split_gap,
            align_items=align_items or 'stretch',
            justify_content=justify_content,
            children=[left, right],
        ),
    )


def create_custom_split(left_module: str, right_module: str, split_type: str,
                        left_submodule: Optional[str] = None, right_submodule: Optional[str] = None,
                        gap: Optional[str] = None, align_items: Optional[str] = None,
                        justify_content: Optional[str] = None,
                        config: Optional[EngineConfig] = None) -> RenderOrderItem:
    """
    Build a two-column row group with the given proportions.

    Args:
        left_module, right_module: Module ids of the two columns
        split_type: One of SPLIT_TYPES, e.g. '30-70'
        left_submodule, right_submodule: Optional submodule ids
        gap: Column gap (defaults to the configured split gap)

    Returns:
        A group render-order item; the wider column grows, the narrower does not
    """
    if split_type not in SPLIT_TYPES:
        raise ValueError(f"Unknown split type: {split_type}")

    left_percent, right_percent = (int(part) for part in split_type.split('-'))

    left = _split_child(left_module, left_submodule, 'left', FlexPosition(
        grow=1 if left_percent >= 50 else 0, shrink=1, basis=f"{left_percent}%"))
    right = _split_child(right_module, right_submodule, 'right', FlexPosition(
        grow=1 if right_percent >= 50 else 0, shrink=1, basis=f"{right_percent}%"))

    return _split_group(left, right, gap, align_items, justify_content, config)


def create_split_50_50(left_module: str, right_module: str, **options) -> RenderOrderItem:
    return create_custom_split(left_module, right_module, '50-50', **options)


def create_split_30_70(left_module: str, right_module: str, **options) -> RenderOrderItem:
    return create_custom_split(left_module, right_module, '30-70', **options)


def create_split_70_30(left_module: str, right_module: str, **options) -> RenderOrderItem:
    return create_custom_split(left_module, right_module, '70-30', **options)


def is_group_item(item: RenderOrderItem) -> bool:
    return item.is_group


def is_spacer_item(item: RenderOrderItem) -> bool:
    return item.is_spacer
