"""
Composition Order Engine

Turns the declarative render order (modules, nested groups, spacers) into a
render tree honoring conditional visibility, then serializes that tree into
nested flex container markup, asking the module registry for leaf content.

Every failure inside this engine degrades to rendering nothing plus a log
line. Exceptions raised by module renderers themselves propagate.
"""

from typing import Any, Dict, List, Optional
import logging
import re
import time

from .conditions import is_recognized
from .config import EngineConfig
from .registry import ModuleRegistry, SubfragmentRenderer
from .types import (
    FlexPosition, RenderCondition, RenderContext, RenderNode, RenderOrderItem,
    NODE_GROUP, NODE_MODULE, NODE_SPACER, ROOT_NODE_ID,
)


_SUBMODULE_INDEX = re.compile(r'(\d+)\s*$')
_CAMEL_BOUNDARY = re.compile(r'([A-Z])')


def css_property_name(key: str) -> str:
    """Convert a camelCase style key to its CSS property name"""
    return _CAMEL_BOUNDARY.sub(r'-\1', key).lower()


def parse_submodule_index(submodule_id: str) -> Optional[int]:
    """Trailing numeric index of a submodule id ('field.0' -> 0, 'item2' -> 2)"""
    match = _SUBMODULE_INDEX.search(submodule_id or '')
    return int(match.group(1)) if match else None


class CompositionOrderEngine:
    """
    Render-order owner for one composition run.

    The engine keeps its own working copy of the render order; build one per
    composition and do not share it between concurrently rendered slides.
    """

    def __init__(self, render_order: List[RenderOrderItem], registry: ModuleRegistry,
                 config: Optional[EngineConfig] = None):
        self.render_order: List[RenderOrderItem] = list(render_order)
        self.registry = registry
        self.config = config or EngineConfig()

    def generate_html(self, context: RenderContext) -> str:
        """
        Build the render tree for a context and serialize it.

        Args:
            context: Enabled modules, their data and the viewport

        Returns:
            Markup for the whole composition (empty when nothing is visible)
        """
        tree = self.build_render_tree(context)
        return self.render_node(tree, context)

    def build_render_tree(self, context: RenderContext) -> RenderNode:
        """Build the root group node from the top-level render order"""
        children = []
        last_index = len(self.render_order) - 1

        for index, item in enumerate(self.render_order):
            if not self.evaluate_condition(item.conditional, context):
                logging.debug(f"Conditional suppressed render item {item.id or item.key}")
                continue

            if item.is_group:
                children.append(self._group_node(item, f"group-{index}", context))
                continue

            if item.is_spacer:
                children.append(self._spacer_node(item, f"spacer-{index}"))
                continue

            children.append(self._module_node(item, f"{item.module_id}-{index}"))

            # Bottom margin is repeated as a spacer so the gap survives an empty module
            if item.margin_bottom and index < last_index:
                children.append(RenderNode(
                    type=NODE_SPACER,
                    id=f"spacer-{index}",
                    margin_top=item.margin_bottom,
                ))

        return RenderNode(type=NODE_GROUP, id=ROOT_NODE_ID, children=children)

    def build_children_nodes(self, children: List[RenderOrderItem],
                             context: RenderContext) -> List[RenderNode]:
        """Build the nodes of a group's children, recursing into nested groups"""
        nodes = []

        for index, item in enumerate(children):
            if not self.evaluate_condition(item.conditional, context):
                logging.debug(f"Conditional suppressed nested render item {item.id or item.key}")
                continue

            if item.is_group:
                nodes.append(self._group_node(item, f"group-nested-{index}", context))
            elif item.is_spacer:
                nodes.append(self._spacer_node(item, f"spacer-nested-{index}"))
            else:
                nodes.append(self._module_node(item, f"{item.module_id}-nested-{index}"))

        return nodes

    def _group_node(self, item: RenderOrderItem, default_id: str, context: RenderContext) -> RenderNode:
        group = item.group_config
        return RenderNode(
            type=NODE_GROUP,
            id=item.id or default_id,
            direction=group.direction,
            gap=group.gap,
            align_items=group.align_items,
            justify_content=group.justify_content,
            flex=item.effective_flex(),
            margin_top=item.margin_top,
            margin_bottom=item.margin_bottom,
            children=self.build_children_nodes(group.children, context),
        )

    def _spacer_node(self, item: RenderOrderItem, default_id: str) -> RenderNode:
        return RenderNode(type=NODE_SPACER, id=item.id or default_id, margin_top=item.margin_top)

    def _module_node(self, item: RenderOrderItem, default_id: str) -> RenderNode:
        return RenderNode(
            type=NODE_MODULE,
            id=item.id or default_id,
            module_id=item.module_id,
            submodule_id=item.submodule_id,
            flex=item.effective_flex(),
            margin_top=item.margin_top,
            margin_bottom=item.margin_bottom,
            style=self._position_style(item),
        )

    def _position_style(self, item: RenderOrderItem) -> Optional[Dict[str, str]]:
        position = item.position
        if position is None or position.type != 'absolute':
            return None

        style = {'position': 'absolute'}
        if position.absolute_coords:
            style.update(position.absolute_coords.to_dict())
        return style

    def evaluate_condition(self, condition: Optional[RenderCondition], context: RenderContext) -> bool:
        """
        Decide whether an item is visible.

        A recognized showIf decides on its own. Otherwise a recognized hideIf
        hides the item when it holds. Anything else is visible.
        """
        if condition is None:
            return True

        if is_recognized(condition.show_if):
            return condition.show_if.evaluate(context, self.config)

        if is_recognized(condition.hide_if):
            return not condition.hide_if.evaluate(context, self.config)

        return True

    def render_node(self, node: RenderNode, context: RenderContext) -> str:
        if node.type == NODE_MODULE:
            return self.render_module(node, context)
        if node.type == NODE_GROUP:
            return self.render_group(node, context)
        if node.type == NODE_SPACER:
            return self.render_spacer(node)
        return ""

    def render_module(self, node: RenderNode, context: RenderContext) -> str:
        """Render a module leaf, wrapped in a styled div when it has any style"""
        if not node.module_id:
            return ""

        if node.module_id not in context.enabled_modules:
            logging.debug(f"Module not enabled, skipping: {node.module_id}")
            return ""

        module = self.registry.get_module(node.module_id)
        if module is None:
            logging.warning(f"Module not found: {node.module_id}")
            return ""

        module_data = context.all_modules_data.get(node.module_id)
        if module_data is None:
            logging.warning(f"Module data not found for: {node.module_id}")
            return ""

        if node.submodule_id:
            return self.render_subfragment(module, module_data, node, context)

        html = module.render_fragment(module_data, context)

        styles = []
        if node.flex:
            styles.append(self.build_flex_style(node.flex))
        if node.style:
            styles.extend(f"{css_property_name(key)}: {value}" for key, value in node.style.items())
        if node.margin_top:
            styles.append(f"margin-top: {node.margin_top}")
        if node.margin_bottom:
            styles.append(f"margin-bottom: {node.margin_bottom}")

        if styles:
            class_attr = f' class="{node.class_name}"' if node.class_name else ''
            html = f'<div{class_attr} style="{"; ".join(styles)}">{html}</div>'

        return html

    def render_subfragment(self, module, module_data: Dict[str, Any], node: RenderNode,
                           context: RenderContext) -> str:
        """Render one indexed sub-part of a module's data"""
        if not isinstance(module, SubfragmentRenderer):
            logging.warning(f"Module {module.id} cannot render submodule {node.submodule_id}")
            return ""

        index = parse_submodule_index(node.submodule_id)
        if index is None:
            logging.warning(f"Submodule id has no index: {node.module_id}.{node.submodule_id}")
            return ""

        return module.render_subfragment(index, module_data, context)

    def render_group(self, node: RenderNode, context: RenderContext) -> str:
        """Render a flex container; groups with no visible output render nothing"""
        if not node.children:
            return ""

        fragments = [self.render_node(child, context) for child in node.children]
        children_html = "\n".join(fragment for fragment in fragments if fragment)
        if not children_html:
            return ""

        styles = [
            "display: flex",
            f"flex-direction: {node.direction or 'column'}",
        ]
        if node.gap:
            styles.append(f"gap: {node.gap}")
        if node.flex:
            styles.append(self.build_flex_style(node.flex))
        if node.margin_top:
            styles.append(f"margin-top: {node.margin_top}")
        if node.margin_bottom:
            styles.append(f"margin-bottom: {node.margin_bottom}")
        if node.align_items:
            styles.append(f"align-items: {node.align_items}")
        if node.justify_content:
            styles.append(f"justify-content: {node.justify_content}")
        if node.style:
            styles.extend(f"{css_property_name(key)}: {value}" for key, value in node.style.items())

        class_attr = f' class="{node.class_name}"' if node.class_name else ''
        return f'<div{class_attr} style="{"; ".join(styles)}">{children_html}</div>'

    def render_spacer(self, node: RenderNode) -> str:
        height = node.margin_top or self.config.default_spacer_height
        return f'<div class="composition-spacer" style="height: {height};"></div>'

    @staticmethod
    def build_flex_style(flex: FlexPosition) -> str:
        grow = flex.grow if flex.grow is not None else 0
        shrink = flex.shrink if flex.shrink is not None else 1
        basis = flex.basis if flex.basis is not None else 'auto'
        return f"flex: {_format_number(grow)} {_format_number(shrink)} {basis}"

    def set_render_order(self, order: List[RenderOrderItem]) -> None:
        self.render_order = list(order)

    def get_render_order(self) -> List[RenderOrderItem]:
        return list(self.render_order)

    def move_item(self, from_index: int, to_index: int) -> None:
        """Move an item within the order; out-of-range indices are ignored"""
        size = len(self.render_order)
        if not (0 <= from_index < size) or not (0 <= to_index < size):
            logging.debug(f"Ignoring render order move out of bounds: {from_index} -> {to_index}")
            return

        item = self.render_order.pop(from_index)
        self.render_order.insert(to_index, item)

    def remove_item(self, index: int) -> None:
        if 0 <= index < len(self.render_order):
            del self.render_order[index]
        else:
            logging.debug(f"Ignoring render order removal out of bounds: {index}")

    def add_item(self, item: RenderOrderItem, index: Optional[int] = None) -> None:
        """Insert an item at index, or append when the index is missing or out of range"""
        if index is not None and 0 <= index <= len(self.render_order):
            self.render_order.insert(index, item)
        else:
            self.render_order.append(item)

    @staticmethod
    def create_horizontal_group(items: List[RenderOrderItem], gap: Optional[str] = None,
                                align_items: Optional[str] = None,
                                justify_content: Optional[str] = None,
                                config: Optional[EngineConfig] = None) -> RenderNode:
        """Build a row group node laying the given module items side by side"""
        config = config or EngineConfig()
        return RenderNode(
            type=NODE_GROUP,
            id=f"horizontal-group-{int(time.time() * 1000)}",
            direction='row',
            gap=gap or config.default_group_gap,
            align_items=align_items or 'stretch',
            justify_content=justify_content,
            children=[
                RenderNode(
                    type=NODE_MODULE,
                    id=item.id or f"{item.module_id}-{index}",
                    module_id=item.module_id,
                    submodule_id=item.submodule_id,
                    flex=item.flex,
                )
                for index, item in enumerate(items)
            ],
        )

    def get_tree_info(self, context: RenderContext) -> Dict[str, Any]:
        """Get detailed render tree information for debugging"""
        tree = self.build_render_tree(context)
        counts = {NODE_MODULE: 0, NODE_GROUP: 0, NODE_SPACER: 0}

        def walk(node: RenderNode, depth: int) -> int:
            counts[node.type] = counts.get(node.type, 0) + 1
            deepest = depth
            for child in node.children or []:
                deepest = max(deepest, walk(child, depth + 1))
            return deepest

        depth = walk(tree, 0)

        return {
            'viewport': (context.viewport_width, context.viewport_height),
            'order_length': len(self.render_order),
            'modules': counts[NODE_MODULE],
            'groups': counts[NODE_GROUP] - 1,
            'spacers': counts[NODE_SPACER],
            'depth': depth,
            'tree': tree.to_dict(),
        }


def _format_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

