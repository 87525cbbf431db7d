"""
Bullets Module

Renders a list of bullet items with optional icons. Single items can be
placed on their own through 'item.N' submodule ids.
"""

from typing import Any, Dict

from ..registry import ContentModule, SubfragmentRenderer
from ..types import RenderContext
from .common import escape_text, resolve_url


class BulletsModule(ContentModule, SubfragmentRenderer):
    """Module for bullet point lists"""

    module_id = "bullets"
    name = "Bullets"
    z_index = 10
    category = "content"

    @property
    def defaults(self) -> Dict[str, Any]:
        return {'items': [], 'gap': 16}

    def _icon(self, index: int, item: Dict[str, Any], context: RenderContext) -> str:
        icon = item.get('icon')
        icon_type = item.get('iconType')
        if icon_type == 'number':
            return str(index + 1)
        if not icon:
            return ""
        if icon_type == 'url':
            return f'<img src="{escape_text(resolve_url(icon, context.base_url))}" alt="Icon" />'
        return escape_text(icon)

    def _render_item(self, index: int, item: Dict[str, Any], context: RenderContext) -> str:
        icon = self._icon(index, item, context)
        icon_html = f'<span class="bullet-icon">{icon}</span>' if icon else ''
        return f'<div class="bullet-item">{icon_html}<span class="bullet-text">{escape_text(item["text"])}</span></div>'

    @staticmethod
    def _is_visible(item: Dict[str, Any]) -> bool:
        return item.get('enabled', True) and bool(item.get('text'))

    def render_fragment(self, data: Dict[str, Any], context: RenderContext) -> str:
        items = [
            self._render_item(index, item, context)
            for index, item in enumerate(data.get('items') or [])
            if self._is_visible(item)
        ]
        if not items:
            return ""
        return '<div class="bullets-section">\n' + "\n".join(items) + '\n</div>'

    def render_subfragment(self, index: int, data: Dict[str, Any], context: RenderContext) -> str:
        items = data.get('items') or []
        if index >= len(items) or not self._is_visible(items[index]):
            return ""
        return self._render_item(index, items[index], context)

    def render_css(self, data: Dict[str, Any], context: RenderContext) -> str:
        return (
            ".bullets-section {\n"
            "  display: flex;\n"
            "  flex-direction: column;\n"
            "  gap: var(--bullets-gap);\n"
            "  position: relative;\n"
            f"  z-index: {self.z_index};\n"
            "}\n"
            ".bullet-item {\n"
            "  display: flex;\n"
            "  align-items: center;\n"
            "  gap: 12px;\n"
            "}"
        )

    def style_variables(self, data: Dict[str, Any]) -> Dict[str, str]:
        return {'bullets-gap': f"{data.get('gap', 16)}px"}
