"""
Text Fields Module

Renders a stack of independently styled text fields. Single fields can be
placed on their own in a composition through 'field.N' submodule ids.
"""

from typing import Any, Dict

from ..registry import ContentModule, SubfragmentRenderer
from ..types import RenderContext
from .common import escape_text, inline_style


FIELD_STYLE_PROPERTIES = {
    'fontFamily': 'font-family',
    'fontSize': 'font-size',
    'fontWeight': 'font-weight',
    'color': 'color',
    'textAlign': 'text-align',
    'lineHeight': 'line-height',
    'letterSpacing': 'letter-spacing',
    'textTransform': 'text-transform',
}


class TextFieldsModule(ContentModule, SubfragmentRenderer):
    """Module for a list of text fields"""

    module_id = "textFields"
    name = "Text Fields"
    z_index = 10
    category = "content"

    @property
    def defaults(self) -> Dict[str, Any]:
        return {'count': 5, 'gap': 20, 'fields': []}

    def _active_fields(self, data: Dict[str, Any]) -> list:
        fields = data.get('fields') or []
        count = data.get('count')
        return fields[:count] if count is not None else fields

    def _render_field(self, index: int, field: Dict[str, Any]) -> str:
        style = inline_style(field.get('style'), FIELD_STYLE_PROPERTIES)
        style_attr = f' style="{style}"' if style else ''
        content = escape_text(field.get('content', ''))
        return f'<div class="text-item text-item-{index + 1}"{style_attr}>{content}</div>'

    def render_fragment(self, data: Dict[str, Any], context: RenderContext) -> str:
        items = [
            self._render_field(index, field)
            for index, field in enumerate(self._active_fields(data))
            if field.get('content')
        ]
        if not items:
            return ""
        return '<div class="text-section">\n' + "\n".join(items) + '\n</div>'

    def render_subfragment(self, index: int, data: Dict[str, Any], context: RenderContext) -> str:
        fields = self._active_fields(data)
        if index >= len(fields) or not fields[index].get('content'):
            return ""
        return self._render_field(index, fields[index])

    def render_css(self, data: Dict[str, Any], context: RenderContext) -> str:
        return (
            ".text-section {\n"
            "  display: flex;\n"
            "  flex-direction: column;\n"
            "  gap: var(--text-fields-gap);\n"
            "  position: relative;\n"
            f"  z-index: {self.z_index};\n"
            "}\n"
            ".text-item {\n"
            "  white-space: pre-wrap;\n"
            "}"
        )

    def style_variables(self, data: Dict[str, Any]) -> Dict[str, str]:
        return {'text-fields-gap': f"{data.get('gap', 20)}px"}
