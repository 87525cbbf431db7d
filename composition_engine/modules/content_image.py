"""
Content Image Module

Renders the main content image of a graphic.
"""

from typing import Any, Dict

from ..registry import ContentModule
from ..types import RenderContext
from .common import escape_text, resolve_url


class ContentImageModule(ContentModule):
    """Module for the content image (above card, below text)"""

    module_id = "contentImage"
    name = "Content Image"
    z_index = 5
    category = "content"

    @property
    def defaults(self) -> Dict[str, Any]:
        return {'enabled': True, 'imageUrl': '', 'objectFit': 'cover', 'borderRadius': 0}

    def render_fragment(self, data: Dict[str, Any], context: RenderContext) -> str:
        if not data.get('enabled', True) or not data.get('imageUrl'):
            return ""

        src = escape_text(resolve_url(data['imageUrl'], context.base_url))
        alt = escape_text(data.get('alt') or 'Content')
        return (
            '<div class="content-image-section">'
            f'<img class="content-image" src="{src}" alt="{alt}" />'
            '</div>'
        )

    def render_css(self, data: Dict[str, Any], context: RenderContext) -> str:
        return (
            ".content-image-section {\n"
            "  position: relative;\n"
            f"  z-index: {self.z_index};\n"
            "  width: 100%;\n"
            "  height: 100%;\n"
            "  overflow: hidden;\n"
            "  border-radius: var(--content-image-radius);\n"
            "}\n"
            ".content-image {\n"
            "  width: 100%;\n"
            "  height: 100%;\n"
            "  object-fit: var(--content-image-fit);\n"
            "}"
        )

    def style_variables(self, data: Dict[str, Any]) -> Dict[str, str]:
        return {
            'content-image-fit': data.get('objectFit', 'cover'),
            'content-image-radius': f"{data.get('borderRadius', 0)}px",
        }
