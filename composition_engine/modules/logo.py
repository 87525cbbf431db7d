"""
Logo Module

Renders a logo overlay in one corner of the graphic.
"""

from typing import Any, Dict

from ..registry import ContentModule
from ..types import RenderContext
from .common import escape_text, resolve_url


LOGO_POSITIONS = {
    'top-left': 'top: 40px; left: 40px;',
    'top-right': 'top: 40px; right: 40px;',
    'bottom-left': 'bottom: 40px; left: 40px;',
    'bottom-right': 'bottom: 40px; right: 40px;',
}


class LogoModule(ContentModule):
    """Module for a logo overlay (above content, below corners)"""

    module_id = "logo"
    name = "Logo"
    z_index = 30
    category = "overlay"

    @property
    def defaults(self) -> Dict[str, Any]:
        return {'enabled': True, 'logoUrl': '', 'position': 'top-right', 'size': 120}

    def render_fragment(self, data: Dict[str, Any], context: RenderContext) -> str:
        logo_url = (data.get('logoUrl') or '').strip()
        if not data.get('enabled', True) or not logo_url or logo_url == 'none':
            return ""

        src = escape_text(resolve_url(logo_url, context.base_url))
        return f'<div class="logo-container"><img src="{src}" alt="Logo" /></div>'

    def render_css(self, data: Dict[str, Any], context: RenderContext) -> str:
        position = LOGO_POSITIONS.get(data.get('position'), LOGO_POSITIONS['top-right'])
        return (
            ".logo-container {\n"
            "  position: absolute;\n"
            f"  {position}\n"
            f"  z-index: {self.z_index};\n"
            "}\n"
            ".logo-container img {\n"
            f"  width: {data.get('size', 120)}px;\n"
            "  height: auto;\n"
            "}"
        )
