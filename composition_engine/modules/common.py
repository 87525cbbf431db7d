"""
Shared helpers for content modules.
"""

from typing import Dict, Optional
import html


def resolve_url(url: str, base_url: Optional[str] = None) -> str:
    """Make a relative asset URL absolute against the base URL"""
    if url.startswith('http://') or url.startswith('https://') or url.startswith('data:'):
        return url
    if not base_url:
        return url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


def escape_text(text) -> str:
    return html.escape(str(text), quote=True)


def inline_style(style: Optional[Dict[str, str]], properties: Dict[str, str]) -> str:
    """
    Build an inline style declaration list.

    Args:
        style: Style mapping from module data (camelCase keys)
        properties: camelCase key -> CSS property to pick from the mapping

    Returns:
        "prop: value; prop: value" or an empty string
    """
    if not style:
        return ""
    declarations = [
        f"{css_name}: {style[key]}"
        for key, css_name in properties.items()
        if style.get(key) not in (None, '')
    ]
    return "; ".join(declarations)
