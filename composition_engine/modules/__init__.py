"""
Composition Engine Modules

Reference content modules and the default registry built from them.
"""

from ..registry import ModuleRegistry
from .text_fields import TextFieldsModule
from .bullets import BulletsModule
from .content_image import ContentImageModule
from .logo import LogoModule


def create_default_registry() -> ModuleRegistry:
    """Registry holding every built-in module"""
    return ModuleRegistry([
        TextFieldsModule(),
        BulletsModule(),
        ContentImageModule(),
        LogoModule(),
    ])


__all__ = [
    'TextFieldsModule',
    'BulletsModule',
    'ContentImageModule',
    'LogoModule',
    'create_default_registry'
]
