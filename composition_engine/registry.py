"""
Module Contract and Registry

Content modules (text blocks, bullet lists, images, ...) are consumed by the
composition engines only through the narrow contract below: an id, a
baseline stacking value, and a markup renderer. Modules that can render a
single sub-part of their data additionally implement SubfragmentRenderer.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING
import logging

from .instances import get_base_module_id

if TYPE_CHECKING:
    from .types import RenderContext


class ContentModule(ABC):
    """
    Base class for all content modules.

    Each module knows how to render its own markup fragment (and optionally
    its CSS) from its data slot and the render context.
    """

    module_id: str = ""
    name: str = ""
    z_index: int = 0
    category: str = "content"

    def __init__(self, module_id: str = None, name: str = None, z_index: int = None):
        if module_id is not None:
            self.module_id = module_id
        self.module_id = self.module_id or self.__class__.__name__
        if name is not None:
            self.name = name
        if z_index is not None:
            self.z_index = z_index

    @property
    def id(self) -> str:
        return self.module_id

    @property
    def display_name(self) -> str:
        return self.name or self.module_id

    @property
    def defaults(self) -> Dict[str, Any]:
        """Default data used when the caller supplies none"""
        return {}

    @abstractmethod
    def render_fragment(self, data: Dict[str, Any], context: 'RenderContext') -> str:
        """
        Render this module's markup.

        Args:
            data: This module's data slot
            context: Render context of the whole graphic

        Returns:
            Markup fragment (may be empty)
        """
        pass

    def render_css(self, data: Dict[str, Any], context: 'RenderContext') -> str:
        """Render CSS for this module. Default implementation has none."""
        return ""

    def style_variables(self, data: Dict[str, Any]) -> Dict[str, str]:
        """CSS custom properties contributed to :root. Default has none."""
        return {}


class SubfragmentRenderer(ABC):
    """Capability of modules that can render one indexed sub-part of their data"""

    @abstractmethod
    def render_subfragment(self, index: int, data: Dict[str, Any], context: 'RenderContext') -> str:
        """
        Render the sub-part at the given index.

        Returns:
            Markup fragment, or an empty string when the index does not exist
        """
        pass


class ModuleRegistry:
    """Maps module ids (including instance ids) to module implementations"""

    def __init__(self, modules: Optional[Iterable[ContentModule]] = None):
        self._modules: Dict[str, ContentModule] = {}
        for module in modules or []:
            self.register(module)

    def register(self, module: ContentModule) -> None:
        if module.id in self._modules:
            logging.warning(f"Replacing registered module: {module.id}")
        self._modules[module.id] = module

    def unregister(self, module_id: str) -> None:
        self._modules.pop(module_id, None)

    def get_module(self, module_id: str) -> Optional[ContentModule]:
        """
        Look up a module. Instance ids ('textFields-2') resolve to their
        base module when not registered under their own id.
        """
        module = self._modules.get(module_id)
        if module is None:
            module = self._modules.get(get_base_module_id(module_id))
        return module

    def get_modules(self, module_ids: Iterable[str]) -> List[ContentModule]:
        modules = [self.get_module(module_id) for module_id in module_ids]
        return [module for module in modules if module is not None]

    def has_module(self, module_id: str) -> bool:
        return self.get_module(module_id) is not None

    def get_default_z_index(self, module_id: str) -> int:
        """Registry-declared baseline stacking value, 0 for unknown modules"""
        module = self.get_module(module_id)
        return module.z_index if module is not None else 0

    def list_module_ids(self) -> List[str]:
        return list(self._modules.keys())

    def list_modules(self) -> List[ContentModule]:
        return list(self._modules.values())

    def __contains__(self, module_id: str) -> bool:
        return self.has_module(module_id)

    def __len__(self) -> int:
        return len(self._modules)
