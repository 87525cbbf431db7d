"""
Layer Controller

Owns the stacking order (z-index), visibility and lock state of the enabled
modules of one graphic, plus the explicit z-index overrides saved with the
composition configuration.
"""

from typing import Dict, List, Optional
from dataclasses import replace
import logging
import re

from .config import EngineConfig
from .registry import ModuleRegistry
from .types import LayerConfig


Z_INDEX_DECLARATION = re.compile(r'z-index:\s*-?\d+', re.IGNORECASE)


class LayerController:
    """
    Stacking-order manager for one composition.

    Effective z-index resolution: explicit override > layer entry >
    registry baseline > 0. Layers are kept sorted ascending by z-index
    (index 0 is the bottom of the stack).
    """

    def __init__(self, registry: ModuleRegistry, overrides: Optional[Dict[str, int]] = None,
                 config: Optional[EngineConfig] = None):
        self.registry = registry
        self.config = config or EngineConfig()
        self.overrides: Dict[str, int] = dict(overrides or {})
        self.layers: List[LayerConfig] = []

    def initialize_layers(self, enabled_modules: List[str]) -> None:
        """Rebuild the layer list from scratch for the enabled modules"""
        self.layers = []
        for module_id in enabled_modules:
            module = self.registry.get_module(module_id)
            default_z_index = module.z_index if module is not None else 0
            override = self.overrides.get(module_id)

            self.layers.append(LayerConfig(
                module_id=module_id,
                z_index=override if override is not None else default_z_index,
                visible=True,
                locked=False,
                display_name=module.display_name if module is not None else module_id,
            ))

        self._sort_layers()

    def _sort_layers(self) -> None:
        self.layers.sort(key=lambda layer: layer.z_index)

    def _find_index(self, module_id: str) -> int:
        for index, layer in enumerate(self.layers):
            if layer.module_id == module_id:
                return index
        return -1

    def get_layer(self, module_id: str) -> Optional[LayerConfig]:
        index = self._find_index(module_id)
        return self.layers[index] if index != -1 else None

    def get_z_index(self, module_id: str) -> int:
        """Effective stacking value of a module"""
        if module_id in self.overrides:
            return self.overrides[module_id]

        layer = self.get_layer(module_id)
        if layer is not None:
            return layer.z_index

        return self.registry.get_default_z_index(module_id)

    def set_z_index(self, module_id: str, z_index: int) -> None:
        self.overrides[module_id] = z_index

        layer = self.get_layer(module_id)
        if layer is not None:
            layer.z_index = z_index
            self._sort_layers()

    def remove_override(self, module_id: str) -> None:
        self.overrides.pop(module_id, None)

        layer = self.get_layer(module_id)
        if layer is not None:
            layer.z_index = self.registry.get_default_z_index(module_id)
            self._sort_layers()

    def reset_overrides(self) -> None:
        self.overrides = {}
        for layer in self.layers:
            layer.z_index = self.registry.get_default_z_index(layer.module_id)
        self._sort_layers()

    def reorder_layers(self, from_index: int, to_index: int) -> None:
        """
        Move a layer in the stack (drag & drop).

        Every layer's z-index is recalculated afterwards, overwriting any
        explicit values previously set on the other layers too.
        """
        if not (0 <= from_index < len(self.layers)) or not (0 <= to_index < len(self.layers)):
            logging.debug(f"Ignoring layer reorder out of bounds: {from_index} -> {to_index}")
            return

        if self.layers[from_index].locked:
            logging.warning(f"Layer {self.layers[from_index].module_id} is locked")
            return

        moved_layer = self.layers.pop(from_index)
        self.layers.insert(to_index, moved_layer)

        self.auto_calculate_z_index()

    def auto_calculate_z_index(self) -> None:
        """Assign index * step to every layer in stack order and save as overrides"""
        step = self.config.z_index_step
        for index, layer in enumerate(self.layers):
            layer.z_index = index * step
            self.overrides[layer.module_id] = layer.z_index

    def set_visibility(self, module_id: str, visible: bool) -> None:
        layer = self.get_layer(module_id)
        if layer is not None:
            layer.visible = visible

    def set_locked(self, module_id: str, locked: bool) -> None:
        layer = self.get_layer(module_id)
        if layer is not None:
            layer.locked = locked

    def get_layers(self) -> List[LayerConfig]:
        return list(self.layers)

    def get_layers_visual_order(self) -> List[LayerConfig]:
        """Layers top of the stack first, as shown in a layers panel"""
        return list(reversed(self.layers))

    def get_overrides(self) -> Dict[str, int]:
        return dict(self.overrides)

    def set_overrides(self, overrides: Dict[str, int]) -> None:
        self.overrides = dict(overrides)
        for layer in self.layers:
            if layer.module_id in overrides:
                layer.z_index = overrides[layer.module_id]
        self._sort_layers()

    def has_override(self, module_id: str) -> bool:
        return module_id in self.overrides

    def get_default_z_index(self, module_id: str) -> int:
        return self.registry.get_default_z_index(module_id)

    def get_next_available_z_index(self) -> int:
        if not self.layers:
            return self.config.empty_stack_z_index
        return max(layer.z_index for layer in self.layers) + self.config.z_index_step

    def move_to_top(self, module_id: str) -> None:
        layer = self.get_layer(module_id)
        if layer is None:
            return
        if layer.locked:
            logging.warning(f"Layer {module_id} is locked")
            return
        self.set_z_index(module_id, self.get_next_available_z_index())

    def move_to_bottom(self, module_id: str) -> None:
        layer = self.get_layer(module_id)
        if layer is None:
            return
        if layer.locked:
            logging.warning(f"Layer {module_id} is locked")
            return
        min_z_index = min(layer.z_index for layer in self.layers)
        self.set_z_index(module_id, min_z_index - self.config.z_index_step)

    def move_up(self, module_id: str) -> None:
        """Swap with the layer above; no-op at the top"""
        index = self._find_index(module_id)
        if index == -1 or index == len(self.layers) - 1:
            return
        self.reorder_layers(index, index + 1)

    def move_down(self, module_id: str) -> None:
        """Swap with the layer below; no-op at the bottom"""
        index = self._find_index(module_id)
        if index <= 0:
            return
        self.reorder_layers(index, index - 1)

    def apply_css_override(self, module_id: str, css: str) -> str:
        """
        Inject the effective z-index into a module's CSS.

        CSS is returned unchanged when the effective value equals the
        module's baseline. Otherwise existing z-index declarations are
        rewritten, or an !important rule for the module's container and
        root classes is prepended when there is none to rewrite.
        """
        z_index = self.get_z_index(module_id)
        if z_index == self.get_default_z_index(module_id):
            return css

        if Z_INDEX_DECLARATION.search(css):
            return Z_INDEX_DECLARATION.sub(f"z-index: {z_index}", css)

        return (
            f"/* Z-Index Override for {module_id} */\n"
            f".{module_id}-container,\n"
            f".{module_id} {{\n"
            f"  z-index: {z_index} !important;\n"
            f"}}\n\n"
            f"{css}"
        )

    def export(self) -> dict:
        return {
            'layers': [layer.to_dict() for layer in self.layers],
            'overrides': self.get_overrides(),
        }

    def import_config(self, layers: Optional[List[LayerConfig]] = None,
                      overrides: Optional[Dict[str, int]] = None) -> None:
        """Restore layers and/or overrides saved with a composition config"""
        if layers is not None:
            self.layers = [replace(layer) for layer in layers]
            self._sort_layers()

        if overrides is not None:
            self.set_overrides(overrides)
