"""
Composition Engine - Modular Graphic Composition System

Turns a declarative composition configuration (render order, nested groups,
conditional visibility, spatial rules and stacking order) into the markup of
a single graphic built from independently implemented content modules.
"""

from .config import EngineConfig, EngineConfigPresets
from .types import (
    CompositionConfig, RenderOrderItem, RenderNode, RenderContext,
    SpatialRule, LayerConfig, LayoutPresetDefinition,
)
from .registry import ContentModule, SubfragmentRenderer, ModuleRegistry
from .spatial_rules import SpatialRulesEngine
from .layers import LayerController
from .composition_order import CompositionOrderEngine
from .presets import get_layout_preset, list_layout_presets, create_config_from_preset

__all__ = [
    'EngineConfig',
    'EngineConfigPresets',
    'CompositionConfig',
    'RenderOrderItem',
    'RenderNode',
    'RenderContext',
    'SpatialRule',
    'LayerConfig',
    'LayoutPresetDefinition',
    'ContentModule',
    'SubfragmentRenderer',
    'ModuleRegistry',
    'SpatialRulesEngine',
    'LayerController',
    'CompositionOrderEngine',
    'get_layout_preset',
    'list_layout_presets',
    'create_config_from_preset'
]
