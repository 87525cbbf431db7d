"""
Composition Data Model

Dataclasses for the declarative composition configuration edited by the
editor (render order, spatial rules, layers) and for the render tree built
from it. Every configuration type converts to and from the editor's
camelCase dictionary format.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
import copy

from .conditions import ConditionExpression, parse_condition_expression
from .config import EngineConfig


GROUP_MODULE_ID = "__group__"
SPACER_MODULE_ID = "__spacer__"
ROOT_NODE_ID = "root"

NODE_MODULE = "module"
NODE_GROUP = "group"
NODE_SPACER = "spacer"

POSITION_TYPES = ('flex', 'absolute', 'relative')
GROUP_DIRECTIONS = ('row', 'column')
RULE_TYPES = ('before', 'after', 'between', 'wrap')


def _drop_none(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


@dataclass
class FlexPosition:
    """Flexbox sizing for an item (grow / shrink / basis)"""
    grow: Optional[float] = None
    shrink: Optional[float] = None
    basis: Optional[str] = None

    def is_empty(self) -> bool:
        return self.grow is None and self.shrink is None and self.basis is None

    def to_dict(self) -> dict:
        return _drop_none({'grow': self.grow, 'shrink': self.shrink, 'basis': self.basis})

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['FlexPosition']:
        if not data:
            return None
        return cls(grow=data.get('grow'), shrink=data.get('shrink'), basis=data.get('basis'))


@dataclass
class AbsoluteCoordinates:
    """Offsets for absolutely positioned items"""
    top: Optional[str] = None
    left: Optional[str] = None
    right: Optional[str] = None
    bottom: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({'top': self.top, 'left': self.left,
                           'right': self.right, 'bottom': self.bottom})

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['AbsoluteCoordinates']:
        if not data:
            return None
        return cls(top=data.get('top'), left=data.get('left'),
                   right=data.get('right'), bottom=data.get('bottom'))


@dataclass
class PositionConfig:
    """Whether an item flows in the flex layout or is placed arbitrarily"""
    type: str = 'flex'
    flex: Optional[FlexPosition] = None
    absolute_coords: Optional[AbsoluteCoordinates] = None

    def to_dict(self) -> dict:
        return _drop_none({
            'type': self.type,
            'flex': self.flex.to_dict() if self.flex else None,
            'absoluteCoords': self.absolute_coords.to_dict() if self.absolute_coords else None,
        })

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['PositionConfig']:
        if not data:
            return None
        position_type = data.get('type', 'flex')
        if position_type not in POSITION_TYPES:
            raise ValueError(f"Invalid position type: {position_type}")
        return cls(
            type=position_type,
            flex=FlexPosition.from_dict(data.get('flex')),
            absolute_coords=AbsoluteCoordinates.from_dict(data.get('absoluteCoords')),
        )


@dataclass
class RenderCondition:
    """showIf / hideIf pair, parsed into condition variants"""
    show_if: Optional[ConditionExpression] = None
    hide_if: Optional[ConditionExpression] = None

    def to_dict(self) -> dict:
        return _drop_none({
            'showIf': self.show_if.to_expression() if self.show_if else None,
            'hideIf': self.hide_if.to_expression() if self.hide_if else None,
        })

    @classmethod
    def from_dict(cls, data: Optional[dict],
                  config: Optional[EngineConfig] = None) -> Optional['RenderCondition']:
        if not data:
            return None
        return cls(
            show_if=parse_condition_expression(data.get('showIf'), config),
            hide_if=parse_condition_expression(data.get('hideIf'), config),
        )


@dataclass
class GroupConfig:
    """Layout of a nested horizontal/vertical group and its children"""
    direction: str = 'column'
    gap: Optional[str] = None
    align_items: Optional[str] = None
    justify_content: Optional[str] = None
    children: List['RenderOrderItem'] = field(default_factory=list)

    def to_dict(self) -> dict:
        return _drop_none({
            'direction': self.direction,
            'gap': self.gap,
            'alignItems': self.align_items,
            'justifyContent': self.justify_content,
            'children': [child.to_dict() for child in self.children],
        })

    @classmethod
    def from_dict(cls, data: Optional[dict],
                  config: Optional[EngineConfig] = None) -> 'GroupConfig':
        data = data or {}
        direction = data.get('direction', 'column')
        if direction not in GROUP_DIRECTIONS:
            raise ValueError(f"Invalid group direction: {direction}")
        return cls(
            direction=direction,
            gap=data.get('gap'),
            align_items=data.get('alignItems'),
            justify_content=data.get('justifyContent'),
            children=[RenderOrderItem.from_dict(child, config) for child in data.get('children') or []],
        )


@dataclass
class RenderOrderItem:
    """
    One entry in the declarative render order.

    module_id is a registered module id (optionally instance-suffixed) or one
    of the GROUP_MODULE_ID / SPACER_MODULE_ID sentinels. group_config is only
    kept for group items.
    """
    module_id: str
    submodule_id: Optional[str] = None
    position: Optional[PositionConfig] = None
    conditional: Optional[RenderCondition] = None
    margin_top: Optional[str] = None
    margin_bottom: Optional[str] = None
    id: Optional[str] = None
    flex: Optional[FlexPosition] = None
    group_config: Optional[GroupConfig] = None

    @property
    def is_group(self) -> bool:
        return self.module_id == GROUP_MODULE_ID and self.group_config is not None

    @property
    def is_spacer(self) -> bool:
        return self.module_id == SPACER_MODULE_ID

    @property
    def key(self) -> str:
        """Module key used by spatial rules: moduleId or moduleId.submoduleId"""
        if self.submodule_id:
            return f"{self.module_id}.{self.submodule_id}"
        return self.module_id

    def effective_flex(self) -> Optional[FlexPosition]:
        """Flex from the position config, falling back to the leaf-level flex"""
        if self.position and self.position.flex:
            return self.position.flex
        return self.flex

    def to_dict(self) -> dict:
        return _drop_none({
            'moduleId': self.module_id,
            'submoduleId': self.submodule_id,
            'position': self.position.to_dict() if self.position else None,
            'conditional': self.conditional.to_dict() if self.conditional else None,
            'marginTop': self.margin_top,
            'marginBottom': self.margin_bottom,
            'id': self.id,
            'flex': self.flex.to_dict() if self.flex else None,
            'groupConfig': self.group_config.to_dict() if self.group_config else None,
        })

    @classmethod
    def from_dict(cls, data: dict, config: Optional[EngineConfig] = None) -> 'RenderOrderItem':
        if not isinstance(data, dict):
            raise ValueError(f"Render order item must be a mapping, got {type(data).__name__}")
        module_id = data.get('moduleId')
        if not module_id:
            raise ValueError("Render order item requires moduleId")

        group_config = None
        if module_id == GROUP_MODULE_ID:
            group_config = GroupConfig.from_dict(data.get('groupConfig'), config)

        return cls(
            module_id=module_id,
            submodule_id=data.get('submoduleId'),
            position=PositionConfig.from_dict(data.get('position')),
            conditional=RenderCondition.from_dict(data.get('conditional'), config),
            margin_top=data.get('marginTop'),
            margin_bottom=data.get('marginBottom'),
            id=data.get('id'),
            flex=FlexPosition.from_dict(data.get('flex')),
            group_config=group_config,
        )


@dataclass
class RenderNode:
    """Materialized render tree node (module, group or spacer)"""
    type: str
    id: str
    module_id: Optional[str] = None
    submodule_id: Optional[str] = None
    children: Optional[List['RenderNode']] = None
    flex: Optional[FlexPosition] = None
    margin_top: Optional[str] = None
    margin_bottom: Optional[str] = None
    gap: Optional[str] = None
    class_name: Optional[str] = None
    style: Optional[Dict[str, str]] = None
    direction: Optional[str] = None
    align_items: Optional[str] = None
    justify_content: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({
            'type': self.type,
            'id': self.id,
            'moduleId': self.module_id,
            'submoduleId': self.submodule_id,
            'children': [child.to_dict() for child in self.children] if self.children is not None else None,
            'flex': self.flex.to_dict() if self.flex else None,
            'marginTop': self.margin_top,
            'marginBottom': self.margin_bottom,
            'gap': self.gap,
            'className': self.class_name,
            'style': dict(self.style) if self.style else None,
            'direction': self.direction,
            'alignItems': self.align_items,
            'justifyContent': self.justify_content,
        })


@dataclass
class WrapperConfig:
    """Containing element descriptor for 'wrap' rules"""
    tag: str
    class_name: Optional[str] = None
    style: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({'tag': self.tag, 'className': self.class_name, 'style': self.style})

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['WrapperConfig']:
        if not data:
            return None
        return cls(tag=data.get('tag', 'div'), class_name=data.get('className'), style=data.get('style'))


@dataclass
class SpatialRule:
    """Relative placement constraint between modules"""
    id: str
    type: str
    target: str
    reference: Optional[str] = None
    reference2: Optional[str] = None
    wrapper: Optional[WrapperConfig] = None
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({
            'id': self.id,
            'type': self.type,
            'target': self.target,
            'reference': self.reference,
            'reference2': self.reference2,
            'wrapper': self.wrapper.to_dict() if self.wrapper else None,
            'description': self.description,
        })

    @classmethod
    def from_dict(cls, data: dict) -> 'SpatialRule':
        if not isinstance(data, dict):
            raise ValueError(f"Spatial rule must be a mapping, got {type(data).__name__}")
        return cls(
            id=data.get('id') or '',
            type=data.get('type') or '',
            target=data.get('target') or '',
            reference=data.get('reference'),
            reference2=data.get('reference2'),
            wrapper=WrapperConfig.from_dict(data.get('wrapper')),
            description=data.get('description'),
        )


@dataclass
class SpatialRuleResult:
    """Outcome of applying one spatial rule"""
    success: bool
    error: Optional[str] = None
    modified_order: Optional[List[RenderOrderItem]] = None


@dataclass
class LayerConfig:
    """Per-module stacking state"""
    module_id: str
    z_index: int
    visible: bool = True
    locked: bool = False
    display_name: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({
            'moduleId': self.module_id,
            'zIndex': self.z_index,
            'visible': self.visible,
            'locked': self.locked,
            'displayName': self.display_name,
        })

    @classmethod
    def from_dict(cls, data: dict) -> 'LayerConfig':
        if not isinstance(data, dict) or not data.get('moduleId'):
            raise ValueError("Layer config requires moduleId")
        return cls(
            module_id=data['moduleId'],
            z_index=int(data.get('zIndex', 0)),
            visible=bool(data.get('visible', True)),
            locked=bool(data.get('locked', False)),
            display_name=data.get('displayName'),
        )


@dataclass
class CompositionConfig:
    """The persisted/edited composition unit for one graphic"""
    render_order: List[RenderOrderItem] = field(default_factory=list)
    preset_id: Optional[str] = None
    z_index_overrides: Dict[str, int] = field(default_factory=dict)
    spatial_rules: List[SpatialRule] = field(default_factory=list)
    layers: List[LayerConfig] = field(default_factory=list)
    is_custom: bool = False

    def copy(self) -> 'CompositionConfig':
        """Deep copy, so engines built from the copy never share state"""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        return _drop_none({
            'presetId': self.preset_id,
            'renderOrder': [item.to_dict() for item in self.render_order],
            'zIndexOverrides': dict(self.z_index_overrides),
            'spatialRules': [rule.to_dict() for rule in self.spatial_rules],
            'layers': [layer.to_dict() for layer in self.layers],
            'isCustom': self.is_custom,
        })

    @classmethod
    def from_dict(cls, data: dict, config: Optional[EngineConfig] = None) -> 'CompositionConfig':
        if not isinstance(data, dict):
            raise ValueError(f"Composition config must be a mapping, got {type(data).__name__}")
        return cls(
            render_order=[RenderOrderItem.from_dict(item, config) for item in data.get('renderOrder') or []],
            preset_id=data.get('presetId'),
            z_index_overrides={k: int(v) for k, v in (data.get('zIndexOverrides') or {}).items()},
            spatial_rules=[SpatialRule.from_dict(rule) for rule in data.get('spatialRules') or []],
            layers=[LayerConfig.from_dict(layer) for layer in data.get('layers') or []],
            is_custom=bool(data.get('isCustom', False)),
        )


@dataclass
class LayoutPresetDefinition:
    """Named, static starting configuration"""
    id: str
    name: str
    description: str
    config: CompositionConfig
    icon: Optional[str] = None
    thumbnail: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
            'thumbnail': self.thumbnail,
            'config': self.config.to_dict(),
        })


@dataclass
class RenderContext:
    """Everything a composition call needs to know about the current graphic"""
    enabled_modules: List[str] = field(default_factory=list)
    all_modules_data: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    viewport_width: int = 1080
    viewport_height: int = 1440
    base_url: str = ""
    composition_config: Optional[CompositionConfig] = None
