"""
Composition Engine Configuration

Centralized settings for the composition engines: spacing defaults,
stacking-order step, and the counters available to conditional rules.
"""

from typing import Dict, Tuple
from dataclasses import dataclass, field
import re


CSS_LENGTH_PATTERN = re.compile(r'^(0|auto|-?\d+(\.\d+)?(px|%|em|rem|vh|vw))$')


@dataclass
class EngineConfig:
    """
    Settings shared by the composition, layer and spatial engines.

    Spacing values are CSS lengths. Counters map a counter name used in
    comparison conditions to the module id and list field that is counted.
    """

    # Spacing
    default_spacer_height: str = "20px"
    default_group_gap: str = "20px"        # createHorizontalGroup gap
    default_split_gap: str = "30px"        # split helpers gap

    # Stacking order
    z_index_step: int = 10                 # gap left between auto-calculated layers
    empty_stack_z_index: int = 10          # next available z-index with no layers

    # Conditional rendering
    image_module_id: str = "contentImage"
    image_content_field: str = "imageUrl"
    counters: Dict[str, Tuple[str, str]] = field(default_factory=lambda: {
        "bulletCount": ("bullets", "items"),
    })

    # Viewport (one slide)
    base_viewport_width: int = 1080
    base_viewport_height: int = 1440

    def counter_source(self, counter_name: str):
        """Get (module_id, field) counted by a counter, or None if unknown"""
        source = self.counters.get(counter_name)
        return tuple(source) if source else None

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization"""
        return {
            field.name: getattr(self, field.name)
            for field in self.__dataclass_fields__.values()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'EngineConfig':
        """Create config from dictionary"""
        # Filter data to only include valid fields
        valid_fields = {field.name for field in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in valid_fields}
        if 'counters' in filtered_data:
            filtered_data['counters'] = {
                name: tuple(source) for name, source in filtered_data['counters'].items()
            }
        return cls(**filtered_data)

    def copy(self) -> 'EngineConfig':
        """Create a copy of this configuration"""
        data = self.to_dict()
        data['counters'] = dict(self.counters)
        return EngineConfig(**data)

    def validate(self) -> list:
        """Validate configuration and return list of issues"""
        issues = []

        for name in ('default_spacer_height', 'default_group_gap', 'default_split_gap'):
            value = getattr(self, name)
            if not isinstance(value, str) or not CSS_LENGTH_PATTERN.match(value):
                issues.append(f"{name} must be a CSS length, got {value!r}")

        if self.z_index_step <= 0:
            issues.append(f"z_index_step must be positive, got {self.z_index_step}")

        for name in ('base_viewport_width', 'base_viewport_height'):
            value = getattr(self, name)
            if value <= 0:
                issues.append(f"{name} must be positive, got {value}")

        for counter_name, source in self.counters.items():
            if not (isinstance(source, (tuple, list)) and len(source) == 2):
                issues.append(f"counter {counter_name} must map to (module_id, field), got {source!r}")

        return issues


# Predefined configuration presets
class EngineConfigPresets:
    """Predefined engine settings for different use cases"""

    @staticmethod
    def default() -> EngineConfig:
        """Default configuration"""
        return EngineConfig()

    @staticmethod
    def compact() -> EngineConfig:
        """Tighter spacing between composed modules"""
        config = EngineConfig()
        config.default_spacer_height = "10px"
        config.default_group_gap = "10px"
        config.default_split_gap = "16px"
        return config
