"""
Layout Presets

Named starting configurations for a composition. Built-in presets are kept in
the editor's wire format and parsed once at import; additional presets can
be loaded from a YAML file with the same shape.
"""

from typing import Dict, List, Optional
import logging
import os

import yaml

from .types import CompositionConfig, LayoutPresetDefinition


_IMAGE_FLEX = {'type': 'flex', 'flex': {'grow': 1, 'shrink': 1}}


def _text_field(index: int, item_id: str = None, **extra) -> dict:
    item = {'moduleId': 'textFields', 'submoduleId': f'field.{index}', 'id': item_id or f'text-field-{index}'}
    item.update(extra)
    return item


BUILTIN_PRESETS = [
    {
        'id': 'stack',
        'name': 'Stack Layout',
        'description': 'Vertical stack: Text fields above and below image',
        'icon': 'layers',
        'config': {
            'renderOrder': [
                _text_field(0),
                _text_field(1),
                {'moduleId': 'contentImage', 'id': 'content-image', 'position': _IMAGE_FLEX,
                 'marginTop': '30px', 'marginBottom': '30px'},
                _text_field(2),
                _text_field(3),
                _text_field(4),
            ],
        },
    },
    {
        'id': 'image-first',
        'name': 'Image First',
        'description': 'Image on top, text below',
        'icon': 'image',
        'config': {
            'renderOrder': [
                {'moduleId': 'contentImage', 'id': 'content-image', 'position': _IMAGE_FLEX,
                 'marginBottom': '30px'},
                {'moduleId': 'textFields', 'id': 'text-fields'},
            ],
        },
    },
    {
        'id': 'image-last',
        'name': 'Image Last',
        'description': 'Text on top, image at bottom',
        'icon': 'image',
        'config': {
            'renderOrder': [
                {'moduleId': 'textFields', 'id': 'text-fields', 'marginBottom': '30px'},
                {'moduleId': 'contentImage', 'id': 'content-image', 'position': _IMAGE_FLEX},
            ],
        },
    },
    {
        'id': 'sandwich',
        'name': 'Sandwich',
        'description': 'Title, image in middle, description below',
        'icon': 'sandwich',
        'config': {
            'renderOrder': [
                _text_field(0, marginBottom='40px'),
                {'moduleId': 'contentImage', 'id': 'content-image', 'position': _IMAGE_FLEX},
                _text_field(1, marginTop='40px'),
                _text_field(2),
                _text_field(3),
                _text_field(4),
            ],
        },
    },
    {
        'id': 'bullets-grid',
        'name': 'Bullets Grid',
        'description': 'Header, bullet grid, footer',
        'icon': 'list',
        'config': {
            'renderOrder': [
                _text_field(0, 'header-text', marginBottom='40px'),
                {'moduleId': 'bullets', 'id': 'bullets', 'position': _IMAGE_FLEX},
                _text_field(1, 'footer-text', marginTop='40px'),
            ],
        },
    },
    {
        'id': 'floating',
        'name': 'Floating',
        'description': 'Image with floating text overlay',
        'icon': 'maximize',
        'config': {
            'renderOrder': [
                {'moduleId': 'contentImage', 'id': 'content-image', 'position': _IMAGE_FLEX},
                {'moduleId': 'textFields', 'id': 'text-fields',
                 'position': {'type': 'absolute', 'absoluteCoords': {'top': '60px', 'left': '60px'}}},
            ],
            'zIndexOverrides': {'textFields': 50, 'contentImage': 5},
        },
    },
    {
        'id': 'bullets-first',
        'name': 'Bullets First',
        'description': 'Bullet points before text',
        'icon': 'list',
        'config': {
            'renderOrder': [
                {'moduleId': 'bullets', 'id': 'bullets', 'marginBottom': '30px'},
                {'moduleId': 'textFields', 'id': 'text-fields'},
            ],
        },
    },
    {
        'id': 'split-content',
        'name': 'Split Content',
        'description': 'Content split by image in middle',
        'icon': 'split',
        'config': {
            'renderOrder': [
                _text_field(0),
                _text_field(1, marginBottom='30px'),
                {'moduleId': 'contentImage', 'id': 'content-image', 'position': _IMAGE_FLEX,
                 'marginTop': '30px', 'marginBottom': '30px'},
                _text_field(2),
                _text_field(3),
                _text_field(4),
            ],
        },
    },
]


def parse_preset(data: dict) -> LayoutPresetDefinition:
    """
    Build a preset definition from its wire-format dictionary.

    Raises:
        ValueError: If the id, name or config is missing or malformed
    """
    if not isinstance(data, dict):
        raise ValueError(f"Preset must be a mapping, got {type(data).__name__}")
    if not data.get('id') or not data.get('name'):
        raise ValueError("Preset requires id and name")

    config = CompositionConfig.from_dict(data.get('config') or {})
    config.preset_id = data['id']

    return LayoutPresetDefinition(
        id=data['id'],
        name=data['name'],
        description=data.get('description', ''),
        config=config,
        icon=data.get('icon'),
        thumbnail=data.get('thumbnail'),
    )


LAYOUT_PRESETS: Dict[str, LayoutPresetDefinition] = {
    preset.id: preset for preset in (parse_preset(data) for data in BUILTIN_PRESETS)
}

DEFAULT_LAYOUT_PRESET = LAYOUT_PRESETS['stack']


def get_layout_preset(preset_id: str) -> Optional[LayoutPresetDefinition]:
    return LAYOUT_PRESETS.get(preset_id)


def list_layout_presets() -> List[LayoutPresetDefinition]:
    return list(LAYOUT_PRESETS.values())


def create_config_from_preset(preset_id: str) -> Optional[CompositionConfig]:
    """Fresh, independently editable config for a preset (None if unknown)"""
    preset = get_layout_preset(preset_id)
    if preset is None:
        return None

    config = preset.config.copy()
    config.preset_id = preset.id
    config.is_custom = False
    return config


def load_presets_file(path: str, register: bool = True) -> List[LayoutPresetDefinition]:
    """
    Load additional presets from a YAML file.

    The file holds a top-level 'presets' list of wire-format preset mappings.
    Invalid entries are skipped with a warning.

    Args:
        path: YAML file path
        register: Add the loaded presets to LAYOUT_PRESETS

    Returns:
        The presets that were loaded
    """
    if not os.path.exists(path):
        logging.warning(f"Layout presets file not found at {path}")
        return []

    with open(path, 'r', encoding='utf-8') as f:
        document = yaml.safe_load(f) or {}

    entries = document.get('presets', []) if isinstance(document, dict) else []

    presets = []
    for entry in entries:
        try:
            preset = parse_preset(entry)
        except (ValueError, TypeError) as e:
            logging.warning(f"Skipping invalid layout preset in {path}: {e}")
            continue

        if register:
            if preset.id in LAYOUT_PRESETS:
                logging.warning(f"Layout preset {preset.id} from {path} replaces an existing preset")
            LAYOUT_PRESETS[preset.id] = preset
        presets.append(preset)

    logging.info(f"Loaded {len(presets)} layout presets from {path}")
    return presets
