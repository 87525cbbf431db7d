"""
Module Instance Addressing

One module implementation can hold several independent data slots. The
first instance uses the bare module id ("textFields"); further instances
carry a numeric suffix ("textFields-2", "textFields-3").
"""

from typing import List, Optional
from dataclasses import dataclass
import re


_INSTANCE_PATTERN = re.compile(r'^(.+)-(\d+)$')


@dataclass(frozen=True)
class ParsedModuleId:
    """Module id split into base id and instance number"""
    base: str
    instance: Optional[int]  # None when the id carries no suffix
    full_id: str


def parse_module_id(module_id: str) -> ParsedModuleId:
    """
    Split a trailing -<digits> suffix from a module id.

    Examples:
        'textFields'   -> base='textFields', instance=None
        'textFields-2' -> base='textFields', instance=2
    """
    match = _INSTANCE_PATTERN.match(module_id)
    if match:
        return ParsedModuleId(base=match.group(1), instance=int(match.group(2)), full_id=module_id)
    return ParsedModuleId(base=module_id, instance=None, full_id=module_id)


def create_instance_id(base_module_id: str, instance_number: int) -> str:
    """Build an instance id; instance 1 is the bare base id"""
    if instance_number <= 1:
        return base_module_id
    return f"{base_module_id}-{instance_number}"


def get_module_instances(base_module_id: str, enabled_modules: List[str]) -> List[str]:
    """Enabled ids (bare or suffixed) that belong to the given base module"""
    return [
        module_id for module_id in enabled_modules
        if parse_module_id(module_id).base == base_module_id
    ]


def get_next_instance_number(base_module_id: str, enabled_modules: List[str]) -> int:
    """
    Next free instance number for a module.

    The bare id counts as instance 1, so ['textFields', 'textFields-3'] gives 4.
    """
    instances = get_module_instances(base_module_id, enabled_modules)
    if not instances:
        return 1
    return max(get_instance_display_number(module_id) for module_id in instances) + 1


def has_any_instance(base_module_id: str, enabled_modules: List[str]) -> bool:
    return len(get_module_instances(base_module_id, enabled_modules)) > 0


def get_instance_count(base_module_id: str, enabled_modules: List[str]) -> int:
    return len(get_module_instances(base_module_id, enabled_modules))


def is_instance_id(module_id: str) -> bool:
    return parse_module_id(module_id).instance is not None


def get_base_module_id(module_id: str) -> str:
    return parse_module_id(module_id).base


def get_instance_display_number(module_id: str) -> int:
    """Instance number shown to users; the bare id is #1"""
    instance = parse_module_id(module_id).instance
    return instance if instance is not None else 1
