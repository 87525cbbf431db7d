"""
Conditional Visibility Expressions

Render-order items can be shown or hidden depending on the render context.
Expressions are parsed once, when a configuration is loaded, into one of a
closed set of variants:

- HasModuleWithContent: "hasImage"
- Comparison: "<counterName> <op> <integer>", e.g. "bulletCount > 0"
- Unrecognized: anything else; always evaluates as visible
"""

from typing import Optional, Union, TYPE_CHECKING
from dataclasses import dataclass
import logging
import re

from .config import EngineConfig

if TYPE_CHECKING:
    from .types import RenderContext


COMPARISON_OPERATORS = ('>', '>=', '<', '<=', '==', '===')

_COMPARISON_PATTERN = re.compile(r'^\s*([A-Za-z_]\w*)\s*(>=|<=|===|==|>|<)\s*(\d+)\s*$')

HAS_IMAGE_EXPRESSION = "hasImage"


@dataclass(frozen=True)
class HasModuleWithContent:
    """True when the module is enabled and its content field is non-empty"""
    module_id: str
    content_field: str

    def evaluate(self, context: 'RenderContext', config: EngineConfig) -> bool:
        if self.module_id not in context.enabled_modules:
            return False
        data = context.all_modules_data.get(self.module_id) or {}
        return bool(data.get(self.content_field))

    def to_expression(self) -> str:
        return HAS_IMAGE_EXPRESSION


@dataclass(frozen=True)
class Comparison:
    """Compares a module-derived count against an integer threshold"""
    counter: str
    operator: str
    value: int

    def evaluate(self, context: 'RenderContext', config: EngineConfig) -> bool:
        count = count_items(self.counter, context, config)
        if self.operator == '>':
            return count > self.value
        if self.operator == '>=':
            return count >= self.value
        if self.operator == '<':
            return count < self.value
        if self.operator == '<=':
            return count <= self.value
        # '==' and '==='
        return count == self.value

    def to_expression(self) -> str:
        return f"{self.counter} {self.operator} {self.value}"


@dataclass(frozen=True)
class Unrecognized:
    """Expression outside the supported grammar; treated as visible"""
    expression: str

    def evaluate(self, context: 'RenderContext', config: EngineConfig) -> bool:
        return True

    def to_expression(self) -> str:
        return self.expression


ConditionExpression = Union[HasModuleWithContent, Comparison, Unrecognized]


def count_items(counter: str, context: 'RenderContext', config: EngineConfig) -> int:
    """Count the list items behind a counter name (0 when absent)"""
    source = config.counter_source(counter)
    if source is None:
        return 0
    module_id, list_field = source
    data = context.all_modules_data.get(module_id) or {}
    items = data.get(list_field) or []
    return len(items)


def parse_condition_expression(expression: Optional[str],
                               config: Optional[EngineConfig] = None) -> Optional[ConditionExpression]:
    """
    Parse a free-text condition into a condition variant.

    Args:
        expression: Expression string from the editor, e.g. "bulletCount >= 2"
        config: Engine configuration naming the image module and known counters

    Returns:
        The parsed variant, or None for an empty expression
    """
    if expression is None:
        return None
    if not isinstance(expression, str):
        expression = str(expression)
    if not expression.strip():
        return None

    config = config or EngineConfig()

    if expression.strip() == HAS_IMAGE_EXPRESSION:
        return HasModuleWithContent(config.image_module_id, config.image_content_field)

    match = _COMPARISON_PATTERN.match(expression)
    if match and config.counter_source(match.group(1)) is not None:
        counter, operator, value = match.groups()
        return Comparison(counter, operator, int(value))

    logging.debug(f"Unrecognized condition expression treated as visible: {expression!r}")
    return Unrecognized(expression)


def is_recognized(expression: Optional[ConditionExpression]) -> bool:
    """Check whether an expression is one of the supported variants"""
    return expression is not None and not isinstance(expression, Unrecognized)
