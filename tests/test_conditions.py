"""
Tests for composition_engine.conditions

Test Coverage:
- parse_condition_expression(): variant selection for each grammar
- evaluate(): hasImage and counter comparisons against a render context
- Unrecognized expressions default to visible
"""
import pytest

from composition_engine.conditions import (
    Comparison, HasModuleWithContent, Unrecognized, count_items, is_recognized,
    parse_condition_expression,
)
from composition_engine.config import EngineConfig
from composition_engine.types import RenderCondition, RenderContext


def make_context(bullet_count=0, image_url=None, image_enabled=True):
    enabled = ["bullets"]
    data = {"bullets": {"items": [{"text": f"item {i}"} for i in range(bullet_count)]}}
    if image_enabled:
        enabled.append("contentImage")
    if image_url is not None:
        data["contentImage"] = {"imageUrl": image_url}
    return RenderContext(enabled_modules=enabled, all_modules_data=data)


def test_empty_expression_parses_to_none():
    assert parse_condition_expression(None) is None
    assert parse_condition_expression("") is None
    assert parse_condition_expression("   ") is None


def test_has_image_variant():
    expression = parse_condition_expression("hasImage")

    assert expression == HasModuleWithContent("contentImage", "imageUrl")
    assert expression.to_expression() == "hasImage"


@pytest.mark.parametrize("text,operator,value", [
    ("bulletCount > 0", ">", 0),
    ("bulletCount>=2", ">=", 2),
    ("bulletCount < 5", "<", 5),
    ("bulletCount <= 3", "<=", 3),
    ("bulletCount == 1", "==", 1),
    ("bulletCount === 4", "===", 4),
])
def test_comparison_variants(text, operator, value):
    expression = parse_condition_expression(text)

    assert expression == Comparison("bulletCount", operator, value)


@pytest.mark.parametrize("text", [
    "hasVideo",
    "bulletCount != 2",
    "unknownCounter > 1",
    "bulletCount > many",
    "hasImage && bulletCount > 0",
])
def test_unrecognized_expressions(text):
    expression = parse_condition_expression(text)

    assert isinstance(expression, Unrecognized)
    assert not is_recognized(expression)
    assert expression.evaluate(make_context(), EngineConfig()) is True


def test_has_image_requires_enabled_module_with_content():
    expression = parse_condition_expression("hasImage")
    config = EngineConfig()

    assert expression.evaluate(make_context(image_url="/img.png"), config)
    assert not expression.evaluate(make_context(image_url=""), config)
    assert not expression.evaluate(make_context(image_url=None), config)
    assert not expression.evaluate(make_context(image_url="/img.png", image_enabled=False), config)


def test_comparison_counts_bullet_items():
    config = EngineConfig()
    expression = parse_condition_expression("bulletCount >= 2")

    assert count_items("bulletCount", make_context(bullet_count=3), config) == 3
    assert expression.evaluate(make_context(bullet_count=2), config)
    assert not expression.evaluate(make_context(bullet_count=1), config)


def test_custom_counter_from_config():
    """Counters are configurable, not hard-wired to bullets."""
    config = EngineConfig(counters={"fieldCount": ("textFields", "fields")})
    context = RenderContext(
        enabled_modules=["textFields"],
        all_modules_data={"textFields": {"fields": [{}, {}]}},
    )

    expression = parse_condition_expression("fieldCount == 2", config)

    assert expression == Comparison("fieldCount", "==", 2)
    assert expression.evaluate(context, config)
    assert isinstance(parse_condition_expression("bulletCount > 0", config), Unrecognized)


def test_render_condition_round_trip_keeps_expressions():
    condition = RenderCondition.from_dict({"showIf": "bulletCount > 0", "hideIf": "whatever"})

    assert condition.to_dict() == {"showIf": "bulletCount > 0", "hideIf": "whatever"}
