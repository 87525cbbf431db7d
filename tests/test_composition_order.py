"""
Tests for composition_engine.composition_order

Test Coverage:
- build_render_tree(): root group, groups, spacers, synthetic margin spacers
- Conditional suppression (showIf / hideIf / unrecognized)
- Serialization: wrappers, empty-group elision, missing modules and data
- Submodule rendering through SubfragmentRenderer
- Render order management (move/remove/add are bounds-safe)
"""
import pytest

from composition_engine.composition_order import CompositionOrderEngine, parse_submodule_index
from composition_engine.types import (
    FlexPosition, GroupConfig, RenderCondition, RenderOrderItem, PositionConfig, AbsoluteCoordinates,
    GROUP_MODULE_ID, SPACER_MODULE_ID,
)


def module(module_id, **kwargs):
    return RenderOrderItem(module_id=module_id, **kwargs)


def group(children, direction="row", gap=None, **kwargs):
    return RenderOrderItem(
        module_id=GROUP_MODULE_ID,
        group_config=GroupConfig(direction=direction, gap=gap, children=children),
        **kwargs,
    )


def show_if(expression):
    return RenderCondition.from_dict({"showIf": expression})


def test_root_is_a_plain_group(registry, context):
    engine = CompositionOrderEngine([module("alpha")], registry)

    tree = engine.build_render_tree(context)

    assert tree.type == "group"
    assert tree.id == "root"
    assert tree.gap is None
    assert tree.flex is None
    assert [child.module_id for child in tree.children] == ["alpha"]


def test_generate_html_renders_modules_in_order(registry, context):
    engine = CompositionOrderEngine([module("gamma"), module("alpha")], registry)

    html = engine.generate_html(context)

    assert html == (
        '<div style="display: flex; flex-direction: column">'
        '<div class="gamma">C</div>\n<div class="alpha">A</div>'
        '</div>'
    )


def test_margin_bottom_adds_spacer_between_items(registry, context):
    engine = CompositionOrderEngine([module("alpha", margin_bottom="30px"), module("beta")], registry)

    tree = engine.build_render_tree(context)

    assert [node.type for node in tree.children] == ["module", "spacer", "module"]
    assert tree.children[1].margin_top == "30px"
    html = engine.generate_html(context)
    assert '<div style="margin-bottom: 30px"><div class="alpha">A</div></div>' in html
    assert '<div class="composition-spacer" style="height: 30px;"></div>' in html


def test_no_margin_spacer_after_last_item(registry, context):
    engine = CompositionOrderEngine([module("alpha"), module("beta", margin_bottom="30px")], registry)

    tree = engine.build_render_tree(context)

    assert [node.type for node in tree.children] == ["module", "module"]


def test_spacer_items(registry, context):
    engine = CompositionOrderEngine([
        module("alpha"),
        RenderOrderItem(module_id=SPACER_MODULE_ID, margin_top="45px"),
        RenderOrderItem(module_id=SPACER_MODULE_ID),
    ], registry)

    html = engine.generate_html(context)

    assert '<div class="composition-spacer" style="height: 45px;"></div>' in html
    assert '<div class="composition-spacer" style="height: 20px;"></div>' in html


@pytest.mark.parametrize("count,visible", [(0, False), (1, True), (3, True)])
def test_conditional_suppression_by_bullet_count(registry, context, count, visible):
    context.all_modules_data["bullets"] = {"items": [f"item {i}" for i in range(count)]}
    engine = CompositionOrderEngine([
        module("alpha"),
        module("beta", conditional=show_if("bulletCount > 0")),
    ], registry)

    tree = engine.build_render_tree(context)

    assert ("beta" in [node.module_id for node in tree.children]) is visible


def test_hide_if_negates(registry, context):
    engine = CompositionOrderEngine([
        module("alpha", conditional=RenderCondition.from_dict({"hideIf": "bulletCount >= 2"})),
    ], registry)

    assert engine.build_render_tree(context).children == []

    context.all_modules_data["bullets"] = {"items": ["one"]}
    assert len(engine.build_render_tree(context).children) == 1


def test_unrecognized_conditions_are_visible(registry, context):
    engine = CompositionOrderEngine([
        module("alpha", conditional=show_if("isWeekend")),
        module("beta", conditional=RenderCondition.from_dict({"hideIf": "isWeekend"})),
    ], registry)

    assert len(engine.build_render_tree(context).children) == 2


def test_has_image_condition(registry, context):
    engine = CompositionOrderEngine([module("alpha", conditional=show_if("hasImage"))], registry)

    assert engine.build_render_tree(context).children == []

    context.enabled_modules.append("contentImage")
    context.all_modules_data["contentImage"] = {"imageUrl": "/photo.jpg"}
    assert len(engine.build_render_tree(context).children) == 1


def test_nested_groups(registry, context):
    engine = CompositionOrderEngine([
        group([
            module("alpha", flex=FlexPosition(grow=1, basis="50%")),
            group([module("beta"), module("gamma")], direction="column", gap="10px"),
        ], gap="30px", id="row"),
    ], registry)

    tree = engine.build_render_tree(context)
    row = tree.children[0]

    assert row.id == "row"
    assert row.direction == "row"
    assert row.children[1].type == "group"
    assert [child.module_id for child in row.children[1].children] == ["beta", "gamma"]

    html = engine.generate_html(context)
    assert '<div style="display: flex; flex-direction: row; gap: 30px">' in html
    assert '<div style="flex: 1 1 50%"><div class="alpha">A</div></div>' in html
    assert '<div style="display: flex; flex-direction: column; gap: 10px">' in html


def test_empty_group_is_elided(registry, context):
    """A group whose children are all suppressed contributes no markup."""
    engine = CompositionOrderEngine([
        module("alpha"),
        group([
            module("beta", conditional=show_if("bulletCount > 5")),
            group([module("gamma", conditional=show_if("bulletCount > 5"))]),
        ], gap="30px"),
    ], registry)

    html = engine.generate_html(context)

    assert "gap: 30px" not in html
    assert html.count("<div") == 2


def test_everything_suppressed_renders_nothing(registry, context):
    engine = CompositionOrderEngine([module("alpha", conditional=show_if("bulletCount > 9"))], registry)

    assert engine.generate_html(context) == ""


def test_missing_module_and_data_render_empty(registry, context):
    context.enabled_modules.extend(["unregistered", "contentImage"])
    engine = CompositionOrderEngine([
        module("unregistered"),
        module("contentImage"),
        module("alpha"),
    ], registry)

    html = engine.generate_html(context)

    assert html == '<div style="display: flex; flex-direction: column"><div class="alpha">A</div></div>'


def test_disabled_module_renders_empty(registry, context):
    context.enabled_modules.remove("beta")
    engine = CompositionOrderEngine([module("beta")], registry)

    assert engine.generate_html(context) == ""


def test_submodule_rendering(registry, context):
    engine = CompositionOrderEngine([
        module("bullets", submodule_id="item.1"),
        module("bullets", submodule_id="item.7"),
        module("alpha", submodule_id="part.0"),
    ], registry)

    html = engine.generate_html(context)

    assert '<li class="single">two</li>' in html
    assert "one" not in html
    assert '<div class="alpha">' not in html


def test_parse_submodule_index():
    assert parse_submodule_index("field.0") == 0
    assert parse_submodule_index("item12") == 12
    assert parse_submodule_index("field") is None


def test_absolute_position_in_wrapper(registry, context):
    position = PositionConfig(type="absolute", absolute_coords=AbsoluteCoordinates(top="60px", left="40px"))
    engine = CompositionOrderEngine([module("alpha", position=position)], registry)

    html = engine.generate_html(context)

    assert '<div style="position: absolute; top: 60px; left: 40px">' in html


def test_position_flex_takes_precedence(registry, context):
    item = module("alpha", position=PositionConfig(flex=FlexPosition(grow=2)), flex=FlexPosition(grow=1))
    engine = CompositionOrderEngine([item], registry)

    assert engine.build_render_tree(context).children[0].flex.grow == 2
    assert "flex: 2 1 auto" in engine.generate_html(context)


def test_move_remove_add_are_bounds_safe(registry):
    engine = CompositionOrderEngine([module("alpha"), module("beta"), module("gamma")], registry)

    engine.move_item(0, 2)
    assert [item.module_id for item in engine.get_render_order()] == ["beta", "gamma", "alpha"]

    engine.move_item(0, 5)
    engine.remove_item(7)
    assert [item.module_id for item in engine.get_render_order()] == ["beta", "gamma", "alpha"]

    engine.remove_item(1)
    engine.add_item(module("delta"), 0)
    engine.add_item(module("epsilon"), 99)
    assert [item.module_id for item in engine.get_render_order()] == ["delta", "beta", "alpha", "epsilon"]


def test_engine_works_on_a_copy(registry):
    order = [module("alpha")]
    engine = CompositionOrderEngine(order, registry)

    engine.add_item(module("beta"))

    assert len(order) == 1


def test_create_horizontal_group():
    node = CompositionOrderEngine.create_horizontal_group([module("alpha"), module("beta", id="b")])

    assert node.direction == "row"
    assert node.gap == "20px"
    assert node.align_items == "stretch"
    assert [child.id for child in node.children] == ["alpha-0", "b"]


def test_tree_info(registry, context):
    engine = CompositionOrderEngine([
        module("alpha", margin_bottom="10px"),
        group([module("beta"), group([module("gamma")])]),
    ], registry)

    info = engine.get_tree_info(context)

    assert info["modules"] == 3
    assert info["groups"] == 2
    assert info["spacers"] == 1
    assert info["depth"] == 3
    assert info["tree"]["id"] == "root"
