"""
Tests for composition_engine.spatial_rules

Test Coverage:
- apply_rules(): before/after/between/wrap rewrites, failure carry-forward
- Idempotence of a rule set
- validate_rule() / validate_all_rules(): structural checks
- detect_conflicts(): same-target and mutual-before cycles
- Rule management and import/export
"""
from composition_engine.spatial_rules import SpatialRulesEngine, find_module_index
from composition_engine.types import RenderOrderItem, SpatialRule, WrapperConfig


def order_of(*module_ids):
    return [RenderOrderItem(module_id=module_id) for module_id in module_ids]


def ids(order):
    return [item.module_id for item in order]


def rule(rule_type, target, reference=None, reference2=None, rule_id="r1", **kwargs):
    return SpatialRule(id=rule_id, type=rule_type, target=target,
                       reference=reference, reference2=reference2, **kwargs)


def test_before_moves_target_ahead_of_reference():
    engine = SpatialRulesEngine([rule("before", "C", "A")])

    assert ids(engine.apply_rules(order_of("A", "B", "C"))) == ["C", "A", "B"]


def test_after_moves_target_behind_reference():
    engine = SpatialRulesEngine([rule("after", "A", "C")])

    assert ids(engine.apply_rules(order_of("A", "B", "C"))) == ["B", "C", "A"]


def test_before_when_target_precedes_reference():
    """The reference is re-located after the target is removed."""
    engine = SpatialRulesEngine([rule("before", "A", "C")])

    assert ids(engine.apply_rules(order_of("A", "B", "C", "D"))) == ["B", "A", "C", "D"]


def test_between_inserts_after_lower_reference():
    engine = SpatialRulesEngine([rule("between", "D", "A", "C")])

    assert ids(engine.apply_rules(order_of("A", "B", "C", "D"))) == ["A", "D", "B", "C"]


def test_between_with_references_in_reverse_order():
    engine = SpatialRulesEngine([rule("between", "D", "C", "A")])

    assert ids(engine.apply_rules(order_of("A", "B", "C", "D"))) == ["A", "D", "B", "C"]


def test_between_when_target_precedes_references():
    """Insertion uses the lower reference index taken before the target is removed."""
    engine = SpatialRulesEngine([rule("between", "D", "A", "C")])

    assert ids(engine.apply_rules(order_of("D", "A", "B", "C"))) == ["A", "B", "D", "C"]


def test_between_with_the_same_reference_twice():
    engine = SpatialRulesEngine()

    result = engine.apply_rule(order_of("A", "B", "C"), rule("between", "C", "A", "A"))

    assert result.success
    assert ids(result.modified_order) == ["A", "C", "B"]


def test_apply_rules_with_results_reports_each_rule(caplog):
    engine = SpatialRulesEngine([
        rule("before", "C", "A", rule_id="r1"),
        rule("after", "B", "missing", rule_id="r2"),
    ])

    order, outcomes = engine.apply_rules_with_results(order_of("A", "B", "C"))

    assert ids(order) == ["C", "A", "B"]
    assert [(applied.id, result.success) for applied, result in outcomes] == [("r1", True), ("r2", False)]
    assert "Failed to apply spatial rule r2" in caplog.text


def test_wrap_leaves_order_unchanged():
    engine = SpatialRulesEngine([rule("wrap", "A", wrapper=WrapperConfig(tag="section"))])
    original = order_of("A", "B")

    assert ids(engine.apply_rules(original)) == ["A", "B"]


def test_wrap_without_wrapper_fails():
    engine = SpatialRulesEngine()
    result = engine.apply_rule(order_of("A", "B"), rule("wrap", "A"))

    assert not result.success
    assert "wrapper" in result.error


def test_missing_reference_is_reported_not_raised():
    engine = SpatialRulesEngine()
    result = engine.apply_rule(order_of("A", "B"), rule("before", "A", "Z"))

    assert not result.success
    assert "Z" in result.error


def test_failed_rule_carries_previous_order_forward():
    """A failing rule in the middle does not discard earlier or later rewrites."""
    engine = SpatialRulesEngine([
        rule("after", "A", "C", rule_id="r1"),
        rule("before", "B", "missing", rule_id="r2"),
        rule("before", "C", "B", rule_id="r3"),
    ])

    assert ids(engine.apply_rules(order_of("A", "B", "C"))) == ["C", "B", "A"]


def test_unknown_rule_type_fails():
    result = SpatialRulesEngine().apply_rule(order_of("A", "B"), rule("around", "A", "B"))

    assert not result.success


def test_self_reference_is_a_failure():
    result = SpatialRulesEngine().apply_rule(order_of("A", "B"), rule("before", "A", "A"))

    assert not result.success


def test_apply_rules_does_not_mutate_input():
    original = order_of("A", "B", "C")
    SpatialRulesEngine([rule("before", "C", "A")]).apply_rules(original)

    assert ids(original) == ["A", "B", "C"]


def test_rule_set_is_idempotent():
    engine = SpatialRulesEngine([
        rule("before", "D", "B", rule_id="r1"),
        rule("after", "A", "C", rule_id="r2"),
        rule("between", "E", "B", "C", rule_id="r3"),
    ])
    order = order_of("A", "B", "C", "D", "E")

    once = engine.apply_rules(order)
    twice = engine.apply_rules(once)

    assert ids(twice) == ids(once)


def test_submodule_keys():
    order = [
        RenderOrderItem(module_id="textFields", submodule_id="field.0"),
        RenderOrderItem(module_id="contentImage"),
        RenderOrderItem(module_id="textFields", submodule_id="field.1"),
    ]
    engine = SpatialRulesEngine([rule("before", "textFields.field.1", "contentImage")])

    result = engine.apply_rules(order)

    assert [item.key for item in result] == ["textFields.field.0", "textFields.field.1", "contentImage"]
    assert find_module_index(order, "textFields.field.1") == 2
    assert find_module_index(order, "textFields") == 0
    assert find_module_index(order, "textFields.field.9") == -1


def test_validate_rule_requirements():
    engine = SpatialRulesEngine()

    assert engine.validate_rule(rule("before", "A", "B")).valid
    assert not engine.validate_rule(rule("before", "A")).valid
    assert not engine.validate_rule(rule("between", "A", "B")).valid
    assert not engine.validate_rule(rule("wrap", "A")).valid
    assert not engine.validate_rule(rule("", "A", "B")).valid
    assert not engine.validate_rule(rule("before", "", "B")).valid

    self_reference = engine.validate_rule(rule("after", "A", "A"))
    assert not self_reference.valid
    assert "Target must differ from its references" in self_reference.errors


def test_validate_all_rules_keys_errors_by_rule_id():
    engine = SpatialRulesEngine([
        rule("before", "A", "B", rule_id="good"),
        rule("between", "A", "B", rule_id="bad"),
    ])

    validation = engine.validate_all_rules()

    assert not validation.valid
    assert list(validation.rule_errors) == ["bad"]


def test_detect_same_target_conflict():
    engine = SpatialRulesEngine([
        rule("before", "A", "B", rule_id="r1"),
        rule("after", "A", "C", rule_id="r2"),
    ])

    conflicts = engine.detect_conflicts()

    assert len(conflicts) == 1
    assert (conflicts[0].rule1, conflicts[0].rule2) == ("r1", "r2")


def test_detect_circular_before():
    engine = SpatialRulesEngine([
        rule("before", "A", "B", rule_id="r1"),
        rule("before", "B", "A", rule_id="r2"),
    ])

    reasons = [conflict.reason for conflict in engine.detect_conflicts()]

    assert "Circular dependency detected" in reasons


def test_no_conflicts_for_independent_rules():
    engine = SpatialRulesEngine([
        rule("before", "A", "B", rule_id="r1"),
        rule("after", "C", "D", rule_id="r2"),
    ])

    assert engine.detect_conflicts() == []


def test_rule_management():
    engine = SpatialRulesEngine()

    added = engine.add_rule(rule("before", "A", "B", rule_id=""))
    assert added.id.startswith("rule-")
    assert engine.get_rule(added.id) == added

    engine.update_rule(added.id, reference="C")
    assert engine.get_rule(added.id).reference == "C"

    engine.remove_rule(added.id)
    assert engine.get_rules() == []


def test_engine_keeps_its_own_copy_of_rules():
    rules = [rule("before", "A", "B")]
    engine = SpatialRulesEngine(rules)

    engine.add_rule(rule("after", "C", "D", rule_id="r2"))
    engine.clear_rules()

    assert len(rules) == 1


def test_export_import_round_trip():
    engine = SpatialRulesEngine([
        rule("between", "D", "A", "C", description="pull D up"),
        rule("wrap", "B", rule_id="r2", wrapper=WrapperConfig(tag="div", class_name="box")),
    ])

    exported = engine.export_rules()
    other = SpatialRulesEngine()
    other.import_rules(exported)

    assert other.export_rules() == exported
    assert exported[1]["wrapper"] == {"tag": "div", "className": "box"}
