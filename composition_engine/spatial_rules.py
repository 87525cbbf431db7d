"""
Spatial Rules Engine

Rewrites a flat render order so that modules sit before, after, or between
other modules. Rules are folded over the order in list order; a rule that
cannot be applied is skipped and the order from before it carries forward.
"""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field, replace
import logging
import time
import uuid

from .types import RenderOrderItem, SpatialRule, SpatialRuleResult, RULE_TYPES


@dataclass
class ValidationResult:
    """Structural validation outcome for one rule"""
    valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class RuleSetValidation:
    """Validation outcome for every rule, keyed by rule id"""
    valid: bool
    rule_errors: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class RuleConflict:
    """Two rules that cannot both be honoured"""
    rule1: str
    rule2: str
    reason: str


def find_module_index(order: List[RenderOrderItem], module_key: str) -> int:
    """
    Index of the first item matching a module key, or -1.

    Keys are either a module id ('contentImage') or a module id plus
    submodule id joined by the first dot ('textFields.field.0').
    """
    if '.' in module_key:
        module_id, submodule_id = module_key.split('.', 1)
        for index, item in enumerate(order):
            if item.module_id == module_id and item.submodule_id == submodule_id:
                return index
        return -1

    for index, item in enumerate(order):
        if item.module_id == module_key:
            return index
    return -1


class SpatialRulesEngine:
    """
    Holds a working copy of a rule list and applies it to render orders.

    Not safe to share between concurrent compositions: add/remove/update
    mutate the engine's own list.
    """

    def __init__(self, rules: Optional[List[SpatialRule]] = None):
        self.rules: List[SpatialRule] = []
        self.set_rules(rules or [])

    def apply_rules(self, render_order: List[RenderOrderItem]) -> List[RenderOrderItem]:
        """
        Apply all rules to a render order.

        Args:
            render_order: Flat render order (not modified)

        Returns:
            New list with every applicable rule honoured
        """
        order, _ = self.apply_rules_with_results(render_order)
        return order

    def apply_rules_with_results(self, render_order: List[RenderOrderItem]
                                 ) -> Tuple[List[RenderOrderItem], List[Tuple[SpatialRule, SpatialRuleResult]]]:
        """Apply all rules, also returning each rule's outcome in rule order"""
        order = list(render_order)
        results = []

        for rule in self.rules:
            result = self.apply_rule(order, rule)
            if result.success and result.modified_order is not None:
                order = result.modified_order
            elif not result.success:
                logging.warning(f"Failed to apply spatial rule {rule.id}: {result.error}")
            results.append((rule, result))

        return order, results

    def apply_rule(self, order: List[RenderOrderItem], rule: SpatialRule) -> SpatialRuleResult:
        """Apply a single rule; failures are reported, never raised"""
        if rule.type == 'before':
            return self._apply_before(order, rule)
        if rule.type == 'after':
            return self._apply_after(order, rule)
        if rule.type == 'between':
            return self._apply_between(order, rule)
        if rule.type == 'wrap':
            return self._apply_wrap(order, rule)
        return SpatialRuleResult(success=False, error=f"Unknown rule type: {rule.type}")

    def _locate(self, order: List[RenderOrderItem], rule: SpatialRule,
                *references: str) -> Tuple[Optional[int], List[int], Optional[str]]:
        target_index = find_module_index(order, rule.target)
        if target_index == -1:
            return None, [], f"Target module not found: {rule.target}"

        reference_indices = []
        for name, reference in zip(('Reference', 'Reference2'), references):
            if reference == rule.target:
                return None, [], f"{name} must differ from target: {reference}"
            reference_index = find_module_index(order, reference)
            if reference_index == -1:
                return None, [], f"{name} module not found: {reference}"
            reference_indices.append(reference_index)

        return target_index, reference_indices, None

    def _apply_before(self, order: List[RenderOrderItem], rule: SpatialRule) -> SpatialRuleResult:
        """BEFORE: place target immediately before reference"""
        if not rule.reference:
            return SpatialRuleResult(success=False, error="BEFORE rule requires reference")

        target_index, _, error = self._locate(order, rule, rule.reference)
        if error:
            return SpatialRuleResult(success=False, error=error)

        new_order = list(order)
        target = new_order.pop(target_index)

        # Removing the target shifts the reference when the target preceded it
        reference_index = find_module_index(new_order, rule.reference)
        new_order.insert(reference_index, target)

        return SpatialRuleResult(success=True, modified_order=new_order)

    def _apply_after(self, order: List[RenderOrderItem], rule: SpatialRule) -> SpatialRuleResult:
        """AFTER: place target immediately after reference"""
        if not rule.reference:
            return SpatialRuleResult(success=False, error="AFTER rule requires reference")

        target_index, _, error = self._locate(order, rule, rule.reference)
        if error:
            return SpatialRuleResult(success=False, error=error)

        new_order = list(order)
        target = new_order.pop(target_index)

        reference_index = find_module_index(new_order, rule.reference)
        new_order.insert(reference_index + 1, target)

        return SpatialRuleResult(success=True, modified_order=new_order)

    def _apply_between(self, order: List[RenderOrderItem], rule: SpatialRule) -> SpatialRuleResult:
        """
        BETWEEN: insert target at min(reference indices) + 1.

        Reference indices are taken before the target is removed, and the
        insertion point does not depend on where the target started.
        """
        if not rule.reference or not rule.reference2:
            return SpatialRuleResult(success=False, error="BETWEEN rule requires reference and reference2")

        target_index, reference_indices, error = self._locate(order, rule, rule.reference, rule.reference2)
        if error:
            return SpatialRuleResult(success=False, error=error)

        insert_index = min(reference_indices) + 1

        new_order = list(order)
        target = new_order.pop(target_index)
        new_order.insert(insert_index, target)

        return SpatialRuleResult(success=True, modified_order=new_order)

    def _apply_wrap(self, order: List[RenderOrderItem], rule: SpatialRule) -> SpatialRuleResult:
        """
        WRAP: validated only. Wrapping needs a containing element in the
        render tree, which a flat reordering cannot express.
        """
        if not rule.wrapper:
            return SpatialRuleResult(success=False, error="WRAP rule requires wrapper config")
        return SpatialRuleResult(success=True, modified_order=order)

    def add_rule(self, rule: SpatialRule) -> SpatialRule:
        """Add a rule, generating an id when it has none"""
        if not rule.id:
            rule = replace(rule, id=self._generate_rule_id())
        self.rules.append(rule)
        return rule

    def remove_rule(self, rule_id: str) -> None:
        self.rules = [rule for rule in self.rules if rule.id != rule_id]

    def update_rule(self, rule_id: str, **updates) -> None:
        """Replace fields of a rule, e.g. update_rule('r1', reference='logo')"""
        for index, rule in enumerate(self.rules):
            if rule.id == rule_id:
                self.rules[index] = replace(rule, **updates)
                return
        logging.warning(f"Cannot update unknown spatial rule: {rule_id}")

    def get_rules(self) -> List[SpatialRule]:
        return list(self.rules)

    def get_rule(self, rule_id: str) -> Optional[SpatialRule]:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None

    def set_rules(self, rules: List[SpatialRule]) -> None:
        self.rules = [replace(rule, id=rule.id or self._generate_rule_id()) for rule in rules]

    def clear_rules(self) -> None:
        self.rules = []

    def validate_rule(self, rule: SpatialRule) -> ValidationResult:
        """Check the structural requirements of a rule for its type"""
        errors = []

        if not rule.type:
            errors.append("Rule type is required")
        elif rule.type not in RULE_TYPES:
            errors.append(f"Unknown rule type: {rule.type}")

        if not rule.target:
            errors.append("Target module is required")

        if rule.type in ('before', 'after'):
            if not rule.reference:
                errors.append(f"{rule.type.upper()} rule requires reference")
        elif rule.type == 'between':
            if not rule.reference or not rule.reference2:
                errors.append("BETWEEN rule requires reference and reference2")
        elif rule.type == 'wrap':
            if not rule.wrapper:
                errors.append("WRAP rule requires wrapper config")

        if rule.target and rule.target in (rule.reference, rule.reference2):
            errors.append("Target must differ from its references")

        return ValidationResult(valid=not errors, errors=errors)

    def validate_all_rules(self) -> RuleSetValidation:
        rule_errors = {}
        for rule in self.rules:
            validation = self.validate_rule(rule)
            if not validation.valid:
                rule_errors[rule.id] = validation.errors
        return RuleSetValidation(valid=not rule_errors, rule_errors=rule_errors)

    def detect_conflicts(self) -> List[RuleConflict]:
        """
        Report pairs of rules naming the same target, and mutual BEFORE
        cycles (A before B plus B before A). Longer cycles through AFTER or
        BETWEEN chains are not detected.
        """
        conflicts = []

        for i, rule1 in enumerate(self.rules):
            for rule2 in self.rules[i + 1:]:
                if rule1.target == rule2.target:
                    conflicts.append(RuleConflict(
                        rule1=rule1.id,
                        rule2=rule2.id,
                        reason=f"Both rules target the same module: {rule1.target}",
                    ))

                if (rule1.type == 'before' and rule2.type == 'before'
                        and rule1.target == rule2.reference
                        and rule1.reference == rule2.target):
                    conflicts.append(RuleConflict(
                        rule1=rule1.id,
                        rule2=rule2.id,
                        reason="Circular dependency detected",
                    ))

        return conflicts

    def export_rules(self) -> List[dict]:
        return [rule.to_dict() for rule in self.rules]

    def import_rules(self, rules: List[dict]) -> None:
        self.set_rules([SpatialRule.from_dict(rule) for rule in rules])

    @staticmethod
    def _generate_rule_id() -> str:
        return f"rule-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"
