"""
Composition Routes

Handles document composition, spatial rule application and validation,
layer initialization and layout preset endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from composition_engine.generators import TemplateComposer
from composition_engine.layers import LayerController
from composition_engine.presets import get_layout_preset, list_layout_presets
from composition_engine.spatial_rules import SpatialRulesEngine
from composition_engine.types import CompositionConfig, RenderOrderItem, SpatialRule
from models.request_models import ApplyRulesRequest, ComposeRequest, LayersRequest, ValidateRulesRequest
from utils.route_helpers import composition_operation, parse_payload, require_preset_config


def setup_composition_routes(composer: TemplateComposer) -> APIRouter:
    """
    Setup composition routes with dependency injection

    Args:
        composer: TemplateComposer holding the module registry and engine config

    Returns:
        Configured APIRouter
    """
    router = APIRouter()

    @router.post("/composition/html")
    async def compose_html(request: ComposeRequest):
        """Compose the full document for a graphic"""
        composition_config: Optional[CompositionConfig] = None
        if request.composition_config is not None:
            composition_config = parse_payload(
                lambda data: CompositionConfig.from_dict(data, composer.config),
                request.composition_config, "composition config")
        elif request.preset_id:
            composition_config = require_preset_config(request.preset_id)

        logging.info(f"Composing {len(request.enabled_modules)} modules "
                     f"(preset={composition_config.preset_id if composition_config else None}, "
                     f"slides={request.slide_count})")

        result = composition_operation(
            lambda: composer.compose(
                request.enabled_modules,
                request.form_data,
                composition_config=composition_config,
                slide_count=request.slide_count,
                base_url=request.base_url,
            ),
            error_context="compose document",
        )
        return result.to_dict()

    @router.post("/composition/order/apply-rules")
    async def apply_rules(request: ApplyRulesRequest):
        """Apply spatial rules to a flat render order"""
        render_order = parse_payload(
            lambda items: [RenderOrderItem.from_dict(item, composer.config) for item in items],
            request.render_order, "render order")
        rules = parse_payload(
            lambda items: [SpatialRule.from_dict(item) for item in items],
            request.spatial_rules, "spatial rules")

        order, outcomes = SpatialRulesEngine(rules).apply_rules_with_results(render_order)

        return {
            "renderOrder": [item.to_dict() for item in order],
            "results": [
                {"ruleId": rule.id, "success": result.success, "error": result.error}
                for rule, result in outcomes
            ],
        }

    @router.post("/composition/rules/validate")
    async def validate_rules(request: ValidateRulesRequest):
        """Validate spatial rules and report conflicts between them"""
        rules = parse_payload(
            lambda items: [SpatialRule.from_dict(item) for item in items],
            request.spatial_rules, "spatial rules")

        engine = SpatialRulesEngine(rules)
        validation = engine.validate_all_rules()
        conflicts = engine.detect_conflicts()

        return {
            "valid": validation.valid,
            "errors": validation.rule_errors,
            "conflicts": [
                {"rule1": conflict.rule1, "rule2": conflict.rule2, "reason": conflict.reason}
                for conflict in conflicts
            ],
            "rules": engine.export_rules(),
        }

    @router.post("/composition/layers")
    async def initialize_layers(request: LayersRequest):
        """Get the layer stack for a set of enabled modules"""
        controller = LayerController(composer.registry, request.z_index_overrides, composer.config)
        controller.initialize_layers(request.enabled_modules)
        return controller.export()

    @router.get("/composition/presets")
    async def list_presets():
        """List available layout presets"""
        return {"presets": [preset.to_dict() for preset in list_layout_presets()]}

    @router.get("/composition/presets/{preset_id}")
    async def get_preset(preset_id: str):
        """Get one layout preset"""
        preset = get_layout_preset(preset_id)
        if preset is None:
            raise HTTPException(status_code=404, detail=f"Layout preset not found: {preset_id}")
        return preset.to_dict()

    return router
