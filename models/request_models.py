"""
API Request Models

Pydantic models for API request validation. Composition payloads nested in
these models keep the editor's camelCase wire format.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel


class ComposeRequest(BaseModel):
    enabled_modules: List[str]
    form_data: Dict[str, Dict[str, Any]] = {}
    composition_config: Optional[Dict[str, Any]] = None  # CompositionConfig wire format
    preset_id: Optional[str] = None  # used when composition_config is missing
    slide_count: int = 1
    base_url: Optional[str] = None  # None = server default


class ApplyRulesRequest(BaseModel):
    render_order: List[Dict[str, Any]]
    spatial_rules: List[Dict[str, Any]] = []


class ValidateRulesRequest(BaseModel):
    spatial_rules: List[Dict[str, Any]]


class LayersRequest(BaseModel):
    enabled_modules: List[str]
    z_index_overrides: Dict[str, int] = {}
