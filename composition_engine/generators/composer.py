"""
Template Composer

High-level generator that runs the composition pipeline for one graphic and
produces the complete HTML document handed to the rasterization service:
spatial rules -> layer overrides -> module CSS -> ordered markup.
"""

from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass
import logging

from jinja2 import Environment

from ..composition_order import CompositionOrderEngine
from ..config import EngineConfig
from ..layers import LayerController
from ..modules import create_default_registry
from ..registry import ContentModule, ModuleRegistry
from ..spatial_rules import SpatialRulesEngine
from ..types import CompositionConfig, RenderContext


DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width={{ viewport_width }}, height={{ viewport_height }}">
  <title>Generated Image</title>
  {% if base_url %}
  <link rel="stylesheet" href="{{ base_url }}/css/base/reset.css">
  <link rel="stylesheet" href="{{ base_url }}/css/modules/fonts.css">
  {% endif %}
  <style>
    :root {
      {{ style_variables }}
    }

    body {
      width: {{ viewport_width }}px;
      height: {{ viewport_height }}px;
      margin: 0;
      padding: 0;
      overflow: hidden;
      position: relative;
      display: flex;
      flex-direction: column;
    }

    .content-wrapper {
      flex: 1;
      display: flex;
      flex-direction: column;
      width: 100%;
      min-height: 0;
      position: relative;
      box-sizing: border-box;
    }

    {{ modules_css }}
  </style>
</head>
<body>
{{ modules_html }}
</body>
</html>
"""

_environment = Environment(trim_blocks=True, lstrip_blocks=True, autoescape=False)
_document = _environment.from_string(DOCUMENT_TEMPLATE)


@dataclass
class ComposedTemplate:
    """Result of one composition run"""
    viewport_width: int
    viewport_height: int
    modules_css: str
    modules_html: str
    style_variables: str
    final_html: str

    def to_dict(self) -> dict:
        return {
            'viewportWidth': self.viewport_width,
            'viewportHeight': self.viewport_height,
            'modulesCss': self.modules_css,
            'modulesHtml': self.modules_html,
            'styleVariables': self.style_variables,
            'finalHtml': self.final_html,
        }


class TemplateComposer:
    """
    Composes enabled modules into a full document.

    Engines are created fresh for every compose() call, so one composer can
    serve concurrent requests.
    """

    def __init__(self, registry: Optional[ModuleRegistry] = None,
                 config: Optional[EngineConfig] = None, base_url: str = ""):
        """
        Initialize the composer.

        Args:
            registry: Module registry. If None, uses the built-in modules.
            config: Engine configuration. If None, uses default config.
            base_url: Default base URL for module assets
        """
        self.registry = registry or create_default_registry()
        self.config = config or EngineConfig()
        self.base_url = base_url

        issues = self.config.validate()
        if issues:
            logging.warning(f"Engine configuration issues: {issues}")

    def calculate_viewport(self, slide_count: int = 1) -> Tuple[int, int]:
        """Viewport for a carousel strip of slide_count slides"""
        slide_count = max(1, slide_count)
        return slide_count * self.config.base_viewport_width, self.config.base_viewport_height

    def compose(self, enabled_modules: List[str], form_data: Dict[str, Dict[str, Any]],
                composition_config: Optional[CompositionConfig] = None,
                slide_count: int = 1, base_url: Optional[str] = None) -> ComposedTemplate:
        """
        Compose a template from the enabled modules.

        Args:
            enabled_modules: Enabled module ids (possibly instance-suffixed)
            form_data: Per-module data keyed by the same ids
            composition_config: Custom layout; the default order is used when
                it is missing or has an empty render order
            slide_count: Number of slides laid side by side
            base_url: Asset base URL override

        Returns:
            ComposedTemplate with the final document
        """
        viewport_width, viewport_height = self.calculate_viewport(slide_count)
        context = RenderContext(
            enabled_modules=list(enabled_modules),
            all_modules_data=form_data,
            viewport_width=viewport_width,
            viewport_height=viewport_height,
            base_url=self.base_url if base_url is None else base_url,
            composition_config=composition_config,
        )

        if composition_config is not None and composition_config.render_order:
            modules_css, modules_html = self._compose_with_custom_order(context, composition_config)
        else:
            modules_css, modules_html = self._compose_with_default_order(context)

        style_variables = self._collect_style_variables(context)

        final_html = _document.render(
            viewport_width=viewport_width,
            viewport_height=viewport_height,
            base_url=context.base_url.rstrip('/'),
            style_variables=style_variables,
            modules_css=modules_css,
            modules_html=modules_html,
        )

        return ComposedTemplate(
            viewport_width=viewport_width,
            viewport_height=viewport_height,
            modules_css=modules_css,
            modules_html=modules_html,
            style_variables=style_variables,
            final_html=final_html,
        )

    def _enabled_instances(self, context: RenderContext) -> List[Tuple[str, ContentModule]]:
        """(instance id, module) pairs for registered modules, by baseline z-index"""
        instances = []
        for instance_id in context.enabled_modules:
            module = self.registry.get_module(instance_id)
            if module is None:
                logging.warning(f"Enabled module is not registered: {instance_id}")
                continue
            instances.append((instance_id, module))

        instances.sort(key=lambda pair: pair[1].z_index)
        return instances

    def _module_data(self, instance_id: str, module: ContentModule, context: RenderContext) -> Dict[str, Any]:
        data = context.all_modules_data.get(instance_id)
        return data if data is not None else module.defaults

    @staticmethod
    def _label(instance_id: str, module: ContentModule) -> str:
        if instance_id != module.id:
            return f"{module.display_name} ({instance_id})"
        return module.display_name

    def _collect_css(self, context: RenderContext,
                     layer_controller: Optional[LayerController] = None) -> str:
        blocks = []
        for instance_id, module in self._enabled_instances(context):
            css = module.render_css(self._module_data(instance_id, module, context), context)
            if not css:
                continue
            if layer_controller is not None:
                css = layer_controller.apply_css_override(instance_id, css)
            blocks.append(f"/* === {self._label(instance_id, module)} === */\n{css}")
        return "\n\n".join(blocks)

    def _collect_style_variables(self, context: RenderContext) -> str:
        variables = {}
        for instance_id, module in self._enabled_instances(context):
            variables.update(module.style_variables(self._module_data(instance_id, module, context)))
        return "\n      ".join(f"--{key}: {value};" for key, value in variables.items())

    def _compose_with_default_order(self, context: RenderContext) -> Tuple[str, str]:
        """Every enabled module rendered whole, bottom layer first"""
        modules_css = self._collect_css(context)

        fragments = []
        for instance_id, module in self._enabled_instances(context):
            html = module.render_fragment(self._module_data(instance_id, module, context), context)
            if html:
                fragments.append(f"<!-- {self._label(instance_id, module)} -->\n{html}")

        return modules_css, "\n\n".join(fragments)

    def _compose_with_custom_order(self, context: RenderContext,
                                   composition_config: CompositionConfig) -> Tuple[str, str]:
        render_order = composition_config.render_order
        if composition_config.spatial_rules:
            rules_engine = SpatialRulesEngine(composition_config.spatial_rules)
            render_order = rules_engine.apply_rules(render_order)

        layer_controller = LayerController(self.registry, composition_config.z_index_overrides, self.config)
        layer_controller.initialize_layers(context.enabled_modules)

        modules_css = self._collect_css(context, layer_controller)

        order_engine = CompositionOrderEngine(render_order, self.registry, self.config)
        modules_html = f'<div class="content-wrapper">\n{order_engine.generate_html(context)}\n</div>'

        logging.debug(f"Composed {len(render_order)} render order items "
                      f"for {len(context.enabled_modules)} enabled modules")
        return modules_css, modules_html
