"""
Shared fixtures: a registry of simple fake modules and render contexts.
"""
import pytest

from composition_engine.registry import ContentModule, ModuleRegistry, SubfragmentRenderer
from composition_engine.types import RenderContext


class FakeModule(ContentModule):
    """Renders <div class="{id}">{text}</div> and a z-index rule"""

    def render_fragment(self, data, context):
        return f'<div class="{self.module_id}">{data.get("text", "")}</div>'

    def render_css(self, data, context):
        return f".{self.module_id} {{\n  position: relative;\n  z-index: {self.z_index};\n}}"


class FakeListModule(ContentModule, SubfragmentRenderer):
    """Module with an 'items' list whose entries can be rendered alone"""

    def render_fragment(self, data, context):
        return "".join(f"<li>{item}</li>" for item in data.get("items", []))

    def render_subfragment(self, index, data, context):
        items = data.get("items", [])
        if index >= len(items):
            return ""
        return f'<li class="single">{items[index]}</li>'


@pytest.fixture
def registry():
    return ModuleRegistry([
        FakeModule("alpha", "Alpha", z_index=5),
        FakeModule("beta", "Beta", z_index=10),
        FakeModule("gamma", "Gamma", z_index=30),
        FakeListModule("bullets", "Bullets", z_index=10),
        FakeModule("contentImage", "Content Image", z_index=5),
    ])


@pytest.fixture
def context():
    return RenderContext(
        enabled_modules=["alpha", "beta", "gamma", "bullets"],
        all_modules_data={
            "alpha": {"text": "A"},
            "beta": {"text": "B"},
            "gamma": {"text": "C"},
            "bullets": {"items": ["one", "two"]},
        },
    )

