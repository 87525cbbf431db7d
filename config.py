"""
Composition Server Configuration

Central configuration file for all constants and settings.
"""
import os

# Asset base URL passed to module renderers
DEFAULT_BASE_URL = os.getenv("BASE_URL", "http://localhost:3000")

# Viewport of a single slide
DEFAULT_VIEWPORT_WIDTH = 1080
DEFAULT_VIEWPORT_HEIGHT = 1440

# Additional layout presets (YAML)
PRESETS_FILE = os.getenv(
    "LAYOUT_PRESETS_FILE",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "layout_presets.yaml")
)

# Server Configuration
DEFAULT_PORT = 8000
PRODUCTION_PORT = 80
