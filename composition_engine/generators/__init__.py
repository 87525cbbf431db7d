"""
Composition Engine Generators

High-level generators that combine the registry and the composition engines
to create complete documents.
"""

from .composer import TemplateComposer, ComposedTemplate

__all__ = [
    'TemplateComposer',
    'ComposedTemplate'
]
