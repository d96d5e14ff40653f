"""Agent manifests — models, loading and prompt rendering."""

from ame.core.manifest.loader import load_manifest, parse_manifest, validate_manifest
from ame.core.manifest.models import Block, Chunk, Manifest, Scenario, VariableDefinition
from ame.core.manifest.renderer import TemplateRenderer, substitute_variables

__all__ = [
    "Block",
    "Chunk",
    "Manifest",
    "Scenario",
    "TemplateRenderer",
    "VariableDefinition",
    "load_manifest",
    "parse_manifest",
    "substitute_variables",
    "validate_manifest",
]
