"""Procedural overworld generation package.

This package implements the seeded generation pipeline: noise-based
elevation, puddle removal, smoothing, climate, biome classification,
hydrology (flow routing, rivers, bank erosion), point-of-interest placement,
roads and the overview grid.
"""

from .config import WorldGenConfig, load_config
from .generator import GenerationStage, WorldGenerator, default_stages, generate
from .noise import NoiseField
from .persistence import load_world, save_world
from .simplify import WorldSimplifier
from .validation import ValidationResult, validate_world

__all__ = [
    "GenerationStage",
    "NoiseField",
    "ValidationResult",
    "WorldGenConfig",
    "WorldGenerator",
    "WorldSimplifier",
    "default_stages",
    "generate",
    "load_config",
    "load_world",
    "save_world",
    "validate_world",
]
