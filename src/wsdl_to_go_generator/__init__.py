"""WSDL to Go code generator package."""

from __future__ import annotations

from .cli import main
from .config import GeneratorOptions
from .generator import build_model, run_generation
from .model_types import GeneratedModel, GenerationResult

__all__ = [
    "GeneratedModel",
    "GenerationResult",
    "GeneratorOptions",
    "build_model",
    "main",
    "run_generation",
]
