"""
Binding generation for GLSL shaders.

This package lexes and parses the interface declarations of a shader,
resolves its includes and types, and renders the result as a typed binding
file for a host language.
"""

from glsl_types.generator.emitter import emit
from glsl_types.generator.errors import (
    GenerationError,
    GenerationWarning,
    IncludeError,
    LinkError,
    ParseError,
    TypeConflictError,
    UnknownTypeError,
)
from glsl_types.generator.interfaces import BindingLanguage, FileSystem, GeneratorConfig
from glsl_types.generator.models import (
    GeneratedArtifact,
    GenerationResult,
    GenerationStage,
    ShaderInterface,
)
from glsl_types.generator.pipeline import generate, generate_program

__all__ = [
    "BindingLanguage",
    "FileSystem",
    "GeneratedArtifact",
    "GenerationError",
    "GenerationResult",
    "GenerationStage",
    "GenerationWarning",
    "GeneratorConfig",
    "IncludeError",
    "LinkError",
    "ParseError",
    "ShaderInterface",
    "TypeConflictError",
    "UnknownTypeError",
    "emit",
    "generate",
    "generate_program",
]
