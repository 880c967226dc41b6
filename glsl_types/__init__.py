from glsl_types.generator import (
    BindingLanguage,
    GenerationError,
    GenerationResult,
    GeneratorConfig,
    ShaderInterface,
    generate,
    generate_program,
)

__version__ = "0.1.0"


__all__ = [
    "BindingLanguage",
    "GenerationError",
    "GenerationResult",
    "GeneratorConfig",
    "ShaderInterface",
    "generate",
    "generate_program",
]
