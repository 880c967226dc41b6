"""Binding targets."""

from glsl_types.generator.interfaces import BindingLanguage, BindingTarget
from glsl_types.generator.targets.rust import RustTarget
from glsl_types.generator.targets.typescript import TypeScriptTarget

TARGETS: dict[BindingLanguage, type[BindingTarget]] = {
    BindingLanguage.TYPESCRIPT: TypeScriptTarget,
    BindingLanguage.RUST: RustTarget,
}


def create_target(
    language: BindingLanguage = BindingLanguage.TYPESCRIPT, embed_source: bool = True
) -> BindingTarget:
    """Create the binding target for a language.

    Args:
        language: Binding language
        embed_source: Embed shader sources in the generated binding

    Returns:
        A target instance
    """
    return TARGETS[language](embed_source=embed_source)


__all__ = ["TARGETS", "RustTarget", "TypeScriptTarget", "create_target"]
