"""Code emitter that renders a shader interface into a binding file."""

from glsl_types.generator.interfaces import BindingLanguage, BindingTarget
from glsl_types.generator.models import GeneratedArtifact, ShaderInterface
from glsl_types.generator.targets import create_target


class Emitter:
    """Generates binding code from a shader interface using a BindingTarget."""

    def __init__(self, target: BindingTarget):
        self.target = target

    def emit(self, interface: ShaderInterface) -> GeneratedArtifact:
        """Render the interface.

        The result depends only on the interface and the target options, so
        emitting the same interface twice yields identical contents.
        """
        return self.target.emit(interface)


def emit(
    interface: ShaderInterface,
    language: BindingLanguage = BindingLanguage.TYPESCRIPT,
    embed_source: bool = True,
) -> GeneratedArtifact:
    """Render a shader interface into a binding artifact."""
    return Emitter(create_target(language, embed_source)).emit(interface)
