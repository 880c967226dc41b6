"""
Program linking for vertex/fragment shader pairs.

Combines the interfaces of both stages into a single program interface:
uniforms shared by both stages are merged and every varying written by the
vertex stage must be read by the fragment stage with the same type, and the
other way round.
"""

import os

from glsl_types.generator.builder import merge_declarations
from glsl_types.generator.errors import LinkError, TypeConflictError
from glsl_types.generator.models import (
    Declaration,
    ShaderInterface,
    ShaderStage,
    StructDef,
)


def _merge_structs(
    vertex: ShaderInterface, fragment: ShaderInterface
) -> list[StructDef]:
    merged: dict[str, StructDef] = {}
    for struct in (*vertex.structs, *fragment.structs):
        existing = merged.get(struct.name)
        if existing is None:
            merged[struct.name] = struct
        elif existing.fields != struct.fields:
            raise TypeConflictError(
                f"Struct '{struct.name}' is defined differently in the vertex and "
                "fragment shaders",
                file_path=fragment.source_file,
            )
    return list(merged.values())


def _link_varyings(
    vertex: ShaderInterface, fragment: ShaderInterface
) -> list[Declaration]:
    fragment_inputs = {d.name: d for d in fragment.inputs}
    vertex_outputs = {d.name: d for d in vertex.outputs}

    for name, declaration in vertex_outputs.items():
        if name not in fragment_inputs:
            raise LinkError(
                f"Varying '{name}' is written by the vertex shader but not read by "
                "the fragment shader",
                file_path=vertex.source_file,
                line=declaration.location.line if declaration.location else None,
            )
    for name, declaration in fragment_inputs.items():
        if name not in vertex_outputs:
            raise LinkError(
                f"Varying '{name}' is read by the fragment shader but not written by "
                "the vertex shader",
                file_path=fragment.source_file,
                line=declaration.location.line if declaration.location else None,
            )
        if vertex_outputs[name].type != declaration.type:
            raise LinkError(
                f"Varying '{name}' has type '{vertex_outputs[name].type}' in the "
                f"vertex shader and '{declaration.type}' in the fragment shader",
                file_path=fragment.source_file,
                line=declaration.location.line if declaration.location else None,
            )
    return list(vertex.outputs)


def program_path(vertex_file: str) -> str:
    """Path shared by a program's shaders, without the stage extension."""
    return os.path.splitext(vertex_file)[0]


def link_program(vertex: ShaderInterface, fragment: ShaderInterface) -> ShaderInterface:
    """Link a vertex and a fragment interface into one program interface.

    Args:
        vertex: Interface of the vertex shader
        fragment: Interface of the fragment shader

    Returns:
        Program interface with attributes as inputs, linked varyings and the
        fragment outputs

    Raises:
        TypeConflictError: If a uniform or struct differs between the stages
        LinkError: If the varyings of both stages do not match
    """
    uniforms: list[Declaration] = []
    for declaration in (*vertex.uniforms, *fragment.uniforms):
        merge_declarations(uniforms, declaration, "uniform")

    constants: list[Declaration] = []
    for declaration in (*vertex.constants, *fragment.constants):
        merge_declarations(constants, declaration, "constant")

    varyings = _link_varyings(vertex, fragment)
    structs = _merge_structs(vertex, fragment)

    return ShaderInterface(
        source_file=program_path(vertex.source_file),
        stage=ShaderStage.PROGRAM,
        uniforms=tuple(uniforms),
        inputs=vertex.inputs,
        outputs=fragment.outputs,
        constants=tuple(constants),
        varyings=tuple(varyings),
        structs=tuple(structs),
        sources=(*vertex.sources, *fragment.sources),
    )
