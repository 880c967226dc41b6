"""Helpers shared by the binding targets."""

import posixpath
import re
from dataclasses import dataclass

from glsl_types.generator.models import (
    Declaration,
    ShaderInterface,
    ShaderStage,
    StructDef,
)
from glsl_types.generator.types import struct_references

GENERATED_NOTICE = "DO NOT EDIT THIS FILE"

_NUMERIC_LITERAL_RE = re.compile(
    r"^-?(?:0[xX][0-9a-fA-F]+|\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?(?:lf|LF|[fFuU])?$"
)


@dataclass(frozen=True)
class Section:
    """One group of declarations in the generated binding.

    Attributes:
        key: Lower-case name used in descriptor tables (e.g. "uniforms")
        title: Capitalized name used in type names (e.g. "Uniforms")
        declarations: Declarations of the group
    """

    key: str
    title: str
    declarations: tuple[Declaration, ...]


def sections(interface: ShaderInterface) -> list[Section]:
    """Declaration groups of an interface in output order.

    Uniforms, inputs and outputs are always present; varyings and constants
    only when the interface has any.
    """
    is_program = interface.stage == ShaderStage.PROGRAM
    result = [Section("uniforms", "Uniforms", interface.uniforms)]
    if is_program:
        result.append(Section("attributes", "Attributes", interface.inputs))
        result.append(Section("varyings", "Varyings", interface.varyings))
    else:
        result.append(Section("inputs", "Inputs", interface.inputs))
    result.append(Section("outputs", "Outputs", interface.outputs))
    if interface.constants:
        result.append(Section("constants", "Constants", interface.constants))
    return result


def sort_structs(structs: tuple[StructDef, ...]) -> list[StructDef]:
    """Order structs so that embedded structs come before their users.

    Source order is kept wherever dependencies allow it.
    """
    by_name = {s.name: s for s in structs}
    ordered: list[StructDef] = []
    done: set[str] = set()

    def visit(struct: StructDef) -> None:
        if struct.name in done:
            return
        done.add(struct.name)
        for _, field_type in struct.fields:
            for name in struct_references(field_type):
                if name in by_name:
                    visit(by_name[name])
        ordered.append(struct)

    for struct in structs:
        visit(struct)
    return ordered


def output_path(interface: ShaderInterface, extension: str) -> str:
    """Output path mirroring the shader path, with the binding extension."""
    source = interface.source_file.replace("\\", "/")
    if interface.stage != ShaderStage.PROGRAM:
        source = posixpath.splitext(source)[0]
    return source + extension


def binding_name(interface: ShaderInterface) -> str:
    """PascalCase name derived from the shader file stem.

    Examples:
        shaders/blur_pass.frag -> BlurPass
        my-shader.vert -> MyShader
    """
    stem = posixpath.basename(output_path(interface, ""))
    parts = [p for p in re.split(r"[^A-Za-z0-9]+", stem) if p]
    name = "".join(p[:1].upper() + p[1:] for p in parts) or "Shader"
    if name[0].isdigit():
        name = f"_{name}"
    return name


def source_keys(interface: ShaderInterface) -> list[tuple[str, str]]:
    """Key suffixes and texts of the sources to embed.

    A single shader has one source; a program has one per stage.
    """
    if interface.stage != ShaderStage.PROGRAM:
        return [("", source.text) for source in interface.sources]
    return [(source.stage.name.lower(), source.text) for source in interface.sources]


def literal_value(initializer: str | None) -> str | None:
    """Normalize a scalar literal initializer, or None if it is not one.

    Type suffixes are dropped and legacy octal literals are converted to
    decimal so the value can be used in any binding language.
    """
    if initializer is None:
        return None
    text = initializer.strip()
    if text in ("true", "false"):
        return text
    if not _NUMERIC_LITERAL_RE.match(text):
        return None
    if text[-2:] in ("lf", "LF"):
        text = text[:-2]
    elif not text.lower().startswith(("0x", "-0x")) and text[-1] in "fFuU":
        text = text[:-1]
    elif text.lower().startswith(("0x", "-0x")) and text[-1] in "uU":
        text = text[:-1]
    sign = "-" if text.startswith("-") else ""
    digits = text.lstrip("-")
    if len(digits) > 1 and digits.startswith("0") and digits.isdigit():
        try:
            digits = str(int(digits, 8))
        except ValueError:
            return None
    return sign + digits
