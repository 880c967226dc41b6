"""TypeScript binding target."""

from glsl_types.generator.interfaces import BindingTarget, LanguageConfig
from glsl_types.generator.models import (
    Declaration,
    GeneratedArtifact,
    ShaderInterface,
    ShaderStage,
    StructDef,
)
from glsl_types.generator.targets.base import (
    GENERATED_NOTICE,
    binding_name,
    literal_value,
    output_path,
    sections,
    sort_structs,
    source_keys,
)
from glsl_types.generator.types import (
    Array,
    GLSLType,
    Matrix,
    Sampler,
    Scalar,
    ScalarKind,
    Struct,
    Vector,
)

_INDENT = "  "

_VECTOR_ALIAS_PREFIX = {
    ScalarKind.BOOL: "BVec",
    ScalarKind.INT: "IVec",
    ScalarKind.UINT: "UVec",
    ScalarKind.FLOAT: "Vec",
    ScalarKind.DOUBLE: "DVec",
}

FIXED_ARRAY_HELPER = (
    "export type FixedArray<T, N extends number> = T[] & { length: N };"
)


def _component(kind: ScalarKind) -> str:
    return "boolean" if kind == ScalarKind.BOOL else "number"


def _tuple(component: str, size: int) -> str:
    return "[" + ", ".join([component] * size) + "]"


def escape_template(text: str) -> str:
    """Escape text for use inside a template literal."""
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


class TypeScriptTarget(BindingTarget):
    """Emits a `.ts` module with interfaces and a descriptor object.

    Vectors and matrices become named tuple aliases (`Vec3`, `Mat4`),
    fixed-size arrays use the `FixedArray` helper and arrays of unknown
    length become plain `T[]`. Samplers are bound by texture unit and map
    to `number`.
    """

    def get_config(self) -> LanguageConfig:
        return LanguageConfig(name="typescript", file_extension=".ts", comment_prefix="//")

    def type_name(self, glsl_type: GLSLType, aliases: dict[str, str]) -> str:
        """Map a GLSL type to a TypeScript type, recording the aliases it needs."""
        match glsl_type:
            case Scalar(kind):
                return _component(kind)
            case Vector(base, size):
                name = f"{_VECTOR_ALIAS_PREFIX[base]}{size}"
                aliases[name] = _tuple(_component(base), size)
                return name
            case Matrix(columns, rows, base):
                prefix = "DMat" if base == ScalarKind.DOUBLE else "Mat"
                name = f"{prefix}{columns}" if columns == rows else f"{prefix}{columns}x{rows}"
                aliases[name] = _tuple("number", columns * rows)
                return name
            case Sampler():
                name = str(glsl_type)
                name = name[0].upper() + name[1:]
                if not name.startswith("Sampler"):
                    name = name[0] + "S" + name[2:]
                aliases[name] = "number"
                return name
            case Array(element, None):
                return f"{self.type_name(element, aliases)}[]"
            case Array(element, length):
                aliases["FixedArray"] = ""
                return f"FixedArray<{self.type_name(element, aliases)}, {length}>"
            case Struct(name):
                return name
        raise TypeError(f"Unsupported GLSL type: {glsl_type!r}")

    def _interface(
        self, name: str, members: list[tuple[str, GLSLType]], aliases: dict[str, str]
    ) -> list[str]:
        if not members:
            return [f"export interface {name} {{}}"]
        lines = [f"export interface {name} {{"]
        for member, glsl_type in members:
            lines.append(f"{_INDENT}{member}: {self.type_name(glsl_type, aliases)};")
        lines.append("}")
        return lines

    def _struct(self, struct: StructDef, aliases: dict[str, str]) -> list[str]:
        return self._interface(struct.name, list(struct.fields), aliases)

    def _descriptor(self, name: str, interface: ShaderInterface) -> list[str]:
        lines = [f"export const {name} = {{"]
        for section in sections(interface):
            if not section.declarations:
                lines.append(f"{_INDENT}{section.key}: {{}},")
                continue
            lines.append(f"{_INDENT}{section.key}: {{")
            for declaration in section.declarations:
                lines.append(f'{_INDENT * 2}{declaration.name}: "{declaration.type}",')
            lines.append(f"{_INDENT}}},")
        if self.embed_source:
            for suffix, text in source_keys(interface):
                key = f"{suffix}Source" if suffix else "source"
                lines.append(f"{_INDENT}{key}: `{escape_template(text)}`,")
        lines.append("} as const;")
        return lines

    def _constant_values(self, name: str, constants: tuple[Declaration, ...]) -> list[str]:
        values = [(d.name, literal_value(d.initializer)) for d in constants]
        values = [(n, v) for n, v in values if v is not None]
        if not values:
            return []
        lines = [f"export const {name}Constants = {{"]
        for constant, value in values:
            lines.append(f"{_INDENT}{constant}: {value},")
        lines.append("} as const;")
        return lines

    def emit(self, interface: ShaderInterface) -> GeneratedArtifact:
        name = binding_name(interface)
        aliases: dict[str, str] = {}
        blocks: list[list[str]] = []

        for struct in sort_structs(interface.structs):
            blocks.append(self._struct(struct, aliases))
        for section in sections(interface):
            members = [(d.name, d.type) for d in section.declarations]
            blocks.append(self._interface(f"{name}{section.title}", members, aliases))
        blocks.append(self._descriptor(name, interface))
        constants = self._constant_values(name, interface.constants)
        if constants:
            blocks.append(constants)

        origin = interface.source_file
        if interface.stage == ShaderStage.PROGRAM:
            origin = f"{origin} (vertex and fragment program)"
        header = [
            f"// {GENERATED_NOTICE}",
            f"// This file is generated by glsl-types from {origin}",
        ]
        prelude: list[str] = []
        if aliases.pop("FixedArray", None) is not None:
            prelude.append(FIXED_ARRAY_HELPER)
        for alias in sorted(aliases):
            prelude.append(f"export type {alias} = {aliases[alias]};")
        if prelude:
            blocks.insert(0, prelude)

        lines = list(header)
        for block in blocks:
            lines.append("")
            lines.extend(block)
        contents = "\n".join(lines) + "\n"
        return GeneratedArtifact(
            relative_output_path=output_path(interface, self.get_config().file_extension),
            contents=contents,
        )
