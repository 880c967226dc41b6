"""Rust binding target."""

import re

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

_INDENT = "    "

_SCALARS = {
    ScalarKind.BOOL: "bool",
    ScalarKind.INT: "i32",
    ScalarKind.UINT: "u32",
    ScalarKind.FLOAT: "f32",
    ScalarKind.DOUBLE: "f64",
}

RUST_KEYWORDS = frozenset(
    {
        "abstract", "as", "async", "await", "become", "box", "break", "const",
        "continue", "do", "dyn", "else", "enum", "extern", "false", "final",
        "fn", "for", "gen", "if", "impl", "in", "let", "loop", "macro", "match",
        "mod", "move", "mut", "override", "priv", "pub", "ref", "return",
        "static", "struct", "trait", "true", "try", "type", "typeof", "unsafe",
        "unsized", "use", "virtual", "where", "while", "yield",
    }
)

# Keywords that cannot be written as raw identifiers
_NON_RAW_KEYWORDS = frozenset({"self", "Self", "super", "crate"})


def identifier(name: str) -> str:
    """Make a GLSL name usable as a Rust identifier."""
    if name in _NON_RAW_KEYWORDS:
        return f"{name}_"
    if name in RUST_KEYWORDS:
        return f"r#{name}"
    return name


def raw_string(text: str) -> str:
    """Quote text as a raw string literal that needs no escaping."""
    runs = [len(m) for m in re.findall(r'"(#*)', text)]
    hashes = "#" * (max(runs, default=0) + 1)
    return f'r{hashes}"{text}"{hashes}'


def constant_literal(value: str, glsl_type: GLSLType) -> str | None:
    """Render a normalized literal as a value of the constant's Rust type."""
    if not isinstance(glsl_type, Scalar):
        return None
    kind = glsl_type.kind
    if kind == ScalarKind.BOOL:
        return value if value in ("true", "false") else None
    if value in ("true", "false"):
        return None
    is_hex = value.lower().lstrip("-").startswith("0x")
    if kind in (ScalarKind.FLOAT, ScalarKind.DOUBLE):
        if is_hex:
            return f"{int(value, 16)}.0"
        if value.endswith("."):
            return f"{value}0"
        if value.lstrip("-").startswith("."):
            return value.replace(".", "0.", 1)
        if not any(c in value for c in ".eE"):
            return f"{value}.0"
        return value
    if any(c in value for c in ".eE") and not is_hex:
        return None
    if kind == ScalarKind.UINT and value.startswith("-"):
        return None
    return value


class RustTarget(BindingTarget):
    """Emits a `.rs` module with plain structs and name tables.

    Vectors and matrices become fixed arrays (`[f32; 3]`, column-major
    `[[f32; 4]; 4]`) and arrays of unknown length become `Vec<T>`.
    Samplers are bound by texture unit and map to `i32`.
    """

    def get_config(self) -> LanguageConfig:
        return LanguageConfig(name="rust", file_extension=".rs", comment_prefix="//")

    def type_name(self, glsl_type: GLSLType) -> str:
        """Map a GLSL type to a Rust type."""
        match glsl_type:
            case Scalar(kind):
                return _SCALARS[kind]
            case Vector(base, size):
                return f"[{_SCALARS[base]}; {size}]"
            case Matrix(columns, rows, base):
                return f"[[{_SCALARS[base]}; {rows}]; {columns}]"
            case Sampler():
                return "i32"
            case Array(element, None):
                return f"Vec<{self.type_name(element)}>"
            case Array(element, length):
                return f"[{self.type_name(element)}; {length}]"
            case Struct(name):
                return name
        raise TypeError(f"Unsupported GLSL type: {glsl_type!r}")

    def _struct(self, name: str, members: list[tuple[str, GLSLType]]) -> list[str]:
        lines = ["#[derive(Debug, Clone, PartialEq)]"]
        if not members:
            lines.append(f"pub struct {name} {{}}")
            return lines
        lines.append(f"pub struct {name} {{")
        for member, glsl_type in members:
            lines.append(f"{_INDENT}pub {identifier(member)}: {self.type_name(glsl_type)},")
        lines.append("}")
        return lines

    def _user_struct(self, struct: StructDef) -> list[str]:
        return self._struct(struct.name, list(struct.fields))

    def _table(self, key: str, declarations: tuple[Declaration, ...]) -> list[str]:
        constant = f"pub const {key.upper()}: &[(&str, &str)] = &["
        if not declarations:
            return [constant + "];"]
        lines = [constant]
        for declaration in declarations:
            lines.append(f'{_INDENT}("{declaration.name}", "{declaration.type}"),')
        lines.append("];")
        return lines

    def _constant_values(self, constants: tuple[Declaration, ...]) -> list[str]:
        values = []
        for declaration in constants:
            value = literal_value(declaration.initializer)
            if value is None:
                continue
            rendered = constant_literal(value, declaration.type)
            if rendered is not None:
                values.append((declaration, rendered))
        if not values:
            return []
        lines = ["pub mod values {"]
        for declaration, rendered in values:
            lines.append(
                f"{_INDENT}pub const {identifier(declaration.name)}: "
                f"{self.type_name(declaration.type)} = {rendered};"
            )
        lines.append("}")
        return lines

    def emit(self, interface: ShaderInterface) -> GeneratedArtifact:
        name = binding_name(interface).lstrip("_") or "Shader"
        if name[0].isdigit():
            name = f"Shader{name}"

        origin = interface.source_file
        if interface.stage == ShaderStage.PROGRAM:
            origin = f"{origin} (vertex and fragment program)"
        lines = [
            f"// {GENERATED_NOTICE}",
            f"// This file is generated by glsl-types from {origin}",
            "",
            "#![allow(dead_code, non_snake_case, non_upper_case_globals)]",
        ]

        blocks: list[list[str]] = []
        for struct in sort_structs(interface.structs):
            blocks.append(self._user_struct(struct))
        for section in sections(interface):
            members = [(d.name, d.type) for d in section.declarations]
            blocks.append(self._struct(f"{name}{section.title}", members))

        tables: list[str] = []
        for section in sections(interface):
            tables.extend(self._table(section.key, section.declarations))
        if self.embed_source:
            for suffix, text in source_keys(interface):
                key = f"{suffix.upper()}_SOURCE" if suffix else "SOURCE"
                tables.append(f"pub const {key}: &str = {raw_string(text)};")
        blocks.append(tables)

        constants = self._constant_values(interface.constants)
        if constants:
            blocks.append(constants)

        for block in blocks:
            lines.append("")
            lines.extend(block)
        contents = "\n".join(lines) + "\n"
        return GeneratedArtifact(
            relative_output_path=output_path(interface, self.get_config().file_extension),
            contents=contents,
        )
