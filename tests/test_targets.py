"""Tests for the binding targets and the emitter."""

import pytest

from glsl_types.generator.emitter import Emitter, emit
from glsl_types.generator.interfaces import BindingLanguage
from glsl_types.generator.models import (
    Declaration,
    Qualifier,
    ShaderInterface,
    ShaderSource,
    ShaderStage,
    StructDef,
)
from glsl_types.generator.targets import RustTarget, TypeScriptTarget, create_target
from glsl_types.generator.targets.base import (
    binding_name,
    literal_value,
    output_path,
    sort_structs,
)
from glsl_types.generator.targets.rust import constant_literal, identifier, raw_string
from glsl_types.generator.targets.typescript import escape_template
from glsl_types.generator.types import (
    Array,
    Matrix,
    Sampler,
    Scalar,
    ScalarKind,
    Struct,
    Vector,
)

FLOAT = Scalar(ScalarKind.FLOAT)
VEC3 = Vector(ScalarKind.FLOAT, 3)


def uniform(name: str, glsl_type) -> Declaration:
    return Declaration(Qualifier.UNIFORM, glsl_type, name)


def shader(source_file: str = "shader.frag", **kwargs) -> ShaderInterface:
    return ShaderInterface(source_file=source_file, stage=ShaderStage.FRAGMENT, **kwargs)


class TestHelpers:
    """Tests for the helpers shared by the targets."""

    @pytest.mark.parametrize(
        "source_file,expected",
        [
            ("shader.frag", "Shader"),
            ("effects/blur_pass.frag", "BlurPass"),
            ("my-shader.vert", "MyShader"),
            ("2d.glsl", "_2d"),
            ("fullScreen.vs", "FullScreen"),
        ],
    )
    def test_binding_name(self, source_file, expected):
        """Test PascalCase names derived from file stems."""
        assert binding_name(shader(source_file)) == expected

    def test_output_path(self):
        """Test that the shader extension is replaced."""
        assert output_path(shader("a/b/c.frag"), ".ts") == "a/b/c.ts"

    def test_program_output_path_keeps_dots(self):
        """Test that a program stem is used verbatim."""
        program = ShaderInterface(source_file="post.bloom", stage=ShaderStage.PROGRAM)

        assert output_path(program, ".rs") == "post.bloom.rs"

    def test_sort_structs(self):
        """Test that embedded structs are moved before their users."""
        outer = StructDef("Outer", (("inner", Struct("Inner")),))
        inner = StructDef("Inner", (("x", FLOAT),))
        other = StructDef("Other", (("y", FLOAT),))

        ordered = sort_structs((outer, other, inner))

        assert [s.name for s in ordered] == ["Inner", "Outer", "Other"]

    @pytest.mark.parametrize(
        "initializer,expected",
        [
            ("1.5", "1.5"),
            ("2.0f", "2.0"),
            ("-3", "-3"),
            ("010", "8"),
            ("09", None),
            ("0x1F", "0x1F"),
            ("7u", "7"),
            ("1e3", "1e3"),
            ("1.0lf", "1.0"),
            ("true", "true"),
            ("vec2(1.0, 2.0)", None),
            ("N * 2", None),
            (None, None),
        ],
    )
    def test_literal_value(self, initializer, expected):
        """Test normalization of scalar literal initializers."""
        assert literal_value(initializer) == expected


class TestTypeScriptTarget:
    """Tests for the TypeScript target."""

    def test_type_names(self):
        """Test the mapping of every type variant."""
        target = TypeScriptTarget()
        aliases: dict[str, str] = {}

        assert target.type_name(FLOAT, aliases) == "number"
        assert target.type_name(Scalar(ScalarKind.BOOL), aliases) == "boolean"
        assert target.type_name(Vector(ScalarKind.INT, 4), aliases) == "IVec4"
        assert target.type_name(Matrix(2, 3), aliases) == "Mat2x3"
        assert target.type_name(Matrix(4, 4, ScalarKind.DOUBLE), aliases) == "DMat4"
        assert target.type_name(Sampler("Cube", ScalarKind.UINT), aliases) == "USamplerCube"
        assert target.type_name(Array(VEC3, 8), aliases) == "FixedArray<Vec3, 8>"
        assert target.type_name(Array(Array(FLOAT, 3)), aliases) == "FixedArray<number, 3>[]"
        assert target.type_name(Struct("Light"), aliases) == "Light"

        assert aliases["IVec4"] == "[number, number, number, number]"
        assert aliases["Mat2x3"] == "[number, number, number, number, number, number]"
        assert aliases["USamplerCube"] == "number"

    def test_unused_aliases_are_not_emitted(self):
        """Test that only the aliases a binding uses are declared."""
        contents = TypeScriptTarget().emit(shader(uniforms=(uniform("t", FLOAT),))).contents

        assert "export type" not in contents
        assert "  t: number;" in contents

    def test_source_is_escaped(self):
        """Test template literal escaping of the embedded source."""
        source = "// `quoted` ${x} \\n\nvoid main() {}\n"
        interface = shader(sources=(ShaderSource(ShaderStage.FRAGMENT, source),))

        contents = TypeScriptTarget(embed_source=True).emit(interface).contents

        assert "  source: `// \\`quoted\\` \\${x} \\\\n\nvoid main() {}\n`," in contents

    def test_source_can_be_omitted(self):
        """Test that no source is embedded when disabled."""
        interface = shader(sources=(ShaderSource(ShaderStage.FRAGMENT, "void main() {}"),))

        contents = TypeScriptTarget(embed_source=False).emit(interface).contents

        assert "source" not in contents

    def test_program_sections(self):
        """Test the attribute and varying sections of a program binding."""
        program = ShaderInterface(
            source_file="quad",
            stage=ShaderStage.PROGRAM,
            inputs=(Declaration(Qualifier.INPUT, VEC3, "position"),),
            varyings=(Declaration(Qualifier.OUTPUT, Vector(ScalarKind.FLOAT, 2), "vUv"),),
            sources=(
                ShaderSource(ShaderStage.VERTEX, "v"),
                ShaderSource(ShaderStage.FRAGMENT, "f"),
            ),
        )

        artifact = TypeScriptTarget().emit(program)

        assert artifact.relative_output_path == "quad.ts"
        assert "export interface QuadAttributes {\n  position: Vec3;\n}" in artifact.contents
        assert "export interface QuadVaryings {\n  vUv: Vec2;\n}" in artifact.contents
        assert "  vertexSource: `v`,\n  fragmentSource: `f`," in artifact.contents
        assert "from quad (vertex and fragment program)" in artifact.contents

    def test_escape_template(self):
        """Test the escaping helper."""
        assert escape_template("a`b${c}\\") == "a\\`b\\${c}\\\\"


class TestRustTarget:
    """Tests for the Rust target."""

    def test_type_names(self):
        """Test the mapping of every type variant."""
        target = RustTarget()

        assert target.type_name(Scalar(ScalarKind.DOUBLE)) == "f64"
        assert target.type_name(Vector(ScalarKind.BOOL, 3)) == "[bool; 3]"
        assert target.type_name(Matrix(3, 4)) == "[[f32; 4]; 3]"
        assert target.type_name(Sampler("2D")) == "i32"
        assert target.type_name(Array(Array(FLOAT, 2))) == "Vec<[f32; 2]>"
        assert target.type_name(Struct("Light")) == "Light"

    @pytest.mark.parametrize(
        "name,expected",
        [("color", "color"), ("type", "r#type"), ("match", "r#match"), ("self", "self_")],
    )
    def test_identifier(self, name, expected):
        """Test that Rust keywords are escaped."""
        assert identifier(name) == expected

    def test_raw_string_hashes(self):
        """Test that the raw string delimiter outlasts any quote in the text."""
        assert raw_string("plain") == 'r#"plain"#'
        assert raw_string('say "hi"#') == 'r##"say "hi"#"##'

    @pytest.mark.parametrize(
        "value,glsl_type,expected",
        [
            ("2", FLOAT, "2.0"),
            ("2.", FLOAT, "2.0"),
            ("-.5", FLOAT, "-0.5"),
            ("0x10", FLOAT, "16.0"),
            ("3", Scalar(ScalarKind.INT), "3"),
            ("1.5", Scalar(ScalarKind.INT), None),
            ("-1", Scalar(ScalarKind.UINT), None),
            ("true", Scalar(ScalarKind.BOOL), "true"),
            ("1", Scalar(ScalarKind.BOOL), None),
            ("1.0", VEC3, None),
        ],
    )
    def test_constant_literal(self, value, glsl_type, expected):
        """Test rendering of constant values."""
        assert constant_literal(value, glsl_type) == expected

    def test_struct_fields_use_raw_identifiers(self):
        """Test keyword field names inside a struct."""
        struct = StructDef("Item", (("type", FLOAT), ("ref", VEC3)))
        interface = shader(structs=(struct,))

        contents = RustTarget().emit(interface).contents

        assert "pub struct Item {\n    pub r#type: f32,\n    pub r#ref: [f32; 3],\n}" in contents


class TestEmitter:
    """Tests for the emit entry point."""

    def test_create_target(self):
        """Test the target registry."""
        assert isinstance(create_target(BindingLanguage.TYPESCRIPT), TypeScriptTarget)
        assert isinstance(create_target(BindingLanguage.RUST), RustTarget)
        assert create_target(BindingLanguage.RUST, embed_source=False).embed_source is False

    def test_extensions(self):
        """Test the output extension of each language."""
        interface = shader("dir/lit.frag")

        assert emit(interface, BindingLanguage.TYPESCRIPT).relative_output_path == "dir/lit.ts"
        assert emit(interface, BindingLanguage.RUST).relative_output_path == "dir/lit.rs"

    @pytest.mark.parametrize("language", list(BindingLanguage))
    def test_emit_is_idempotent(self, language):
        """Test that emitting the same interface twice is byte-identical."""
        interface = shader(
            uniforms=(uniform("light", Struct("Light")), uniform("t", FLOAT)),
            structs=(StructDef("Light", (("pos", VEC3),)),),
            sources=(ShaderSource(ShaderStage.FRAGMENT, "void main() {}\n"),),
        )
        emitter = Emitter(create_target(language))

        assert emitter.emit(interface) == emitter.emit(interface)
        assert emit(interface, language) == emitter.emit(interface)

    def test_structs_before_declarations(self):
        """Test that struct definitions precede the fields that use them."""
        interface = shader(
            uniforms=(uniform("mainLight", Struct("Light")),),
            structs=(StructDef("Light", (("pos", VEC3), ("intensity", FLOAT))),),
        )

        contents = emit(interface).contents

        assert contents.index("export interface Light {") < contents.index("mainLight: Light;")
