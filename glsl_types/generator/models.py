"""
Data models for the GLSL binding generator.

This module contains the dataclass definitions passed between the parser,
the include resolver, the type resolver, the builder and the binding targets.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import PurePath

from glsl_types.generator.errors import GenerationError, GenerationWarning
from glsl_types.generator.lexer import Token
from glsl_types.generator.types import Array, GLSLType

SHADER_EXTENSIONS = (".vert", ".frag", ".vs", ".fs", ".glsl")


class Qualifier(Enum):
    """Storage qualifier class of an interface declaration."""

    UNIFORM = auto()
    INPUT = auto()
    OUTPUT = auto()
    CONST = auto()

    @classmethod
    def from_keyword(cls, keyword: str) -> "Qualifier | None":
        return _QUALIFIER_KEYWORDS.get(keyword)


_QUALIFIER_KEYWORDS = {
    "uniform": Qualifier.UNIFORM,
    "in": Qualifier.INPUT,
    "attribute": Qualifier.INPUT,
    "out": Qualifier.OUTPUT,
    "varying": Qualifier.OUTPUT,
    "const": Qualifier.CONST,
}


class ShaderStage(Enum):
    """Pipeline stage of a shader file, derived from its extension."""

    VERTEX = auto()
    FRAGMENT = auto()
    GENERIC = auto()
    PROGRAM = auto()

    @classmethod
    def from_path(cls, path: str | PurePath) -> "ShaderStage":
        suffix = PurePath(path).suffix.lower()
        if suffix in (".vert", ".vs"):
            return cls.VERTEX
        if suffix in (".frag", ".fs"):
            return cls.FRAGMENT
        return cls.GENERIC


class GenerationStage(Enum):
    """States of the per-file generation state machine."""

    START = auto()
    LEXING = auto()
    PARSING = auto()
    INCLUDE_RESOLUTION = auto()
    TYPE_RESOLUTION = auto()
    BUILDING = auto()
    EMITTING = auto()
    DONE = auto()
    ERROR = auto()


@dataclass(frozen=True)
class SourceLocation:
    file_path: str | None
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file_path or '<source>'}:{self.line}:{self.column}"


# Parser output


@dataclass(frozen=True)
class TypeSpec:
    """Unresolved type of a declaration.

    Attributes:
        token: Token naming the base type
        dims: Array dimensions, outermost first; None for an unknown length
    """

    token: Token
    dims: tuple[int | None, ...] = ()

    @property
    def signature(self) -> tuple[str, tuple[int | None, ...]]:
        return self.token.text, self.dims


@dataclass(frozen=True)
class ParsedField:
    name: str
    spec: TypeSpec


@dataclass(frozen=True)
class ParsedStruct:
    name: str
    fields: tuple[ParsedField, ...]
    location: SourceLocation

    @property
    def signature(self) -> tuple:
        return tuple((f.name, f.spec.signature) for f in self.fields)


@dataclass(frozen=True)
class ParsedDeclaration:
    qualifier: Qualifier
    keyword: str
    spec: TypeSpec
    name: str
    location: SourceLocation
    initializer: str | None = None


@dataclass
class ParsedUnit:
    """Everything the parser recognized in one file.

    Attributes:
        declarations: Interface declarations in source order
        structs: Struct definitions in source order
        includes: Include paths, verbatim, with their source location
        warnings: Non-fatal diagnostics
    """

    declarations: list[ParsedDeclaration] = field(default_factory=list)
    structs: list[ParsedStruct] = field(default_factory=list)
    includes: list[tuple[str, SourceLocation]] = field(default_factory=list)
    warnings: list[GenerationWarning] = field(default_factory=list)


# Resolved model


@dataclass(frozen=True)
class StructDef:
    name: str
    fields: tuple[tuple[str, GLSLType], ...]
    location: SourceLocation | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Declaration:
    qualifier: Qualifier
    type: GLSLType
    name: str
    location: SourceLocation | None = field(default=None, compare=False)
    keyword: str = field(default="", compare=False)
    initializer: str | None = field(default=None, compare=False)

    @property
    def array_length(self) -> int | None:
        if isinstance(self.type, Array):
            return self.type.length
        return None


@dataclass(frozen=True)
class ShaderSource:
    """Include-expanded source text of one shader stage."""

    stage: ShaderStage
    text: str


@dataclass(frozen=True)
class ShaderInterface:
    """Resolved interface of one shader file, or of a linked program.

    Attributes:
        source_file: Path of the shader relative to the input root
        stage: Pipeline stage
        uniforms: Uniform declarations in source order
        inputs: Input declarations (attributes for a program)
        outputs: Output declarations
        constants: Const declarations
        varyings: Linked vertex-to-fragment declarations (programs only)
        structs: Struct definitions, in the order they were declared
        sources: Shader sources to embed in the binding
    """

    source_file: str
    stage: ShaderStage
    uniforms: tuple[Declaration, ...] = ()
    inputs: tuple[Declaration, ...] = ()
    outputs: tuple[Declaration, ...] = ()
    constants: tuple[Declaration, ...] = ()
    varyings: tuple[Declaration, ...] = ()
    structs: tuple[StructDef, ...] = ()
    sources: tuple[ShaderSource, ...] = ()


@dataclass(frozen=True)
class GeneratedArtifact:
    relative_output_path: str
    contents: str


@dataclass
class GenerationResult:
    """Outcome of generating bindings for one file.

    Attributes:
        file_path: Shader file that was processed
        stage: Final state, DONE or ERROR
        failed_stage: Stage that was running when `error` was raised
        artifact: Generated artifact, None on failure
        error: The error that aborted generation
        warnings: Non-fatal diagnostics
        dependencies: Canonical paths of every file read, the shader included
        output_path: Destination of the artifact under the output root
    """

    file_path: str
    stage: GenerationStage = GenerationStage.START
    failed_stage: GenerationStage | None = None
    artifact: GeneratedArtifact | None = None
    error: GenerationError | None = None
    warnings: list[GenerationWarning] = field(default_factory=list)
    dependencies: set[str] = field(default_factory=set)
    output_path: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.artifact is not None

    def unwrap(self) -> GeneratedArtifact:
        """Return the artifact or raise the error that prevented it."""
        if self.error is not None:
            raise self.error
        if self.artifact is None:
            raise GenerationError(
                f"Generation did not complete (stopped at {self.stage.name})",
                file_path=self.file_path,
            )
        return self.artifact
