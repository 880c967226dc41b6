"""GLSL type model.

Types are immutable and structurally comparable: two types are equal iff they
are the same variant with the same parameters.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class ScalarKind(Enum):
    """Basic component types."""

    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    DOUBLE = "double"


_VECTOR_PREFIX = {
    ScalarKind.BOOL: "b",
    ScalarKind.INT: "i",
    ScalarKind.UINT: "u",
    ScalarKind.FLOAT: "",
    ScalarKind.DOUBLE: "d",
}

_SAMPLER_PREFIX = {
    ScalarKind.INT: "i",
    ScalarKind.UINT: "u",
    ScalarKind.FLOAT: "",
}


@dataclass(frozen=True)
class Scalar:
    kind: ScalarKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class Vector:
    base: ScalarKind
    size: int

    def __str__(self) -> str:
        return f"{_VECTOR_PREFIX[self.base]}vec{self.size}"


@dataclass(frozen=True)
class Matrix:
    """Matrix with `columns` column vectors of `rows` components each."""

    columns: int
    rows: int
    base: ScalarKind = ScalarKind.FLOAT

    def __str__(self) -> str:
        prefix = "d" if self.base == ScalarKind.DOUBLE else ""
        if self.columns == self.rows:
            return f"{prefix}mat{self.columns}"
        return f"{prefix}mat{self.columns}x{self.rows}"


@dataclass(frozen=True)
class Sampler:
    """Opaque sampler type, e.g. kind "2D" for sampler2D."""

    kind: str
    base: ScalarKind = ScalarKind.FLOAT

    def __str__(self) -> str:
        return f"{_SAMPLER_PREFIX[self.base]}sampler{self.kind}"


@dataclass(frozen=True)
class Array:
    """Array type. A length of None means the length is not known statically."""

    element: "GLSLType"
    length: int | None = None

    @property
    def is_dynamic(self) -> bool:
        return self.length is None

    def __str__(self) -> str:
        dims: list[int | None] = []
        inner: GLSLType = self
        while isinstance(inner, Array):
            dims.append(inner.length)
            inner = inner.element
        suffix = "".join(f"[{'' if d is None else d}]" for d in dims)
        return f"{inner}{suffix}"


@dataclass(frozen=True)
class Struct:
    """Reference to a user-defined struct by name."""

    name: str

    def __str__(self) -> str:
        return self.name


GLSLType = Scalar | Vector | Matrix | Sampler | Array | Struct


def base_type(glsl_type: GLSLType) -> GLSLType:
    """Strip all array dimensions from a type."""
    while isinstance(glsl_type, Array):
        glsl_type = glsl_type.element
    return glsl_type


def struct_references(glsl_type: GLSLType) -> Iterator[str]:
    """Yield the struct names a type refers to (at most one)."""
    inner = base_type(glsl_type)
    if isinstance(inner, Struct):
        yield inner.name


_SAMPLER_KINDS = (
    "1D",
    "2D",
    "3D",
    "Cube",
    "2DRect",
    "1DArray",
    "2DArray",
    "CubeArray",
    "Buffer",
    "2DMS",
    "2DMSArray",
)

_SHADOW_SAMPLER_KINDS = (
    "1DShadow",
    "2DShadow",
    "CubeShadow",
    "2DRectShadow",
    "1DArrayShadow",
    "2DArrayShadow",
    "CubeArrayShadow",
)


def _build_builtin_types() -> dict[str, GLSLType]:
    table: dict[str, GLSLType] = {}

    for kind in ScalarKind:
        table[kind.value] = Scalar(kind)
        for size in (2, 3, 4):
            vector = Vector(kind, size)
            table[str(vector)] = vector

    for base in (ScalarKind.FLOAT, ScalarKind.DOUBLE):
        for columns in (2, 3, 4):
            for rows in (2, 3, 4):
                matrix = Matrix(columns, rows, base)
                table[str(matrix)] = matrix
                if columns == rows:
                    # matNxN is an alias of matN
                    prefix = "d" if base == ScalarKind.DOUBLE else ""
                    table[f"{prefix}mat{columns}x{rows}"] = matrix

    for base in _SAMPLER_PREFIX:
        for kind in _SAMPLER_KINDS:
            sampler = Sampler(kind, base)
            table[str(sampler)] = sampler
    for kind in _SHADOW_SAMPLER_KINDS:
        table[f"sampler{kind}"] = Sampler(kind)

    return table


# Fixed lookup table for every builtin type name a binding can use
BUILTIN_TYPES: dict[str, GLSLType] = _build_builtin_types()
