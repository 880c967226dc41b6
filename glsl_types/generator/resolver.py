"""
Type resolution for parsed declarations.

Maps GLSL type tokens onto the normalized type model, wrapping array
dimensions and looking up user-defined structs.
"""

from collections.abc import Iterable, Mapping

from glsl_types.generator.errors import DroppedDeclarationWarning, UnknownTypeError
from glsl_types.generator.lexer import Token
from glsl_types.generator.models import (
    Declaration,
    ParsedDeclaration,
    ParsedStruct,
    StructDef,
    TypeSpec,
)
from glsl_types.generator.types import BUILTIN_TYPES, Array, GLSLType, Struct


def resolve_type(
    type_token: Token,
    known_structs: Mapping[str, StructDef],
    file_path: str | None = None,
) -> GLSLType:
    """Map a type token to a GLSL type.

    Args:
        type_token: Token naming the type
        known_structs: Structs visible at this point, by name
        file_path: File the token came from, used in the error message

    Returns:
        The resolved type

    Raises:
        UnknownTypeError: If the name is neither builtin nor a known struct
    """
    builtin = BUILTIN_TYPES.get(type_token.text)
    if builtin is not None:
        return builtin
    if type_token.text in known_structs:
        return Struct(type_token.text)
    raise UnknownTypeError(
        type_token.text,
        file_path=file_path,
        line=type_token.line,
        column=type_token.column,
    )


def resolve_spec(
    spec: TypeSpec, known_structs: Mapping[str, StructDef], file_path: str | None = None
) -> GLSLType:
    """Resolve a type spec, wrapping its array dimensions outermost first."""
    resolved = resolve_type(spec.token, known_structs, file_path)
    for length in reversed(spec.dims):
        resolved = Array(resolved, length)
    return resolved


def resolve_struct(
    struct: ParsedStruct, known_structs: Mapping[str, StructDef]
) -> StructDef:
    """Resolve the field types of a struct against previously declared structs."""
    file_path = struct.location.file_path
    fields = tuple(
        (f.name, resolve_spec(f.spec, known_structs, file_path)) for f in struct.fields
    )
    return StructDef(struct.name, fields, struct.location)


def resolve_declaration(
    declaration: ParsedDeclaration, known_structs: Mapping[str, StructDef]
) -> Declaration:
    return Declaration(
        qualifier=declaration.qualifier,
        type=resolve_spec(
            declaration.spec, known_structs, declaration.location.file_path
        ),
        name=declaration.name,
        location=declaration.location,
        keyword=declaration.keyword,
        initializer=declaration.initializer,
    )


def resolve_all(
    structs: Iterable[ParsedStruct],
    declarations: Iterable[ParsedDeclaration],
    *,
    strict: bool = True,
) -> tuple[list[StructDef], list[Declaration], list[DroppedDeclarationWarning]]:
    """Resolve merged structs and declarations of one shader.

    Structs are resolved in order, each seeing the structs before it. In
    strict mode an unknown type aborts resolution; otherwise the offending
    struct or declaration is dropped with a warning.

    Args:
        structs: Struct definitions in merged order
        declarations: Interface declarations in merged order
        strict: Raise on unknown types instead of dropping

    Returns:
        Tuple of (resolved structs, resolved declarations, drop warnings)

    Raises:
        UnknownTypeError: In strict mode, for the first unknown type
    """
    known: dict[str, StructDef] = {}
    warnings: list[DroppedDeclarationWarning] = []

    for struct in structs:
        try:
            known[struct.name] = resolve_struct(struct, known)
        except UnknownTypeError as e:
            if strict:
                raise
            warnings.append(
                DroppedDeclarationWarning(
                    f"Dropped struct '{struct.name}': {e.message}",
                    file_path=struct.location.file_path,
                    line=e.line,
                )
            )

    resolved: list[Declaration] = []
    for declaration in declarations:
        try:
            resolved.append(resolve_declaration(declaration, known))
        except UnknownTypeError as e:
            if strict:
                raise
            warnings.append(
                DroppedDeclarationWarning(
                    f"Dropped declaration '{declaration.name}': {e.message}",
                    file_path=declaration.location.file_path,
                    line=e.line,
                )
            )

    return list(known.values()), resolved, warnings
