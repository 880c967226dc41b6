"""
Binding model builder.

Aggregates resolved declarations of one shader into a ShaderInterface.
"""

from collections.abc import Iterable, Sequence

from glsl_types.generator.errors import TypeConflictError
from glsl_types.generator.models import (
    Declaration,
    Qualifier,
    ShaderInterface,
    ShaderSource,
    ShaderStage,
    StructDef,
)
from glsl_types.generator.types import struct_references


def _classify(declaration: Declaration, stage: ShaderStage) -> Qualifier:
    # Legacy `varying` is an input on the fragment side
    if declaration.keyword == "varying" and stage == ShaderStage.FRAGMENT:
        return Qualifier.INPUT
    return declaration.qualifier


def _describe(declaration: Declaration) -> str:
    if declaration.location is None:
        return f"'{declaration.type}'"
    return f"'{declaration.type}' at {declaration.location}"


def merge_declarations(
    existing: list[Declaration], declaration: Declaration, kind: str
) -> None:
    """Append a declaration unless an identical one is already present.

    Raises:
        TypeConflictError: If a declaration of the same name has another type,
            or a constant of the same name has another initializer
    """
    for other in existing:
        if other.name != declaration.name:
            continue
        if other.type != declaration.type:
            location = declaration.location
            raise TypeConflictError(
                f"{kind.capitalize()} '{declaration.name}' is declared as "
                f"'{declaration.type}' but was already declared as {_describe(other)}",
                file_path=location.file_path if location else None,
                line=location.line if location else None,
            )
        if (
            declaration.qualifier == Qualifier.CONST
            and other.initializer != declaration.initializer
        ):
            location = declaration.location
            raise TypeConflictError(
                f"{kind.capitalize()} '{declaration.name}' is initialized with "
                f"'{declaration.initializer}' but was already initialized with "
                f"'{other.initializer}'",
                file_path=location.file_path if location else None,
                line=location.line if location else None,
            )
        return
    existing.append(declaration)


def used_structs(
    structs: Sequence[StructDef],
    declarations: Iterable[Declaration],
    always: Iterable[str] = (),
) -> list[StructDef]:
    """Select the structs reachable from the given declarations.

    Args:
        structs: All known structs in declaration order
        declarations: Declarations whose types are followed
        always: Struct names to keep even if unreferenced

    Returns:
        The selected structs, in their original order
    """
    by_name = {s.name: s for s in structs}
    keep: set[str] = set()
    pending = [name for d in declarations for name in struct_references(d.type)]
    pending.extend(always)
    while pending:
        name = pending.pop()
        if name in keep or name not in by_name:
            continue
        keep.add(name)
        for _, field_type in by_name[name].fields:
            pending.extend(struct_references(field_type))
    return [s for s in structs if s.name in keep]


def build(
    declarations: Iterable[Declaration],
    structs: Sequence[StructDef],
    *,
    source_file: str,
    stage: ShaderStage = ShaderStage.GENERIC,
    sources: Sequence[ShaderSource] = (),
    local_structs: Iterable[str] = (),
) -> ShaderInterface:
    """Build the interface descriptor of one shader.

    Declarations are partitioned by qualifier, keeping source order within
    each partition. Exact duplicates are dropped silently.

    Args:
        declarations: Resolved declarations, included files first
        structs: Resolved structs
        source_file: Shader path relative to the input root
        stage: Shader stage
        sources: Shader sources to embed
        local_structs: Names of structs declared in the shader itself, kept
            even when no declaration uses them

    Returns:
        The shader interface

    Raises:
        TypeConflictError: If one name is declared with two different types
            under the same qualifier
    """
    partitions: dict[Qualifier, list[Declaration]] = {q: [] for q in Qualifier}
    for declaration in declarations:
        qualifier = _classify(declaration, stage)
        if qualifier != declaration.qualifier:
            declaration = Declaration(
                qualifier=qualifier,
                type=declaration.type,
                name=declaration.name,
                location=declaration.location,
                keyword=declaration.keyword,
                initializer=declaration.initializer,
            )
        merge_declarations(
            partitions[qualifier], declaration, qualifier.name.lower()
        )

    all_declarations = [d for part in partitions.values() for d in part]
    return ShaderInterface(
        source_file=source_file,
        stage=stage,
        uniforms=tuple(partitions[Qualifier.UNIFORM]),
        inputs=tuple(partitions[Qualifier.INPUT]),
        outputs=tuple(partitions[Qualifier.OUTPUT]),
        constants=tuple(partitions[Qualifier.CONST]),
        structs=tuple(used_structs(structs, all_declarations, local_structs)),
        sources=tuple(sources),
    )
