"""
Top-level generation entry points.

Each call runs one file (or one vertex/fragment pair) through the stages
Lexing, Parsing, IncludeResolution, TypeResolution, Building and Emitting.
Any GenerationError stops the run and is returned in the result; the
caller decides how to report it.
"""

import os
from dataclasses import dataclass

from glsl_types.generator.builder import build
from glsl_types.generator.emitter import emit
from glsl_types.generator.errors import GenerationError, GenerationWarning
from glsl_types.generator.includes import IncludeResolver
from glsl_types.generator.interfaces import FileSystem, GeneratorConfig
from glsl_types.generator.lexer import tokenize
from glsl_types.generator.linker import link_program
from glsl_types.generator.models import (
    GenerationResult,
    GenerationStage,
    ShaderInterface,
    ShaderSource,
    ShaderStage,
)
from glsl_types.generator.parser import parse_declarations
from glsl_types.generator.resolver import resolve_all


def relative_source(path: str, input_root: str) -> str:
    """Path of a shader relative to the input root, in POSIX form.

    Files outside the input root are placed at the top of the output tree.
    """
    relative = os.path.relpath(path, input_root)
    if relative == os.pardir or relative.startswith(os.pardir + os.sep):
        relative = os.path.basename(path)
    return relative.replace(os.sep, "/")


def _unique(warnings: list[GenerationWarning]) -> list[GenerationWarning]:
    # A file reached along several include paths reports its warnings once
    return list(dict.fromkeys(warnings))


@dataclass
class _Analysis:
    interface: ShaderInterface
    warnings: list[GenerationWarning]
    dependencies: set[str]


def _analyze(
    path: str,
    input_root: str,
    fs: FileSystem,
    config: GeneratorConfig,
    result: GenerationResult,
) -> _Analysis:
    """Run one shader through every stage up to and including Building."""
    resolver = IncludeResolver(input_root, fs)
    stage = ShaderStage.from_path(path)

    result.stage = GenerationStage.LEXING
    tokens = list(tokenize(resolver.read(path)))

    result.stage = GenerationStage.PARSING
    unit = parse_declarations(tokens, path)

    result.stage = GenerationStage.INCLUDE_RESOLUTION
    resolved = resolver.resolve(path, unit)
    result.dependencies |= resolved.dependencies

    result.stage = GenerationStage.TYPE_RESOLUTION
    structs, declarations, dropped = resolve_all(
        resolved.structs, resolved.declarations, strict=config.strict_types
    )

    result.stage = GenerationStage.BUILDING
    sources = []
    if config.embed_source:
        sources.append(ShaderSource(stage, resolver.expand_source(path)))
    interface = build(
        declarations,
        structs,
        source_file=relative_source(path, input_root),
        stage=stage,
        sources=sources,
        local_structs=[s.name for s in unit.structs],
    )
    return _Analysis(interface, [*resolved.warnings, *dropped], resolved.dependencies)


def _finish(
    result: GenerationResult,
    interface: ShaderInterface,
    output_root: str,
    config: GeneratorConfig,
) -> None:
    result.stage = GenerationStage.EMITTING
    result.artifact = emit(interface, config.language, config.embed_source)
    result.output_path = os.path.join(
        output_root, *result.artifact.relative_output_path.split("/")
    )
    result.stage = GenerationStage.DONE


def _fail(result: GenerationResult, error: GenerationError, path: str) -> None:
    result.failed_stage = result.stage
    result.stage = GenerationStage.ERROR
    result.error = error.with_file(path)
    result.artifact = None


def _default_fs() -> FileSystem:
    from glsl_types.filesystem import LocalFileSystem

    return LocalFileSystem()


def generate(
    file_path: str | os.PathLike,
    input_root: str | os.PathLike,
    output_root: str | os.PathLike,
    *,
    fs: FileSystem | None = None,
    config: GeneratorConfig | None = None,
) -> GenerationResult:
    """Generate the binding of one shader file.

    Args:
        file_path: Shader file to process
        input_root: Root of the shader tree; output paths mirror the file's
            position below it and it is the fallback include search path
        output_root: Root of the generated tree
        fs: File access capability, the local file system by default
        config: Generation options

    Returns:
        A result holding either the artifact or the error, plus warnings and
        the files the shader depends on. Nothing is written.
    """
    fs = fs or _default_fs()
    config = config or GeneratorConfig()
    result = GenerationResult(file_path=os.fspath(file_path))
    path = os.fspath(file_path)

    try:
        path = fs.canonicalize(path)
        root = fs.canonicalize(os.fspath(input_root))
        analysis = _analyze(path, root, fs, config, result)
        result.warnings = _unique(analysis.warnings)
        _finish(result, analysis.interface, os.fspath(output_root), config)
    except GenerationError as e:
        _fail(result, e, path)
    return result


def generate_program(
    vertex_path: str | os.PathLike,
    fragment_path: str | os.PathLike,
    input_root: str | os.PathLike,
    output_root: str | os.PathLike,
    *,
    fs: FileSystem | None = None,
    config: GeneratorConfig | None = None,
) -> GenerationResult:
    """Generate one binding for a linked vertex/fragment shader pair.

    Both shaders are analyzed independently, then linked during the
    Building stage. The artifact is named after the shared file stem.

    Returns:
        A result for the pair, keyed by the vertex shader path
    """
    fs = fs or _default_fs()
    config = config or GeneratorConfig()
    result = GenerationResult(file_path=os.fspath(vertex_path))
    path = os.fspath(vertex_path)

    try:
        root = fs.canonicalize(os.fspath(input_root))
        path = fs.canonicalize(path)
        vertex = _analyze(path, root, fs, config, result)
        path = fs.canonicalize(os.fspath(fragment_path))
        fragment = _analyze(path, root, fs, config, result)
        result.warnings = _unique([*vertex.warnings, *fragment.warnings])
        interface = link_program(vertex.interface, fragment.interface)
        _finish(result, interface, os.fspath(output_root), config)
    except GenerationError as e:
        _fail(result, e, path)
    return result
