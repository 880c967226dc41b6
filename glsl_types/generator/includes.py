"""
Include resolution for GLSL shaders.

Included files are lexed and parsed independently and their structs and
declarations are merged ahead of the including file's own, so a shader can
use structs defined in a shared chunk.
"""

import os
from dataclasses import dataclass, field

from glsl_types.generator.errors import (
    CyclicIncludeWarning,
    GenerationError,
    GenerationWarning,
    IncludeError,
    TypeConflictError,
)
from glsl_types.generator.interfaces import FileSystem
from glsl_types.generator.lexer import tokenize
from glsl_types.generator.models import (
    ParsedDeclaration,
    ParsedStruct,
    ParsedUnit,
    SourceLocation,
)
from glsl_types.generator.parser import parse_declarations, parse_include


@dataclass
class ResolvedUnit:
    """Merged view of a shader and everything it includes.

    Attributes:
        declarations: Declarations of included files first, then the file's own
        structs: Struct definitions, de-duplicated by name
        warnings: Parse and include warnings of every file involved
        dependencies: Canonical paths of every file read
    """

    declarations: list[ParsedDeclaration] = field(default_factory=list)
    structs: list[ParsedStruct] = field(default_factory=list)
    warnings: list[GenerationWarning] = field(default_factory=list)
    dependencies: set[str] = field(default_factory=set)

    def add_struct(self, struct: ParsedStruct) -> None:
        for existing in self.structs:
            if existing.name != struct.name:
                continue
            if existing.signature != struct.signature:
                raise TypeConflictError(
                    f"Struct '{struct.name}' is redefined with different fields "
                    f"(first defined at {existing.location})",
                    file_path=struct.location.file_path,
                    line=struct.location.line,
                )
            return
        self.structs.append(struct)


class IncludeResolver:
    """Locates, loads and merges included shader files.

    One resolver serves a single generation call; it caches file contents and
    parse results so a file included along several paths is read once.
    """

    def __init__(self, input_root: str, fs: FileSystem):
        self.input_root = input_root
        self.fs = fs
        self._texts: dict[str, str] = {}
        self._units: dict[str, ParsedUnit] = {}

    def read(self, path: str) -> str:
        if path not in self._texts:
            try:
                self._texts[path] = self.fs.read_text(path)
            except OSError as e:
                raise GenerationError(
                    f"Cannot read shader file: {e.strerror or e}", file_path=path
                ) from e
            except UnicodeDecodeError as e:
                raise GenerationError(
                    f"Cannot decode shader file: {e.reason} at byte {e.start}",
                    file_path=path,
                ) from e
        return self._texts[path]

    def load(self, path: str) -> ParsedUnit:
        """Lex and parse one file."""
        if path not in self._units:
            self._units[path] = parse_declarations(tokenize(self.read(path)), path)
        return self._units[path]

    def locate(
        self,
        include: str,
        including_file: str,
        location: SourceLocation | None = None,
    ) -> str:
        """Find an included file.

        The path is tried relative to the including file's directory first,
        then relative to the input root.

        Raises:
            IncludeError: If the file exists in neither place
        """
        candidates = [
            os.path.join(os.path.dirname(including_file), include),
            os.path.join(self.input_root, include),
        ]
        for candidate in candidates:
            if self.fs.exists(candidate):
                return self.fs.canonicalize(candidate)
        raise IncludeError(
            f"Included file '{include}' not found",
            file_path=including_file,
            line=location.line if location else None,
        )

    def resolve(
        self,
        path: str,
        unit: ParsedUnit | None = None,
        visited: set[str] | None = None,
    ) -> ResolvedUnit:
        """Merge a file with its includes.

        Args:
            path: Canonical path of the file
            unit: Already parsed contents of `path`, loaded if omitted
            visited: Canonical paths on the current include chain

        Returns:
            The merged unit

        Raises:
            IncludeError: If an included file cannot be found
            TypeConflictError: If two files define a struct differently
            ParseError: If an included file is malformed
        """
        merged = ResolvedUnit()
        chain = set(visited or ())
        chain.add(path)
        self._merge(path, unit if unit is not None else self.load(path), chain, merged)
        return merged

    def _merge(
        self, path: str, unit: ParsedUnit, chain: set[str], merged: ResolvedUnit
    ) -> None:
        merged.dependencies.add(path)
        for include, location in unit.includes:
            target = self.locate(include, path, location)
            if target in chain:
                merged.warnings.append(
                    CyclicIncludeWarning(
                        f"Skipped cyclic include of '{include}'",
                        file_path=path,
                        line=location.line,
                    )
                )
                continue
            chain.add(target)
            try:
                self._merge(target, self.load(target), chain, merged)
            finally:
                chain.discard(target)

        for struct in unit.structs:
            merged.add_struct(struct)
        merged.declarations.extend(unit.declarations)
        merged.warnings.extend(unit.warnings)

    def expand_source(self, path: str) -> str:
        """Return the source of `path` with every include inlined.

        Each file is inlined at most once; later includes of the same file
        and cyclic includes are dropped.
        """
        return self._expand(path, {path})

    def _expand(self, path: str, emitted: set[str]) -> str:
        lines = []
        for line in self.read(path).splitlines(keepends=True):
            include = parse_include(line) if line.lstrip().startswith("#") else None
            if include is None:
                lines.append(line)
                continue
            target = self.locate(include, path)
            if target in emitted:
                continue
            emitted.add(target)
            text = self._expand(target, emitted)
            if text and not text.endswith("\n"):
                text += "\n"
            lines.append(text)
        return "".join(lines)


def resolve_includes(
    file_path: str,
    input_root: str,
    visited: set[str] | None = None,
    *,
    fs: FileSystem,
) -> ResolvedUnit:
    """Load a shader and merge the declarations and structs of its includes.

    Args:
        file_path: Shader file to resolve
        input_root: Root directory used as fallback include search path
        visited: Canonical paths already on the include chain
        fs: File access capability

    Returns:
        The merged unit
    """
    resolver = IncludeResolver(input_root, fs)
    return resolver.resolve(fs.canonicalize(file_path), visited=visited)
