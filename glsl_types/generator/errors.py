"""
Exceptions and warnings for the GLSL binding generator.

Errors abort the generation of the current file only. Warnings are collected
alongside a successful result and it is up to the caller to report them.
"""

import os
from dataclasses import dataclass


def _format_location(file_path: str | None, line: int | None) -> str:
    location_info = ""
    if file_path:
        location_info = f" in {os.path.basename(file_path)}"
        if line:
            location_info += f" at line {line}"
    elif line:
        location_info = f" at line {line}"
    return location_info


class GenerationError(Exception):
    """Exception raised when bindings cannot be generated for a shader file.

    The class keeps the source location of the problem so the CLI can report
    the file path and line next to the message.

    Examples:
        >>> raise GenerationError("Unexpected token", file_path="a.frag", line=3)
        GenerationError: Unexpected token in a.frag at line 3
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ):
        """Initialize the exception with a message and optional location.

        Args:
            message: The error message
            file_path: Shader file the error originated in
            line: 1-based line number
            column: 1-based column number
        """
        self.message = message
        self.file_path = file_path
        self.line = line
        self.column = column
        super().__init__(f"{message}{_format_location(file_path, line)}")

    def with_file(self, file_path: str) -> "GenerationError":
        """Attach a file path if the error does not carry one yet."""
        if self.file_path is None:
            self.file_path = file_path
            self.args = (f"{self.message}{_format_location(file_path, self.line)}",)
        return self


class ParseError(GenerationError):
    """Malformed declaration statement."""


class UnknownTypeError(GenerationError):
    """Type name is neither a builtin GLSL type nor a known struct."""

    def __init__(self, type_name: str, **kwargs):
        self.type_name = type_name
        super().__init__(f"Unknown type '{type_name}'", **kwargs)


class TypeConflictError(GenerationError):
    """Same name resolved to two different types, or a struct was redefined."""


class IncludeError(GenerationError):
    """An included file could not be located."""


class LinkError(GenerationError):
    """Vertex and fragment interfaces of a program do not match."""


@dataclass(frozen=True)
class GenerationWarning:
    """Non-fatal diagnostic collected during generation."""

    message: str
    file_path: str | None = None
    line: int | None = None

    def __str__(self) -> str:
        return f"{self.message}{_format_location(self.file_path, self.line)}"


@dataclass(frozen=True)
class CyclicIncludeWarning(GenerationWarning):
    """An include already on the current chain was skipped."""


@dataclass(frozen=True)
class UnresolvedArrayLengthWarning(GenerationWarning):
    """Array length is not an integer literal; bound as a dynamic array."""


@dataclass(frozen=True)
class DroppedDeclarationWarning(GenerationWarning):
    """Declaration dropped because its type could not be resolved."""
