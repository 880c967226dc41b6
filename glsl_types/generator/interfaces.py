"""Core interfaces for the binding generator.

This module defines the capabilities the generator needs from its caller and
the language-agnostic abstractions shared by the binding targets.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from glsl_types.generator.models import GeneratedArtifact, ShaderInterface


class FileSystem(Protocol):
    """Read-only file access the generator needs from its caller."""

    def read_text(self, path: str) -> str:
        """Read a text file.

        Args:
            path: Path of the file

        Returns:
            The file contents
        """
        ...

    def exists(self, path: str) -> bool:
        """Check whether a regular file exists at `path`."""
        ...

    def canonicalize(self, path: str) -> str:
        """Return the absolute, normalized form of `path`."""
        ...


class BindingLanguage(Enum):
    """Supported binding languages."""

    TYPESCRIPT = "ts"
    RUST = "rs"


@dataclass
class LanguageConfig:
    """Configuration for a binding language."""

    name: str
    file_extension: str
    comment_prefix: str


@dataclass
class GeneratorConfig:
    """Options for one generation run.

    Attributes:
        language: Binding language to emit
        embed_source: Embed the include-expanded shader source in the binding
        strict_types: Fail the file on unknown types instead of dropping the
            offending declaration
    """

    language: BindingLanguage = BindingLanguage.TYPESCRIPT
    embed_source: bool = True
    strict_types: bool = True


class BindingTarget(ABC):
    """Abstract interface for binding languages."""

    def __init__(self, embed_source: bool = True):
        self.embed_source = embed_source

    @abstractmethod
    def get_config(self) -> LanguageConfig:
        """Get the language configuration.

        Returns:
            Language configuration
        """
        pass

    @abstractmethod
    def emit(self, interface: ShaderInterface) -> GeneratedArtifact:
        """Render a shader interface into a binding file.

        Args:
            interface: Resolved shader interface

        Returns:
            The generated artifact
        """
        pass
