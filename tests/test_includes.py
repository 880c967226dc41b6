"""Tests for include resolution."""

import pytest

from glsl_types.generator.errors import (
    CyclicIncludeWarning,
    GenerationError,
    IncludeError,
    TypeConflictError,
)
from glsl_types.generator.includes import IncludeResolver, resolve_includes

from conftest import INPUT_ROOT, MemoryFileSystem


def _names(unit) -> list[str]:
    return [d.name for d in unit.declarations]


class TestResolveIncludes:
    """Tests for merging included files."""

    def test_included_declarations_come_first(self):
        """Test merge order of an include."""
        fs = MemoryFileSystem(
            {
                "common.glsl": "struct Light { vec3 pos; };\nuniform float time;\n",
                "main.frag": '#include "common.glsl"\nuniform Light light;\n',
            }
        )

        unit = resolve_includes(f"{INPUT_ROOT}/main.frag", INPUT_ROOT, fs=fs)

        assert _names(unit) == ["time", "light"]
        assert [s.name for s in unit.structs] == ["Light"]
        assert unit.dependencies == {
            f"{INPUT_ROOT}/common.glsl",
            f"{INPUT_ROOT}/main.frag",
        }

    def test_relative_to_including_file(self):
        """Test that the including file's folder is searched first."""
        fs = MemoryFileSystem(
            {
                "effects/blur.frag": '#include "kernel.glsl"\n',
                "effects/kernel.glsl": "uniform float radius;\n",
                "kernel.glsl": "uniform float other;\n",
            }
        )

        unit = resolve_includes(f"{INPUT_ROOT}/effects/blur.frag", INPUT_ROOT, fs=fs)

        assert _names(unit) == ["radius"]

    def test_fallback_to_input_root(self):
        """Test the input root as second search location."""
        fs = MemoryFileSystem(
            {
                "effects/blur.frag": "#include <lib/common.glsl>\n",
                "lib/common.glsl": "uniform float time;\n",
            }
        )

        unit = resolve_includes(f"{INPUT_ROOT}/effects/blur.frag", INPUT_ROOT, fs=fs)

        assert _names(unit) == ["time"]

    def test_missing_include(self):
        """Test that an include that cannot be found is an error."""
        fs = MemoryFileSystem({"main.frag": '\n#include "missing.glsl"\n'})

        with pytest.raises(IncludeError, match="'missing.glsl' not found") as exc:
            resolve_includes(f"{INPUT_ROOT}/main.frag", INPUT_ROOT, fs=fs)
        assert exc.value.line == 2

    def test_cyclic_include_is_skipped(self):
        """Test that a cycle produces a warning instead of looping."""
        fs = MemoryFileSystem(
            {
                "a.glsl": '#include "b.glsl"\nuniform float a;\n',
                "b.glsl": '#include "a.glsl"\nuniform float b;\n',
            }
        )

        unit = resolve_includes(f"{INPUT_ROOT}/a.glsl", INPUT_ROOT, fs=fs)

        assert _names(unit) == ["b", "a"]
        assert len(unit.warnings) == 1
        assert isinstance(unit.warnings[0], CyclicIncludeWarning)
        assert unit.warnings[0].file_path == f"{INPUT_ROOT}/b.glsl"

    def test_self_include(self):
        """Test a file including itself."""
        fs = MemoryFileSystem({"a.glsl": '#include "a.glsl"\nuniform float a;\n'})

        unit = resolve_includes(f"{INPUT_ROOT}/a.glsl", INPUT_ROOT, fs=fs)

        assert _names(unit) == ["a"]
        assert isinstance(unit.warnings[0], CyclicIncludeWarning)

    def test_diamond_include_reads_once(self):
        """Test a file included along two paths."""
        fs = MemoryFileSystem(
            {
                "base.glsl": "struct Light { vec3 pos; };\n",
                "left.glsl": '#include "base.glsl"\n',
                "right.glsl": '#include "base.glsl"\n',
                "main.frag": '#include "left.glsl"\n#include "right.glsl"\n',
            }
        )

        unit = resolve_includes(f"{INPUT_ROOT}/main.frag", INPUT_ROOT, fs=fs)

        assert [s.name for s in unit.structs] == ["Light"]
        assert fs.reads.count(f"{INPUT_ROOT}/base.glsl") == 1

    def test_conflicting_struct_definitions(self):
        """Test the same struct name with different fields."""
        fs = MemoryFileSystem(
            {
                "a.glsl": "struct Light { vec3 pos; };\n",
                "main.frag": '#include "a.glsl"\nstruct Light { vec4 pos; };\n',
            }
        )

        with pytest.raises(TypeConflictError, match="Struct 'Light' is redefined"):
            resolve_includes(f"{INPUT_ROOT}/main.frag", INPUT_ROOT, fs=fs)

    def test_identical_struct_definitions(self):
        """Test that an identical redefinition is de-duplicated."""
        fs = MemoryFileSystem(
            {
                "a.glsl": "struct Light { vec3 pos; };\n",
                "main.frag": '#include "a.glsl"\nstruct Light {\n  vec3 pos;\n};\n',
            }
        )

        unit = resolve_includes(f"{INPUT_ROOT}/main.frag", INPUT_ROOT, fs=fs)

        assert len(unit.structs) == 1

    def test_unreadable_file(self):
        """Test a shader that disappeared before it could be read."""
        fs = MemoryFileSystem()

        with pytest.raises(GenerationError, match="Cannot read shader file"):
            resolve_includes(f"{INPUT_ROOT}/gone.frag", INPUT_ROOT, fs=fs)


class TestExpandSource:
    """Tests for the include-expanded shader source."""

    def test_inlines_includes(self):
        """Test that include lines are replaced by the file contents."""
        fs = MemoryFileSystem(
            {
                "common.glsl": "uniform float time;",
                "main.frag": '#version 330 core\n#include "common.glsl"\nvoid main() {}\n',
            }
        )
        resolver = IncludeResolver(INPUT_ROOT, fs)

        source = resolver.expand_source(f"{INPUT_ROOT}/main.frag")

        assert source == "#version 330 core\nuniform float time;\nvoid main() {}\n"

    def test_each_file_inlined_once(self):
        """Test repeated and cyclic includes in the expanded source."""
        fs = MemoryFileSystem(
            {
                "a.glsl": '#include "main.frag"\nfloat a;\n',
                "main.frag": '#include "a.glsl"\n#include "a.glsl"\nvoid main() {}\n',
            }
        )
        resolver = IncludeResolver(INPUT_ROOT, fs)

        source = resolver.expand_source(f"{INPUT_ROOT}/main.frag")

        assert source == "float a;\nvoid main() {}\n"
