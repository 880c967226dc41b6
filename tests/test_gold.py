"""Gold file based tests for generated bindings.

Gold files are organized by binding language in tests/data/gold/:
    - typescript.yaml: TypeScript bindings
    - rust.yaml: Rust bindings

Test case format:
    - name: test_name
      file: shader.frag      # shader to generate, relative to the input root
      language: ts           # optional, default: ts
      embed_source: false    # optional, default: true
      files:                 # shader tree, relative to the input root
        shader.frag: |
          uniform vec3 color;
      path: shader.ts        # expected relative output path
      expected: |
        // DO NOT EDIT THIS FILE
        ...
"""

import difflib
from pathlib import Path

import pytest
import yaml

from glsl_types.generator import BindingLanguage, GeneratorConfig, generate

from conftest import INPUT_ROOT, OUTPUT_ROOT, MemoryFileSystem

GOLD_DIR = Path(__file__).parent / "data" / "gold"


def load_gold_file(filepath: Path) -> list[dict]:
    """Load test cases from a gold file."""
    with open(filepath) as f:
        return yaml.safe_load(f) or []


def load_all_gold_cases() -> list[tuple[str, dict, Path]]:
    """Load all test cases from all gold files."""
    cases = []
    for gold_file in sorted(GOLD_DIR.glob("*.yaml")):
        for case in load_gold_file(gold_file):
            cases.append((case["name"], case, gold_file))
    return cases


def generate_case(case: dict):
    """Generate the binding of a test case."""
    fs = MemoryFileSystem(case["files"])
    config = GeneratorConfig(
        language=BindingLanguage(case.get("language", "ts")),
        embed_source=case.get("embed_source", True),
    )
    return generate(f"{INPUT_ROOT}/{case['file']}", INPUT_ROOT, OUTPUT_ROOT, fs=fs, config=config)


class TestGoldBindings:
    """Test generated bindings against gold outputs."""

    @pytest.mark.parametrize(
        "name,case,gold_file",
        load_all_gold_cases(),
        ids=[name for name, _, _ in load_all_gold_cases()],
    )
    def test_binding(self, name, case, gold_file):
        """Test that the generated binding matches the gold output."""
        artifact = generate_case(case).unwrap()
        actual = artifact.contents.rstrip("\n")
        expected = case["expected"].rstrip("\n")

        assert artifact.relative_output_path == case["path"]
        if actual != expected:
            diff = difflib.unified_diff(
                expected.splitlines(keepends=True),
                actual.splitlines(keepends=True),
                fromfile="expected",
                tofile="actual",
            )
            pytest.fail(
                f"Output mismatch for '{name}' in {gold_file.name}:\n{''.join(diff)}"
            )
