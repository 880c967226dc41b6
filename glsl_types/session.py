"""
Generation session shared by the single-file and watch modes.

A session runs generation jobs, writes their artifacts below the output
root, reports the outcome through a Reporter and remembers which shaders
depend on which files, so a change to an included chunk regenerates every
shader that includes it.
"""

import os
import time
from collections import defaultdict

from loguru import logger

from glsl_types.filesystem import LocalFileSystem, find_shaders, is_shader_file
from glsl_types.generator.interfaces import GeneratorConfig
from glsl_types.generator.models import GenerationResult, ShaderStage
from glsl_types.generator.pipeline import generate, generate_program, relative_source

# A job is one shader path, or the vertex and fragment paths of a program
Job = tuple[str, ...]

_PROGRAM_EXTENSIONS = {
    ShaderStage.VERTEX: (".vert", ".vs"),
    ShaderStage.FRAGMENT: (".frag", ".fs"),
}


class Reporter:
    """Reports generation outcomes through a loguru logger."""

    def __init__(self, log=None, input_root: str | os.PathLike = "."):
        self.log = (log or logger).bind(component="glsl-types")
        self.input_root = os.fspath(input_root)

    def _name(self, path: str) -> str:
        return relative_source(path, self.input_root)

    def generated(self, result: GenerationResult, elapsed: float, written: bool) -> None:
        name = self._name(result.file_path)
        if written:
            self.log.info(
                f"Types generated for {name} -> {result.output_path} "
                f"({elapsed * 1000:.1f} ms)"
            )
        else:
            self.log.debug(f"Types for {name} are up to date")
        for warning in result.warnings:
            self.log.warning(f"{name}: {warning}")

    def failed(self, result: GenerationResult) -> None:
        stage = result.failed_stage.name.lower() if result.failed_stage else "unknown"
        self.log.error(
            f"Failed to generate types for {self._name(result.file_path)}: "
            f"{result.error}"
        )
        self.log.debug(f"Generation stopped during {stage}")

    def missing_pair(self, path: str, missing: str) -> None:
        self.log.error(
            f"Missing shader file for {self._name(path)}: create {missing} "
            "so the vertex and fragment shaders can be linked"
        )


class GenerationSession:
    """Runs generation jobs for one input tree and writes their artifacts.

    Args:
        input_root: Root of the shader tree
        output_root: Root of the generated tree
        config: Generation options
        reporter: Outcome reporter
        fs: Local file system used for reading and writing
        program: Link `.vert`/`.frag` siblings into one binding instead of
            generating one binding per file
    """

    def __init__(
        self,
        input_root: str | os.PathLike,
        output_root: str | os.PathLike,
        config: GeneratorConfig | None = None,
        reporter: Reporter | None = None,
        fs: LocalFileSystem | None = None,
        program: bool = False,
    ):
        self.fs = fs or LocalFileSystem()
        self.input_root = self.fs.canonicalize(os.fspath(input_root))
        self.output_root = os.fspath(output_root)
        self.config = config or GeneratorConfig()
        self.reporter = reporter or Reporter(input_root=self.input_root)
        self.program = program
        self._dependencies: dict[Job, set[str]] = {}
        self._dependents: dict[str, set[Job]] = defaultdict(set)

    # Jobs

    def _sibling(self, path: str, stage: ShaderStage) -> str | None:
        stem = os.path.splitext(path)[0]
        for extension in _PROGRAM_EXTENSIONS[stage]:
            if self.fs.exists(stem + extension):
                return stem + extension
        return None

    def job_for(self, path: str | os.PathLike) -> Job | None:
        """The job that generates the binding of `path`, if any.

        In program mode only vertex and fragment shaders with an existing
        sibling form a job; a missing sibling is reported.
        """
        path = self.fs.canonicalize(os.fspath(path))
        if not is_shader_file(path) or not self.fs.exists(path):
            return None
        if not self.program:
            return (path,)
        stage = ShaderStage.from_path(path)
        if stage not in _PROGRAM_EXTENSIONS:
            return None
        vertex = self._sibling(path, ShaderStage.VERTEX)
        fragment = self._sibling(path, ShaderStage.FRAGMENT)
        if vertex is None or fragment is None:
            other = ShaderStage.VERTEX if fragment else ShaderStage.FRAGMENT
            missing = os.path.splitext(path)[0] + _PROGRAM_EXTENSIONS[other][0]
            self.reporter.missing_pair(path, os.path.basename(missing))
            return None
        return (vertex, fragment)

    def run_job(self, job: Job) -> GenerationResult:
        """Generate, write and report one job."""
        start = time.perf_counter()
        if len(job) == 1:
            result = generate(
                job[0], self.input_root, self.output_root, fs=self.fs, config=self.config
            )
        else:
            vertex, fragment = job
            result = generate_program(
                vertex,
                fragment,
                self.input_root,
                self.output_root,
                fs=self.fs,
                config=self.config,
            )
        self._track(job, result.dependencies, complete=result.ok)

        if result.ok:
            assert result.artifact is not None and result.output_path is not None
            written = self.fs.write_text(result.output_path, result.artifact.contents)
            self.reporter.generated(result, time.perf_counter() - start, written)
        else:
            self.reporter.failed(result)
        return result

    def run_all(self) -> list[GenerationResult]:
        """Generate the bindings of every shader below the input root."""
        jobs: list[Job] = []
        for path in find_shaders(self.input_root):
            if self.program and ShaderStage.from_path(path) == ShaderStage.FRAGMENT:
                # Pairs are discovered from their vertex shader
                if self._sibling(str(path), ShaderStage.VERTEX) is not None:
                    continue
            job = self.job_for(path)
            if job is not None and job not in jobs:
                jobs.append(job)
        return [self.run_job(job) for job in jobs]

    def handle_change(self, path: str | os.PathLike) -> list[GenerationResult]:
        """Regenerate everything affected by a change to `path`.

        That is the shader itself, if it still exists, and every shader that
        read `path` during its last generation.
        """
        path = self.fs.canonicalize(os.fspath(path))
        jobs = set(self._dependents.get(path, ()))
        own = self.job_for(path)
        if own is not None:
            jobs.add(own)

        results = []
        for job in sorted(jobs):
            if not all(self.fs.exists(p) for p in job):
                self.forget(job)
                continue
            results.append(self.run_job(job))
        return results

    # Dependency tracking

    def _track(self, job: Job, dependencies: set[str], complete: bool) -> None:
        known = dependencies | set(job)
        if not complete:
            # A failed run may stop before reading every include
            known |= self._dependencies.get(job, set())
        self.forget(job)
        self._dependencies[job] = known
        for dependency in known:
            self._dependents[dependency].add(job)

    def forget(self, job: Job) -> None:
        for dependency in self._dependencies.pop(job, set()):
            dependents = self._dependents.get(dependency)
            if dependents is not None:
                dependents.discard(job)
                if not dependents:
                    del self._dependents[dependency]

    def dependents(self, path: str | os.PathLike) -> set[Job]:
        """Jobs that read `path` during their last generation."""
        return set(self._dependents.get(self.fs.canonicalize(os.fspath(path)), ()))
