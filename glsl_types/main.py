"""Command line interface for glsl-types.

Generates typed bindings for the uniforms, inputs and outputs of GLSL
shaders, either for a single file or continuously for a watched folder.
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import typer
from loguru import logger

from glsl_types.generator.interfaces import BindingLanguage, GeneratorConfig
from glsl_types.session import GenerationSession
from glsl_types.watcher import DEFAULT_DELAY, watch

DEFAULT_INPUT_FOLDER = Path("shaders")
DEFAULT_OUTPUT_FOLDER = Path("output")

F = TypeVar("F", bound=Callable[..., Any])


def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="glsl-types",
    help="Generate typed bindings for the interface of GLSL shaders.",
    add_completion=False,
)


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr, with debug records when verbose."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="<level>{level: <8}</level> {message}",
    )


def _prepare_input(input_dir: Path) -> None:
    if input_dir.is_dir():
        return
    if input_dir == DEFAULT_INPUT_FOLDER:
        input_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created input folder {input_dir}")
        return
    logger.error(f"Input folder does not exist: {input_dir}")
    raise typer.Exit(1)


@typed_command(app.command())
def main(
    input_dir: Path = typer.Option(
        DEFAULT_INPUT_FOLDER,
        "--input",
        "-i",
        envvar="GLSL_TYPES_INPUT",
        help="Folder with GLSL shaders",
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_FOLDER,
        "--output",
        "-o",
        envvar="GLSL_TYPES_OUTPUT",
        help="Folder for the generated bindings",
    ),
    file: Path | None = typer.Option(
        None, "--file", "-f", help="Shader file to generate bindings for"
    ),
    watch_mode: bool = typer.Option(
        False, "--watch", "-w", help="Watch the input folder and regenerate on changes"
    ),
    language: BindingLanguage = typer.Option(
        BindingLanguage.TYPESCRIPT,
        "--language",
        "-l",
        envvar="GLSL_TYPES_LANGUAGE",
        case_sensitive=False,
        help="Binding language (ts, rs)",
    ),
    program: bool = typer.Option(
        False,
        "--program",
        "-p",
        help="Link .vert/.frag siblings into a single program binding",
    ),
    no_source: bool = typer.Option(
        False, "--no-source", help="Do not embed the shader source in the binding"
    ),
    lenient: bool = typer.Option(
        False, "--lenient", help="Drop declarations of unknown types instead of failing"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Generate typed bindings for the interface of GLSL shaders.

    Bindings are generated for one shader file, or for every shader in watch mode.

    Example: glsl-types --input shaders --output src/generated --file shaders/blur.frag
    """
    configure_logging(verbose)

    config = GeneratorConfig(
        language=language, embed_source=not no_source, strict_types=not lenient
    )

    if watch_mode:
        _prepare_input(input_dir)
        session = GenerationSession(input_dir, output_dir, config, program=program)
        watch(session, DEFAULT_DELAY)
        return

    if file is None:
        logger.error("No shader file given: pass --file <path> or use --watch")
        raise typer.Exit(1)
    if not file.is_file():
        logger.error(f"Shader file does not exist: {file}")
        raise typer.Exit(1)

    session = GenerationSession(input_dir, output_dir, config, program=program)
    job = session.job_for(file)
    if job is None:
        logger.error(f"No binding can be generated for {file}")
        raise typer.Exit(1)
    result = session.run_job(job)
    if not result.ok:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
