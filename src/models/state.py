"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Optional, Type, TypeVar, Callable, TYPE_CHECKING
from dataclasses import dataclass, field

# Forward references for type hints - avoid circular import
if TYPE_CHECKING:
    from ..lib.templates import TemplateRegistry
    from .build import BuildResult


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the build pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the build progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir and the CLI options
        - env_check: inputAbs, templateAbs, htmlOutputdir, envOK
        - templates_load: registry
        - documents_render: buildResult, exitCode
        - watch_run: buildResult (last rebuild), exitCode
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the Markdown sources
        outputdir: Base output directory for rendered files
        verbosity: Logging verbosity level (1-3)
        inputPath: File or directory to render, relative to inputdir
        templateDir: Template directory, relative to inputdir
        ext: Output extension (defaults to settings)
        clean: Remove the output directory before building
        dryRun: Render without writing
        allowHtml: Pass raw HTML in Markdown through unescaped
        watch: Rebuild on changes
        once: With watch, build a single time and exit
        debounceMs: Watch debounce interval (defaults to settings)
        init: Scaffold preset name
        force: Overwrite existing files when scaffolding
        envOK: Environment validation passed
        inputAbs: Resolved input file or directory
        templateAbs: Resolved template directory
        htmlOutputdir: Resolved output directory
        registry: Loaded template registry
        buildResult: Result of the last build
        exitCode: Process exit status
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputPath: str = field(default=".")
    templateDir: Optional[str] = field(default=None)
    ext: Optional[str] = field(default=None)
    clean: bool = field(default=False)
    dryRun: bool = field(default=False)
    allowHtml: bool = field(default=False)
    watch: bool = field(default=False)
    once: bool = field(default=False)
    debounceMs: Optional[int] = field(default=None)
    init: Optional[str] = field(default=None)
    force: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    inputAbs: Path = field(default=Path("/"))
    templateAbs: Path = field(default=Path("/"))
    htmlOutputdir: Path = field(default=Path("/"))
    registry: Optional["TemplateRegistry"] = field(default=None)
    buildResult: Optional["BuildResult"] = field(default=None)
    exitCode: int = field(default=0)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments
            inputdir: Directory containing source files
            outputdir: Directory for rendered output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Namespace may carry plugin-framework extras; keep only our fields
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            templates_load,
            documents_render,
            results_report
        )
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
