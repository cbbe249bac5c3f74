#!/usr/bin/env python3
"""
mdxformer - Template-driven Markdown to HTML transformer

Renders Markdown documents to HTML, replacing headings, paragraphs and
fenced code blocks with user supplied HTML templates.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Markdown stays Markdown: no custom syntax in the source
    - Templates own the markup: one small file per element
    - Safe by default: values are escaped unless a template asks for raw code
    - Mirrored output: inputdir/a/b.md -> outputdir/a/b.html

Templates:
    <templateDir>/h2.template.html         <h2 id="{{ id }}">{{ h2 }}</h2>
    <templateDir>/p.template.html          <p class="lead">{{ p }}</p>
    <templateDir>/codeblock.template.html  <pre>{{{ code }}}</pre>

Usage:
    mdxformer inputdir/ outputdir/ [--inputPath articles] [--templateDir template]

Examples:
    # Render every .md file under inputdir
    mdxformer . dist/

    # Render one subtree with a custom template directory
    mdxformer . dist/ --inputPath articles --templateDir .mdxformer/templates

    # Rebuild on every change
    mdxformer . dist/ --watch -vv

    # Scaffold templates and a sample article into inputdir
    mdxformer . dist/ --init wordpress
"""

import asyncio
import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .lib import (
    LOG,
    state_connectToLogger,
    __version__,
    documents_build,
    documents_collect,
    dir_ensure,
    dir_remove,
    presets_list,
    scaffold_run,
    session_start,
    signals_connect,
    templates_load,
    WatchConfig,
)
from .config import appsettings
from .models import BuildResult, ProgramState, RenderOptions, TemplateError, pipeline


DISPLAY_TITLE = r"""
  +-----------------------------------+
  |  mdxformer                        |
  |  Template-driven Markdown to HTML |
  +-----------------------------------+
"""

# Define CLI arguments
parser = ArgumentParser(
    description="mdxformer - Template-driven Markdown to HTML transformer",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputPath",
    default=".",
    type=str,
    help="Markdown file or directory to render (relative to inputdir)",
)

parser.add_argument(
    "--templateDir",
    default=None,
    type=str,
    help=f"Template directory (relative to inputdir). Defaults to '{appsettings.template_dir}'",
)

parser.add_argument(
    "--ext",
    default=None,
    type=str,
    help=f"Output file extension. Defaults to '{appsettings.output_ext}'",
)

parser.add_argument(
    "--clean", action="store_true", help="Remove the output directory before building"
)

parser.add_argument(
    "--dryRun", action="store_true", help="Render but do not write any file"
)

parser.add_argument(
    "--allowHtml",
    action="store_true",
    help="Allow raw HTML in Markdown input (unsafe for untrusted input)",
)

parser.add_argument(
    "--watch", action="store_true", help="Watch inputs and templates, rebuild on change"
)

parser.add_argument(
    "--once", action="store_true", help="With --watch: build once and exit"
)

parser.add_argument(
    "--debounceMs",
    default=None,
    type=int,
    help=f"With --watch: quiet period before rebuilding. Defaults to {appsettings.debounce_ms}",
)

parser.add_argument(
    "--init",
    default=None,
    type=str,
    help=f"Scaffold a preset into inputdir and exit ({', '.join(presets_list())})",
)

parser.add_argument(
    "--force", action="store_true", help="With --init: overwrite existing files"
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def renderOptions_make(state: ProgramState) -> RenderOptions:
    """Render switches derived from the CLI state"""
    return RenderOptions(verbose=state.verbosity >= 2, allow_raw_html=state.allowHtml)


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all paths.

    Verifies that the input path and template directory exist, optionally
    cleans the output directory, then creates it.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputAbs: Resolved input file or directory
            - templateAbs: Resolved template directory
            - htmlOutputdir: Output directory
            - envOK: True if environment is valid

    Exits:
        1 if the input path or template directory is missing
    """
    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputdir is None or state.outputdir is None:
        print("Error: inputdir and outputdir are required", file=sys.stderr)
        state.envOK = False
        sys.exit(1)
    inputdir = Path(state.inputdir).resolve()

    state.inputAbs = inputdir / state.inputPath
    if not state.inputAbs.exists():
        print(f"Error: input path not found: {state.inputAbs}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)
    LOG(f"Input: {state.inputAbs}", level=2)

    state.templateAbs = inputdir / (state.templateDir or appsettings.template_dir)
    if not state.templateAbs.is_dir():
        print(f"Error: template directory not found: {state.templateAbs}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)
    LOG(f"Templates: {state.templateAbs}", level=2)

    state.htmlOutputdir = Path(state.outputdir).resolve()
    if state.clean and state.htmlOutputdir.exists():
        LOG(f"[clean] {state.htmlOutputdir}", level=2)
        if not state.dryRun:
            dir_remove(state.htmlOutputdir)

    if not state.dryRun:
        dir_ensure(state.htmlOutputdir)
    LOG(f"Output directory: {state.htmlOutputdir}", level=2)

    state.envOK = True
    return state


def templates_stage(inputstate: ProgramState) -> ProgramState:
    """
    Load the template registry from the template directory.

    Returns:
        ProgramState with added field:
            - registry: TemplateRegistry

    Exits:
        1 if the templates cannot be read
    """
    state = inputstate.copy()

    LOG("Loading templates...", level=1)
    try:
        state.registry = templates_load(state.templateAbs)
    except TemplateError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    LOG(f"Loaded {len(state.registry)} templates", level=2)
    return state


def registry_require(state: ProgramState) -> None:
    """Exit unless templates_stage has run"""
    if state.registry is None or state.inputdir is None:
        print("Error: templates have not been loaded", file=sys.stderr)
        sys.exit(1)


def documents_render(inputstate: ProgramState) -> ProgramState:
    """
    Render every discovered document once.

    Returns:
        ProgramState with added fields:
            - buildResult: BuildResult
            - exitCode: 1 if any document failed

    Exits:
        1 if no documents are found
    """
    state = inputstate.copy()
    registry_require(state)

    documents = documents_collect(state.inputAbs)
    if not documents:
        print(f"Error: no markdown files found under: {state.inputAbs}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Rendering {len(documents)} documents...", level=1)
    state.buildResult = asyncio.run(documents_build(
        state.inputAbs,
        Path(state.inputdir).resolve(),
        state.htmlOutputdir,
        state.registry,
        renderOptions_make(state),
        ext=state.ext,
        dry_run=state.dryRun,
        documents=documents,
    ))
    if not state.buildResult.ok:
        state.exitCode = 1
    return state


async def watch_main(state: ProgramState) -> ProgramState:
    """Run the watch session until it stops; returns the updated state"""
    registry_require(state)
    base_dir = Path(state.inputdir).resolve()
    options = renderOptions_make(state)

    async def rebuild(registry):
        return await documents_build(
            state.inputAbs, base_dir, state.htmlOutputdir, registry, options, ext=state.ext
        )

    def result_record(result: BuildResult) -> None:
        state.buildResult = result
        if not result.ok:
            state.exitCode = 1

    if not state.once:
        # Initial build; watching continues even if it had failures
        result_record(await rebuild(state.registry))

    session = await session_start(WatchConfig(
        input_abs=state.inputAbs,
        template_abs=state.templateAbs,
        out_abs=state.htmlOutputdir,
        build=rebuild,
        registry=state.registry,
        debounce_ms=state.debounceMs if state.debounceMs is not None else appsettings.debounce_ms,
        once=state.once,
        on_result=result_record,
    ))
    signals_connect(session)
    LOG("Watching for changes (Ctrl-C to stop)...", level=1)
    await session.wait()
    return state


def watch_run(inputstate: ProgramState) -> ProgramState:
    """
    Rebuild on changes to documents or templates until interrupted.

    Returns:
        ProgramState with added fields:
            - buildResult: Result of the last build
            - exitCode: 1 if any build had failures
    """
    state = inputstate.copy()
    if state.debounceMs is not None and state.debounceMs < 0:
        print("Error: --debounceMs must be a non-negative integer", file=sys.stderr)
        sys.exit(1)
    return asyncio.run(watch_main(state))


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display build results to the user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)
    """
    state: ProgramState = inputstate.copy()
    result = state.buildResult
    if result is None:
        return state

    if state.verbosity >= 1:
        mark = "✓" if result.ok else "✗"
        LOG(f"\n{mark} Build finished", level=1)
        LOG(f"  Documents: {len(result.documents)}", level=1)
        LOG(f"  Succeeded: {result.succeeded}", level=1)
        LOG(f"  Failed:    {result.failed}", level=1)
        LOG(f"  Output:    {state.htmlOutputdir}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="mdxformer - Template-driven Markdown to HTML",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - render Markdown from inputdir into outputdir.

    Orchestrates one of three flows:
        - init:  scaffold_run into inputdir, then exit
        - build: env_check, templates_stage, documents_render, results_report
        - watch: env_check, templates_stage, watch_run, results_report

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing Markdown sources and templates
        outputdir: Directory where rendered HTML is written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    if state.init:
        sys.exit(scaffold_run(state.init, Path(inputdir), force=state.force, dry_run=state.dryRun))

    if state.watch:
        final = pipeline(state, env_check, templates_stage, watch_run, results_report)
    else:
        final = pipeline(state, env_check, templates_stage, documents_render, results_report)

    if final.exitCode:
        sys.exit(final.exitCode)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
