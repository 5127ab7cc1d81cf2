#!/usr/bin/env python3
"""
nbdeck - Notebook to presentation converter

Converts Jupyter notebooks into one remark-style markdown presentation. The
structure of the presentation is written into the notebook cells as command
regions:

    <!--! new; class[center, middle]; start-add; -->
    # Welcome

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Commands:
    new;            start a new page
    start-add;      append the following lines of the cell to the page
    stop-add;       stop appending
    add-stream;     append the stream output of a code cell
    add-error;      append the error output of a code cell
    inject[text];   append text
    image[tmpl];    append tmpl with {} / {N} replaced by the cell's image paths
    class[name];    set the class of the current page

Usage:
    nbdeck inputdir/ outputdir/ [--inputFiles talk.ipynb,chapters] [--headPage title.md]

Examples:
    # All notebooks below the input directory
    nbdeck notebooks/ slides/

    # Title page followed by two notebooks, overwrite existing output
    nbdeck . slides/ --headPage title.md --inputFiles intro.ipynb,part2.ipynb --force

    # Verbose output
    nbdeck notebooks/ slides/ -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import Compiler, __version__, LOG, state_connectToLogger
from .lib.notebook import sources_discover
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
         _         _           _
   _ __ | |__   __| | ___  ___| | __
  | '_ \| '_ \ / _` |/ _ \/ __| |/ /
  | | | | |_) | (_| |  __/ (__|   <
  |_| |_|_.__/ \__,_|\___|\___|_|\_\

  Notebook to presentation converter
"""

# Define CLI arguments
parser = ArgumentParser(
    description="nbdeck - Convert notebooks into a presentation driven by in-cell commands",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFiles",
    default="",
    type=str,
    help="Comma separated notebooks or directories (relative to inputdir). Defaults to all notebooks in inputdir",
)

parser.add_argument(
    "--headPage",
    default=None,
    type=str,
    help="File included verbatim before the notebooks (relative to inputdir)",
)

parser.add_argument(
    "--outputFile",
    default=appsettings.output_file,
    type=str,
    help="Presentation file name (relative to outputdir)",
)

parser.add_argument(
    "-f",
    "--force",
    action="store_true",
    default=False,
    help="Overwrite the presentation file if it already exists",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve the output path.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - outputPath: Resolved presentation file path
            - envOK: True if environment is valid

    Exits:
        1 if the input directory is missing or the output exists without --force
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.outputPath = state.outputdir / state.outputFile
    if state.outputPath.exists() and not state.force:
        print(
            f"Error: File already exists {state.outputPath}. Use --force to override it.",
            file=sys.stderr,
        )
        state.envOK = False
        sys.exit(1)

    LOG(f"Output file: {state.outputPath}", level=2)

    state.envOK = True
    return state


def sources_collect(inputstate: ProgramState) -> ProgramState:
    """
    Resolve the head page and notebooks in presentation order.

    Args:
        inputstate: Program state with inputdir and CLI options

    Returns:
        ProgramState with added field:
            - sourcePaths: Head page (if any) followed by the notebooks

    Exits:
        1 if an input does not exist or no notebook was found
    """

    state = inputstate.copy()

    LOG("Collecting notebooks...", level=1)

    names = [name.strip() for name in state.inputFiles.split(",") if name.strip()]
    inputs = [state.inputdir / name for name in names] or [state.inputdir]

    try:
        notebooks = sources_discover(inputs)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not notebooks:
        print(f"Error: No notebooks found in {state.inputdir}", file=sys.stderr)
        sys.exit(1)

    sources = []
    if state.headPage:
        head = state.inputdir / state.headPage
        if not head.is_file():
            print(f"Error: Head page not found: {head}", file=sys.stderr)
            sys.exit(1)
        sources.append(head)

    state.sourcePaths = sources + notebooks
    LOG(f"Collected {len(state.sourcePaths)} source(s)", level=2)
    return state


def presentation_compile(inputstate: ProgramState) -> ProgramState:
    """
    Convert the sources and write the presentation file.

    Args:
        inputstate: Program state with sourcePaths and outputPath

    Returns:
        ProgramState with added field:
            - compileResult: Dict containing:
                - status: bool (compilation success)
                - output_file: str (path to the presentation)
                - document_count: int (non-empty documents written)
                - page_count: int (pages converted from notebooks)
                - failed: list of sources that were skipped

    Exits:
        1 if compilation fails
    """

    state = inputstate.copy()

    LOG("Compiling presentation...", level=1)

    try:
        compiler = Compiler(
            sources=state.sourcePaths,
            output_file=str(state.outputPath),
            force=state.force,
            verbosity=state.verbosity,
        )
        state.compileResult = compiler.compile()
        LOG(f"Compilation complete: {state.compileResult['page_count']} pages", level=2)
    except Exception as e:
        print(f"Compilation error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display compilation results to the user.

    Args:
        inputstate: Program state with compileResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if compileResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.compileResult:
        print("Error: Compilation failed", file=sys.stderr)
        sys.exit(1)

    if state.verbosity >= 1:
        LOG("\n✓ The presentation was successfully created.", level=1)
        LOG(f"  Output: {state.compileResult['output_file']}", level=1)
        LOG(f"  Documents: {state.compileResult['document_count']}", level=1)
        LOG(f"  Pages: {state.compileResult['page_count']}", level=1)
        for failed in state.compileResult['failed']:
            LOG(f"  Skipped: {failed}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="nbdeck - Notebook to presentation converter",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - convert notebooks into a presentation.

    Orchestrates the full pipeline:
        1. env_check: Validate paths and environment
        2. sources_collect: Resolve head page and notebooks
        3. presentation_compile: Convert notebooks and write the presentation
        4. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the notebooks
        outputdir: Directory where the presentation will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, sources_collect, presentation_compile, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
