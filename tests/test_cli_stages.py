"""
CLI pipeline stage tests

Runs the stages main() composes directly on a ProgramState, without the
plugin wrapper.
"""

import tempfile
from argparse import Namespace
from pathlib import Path

import pytest

from mdxformer.__main__ import (
    documents_render,
    env_check,
    parser,
    renderOptions_make,
    results_report,
    templates_stage,
    watch_run,
)
from mdxformer.models import ProgramState, pipeline


def project_make(root: Path) -> None:
    (root / "template").mkdir()
    (root / "template" / "h2.template.html").write_text('<h2 id="{{ id }}">{{ h2 }}</h2>')
    (root / "articles").mkdir()
    (root / "articles" / "intro.md").write_text("## Hello, World!\n\nBody text.\n")


def state_make(inputdir: Path, outputdir: Path, **kwargs) -> ProgramState:
    return ProgramState(inputdir=inputdir, outputdir=outputdir, verbosity=0, **kwargs)


class TestArguments:
    """Test CLI option defaults and mapping onto the state"""

    def test_defaults(self):
        """Parsed defaults map onto ProgramState fields"""
        options, _ = parser.parse_known_args(["in", "out"])
        state = ProgramState.state_createFromNamespace(options, Path("in"), Path("out"))
        assert state.inputPath == "."
        assert state.templateDir is None
        assert not state.watch
        assert state.verbosity == 1

    def test_unknown_namespace_keys_dropped(self):
        """Extra namespace entries are ignored"""
        options = Namespace(inputPath="articles", somethingElse=True)
        state = ProgramState.state_createFromNamespace(options, Path("in"), Path("out"))
        assert state.inputPath == "articles"
        assert not hasattr(state, "somethingElse")

    def test_render_options(self):
        """-vv turns on render diagnostics"""
        assert not renderOptions_make(ProgramState(verbosity=1)).verbose
        assert renderOptions_make(ProgramState(verbosity=2)).verbose
        assert renderOptions_make(ProgramState(allowHtml=True)).allow_raw_html


class TestBuildPipeline:
    """Test the one-shot build flow"""

    def test_renders_mirrored_output(self):
        """inputdir/articles/intro.md -> outputdir/articles/intro.html"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            project_make(root)
            out = root / "dist"

            final = pipeline(
                state_make(root, out),
                env_check,
                templates_stage,
                documents_render,
                results_report,
            )

            assert final.exitCode == 0
            assert final.buildResult.succeeded == 1
            html = (out / "articles" / "intro.html").read_text()
            assert html == '<h2 id="hello-world">Hello, World!</h2><p>Body text.</p>'

    def test_input_path_subtree(self):
        """--inputPath limits discovery but keeps the mirrored layout"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            project_make(root)
            (root / "other.md").write_text("# Other\n")
            out = root / "dist"

            final = pipeline(
                state_make(root, out, inputPath="articles"),
                env_check,
                templates_stage,
                documents_render,
            )

            assert final.buildResult.documents == [root / "articles" / "intro.md"]
            assert (out / "articles" / "intro.html").exists()
            assert not (out / "other.html").exists()

    def test_clean_removes_stale_output(self):
        """--clean empties the output directory first"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            project_make(root)
            out = root / "dist"
            out.mkdir()
            (out / "stale.html").write_text("old")

            pipeline(state_make(root, out, clean=True), env_check, templates_stage, documents_render)

            assert not (out / "stale.html").exists()
            assert (out / "articles" / "intro.html").exists()

    def test_missing_input_exits(self):
        """A missing input path exits with status 1"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            project_make(root)
            with pytest.raises(SystemExit) as excinfo:
                env_check(state_make(root, root / "dist", inputPath="nope"))
            assert excinfo.value.code == 1

    def test_missing_template_dir_exits(self):
        """A missing template directory exits with status 1"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            project_make(root)
            with pytest.raises(SystemExit) as excinfo:
                env_check(state_make(root, root / "dist", templateDir="absent"))
            assert excinfo.value.code == 1

    def test_no_documents_exits(self):
        """An input path without Markdown exits with status 1"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            project_make(root)
            (root / "empty").mkdir()
            state = pipeline(
                state_make(root, root / "dist", inputPath="empty"), env_check, templates_stage
            )
            with pytest.raises(SystemExit) as excinfo:
                documents_render(state)
            assert excinfo.value.code == 1

    def test_render_without_templates_exits(self):
        """documents_render refuses to run before templates_stage"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            project_make(root)
            state = env_check(state_make(root, root / "dist"))
            with pytest.raises(SystemExit) as excinfo:
                documents_render(state)
            assert excinfo.value.code == 1

    def test_missing_directories_exit(self):
        """env_check needs both inputdir and outputdir"""
        with pytest.raises(SystemExit) as excinfo:
            env_check(ProgramState(verbosity=0))
        assert excinfo.value.code == 1

    def test_failed_document_sets_exit_code(self):
        """Any failed document makes the exit code non-zero"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            project_make(root)
            (root / "articles" / "broken.md").write_bytes(b"\xff\xfe")

            final = pipeline(
                state_make(root, root / "dist"), env_check, templates_stage, documents_render
            )

            assert final.exitCode == 1
            assert final.buildResult.failed == 1
            assert final.buildResult.succeeded == 1


class TestWatchStage:
    """Test the watch flow in once mode"""

    def test_once_builds_and_returns(self):
        """--watch --once runs a single build and exits"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            project_make(root)
            out = root / "dist"

            final = pipeline(
                state_make(root, out, watch=True, once=True),
                env_check,
                templates_stage,
                watch_run,
            )

            assert final.exitCode == 0
            assert final.buildResult.succeeded == 1
            assert (out / "articles" / "intro.html").exists()

    def test_negative_debounce_rejected(self):
        """--debounceMs must not be negative"""
        with pytest.raises(SystemExit) as excinfo:
            watch_run(ProgramState(watch=True, debounceMs=-5))
        assert excinfo.value.code == 1
