"""
Discovery, output mirroring and batch build tests
"""

import asyncio
import tempfile
from pathlib import Path

import pytest

from mdxformer.lib.build import document_build, documents_build
from mdxformer.lib.io import documents_collect, outPath_make, path_hasIgnoredPart
from mdxformer.lib.templates import TemplateRegistry
from mdxformer.models import RenderOptions

REGISTRY = TemplateRegistry.fromDict({"h2": '<h2 id="{{ id }}">{{ h2 }}</h2>'})


def tree_make(root: Path, files: dict) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


class TestDocumentsCollect:
    """Test document discovery"""

    def test_recursive_sorted(self):
        """All .md files below a directory, sorted"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            tree_make(root, {"b.md": "", "a/c.MD": "", "a/notes.txt": ""})
            assert documents_collect(root) == sorted([root / "b.md", root / "a" / "c.MD"])

    def test_ignored_directories_skipped(self):
        """node_modules, .git and dist are never searched"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            tree_make(root, {
                "keep.md": "",
                "node_modules/x.md": "",
                ".git/y.md": "",
                "dist/z.md": "",
                "distillery/w.md": "",
            })
            found = documents_collect(root)
            assert found == sorted([root / "keep.md", root / "distillery" / "w.md"])

    def test_single_file(self):
        """A .md file is its own document list"""
        with tempfile.TemporaryDirectory() as tmpdir:
            document = Path(tmpdir) / "one.md"
            document.write_text("# One")
            assert documents_collect(document) == [document]

    def test_non_content_and_missing(self):
        """Non-.md files and missing paths give nothing"""
        with tempfile.TemporaryDirectory() as tmpdir:
            other = Path(tmpdir) / "one.txt"
            other.write_text("x")
            assert documents_collect(other) == []
            assert documents_collect(Path(tmpdir) / "absent") == []


class TestOutPath:
    """Test mirrored output paths"""

    def test_mirrors_relative_layout(self):
        """<base>/a/b.md -> <out>/a/b.html"""
        out = outPath_make(Path("/p/articles/foo/main.md"), Path("/p"), Path("/out"), "html")
        assert out == Path("/out/articles/foo/main.html")

    def test_uppercase_suffix(self):
        """The content suffix is matched case-insensitively"""
        assert outPath_make(Path("/p/a/b.MD"), Path("/p"), Path("/out"), "htm") == Path("/out/a/b.htm")

    def test_outside_base(self):
        """Documents outside the base keep only their name"""
        assert outPath_make(Path("/elsewhere/x.md"), Path("/p"), Path("/out"), "html") == Path("/out/x.html")


class TestIgnoredParts:
    """Test path component matching"""

    @pytest.mark.parametrize("path,ignored", [
        ("a/node_modules/b.md", True),
        ("a/.git/HEAD", True),
        ("dist/index.html", True),
        ("distillery/notes.md", False),
        ("a\\dist\\b.md", True),
        ("articles/intro.md", False),
    ])
    def test_components(self, path, ignored):
        """Whole components only, either separator"""
        assert path_hasIgnoredPart(Path(path)) is ignored


class TestDocumentsBuild:
    """Test the batch build"""

    def test_renders_and_mirrors(self):
        """Every document is rendered to its mirrored path"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "src"
            out = Path(tmpdir) / "out"
            tree_make(root, {"a.md": "## Alpha\n", "sub/b.md": "## Beta\n"})

            result = asyncio.run(documents_build(root, root, out, REGISTRY))

            assert result.ok
            assert result.succeeded == 2
            assert result.failed == 0
            assert len(result.documents) == 2
            assert (out / "a.html").read_text() == '<h2 id="alpha">Alpha</h2>'
            assert (out / "sub" / "b.html").read_text() == '<h2 id="beta">Beta</h2>'

    def test_failure_counted_not_fatal(self):
        """An unreadable document is counted as failed; the rest still build"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "src"
            out = Path(tmpdir) / "out"
            tree_make(root, {"good.md": "## Good\n"})
            missing = root / "gone.md"

            result = asyncio.run(documents_build(
                root, root, out, REGISTRY, documents=[missing, root / "good.md"]
            ))

            assert not result.ok
            assert result.succeeded == 1
            assert result.failed == 1
            assert result.documents == [missing, root / "good.md"]
            assert (out / "good.html").exists()

    def test_invalid_utf8_counted(self):
        """A document that cannot be decoded is a per-document failure"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "src"
            out = Path(tmpdir) / "out"
            root.mkdir()
            (root / "bad.md").write_bytes(b"\xff\xfe\xfa")
            (root / "ok.md").write_text("text\n")

            result = asyncio.run(documents_build(root, root, out, REGISTRY))

            assert result.succeeded == 1
            assert result.failed == 1

    def test_dry_run_writes_nothing(self):
        """Dry run renders but creates no files"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "src"
            out = Path(tmpdir) / "out"
            tree_make(root, {"a.md": "# A\n"})

            result = asyncio.run(documents_build(root, root, out, REGISTRY, dry_run=True))

            assert result.succeeded == 1
            assert not out.exists()

    def test_custom_extension(self):
        """ext overrides the output extension"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            tree_make(root, {"a.md": "hi\n"})
            path = asyncio.run(document_build(
                root / "a.md", root, root / "out", REGISTRY, RenderOptions(), ext="htm"
            ))
            assert path == root / "out" / "a.htm"
            assert path.read_text() == "<p>hi</p>"
