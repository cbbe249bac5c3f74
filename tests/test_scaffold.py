"""
Scaffolding tests - presets, overwrite protection and exit codes
"""

import tempfile
from pathlib import Path

from mdxformer.lib.scaffold import PRESETS, TEMPLATES_SUBDIR, presets_list, scaffold_run
from mdxformer.lib.templates import templates_load


class TestPresets:
    """Test the preset catalogue"""

    def test_available(self):
        """wordpress and generic ship by default"""
        assert presets_list() == ["wordpress", "generic"]

    def test_templates_are_loadable(self):
        """Scaffolded templates follow the filename convention"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            assert scaffold_run("wordpress", root) == 0
            registry = templates_load(root / TEMPLATES_SUBDIR)
            assert sorted(registry) == ["codeblock", "h2", "h3", "p"]
            assert "{{{ code }}}" in registry.get("codeblock")


class TestScaffoldRun:
    """Test writing a preset"""

    def test_writes_all_files(self):
        """Every preset file is created"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            assert scaffold_run("generic", root) == 0
            for scaffold_file in PRESETS["generic"].files:
                assert (root / scaffold_file.path).is_file()
            assert (root / "articles" / "sample.md").read_text().startswith("# Getting Started")

    def test_unknown_preset(self):
        """An unknown preset is exit code 2 and writes nothing"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            assert scaffold_run("jekyll", root) == 2
            assert list(root.iterdir()) == []

    def test_existing_files_kept(self):
        """Existing files are not overwritten without force (exit code 3)"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            sample = root / "articles" / "sample.md"
            sample.parent.mkdir(parents=True)
            sample.write_text("mine")

            assert scaffold_run("generic", root) == 3
            assert sample.read_text() == "mine"
            assert (root / TEMPLATES_SUBDIR / "h2.template.html").is_file()

    def test_force_overwrites(self):
        """force replaces existing files"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            sample = root / "articles" / "sample.md"
            sample.parent.mkdir(parents=True)
            sample.write_text("mine")

            assert scaffold_run("generic", root, force=True) == 0
            assert sample.read_text() != "mine"

    def test_dry_run(self):
        """Dry run reports success and writes nothing"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            assert scaffold_run("wordpress", root, dry_run=True) == 0
            assert list(root.iterdir()) == []
