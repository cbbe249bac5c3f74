"""
Template loader and registry tests

Filenames <key>.template.html become lowercase registry keys; loading is
non-recursive and the registry is read-only.
"""

import tempfile
from pathlib import Path

import pytest

from mdxformer.lib.templates import TemplateRegistry, templateKey_fromFilename, templates_load
from mdxformer.models import TemplateError


class TestTemplateKeys:
    """Test filename to key mapping"""

    def test_simple_key(self):
        """h2.template.html -> h2"""
        assert templateKey_fromFilename("h2.template.html") == "h2"

    def test_key_is_lowercased(self):
        """Keys are case-insensitive on disk"""
        assert templateKey_fromFilename("CodeBlock.Template.HTML") == "codeblock"

    @pytest.mark.parametrize("name", [
        "h2.html",
        "notes.txt",
        "h2.template.htm",
        "my-key.template.html",
        ".template.html",
    ])
    def test_non_template_names(self, name):
        """Names outside the convention are not templates"""
        assert templateKey_fromFilename(name) is None


class TestTemplatesLoad:
    """Test loading a template directory"""

    def test_loads_direct_children(self):
        """Every template file directly in the directory is loaded"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "h2.template.html").write_text('<h2 id="{{ id }}">{{ h2 }}</h2>')
            (root / "P.template.html").write_text("<p>{{ p }}</p>")
            (root / "README.md").write_text("not a template")

            registry = templates_load(root)

            assert len(registry) == 2
            assert registry.get("h2") == '<h2 id="{{ id }}">{{ h2 }}</h2>'
            assert registry.get("p") == "<p>{{ p }}</p>"
            assert registry.source_dir == root

    def test_non_recursive(self):
        """Templates in subdirectories are ignored"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "nested").mkdir()
            (root / "nested" / "h3.template.html").write_text("<h3>{{ h3 }}</h3>")

            registry = templates_load(root)

            assert "h3" not in registry
            assert len(registry) == 0

    def test_missing_directory_raises(self):
        """A missing template directory is an error"""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(TemplateError):
                templates_load(Path(tmpdir) / "absent")

    def test_reload_builds_new_registry(self):
        """A reload never mutates a registry already handed out"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            template = root / "p.template.html"
            template.write_text("<p>v1 {{ p }}</p>")
            first = templates_load(root)

            template.write_text("<p>v2 {{ p }}</p>")
            second = templates_load(root)

            assert first.get("p") == "<p>v1 {{ p }}</p>"
            assert second.get("p") == "<p>v2 {{ p }}</p>"


class TestTemplateRegistry:
    """Test the registry mapping"""

    def test_from_dict_lowercases_keys(self):
        """Lookups are case-insensitive"""
        registry = TemplateRegistry.fromDict({"H2": "x"})
        assert registry.get("h2") == "x"
        assert registry.get("H2") == "x"
        assert "h2" in registry
        assert list(registry) == ["h2"]

    def test_missing_key(self):
        """Unregistered keys give None"""
        assert TemplateRegistry.fromDict({}).get("p") is None

    def test_read_only(self):
        """The template mapping cannot be modified"""
        registry = TemplateRegistry.fromDict({"p": "<p>{{ p }}</p>"})
        with pytest.raises(TypeError):
            registry.templates["p"] = "changed"  # type: ignore[index]

    def test_source_dict_not_shared(self):
        """Changing the input dict afterwards does not leak in"""
        source = {"p": "one"}
        registry = TemplateRegistry.fromDict(source)
        source["p"] = "two"
        assert registry.get("p") == "one"
