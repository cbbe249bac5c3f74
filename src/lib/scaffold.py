"""
Project scaffolding

Writes a starter template directory and a sample article:

    .mdxformer/templates/h2.template.html
    .mdxformer/templates/codeblock.template.html
    articles/sample.md

Exit codes of scaffold_run():
    0  files written (or listed on dry run)
    2  unknown preset
    3  some files already existed and force was not given
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from .log import ERROR, LOG

CONFIG_DIR = ".mdxformer"
TEMPLATES_SUBDIR = f"{CONFIG_DIR}/templates"

_HEADING_H2 = '<h2 id="{{ id }}">{{ h2 }}</h2>'
_HEADING_H3 = '<h3 id="{{ id }}">{{ h3 }}</h3>'
_PARAGRAPH = '<p>{{ p }}</p>'
_CODEBLOCK = '<pre><code class="hljs language-{{ lang }}">{{{ code }}}</code></pre>'

_WORDPRESS_SAMPLE = """# Sample Article

This is a sample Markdown document to help you get started with mdxformer.

## Introduction

mdxformer converts Markdown into template-based HTML. You can customize
headings, paragraphs and code blocks with templates.

### Features

- **Template-based rendering**: Replace Markdown elements with your own HTML
- **Syntax highlighting**: Automatic code highlighting with Pygments

## Code Examples

```python
def calculate_sum(a, b):
    return a + b

print(calculate_sum(10, 20))
```

## Next Steps

1. Edit the templates in `.mdxformer/templates/`
2. Run the transformer:

```bash
mdxformer . dist --inputPath articles --templateDir .mdxformer/templates
```
"""

_GENERIC_SAMPLE = """# Getting Started

This is a minimal sample document.

## Code Example

```python
print("Hello, World!")
```

## Next Steps

Run: `mdxformer . dist --inputPath articles --templateDir .mdxformer/templates`
"""


@dataclass
class ScaffoldFile:
    """A file a preset creates, relative to the target directory"""
    path: str
    content: str


@dataclass
class Preset:
    """Named set of scaffold files"""
    name: str
    files: List[ScaffoldFile] = field(default_factory=list)


PRESETS: Dict[str, Preset] = {
    "wordpress": Preset(
        name="wordpress",
        files=[
            ScaffoldFile(f"{TEMPLATES_SUBDIR}/h2.template.html", _HEADING_H2),
            ScaffoldFile(f"{TEMPLATES_SUBDIR}/h3.template.html", _HEADING_H3),
            ScaffoldFile(f"{TEMPLATES_SUBDIR}/p.template.html", _PARAGRAPH),
            ScaffoldFile(f"{TEMPLATES_SUBDIR}/codeblock.template.html", _CODEBLOCK),
            ScaffoldFile("articles/sample.md", _WORDPRESS_SAMPLE),
        ],
    ),
    "generic": Preset(
        name="generic",
        files=[
            ScaffoldFile(f"{TEMPLATES_SUBDIR}/h2.template.html", _HEADING_H2),
            ScaffoldFile(f"{TEMPLATES_SUBDIR}/codeblock.template.html", _CODEBLOCK),
            ScaffoldFile("articles/sample.md", _GENERIC_SAMPLE),
        ],
    ),
}


@dataclass
class ScaffoldOutcome:
    """What happened to one scaffold file"""
    path: str
    written: bool
    existed: bool


def presets_list() -> List[str]:
    """Names of the available presets"""
    return list(PRESETS)


def file_writeIfNeeded(path: Path, content: str, force: bool, dry_run: bool) -> ScaffoldOutcome:
    """Write a scaffold file unless it exists (without force) or on dry run"""
    existed = path.exists()
    if existed and not force:
        return ScaffoldOutcome(path=str(path), written=False, existed=True)
    if dry_run:
        return ScaffoldOutcome(path=str(path), written=False, existed=existed)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    return ScaffoldOutcome(path=str(path), written=True, existed=existed)


def scaffold_run(preset_name: str, target_dir: Path, force: bool = False, dry_run: bool = False) -> int:
    """
    Scaffold a preset into target_dir

    Args:
        preset_name: Key of PRESETS
        target_dir: Directory to populate
        force: Overwrite existing files
        dry_run: Only report what would be created

    Returns:
        Exit code (0, 2 or 3, see module docstring)
    """
    preset = PRESETS.get(preset_name)
    if preset is None:
        ERROR(f"Unknown preset: {preset_name} (available: {', '.join(presets_list())})")
        return 2

    target_dir = Path(target_dir).resolve()
    LOG(f"Initializing mdxformer with preset: {preset_name}", level=1)
    LOG(f"Target directory: {target_dir}", level=1)

    outcomes: List[ScaffoldOutcome] = []
    for scaffold_file in preset.files:
        outcome = file_writeIfNeeded(
            target_dir / scaffold_file.path, scaffold_file.content, force, dry_run
        )
        outcome.path = scaffold_file.path
        outcomes.append(outcome)
        if dry_run:
            status = "[exists]" if outcome.existed else "[create]"
            LOG(f"  {status} {scaffold_file.path}", level=1)

    if dry_run:
        LOG("No files were written (dry run mode).", level=1)
        return 0

    for outcome in outcomes:
        if outcome.written and not outcome.existed:
            LOG(f"  created: {outcome.path}", level=1)
        elif outcome.written:
            LOG(f"  overwritten: {outcome.path}", level=1)
        else:
            LOG(f"  skipped (already exists): {outcome.path}", level=1)

    if any(not o.written and o.existed for o in outcomes):
        LOG("Some files already exist. Use --force to overwrite.", level=1)
        return 3

    LOG(f"Next: customize templates in {TEMPLATES_SUBDIR}/", level=1)
    return 0
