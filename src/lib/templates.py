"""
Template registry and loader

A template directory holds one file per element key:

    template/
      h2.template.html         -> key "h2"
      p.template.html          -> key "p"
      codeblock.template.html  -> key "codeblock"

Loading is non-recursive. The resulting TemplateRegistry is immutable; a
reload builds a new registry that replaces the old one wholesale, so a
build in flight keeps reading the registry it started with.
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from ..config import appsettings
from ..models.errors import TemplateError
from .log import LOG


@dataclass(frozen=True)
class TemplateRegistry:
    """
    Read-only mapping from lowercase element key to template text

    Attributes:
        templates: Key -> template string
        source_dir: Directory the templates were loaded from, if any
    """
    templates: Mapping[str, str] = field(default_factory=dict)
    source_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        frozen = MappingProxyType({k.lower(): v for k, v in self.templates.items()})
        object.__setattr__(self, 'templates', frozen)

    @classmethod
    def fromDict(cls, templates: Dict[str, str]) -> "TemplateRegistry":
        """Build a registry from an in-memory mapping"""
        return cls(templates=dict(templates))

    def get(self, key: str) -> Optional[str]:
        """Template for key, or None when not registered"""
        return self.templates.get(key.lower())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self.templates

    def __iter__(self) -> Iterator[str]:
        return iter(self.templates)

    def __len__(self) -> int:
        return len(self.templates)


def templateKey_fromFilename(filename: str) -> Optional[str]:
    """
    Extract the registry key from a template filename

    Args:
        filename: Bare filename (no directory)

    Returns:
        Lowercase key, or None if the name is not a template file

    Example:
        >>> templateKey_fromFilename('H2.template.html')
        'h2'
        >>> templateKey_fromFilename('notes.txt') is None
        True
    """
    match = appsettings.templateFilename_pattern().match(filename)
    if not match:
        return None
    return match.group(1).lower()


def templates_load(template_dir: Path) -> TemplateRegistry:
    """
    Load every template file directly inside template_dir

    Args:
        template_dir: Directory to scan (subdirectories are ignored)

    Returns:
        New TemplateRegistry

    Raises:
        TemplateError: If the directory is missing or a template cannot be read
    """
    template_dir = Path(template_dir)
    if not template_dir.is_dir():
        raise TemplateError(f"template directory not found: {template_dir}")

    templates: Dict[str, str] = {}
    for entry in sorted(template_dir.iterdir()):
        if not entry.is_file():
            continue
        key = templateKey_fromFilename(entry.name)
        if key is None:
            continue
        try:
            templates[key] = entry.read_text(encoding='utf-8')
        except OSError as e:
            raise TemplateError(f"failed to read template {entry}: {e}") from e
        LOG(f"Loaded template '{key}' from {entry.name}", level=3)

    LOG(f"Loaded {len(templates)} templates from {template_dir}", level=2)
    return TemplateRegistry(templates=templates, source_dir=template_dir)
