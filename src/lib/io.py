"""
Filesystem helpers for document discovery and output mirroring

Outputs mirror the input tree relative to a base directory:

    <base>/articles/foo/main.md  ->  <out>/articles/foo/main.html
"""

import shutil
from pathlib import Path
from typing import Iterable, List, Optional

from ..config import appsettings


def dir_ensure(directory: Path) -> None:
    """Create directory and its parents if missing"""
    Path(directory).mkdir(parents=True, exist_ok=True)


def dir_remove(directory: Path) -> None:
    """Remove a directory tree; a missing directory is not an error"""
    shutil.rmtree(directory, ignore_errors=True)


def path_hasIgnoredPart(path: Path, ignored_dirs: Optional[Iterable[str]] = None) -> bool:
    """
    Check if any component of path is an ignored directory name

    Components are compared whole, so "distillery" is not "dist".
    Both / and \\ count as separators.
    """
    ignored = set(ignored_dirs if ignored_dirs is not None else appsettings.ignored_dirs)
    parts = str(path).replace('\\', '/').split('/')
    return any(part in ignored for part in parts)


def documents_walk(directory: Path, found: List[Path]) -> None:
    """Recursively collect content files below directory"""
    for entry in directory.iterdir():
        if entry.is_dir():
            if entry.name in appsettings.ignored_dirs:
                continue
            documents_walk(entry, found)
        elif entry.is_file() and appsettings.contentSuffix_matches(entry.name):
            found.append(entry)


def documents_collect(input_path: Path) -> List[Path]:
    """
    Discover the documents to render

    Args:
        input_path: A single content file or a directory to search

    Returns:
        Sorted document paths; empty when input_path is missing, is not a
        content file, or holds no content files
    """
    input_path = Path(input_path)
    if not input_path.exists():
        return []

    if input_path.is_file():
        if not appsettings.contentSuffix_matches(input_path.name):
            return []
        return [input_path]

    if input_path.is_dir():
        found: List[Path] = []
        documents_walk(input_path, found)
        return sorted(found)

    return []


def outPath_make(document: Path, base_dir: Path, out_dir: Path, ext: str) -> Path:
    """
    Mirror a document path into the output directory

    Args:
        document: Source document
        base_dir: Directory the mirrored layout is relative to
        out_dir: Output root
        ext: Output extension without the dot

    Example:
        >>> outPath_make(Path('/p/a/b.MD'), Path('/p'), Path('/out'), 'html')
        PosixPath('/out/a/b.html')
    """
    document = Path(document)
    try:
        relative = document.relative_to(base_dir)
    except ValueError:
        # Outside the base: keep only the filename
        relative = Path(document.name)
    suffix = appsettings.content_suffix
    name = relative.name
    if name.lower().endswith(suffix.lower()):
        name = name[: -len(suffix)]
    return Path(out_dir) / relative.parent / f"{name}.{ext}"
