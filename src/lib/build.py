"""
Batch build: render every discovered document and write the results

File reads and writes run in worker threads so the event loop stays free
to accept watch notifications while a build is in progress. Rendering
itself happens on the loop thread.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

from ..config import appsettings
from ..models.build import BuildResult
from ..models.render import RenderOptions
from .io import dir_ensure, documents_collect, outPath_make
from .log import ERROR, LOG
from .templates import TemplateRegistry
from .transform import render


def _text_write(path: Path, text: str) -> None:
    dir_ensure(path.parent)
    path.write_text(text, encoding='utf-8')


async def document_build(
    document: Path,
    base_dir: Path,
    out_dir: Path,
    registry: TemplateRegistry,
    options: RenderOptions,
    ext: Optional[str] = None,
    dry_run: bool = False,
) -> Path:
    """
    Render one document and write it to its mirrored output path

    Args:
        document: Source Markdown file
        base_dir: Directory the output layout mirrors
        out_dir: Output root
        registry: Template registry
        options: Render switches
        ext: Output extension (settings default when None)
        dry_run: Render but do not write

    Returns:
        The output path

    Raises:
        OSError: If the document cannot be read or the output cannot be written
    """
    source = await asyncio.to_thread(document.read_text, encoding='utf-8')
    html = render(source, registry, options)

    out_file = outPath_make(document, base_dir, out_dir, ext or appsettings.output_ext)
    if options.verbose:
        LOG(f"[emit] {document} -> {out_file}", level=1)

    if not dry_run:
        await asyncio.to_thread(_text_write, out_file, html)
    return out_file


async def documents_build(
    input_path: Path,
    base_dir: Path,
    out_dir: Path,
    registry: TemplateRegistry,
    options: Optional[RenderOptions] = None,
    ext: Optional[str] = None,
    dry_run: bool = False,
    documents: Optional[List[Path]] = None,
) -> BuildResult:
    """
    Render every document under input_path

    A failing document is logged and counted; the remaining documents are
    still processed.

    Args:
        input_path: Content file or directory
        base_dir: Directory the output layout mirrors
        out_dir: Output root
        registry: Template registry, fixed for the whole batch
        options: Render switches
        ext: Output extension
        dry_run: Render but do not write
        documents: Pre-discovered documents (discovered from input_path when None)

    Returns:
        BuildResult counting every document exactly once
    """
    options = options or RenderOptions()
    if documents is None:
        documents = await asyncio.to_thread(documents_collect, input_path)

    LOG(f"Building {len(documents)} documents", level=2)

    succeeded = 0
    failed = 0
    for document in documents:
        try:
            await document_build(
                document, base_dir, out_dir, registry, options, ext=ext, dry_run=dry_run
            )
            succeeded += 1
        except Exception as e:
            failed += 1
            ERROR(f"[error] {document}: {e}", exc=e if options.verbose else None)

    LOG(f"[done] ok={succeeded} failed={failed}", level=2)
    return BuildResult(succeeded=succeeded, failed=failed, documents=list(documents))
