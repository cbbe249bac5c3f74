"""
mdxformer - Template-driven Markdown to HTML transformer

Rendering, building and watching.
"""

__version__ = "1.0.0"

from .log import LOG, WARN, ERROR, state_connectToLogger
from .slug import slugify
from .templates import TemplateRegistry, templates_load, templateKey_fromFilename
from .substitute import template_apply, templateFields_apply, templateWithRaw_apply
from .highlight import Highlighter
from .codeblock import codeblock_render
from .transform import Transformer, render
from .io import documents_collect, outPath_make, dir_ensure, dir_remove
from .build import documents_build, document_build
from .watch import WatchConfig, WatchSession, session_start, signals_connect
from .scaffold import scaffold_run, presets_list

__all__ = [
    "LOG",
    "WARN",
    "ERROR",
    "state_connectToLogger",
    "slugify",
    "TemplateRegistry",
    "templates_load",
    "templateKey_fromFilename",
    "template_apply",
    "templateFields_apply",
    "templateWithRaw_apply",
    "Highlighter",
    "codeblock_render",
    "Transformer",
    "render",
    "documents_collect",
    "outPath_make",
    "dir_ensure",
    "dir_remove",
    "documents_build",
    "document_build",
    "WatchConfig",
    "WatchSession",
    "session_start",
    "signals_connect",
    "scaffold_run",
    "presets_list",
    "__version__",
]
