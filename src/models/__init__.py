"""
Models package for mdxformer

Contains data structures and type definitions for the build pipeline.
"""

from .state import ProgramState, pipeline
from .render import Block, BlockKind, block_classify, RenderOptions, RenderContext, CodeHighlight
from .errors import MdxformerError, TemplateError
from .build import (
    BuildResult,
    WatchPhase,
    WatchTrigger,
    WatchTransitionError,
    WATCH_TRANSITIONS,
    phase_next,
)

__all__ = [
    "ProgramState",
    "MdxformerError",
    "TemplateError",
    "pipeline",
    "Block",
    "BlockKind",
    "block_classify",
    "RenderOptions",
    "RenderContext",
    "CodeHighlight",
    "BuildResult",
    "WatchPhase",
    "WatchTrigger",
    "WatchTransitionError",
    "WATCH_TRANSITIONS",
    "phase_next",
]
