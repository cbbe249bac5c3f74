"""
Rendering data models

Type-safe structures passed between the block walker, the code-block
renderer and the placeholder substitution engine.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional


class BlockKind(Enum):
    """
    Kinds of block tokens the walker treats specially

    Everything the walker does not template is OTHER and goes through the
    tokenizer's default rendering.
    """
    HEADING = "heading"      # heading_open -> inline -> heading_close
    PARAGRAPH = "paragraph"  # paragraph_open -> inline -> paragraph_close
    FENCE = "fence"          # single fence token
    OTHER = "other"


@dataclass(frozen=True)
class Block:
    """
    Classified view of one token from the markdown-it token stream

    Attributes:
        kind: What the walker should do with the token
        tag: Lowercase element key (e.g., "h2", "p"); empty for fences
        level: Heading level 1-6, None for other kinds
        info: Fence info string (language plus extra attributes)
        content: Fence body text
    """
    kind: BlockKind
    tag: str = ""
    level: Optional[int] = None
    info: str = ""
    content: str = ""


def block_classify(token: Any) -> Block:
    """
    Classify a markdown-it token

    Paragraphs the tokenizer marks hidden (tight list items) are OTHER so
    the default renderer can drop their tags.

    Args:
        token: markdown-it Token (or anything with type/tag attributes)

    Returns:
        Block describing the token
    """
    token_type = getattr(token, 'type', '')
    tag = (getattr(token, 'tag', '') or '').lower()

    if token_type == 'heading_open':
        level: Optional[int] = None
        if len(tag) == 2 and tag[0] == 'h' and tag[1].isdigit():
            level = int(tag[1])
        return Block(kind=BlockKind.HEADING, tag=tag, level=level)

    if token_type == 'paragraph_open' and not getattr(token, 'hidden', False):
        return Block(kind=BlockKind.PARAGRAPH, tag='p')

    if token_type == 'fence':
        return Block(
            kind=BlockKind.FENCE,
            info=getattr(token, 'info', '') or '',
            content=getattr(token, 'content', '') or '',
        )

    return Block(kind=BlockKind.OTHER, tag=tag)


@dataclass(frozen=True)
class RenderOptions:
    """
    Per-render switches

    Attributes:
        verbose: Emit advisory diagnostics (missing placeholders, highlight failures)
        allow_raw_html: Pass raw HTML in the Markdown source through unescaped
    """
    verbose: bool = False
    allow_raw_html: bool = False


@dataclass
class RenderContext:
    """
    Variables for one template application

    The raw set is declared by the caller for this render: only those names
    are injected at {{{ name }}} without escaping. Every other name is
    escaped and injected at {{ name }}.

    Example:
        RenderContext(
            values={"lang": "python", "code": "<span>...</span>", "raw": "x < 1"},
            raw=frozenset({"code"}),
        )
    """
    values: Dict[str, str]
    raw: FrozenSet[str] = field(default_factory=frozenset)

    def rawName_is(self, name: str) -> bool:
        """Check if a variable is declared raw for this render"""
        return name in self.raw


@dataclass(frozen=True)
class CodeHighlight:
    """
    Outcome of a highlighting attempt

    Attributes:
        lang: Resolved language name (declared tag or the default language)
        markup: Highlighted HTML, or the escaped code on fallback
        is_supported: True only when the highlighter produced the markup
    """
    lang: str
    markup: str
    is_supported: bool
