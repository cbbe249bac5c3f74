"""
Markdown to HTML transformation

Walks the markdown-it token stream once, left to right. Headings,
paragraphs and fences are rendered through templates; every other token
is rendered by markdown-it's own renderer, unchanged.

    heading_open, inline, heading_close    -> template "h1".."h6"
    paragraph_open, inline, paragraph_close -> template "p"
    fence                                  -> template "codeblock"

A heading or paragraph whose open token is not followed by an inline
token and the matching close is treated as foreign: the open token gets
default rendering and the walk resumes at the next token.

Example:
    >>> registry = TemplateRegistry.fromDict({"h2": '<h2 id="{{ id }}">{{ h2 }}</h2>'})
    >>> render("## Hello, World!\\n", registry)
    '<h2 id="hello-world">Hello, World!</h2>'
"""

from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence

from markdown_it import MarkdownIt

from ..models.render import BlockKind, RenderOptions, block_classify
from .codeblock import codeblock_render
from .highlight import Highlighter
from .log import LOG
from .slug import slugify
from .substitute import template_apply, templateFields_apply
from .templates import TemplateRegistry


class WalkState(Enum):
    """States of the block dispatch walk"""
    SCANNING = "scanning"
    CONSUMING_HEADING = "consuming-heading"
    CONSUMING_PARAGRAPH = "consuming-paragraph"


def markdown_make(allow_raw_html: bool = False) -> MarkdownIt:
    """
    Create the markdown-it parser used for rendering

    CommonMark plus tables, strikethrough, bare-URL autolinks and
    typographic replacements ((c), --, smart quotes). Raw HTML in the
    source is passed through only when allow_raw_html is set.
    """
    return (
        MarkdownIt(
            "commonmark",
            {"html": allow_raw_html, "linkify": True, "typographer": True},
        )
        .enable("table")
        .enable("strikethrough")
        .enable(["linkify", "replacements", "smartquotes"])
    )


def inlineText_extract(children: Optional[Sequence[Any]]) -> str:
    """
    Plain text of an inline token's children

    Text and code spans contribute their content; images contribute their
    alt text; breaks become spaces; other markup tokens contribute nothing.
    """
    parts: List[str] = []
    for child in children or []:
        child_type = getattr(child, 'type', '')
        if child_type in ('text', 'code_inline'):
            parts.append(child.content)
        elif child_type == 'image':
            parts.append(inlineText_extract(child.children))
        elif child_type in ('softbreak', 'hardbreak'):
            parts.append(' ')
    return ''.join(parts)


class Transformer:
    """
    Template-driven Markdown renderer

    Holds a markdown-it instance and a highlighter; the template registry
    is passed per call so a reloaded registry never mixes with an old one.
    """

    def __init__(
        self,
        md: Optional[MarkdownIt] = None,
        highlighter: Optional[Highlighter] = None,
        allow_raw_html: bool = False,
    ) -> None:
        self.md = md or markdown_make(allow_raw_html)
        self.highlighter = highlighter or Highlighter()

    def token_renderDefault(self, tokens: Sequence[Any], idx: int, env: Dict[str, Any]) -> str:
        """
        Render one token the way markdown-it would

        Uses the renderer rule for the token type, the inline renderer for
        inline tokens, and renderToken for everything else.
        """
        renderer = self.md.renderer
        token = tokens[idx]
        if token.type == 'inline':
            return renderer.renderInline(token.children or [], self.md.options, env)
        rule = renderer.rules.get(token.type)
        if rule is not None:
            return rule(tokens, idx, self.md.options, env)
        return renderer.renderToken(tokens, idx, self.md.options, env)

    def inline_render(self, inline: Any, env: Dict[str, Any]) -> str:
        """Render an inline token's children to HTML"""
        return self.md.renderer.renderInline(inline.children or [], self.md.options, env)

    def unit_isWellFormed(self, tokens: Sequence[Any], idx: int) -> bool:
        """Check for open -> inline -> matching close starting at idx"""
        if idx + 2 >= len(tokens):
            return False
        opener, inline, closer = tokens[idx], tokens[idx + 1], tokens[idx + 2]
        if getattr(inline, 'type', None) != 'inline':
            return False
        expected_close = opener.type.replace('_open', '_close')
        return getattr(closer, 'type', None) == expected_close

    def tokens_walk(
        self,
        tokens: Sequence[Any],
        registry: TemplateRegistry,
        verbose: bool = False,
        env: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Render a token stream

        Args:
            tokens: markdown-it block tokens
            registry: Template registry for this render
            verbose: Emit advisory diagnostics
            env: markdown-it environment (references etc.)

        Returns:
            Concatenated HTML
        """
        env = env if env is not None else {}
        parts: List[str] = []
        state = WalkState.SCANNING
        i = 0

        while i < len(tokens):
            block = block_classify(tokens[i])

            if block.kind is BlockKind.FENCE:
                parts.append(codeblock_render(
                    block.info, block.content, registry, self.highlighter, verbose
                ))
                i += 1
                continue

            if block.kind is BlockKind.HEADING:
                state = WalkState.CONSUMING_HEADING
            elif block.kind is BlockKind.PARAGRAPH:
                state = WalkState.CONSUMING_PARAGRAPH
            else:
                parts.append(self.token_renderDefault(tokens, i, env))
                i += 1
                continue

            if not self.unit_isWellFormed(tokens, i):
                LOG(f"Malformed {block.kind.value} at token {i}, rendering as is", level=3)
                parts.append(self.token_renderDefault(tokens, i, env))
                state = WalkState.SCANNING
                i += 1
                continue

            inline = tokens[i + 1]
            inner = self.inline_render(inline, env)

            if state is WalkState.CONSUMING_HEADING:
                fields = {block.tag: inner, "id": slugify(inlineText_extract(inline.children))}
                parts.append(templateFields_apply(registry, block.tag, fields, verbose))
            else:
                parts.append(template_apply(registry, block.tag, inner, verbose))

            state = WalkState.SCANNING
            i += 3

        return ''.join(parts)

    def markdown_render(
        self,
        text: str,
        registry: TemplateRegistry,
        options: Optional[RenderOptions] = None,
    ) -> str:
        """Parse text and render it through the templates"""
        options = options or RenderOptions()
        env: Dict[str, Any] = {}
        tokens = self.md.parse(text, env)
        return self.tokens_walk(tokens, registry, verbose=options.verbose, env=env)


@lru_cache(maxsize=2)
def transformer_get(allow_raw_html: bool) -> Transformer:
    """Shared Transformer per raw-HTML setting"""
    return Transformer(allow_raw_html=allow_raw_html)


def render(
    text: str,
    registry: TemplateRegistry,
    options: Optional[RenderOptions] = None,
) -> str:
    """
    Render a Markdown document to HTML through the templates

    Args:
        text: Markdown source
        registry: Template registry
        options: Verbosity and raw-HTML switches

    Returns:
        HTML fragment
    """
    options = options or RenderOptions()
    return transformer_get(options.allow_raw_html).markdown_render(text, registry, options)
