"""
Fenced code block rendering

A fence becomes a `codeblock` template application with three variables:

    lang   resolved language name               escaped, {{ lang }}
    code   highlighted (or escaped) markup      raw,     {{{ code }}}
    raw    original code text                   escaped, {{ raw }}

Without a codeblock template the default wrapper is emitted:

    <pre><code class="hljs language-python">...</code></pre>

where the language- class only appears when highlighting succeeded.
"""

from typing import Optional

from markdown_it.common.utils import escapeHtml

from ..config import appsettings
from ..models.render import CodeHighlight, RenderContext
from .highlight import Highlighter
from .log import WARN
from .substitute import templateWithRaw_apply
from .templates import TemplateRegistry

CODEBLOCK_KEY = "codeblock"


def language_fromInfo(info: str) -> str:
    """
    First whitespace-delimited token of a fence info string

    Example:
        >>> language_fromInfo('javascript {1-3}')
        'javascript'
        >>> language_fromInfo('   ')
        ''
    """
    parts = info.split()
    return parts[0] if parts else ""


def code_highlight(
    code: str,
    declared: str,
    highlighter: Highlighter,
    verbose: bool = False,
) -> CodeHighlight:
    """
    Highlight code, falling back to escaped text

    Highlighting is attempted only for a declared language the highlighter
    knows. Any exception raised while highlighting is absorbed.

    Args:
        code: Fence body
        declared: Language from the info string, possibly empty
        highlighter: Highlighter to use
        verbose: Warn when highlighting fails

    Returns:
        CodeHighlight with the resolved language and markup
    """
    lang = declared or appsettings.default_language

    if declared and highlighter.language_isKnown(declared):
        try:
            markup = highlighter.code_highlight(code, declared)
            return CodeHighlight(lang=lang, markup=markup, is_supported=True)
        except Exception as e:
            if verbose:
                WARN(f'highlighting "{declared}" failed, emitting plain code: {e}')

    return CodeHighlight(lang=lang, markup=escapeHtml(code), is_supported=False)


def codeblock_render(
    info: str,
    code: str,
    registry: TemplateRegistry,
    highlighter: Optional[Highlighter] = None,
    verbose: bool = False,
) -> str:
    """
    Render one fence to HTML

    Args:
        info: Fence info string
        code: Fence body
        registry: Template registry
        highlighter: Highlighter (a default Pygments highlighter when None)
        verbose: Emit advisory diagnostics

    Returns:
        HTML for the code block
    """
    highlighter = highlighter or Highlighter()
    result = code_highlight(code, language_fromInfo(info), highlighter, verbose)

    context = RenderContext(
        values={"lang": result.lang, "code": result.markup, "raw": code},
        raw=frozenset({"code"}),
    )
    html = templateWithRaw_apply(registry, CODEBLOCK_KEY, context, verbose)
    if html is not None:
        return html

    css_class = "hljs"
    if result.is_supported:
        css_class += f" language-{escapeHtml(result.lang)}"
    return f'<pre><code class="{css_class}">{result.markup}</code></pre>'
