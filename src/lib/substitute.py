"""
Placeholder substitution engine

Templates carry two placeholder forms:

    {{ name }}     value is HTML-escaped before insertion
    {{{ name }}}   value is inserted verbatim

Which form a variable uses is decided by the caller through the raw set of
a RenderContext, never by scanning the template. All placeholders of a
template are replaced in a single pass, so text inserted for one
placeholder is never scanned for further placeholders.
"""

import re
from typing import Dict, Optional

from markdown_it.common.utils import escapeHtml

from ..models.render import RenderContext
from .log import WARN
from .templates import TemplateRegistry


def placeHolder_make(name: str, raw: bool = False) -> str:
    """
    Build the placeholder text for a variable

    Example:
        >>> placeHolder_make('code', raw=True)
        '{{{ code }}}'
    """
    if raw:
        return f"{{{{{{ {name} }}}}}}"
    return f"{{{{ {name} }}}}"


def placeholders_substitute(
    template: str,
    replacements: Dict[str, str],
    tag: str = "",
    verbose: bool = False,
) -> str:
    """
    Replace placeholder text with values in one pass over the template

    Args:
        template: Template text
        replacements: Placeholder text (e.g. "{{ id }}") -> inserted text
        tag: Template key, used in diagnostics
        verbose: Warn about placeholders the template does not contain

    Returns:
        Template with every occurrence of every placeholder replaced
    """
    if verbose:
        for placeholder in replacements:
            if placeholder not in template:
                WARN(f'template "{tag}" has no placeholder "{placeholder}"')

    if not replacements:
        return template

    # Longest first so "{{{ x }}}" wins over an overlapping "{{ x }}"
    ordered = sorted(replacements, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(p) for p in ordered))
    return pattern.sub(lambda match: replacements[match.group(0)], template)


def template_apply(
    registry: TemplateRegistry,
    tag: str,
    inner_html: str,
    verbose: bool = False,
) -> str:
    """
    Single-slot substitution of {{ tag }}

    inner_html must already be HTML-safe (the inline renderer's output);
    it is inserted as is.

    Args:
        registry: Template registry
        tag: Element key (e.g. "p")
        inner_html: Rendered inline content
        verbose: Warn when the template lacks the placeholder

    Returns:
        Filled template, or <tag>inner_html</tag> when no template exists
    """
    return templateFields_apply(registry, tag, {tag: inner_html}, verbose)


def templateFields_apply(
    registry: TemplateRegistry,
    tag: str,
    fields: Dict[str, str],
    verbose: bool = False,
) -> str:
    """
    Substitute several already HTML-safe fields at their {{ name }} slots

    Used for headings, which fill both {{ hN }} and {{ id }}.

    Returns:
        Filled template, or <tag>fields[tag]</tag> when no template exists
    """
    template = registry.get(tag)
    if template is None:
        return f"<{tag}>{fields.get(tag, '')}</{tag}>"

    replacements = {placeHolder_make(name): value for name, value in fields.items()}
    return placeholders_substitute(template, replacements, tag=tag, verbose=verbose)


def templateWithRaw_apply(
    registry: TemplateRegistry,
    tag: str,
    context: RenderContext,
    verbose: bool = False,
) -> Optional[str]:
    """
    Multi-slot substitution honouring the caller's raw set

    Raw names are injected verbatim at {{{ name }}}; every other name is
    escaped and injected at {{ name }}.

    Args:
        registry: Template registry
        tag: Element key (e.g. "codeblock")
        context: Values plus the names declared raw
        verbose: Warn about missing placeholders

    Returns:
        Filled template, or None when no template is registered for tag.
        The caller owns the fallback shape.
    """
    template = registry.get(tag)
    if template is None:
        return None

    replacements: Dict[str, str] = {}
    for name, value in context.values.items():
        if context.rawName_is(name):
            replacements[placeHolder_make(name, raw=True)] = value
        else:
            replacements[placeHolder_make(name)] = escapeHtml(value)

    return placeholders_substitute(template, replacements, tag=tag, verbose=verbose)
