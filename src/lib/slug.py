"""
Heading id slugification

Turns heading text into a URL-safe id. Word characters and the CJK range
U+3000-U+9FFF survive, so Japanese and Chinese headings keep their script.
"""

import re

_SEPARATOR_RUN = re.compile(r"[^\w\u3000-\u9fff]+")
_HYPHEN_RUN = re.compile(r"-+")
_EDGES = re.compile(r"^[-\s]+|[-\s]+$")


def slugify(text: str) -> str:
    """
    Derive a slug from text

    Idempotent: slugify(slugify(x)) == slugify(x). Identical headings get
    identical ids; no de-duplication is attempted.

    Example:
        >>> slugify('Hello, World!')
        'hello-world'
        >>> slugify('日本語 見出し')
        '日本語-見出し'
    """
    slug = text.lower().strip()
    slug = _SEPARATOR_RUN.sub("-", slug)
    slug = _HYPHEN_RUN.sub("-", slug)
    return _EDGES.sub("", slug)
