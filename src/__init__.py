"""
mdxformer - Template-driven Markdown to HTML transformer

Converts Markdown to HTML, substituting user supplied templates for
headings, paragraphs and fenced code blocks.
"""

__version__ = "1.0.0"
__author__ = "Rudolph Pienaar"
__email__ = "rudolph.pienaar@gmail.com"

from .lib import render, slugify, TemplateRegistry, templates_load, session_start, LOG, state_connectToLogger

__all__ = [
    "render",
    "slugify",
    "TemplateRegistry",
    "templates_load",
    "session_start",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
