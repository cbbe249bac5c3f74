"""
Syntax highlighting through Pygments

Wraps the two questions the code-block renderer asks of a highlighter:
is a language known, and what is the highlighted markup for some code.
The formatter runs with nowrap=True so only the inner <span> markup is
produced; the surrounding <pre><code> belongs to the template.
"""

from typing import Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from ..config import appsettings


class Highlighter:
    """
    Pygments-backed highlighter

    Attributes:
        style: Pygments style name (used with inline styles)
        noclasses: Emit style attributes instead of CSS classes
    """

    def __init__(self, style: Optional[str] = None, noclasses: Optional[bool] = None) -> None:
        self.style = style if style is not None else appsettings.pygments_style
        self.noclasses = noclasses if noclasses is not None else appsettings.highlight_noclasses

    def language_isKnown(self, name: str) -> bool:
        """Check if Pygments has a lexer registered under name"""
        if not name:
            return False
        try:
            get_lexer_by_name(name)
        except ClassNotFound:
            return False
        return True

    def code_highlight(self, code: str, name: str) -> str:
        """
        Highlight code as language name

        Raises:
            ClassNotFound: If the language is unknown
            Exception: Whatever the lexer or formatter raises
        """
        # Blank lines at either end belong to the code
        lexer = get_lexer_by_name(name, stripnl=False)
        formatter = HtmlFormatter(nowrap=True, style=self.style, noclasses=self.noclasses)
        return highlight(code, lexer, formatter)
