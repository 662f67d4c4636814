"""Per-line syntax highlighting using Pygments tokens and Rich styles."""

from __future__ import annotations

import os

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_for_filename
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound
from rich.segment import Segment
from rich.style import Style
from rich.syntax import Syntax

from ..utils.logger import log

DEFAULT_THEME = "monokai"


class SyntaxHighlighter:
    """Turns a line of source into styled Rich segments.

    Lexers are looked up once per file extension. Lines are highlighted
    independently, so multi-line constructs (block comments, strings) are
    only approximated.
    """

    def __init__(self, theme: str = DEFAULT_THEME):
        self._theme = Syntax.get_theme(theme)
        self._lexers: dict[str, Lexer | None] = {}

    def lexer_for(self, file_path: str | None) -> Lexer | None:
        if not file_path:
            return None
        name = os.path.basename(file_path)
        _, ext = os.path.splitext(name)
        key = ext.lower() or name
        if key not in self._lexers:
            try:
                lexer = get_lexer_for_filename(name, stripnl=False, ensurenl=False)
                # Plain text keeps the diff line colors
                self._lexers[key] = None if isinstance(lexer, TextLexer) else lexer
            except ClassNotFound:
                log.debug(f"[SYNTAX] No lexer for {name}")
                self._lexers[key] = None
        return self._lexers[key]

    def highlight(self, code: str, file_path: str | None, default_style: Style | None = None) -> list[Segment]:
        """Token-styled segments for ``code``, or one ``default_style`` segment when unlexed."""
        lexer = self.lexer_for(file_path)
        if lexer is None or not code:
            return [Segment(code, default_style)]
        segments = [
            Segment(value, self._theme.get_style_for_token(token_type))
            for token_type, value in lexer.get_tokens(code)
            if value
        ]
        # Search offsets are laid over these spans, so the text must be exact
        if "".join(s.text for s in segments) != code:
            return [Segment(code, default_style)]
        return segments
