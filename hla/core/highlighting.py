"""Search term highlighting for table cells."""

import re

from rich.text import Text

HIGHLIGHT_STYLE = "bold black on yellow"


def highlight_text(text: str, term: str | None) -> Text:
    """Highlight every case-insensitive occurrence of ``term`` in ``text``.

    Args:
        text: Cell text
        term: Active search term (empty or None leaves the text unstyled)

    Returns:
        Rich Text with matches styled
    """
    rich_text = Text(text)
    if not text or not term or not term.strip():
        return rich_text

    pattern = re.compile(re.escape(term.strip()), re.IGNORECASE)
    for match in pattern.finditer(text):
        rich_text.stylize(HIGHLIGHT_STYLE, match.start(), match.end())
    return rich_text
