"""Core functionality module."""

from hla.core.constants import EntityType, FormattingConstants
from hla.core.debounce import Debouncer
from hla.core.highlighting import highlight_text
from hla.core.paging import page_meta, to_page_index, to_request_page

__all__ = [
    "Debouncer",
    "EntityType",
    "FormattingConstants",
    "highlight_text",
    "page_meta",
    "to_page_index",
    "to_request_page",
]
