"""CLI utilities module."""

from hla.cli.utils.auth import open_admin, resolve_token
from hla.cli.utils.errors import error_boundary
from hla.cli.utils.options import (
    ENTITY_ARGUMENT,
    OUTPUT_PATH_OPTION,
    PAGE_OPTION,
    PAGE_SIZE_OPTION,
    SEARCH_OPTION,
    TOKEN_OPTION,
    ExportFormat,
    OutputFormat,
)
from hla.cli.utils.output import handle_csv_output, handle_json_output

__all__ = [
    "ENTITY_ARGUMENT",
    "OUTPUT_PATH_OPTION",
    "PAGE_OPTION",
    "PAGE_SIZE_OPTION",
    "SEARCH_OPTION",
    "TOKEN_OPTION",
    "ExportFormat",
    "OutputFormat",
    "error_boundary",
    "handle_csv_output",
    "handle_json_output",
    "open_admin",
    "resolve_token",
]
