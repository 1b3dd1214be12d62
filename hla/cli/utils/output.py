"""Shared output handlers for CLI commands."""

import csv
import io
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rich.console import Console

from hla.core.constants import FormattingConstants

console = Console()


def _write(content: str, output_path: Path | None) -> None:
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        console.print(f"[bold green]✓ Saved to:[/bold green] {output_path}")
    else:
        print(content)


def handle_json_output(
    data: Any,
    output_path: Path | None,
    transformer: Callable[[Any], Any] | None = None,
) -> None:
    """Handle JSON format output.

    Args:
        data: Data to output (can be any type)
        output_path: Optional file path to save output
        transformer: Optional function to transform data before serialization
    """
    output_data = transformer(data) if transformer else data
    _write(json.dumps(output_data, indent=FormattingConstants.JSON_INDENT, default=str), output_path)


def handle_csv_output(
    rows: list[dict[str, Any]],
    output_path: Path | None,
    fieldnames: list[str] | None = None,
) -> None:
    """Handle CSV format output.

    Args:
        rows: Flat records to write
        output_path: Optional file path to save output
        fieldnames: Column order (defaults to the keys of the first row)
    """
    string_buffer = io.StringIO()
    if rows:
        writer = csv.DictWriter(string_buffer, fieldnames=fieldnames or list(rows[0].keys()))
        writer.writeheader()
        for row in rows:
            writer.writerow({key: "" if value is None else value for key, value in row.items()})
    _write(string_buffer.getvalue(), output_path)
