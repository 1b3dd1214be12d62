"""Statistics tracking models for commands."""

from pydantic import BaseModel


class ListCommandStats(BaseModel):
    """Statistics for list command execution."""

    start_time: float
    rows: int = 0
    total: int = 0
    search_term: str | None = None


class ExportResult(BaseModel):
    """Result of walking every page of an entity."""

    rows: int = 0
    pages: int = 0
    total: int = 0
