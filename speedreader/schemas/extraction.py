"""Pydantic schemas for the extractor -> tokenizer boundary."""

from pydantic import Field

from speedreader.schemas.base import BoundaryModel


class ExtractedLine(BoundaryModel):
    line_index: int = Field(..., ge=0)
    text: str


class ExtractedPage(BoundaryModel):
    text: str = ""
    lines: list[ExtractedLine] = Field(default_factory=list)
    width: float | None = None
    height: float | None = None


class ExtractedDocument(BoundaryModel):
    total_pages: int = Field(..., ge=0)
    pages: dict[int, ExtractedPage] = Field(default_factory=dict)
    file_name: str | None = None
