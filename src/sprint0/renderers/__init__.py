"""Formatting filters for report content and Markdown output."""

from sprint0.renderers.filters import (
    format_currency,
    format_percent,
    md_cell,
    pluralize,
)

__all__ = [
    "format_currency",
    "format_percent",
    "md_cell",
    "pluralize",
]
