"""Formatting helpers shared by the report assembler and Jinja2 templates.

These only format values; they never compute new figures.
"""

import re

_WHITESPACE_RE = re.compile(r"\s+")


def format_currency(amount: float | int | None) -> str:
    """Format an amount as whole dollars with thousands separators.

    Examples:
        >>> format_currency(120000)
        '$120,000'
        >>> format_currency(-5000)
        '-$5,000'
    """
    if amount is None:
        return "N/A"
    value = round(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,}"


def format_percent(value: float | int | None, digits: int = 1) -> str:
    """Format a percentage, dropping a trailing ``.0``.

    Examples:
        >>> format_percent(50.0)
        '50%'
        >>> format_percent(12.34)
        '12.3%'
    """
    if value is None:
        return "N/A"
    rounded = round(float(value), digits)
    if rounded.is_integer():
        return f"{int(rounded)}%"
    return f"{rounded}%"


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return ``"<count> <noun>"`` with the noun pluralized when needed."""
    noun = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {noun}"


def md_cell(value: object) -> str:
    """Make a value safe for a Markdown table cell.

    Collapses whitespace and escapes pipes so the row layout survives.
    """
    text = "" if value is None else str(value)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return text.replace("|", "\\|")
