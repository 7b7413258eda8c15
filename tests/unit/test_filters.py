"""Unit tests for renderer filters."""

import pytest

from sprint0.renderers.filters import format_currency, format_percent, md_cell, pluralize


class TestFormatCurrency:
    """Tests for format_currency filter."""

    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (120000, "$120,000"),
            (0, "$0"),
            (-5000, "-$5,000"),
            (1234.6, "$1,235"),
            (None, "N/A"),
        ],
    )
    def test_format(self, amount: float | int | None, expected: str) -> None:
        assert format_currency(amount) == expected


class TestFormatPercent:
    """Tests for format_percent filter."""

    def test_drops_trailing_zero(self) -> None:
        assert format_percent(50.0) == "50%"

    def test_keeps_one_decimal(self) -> None:
        assert format_percent(12.34) == "12.3%"

    def test_negative(self) -> None:
        assert format_percent(-16.7) == "-16.7%"

    def test_none(self) -> None:
        assert format_percent(None) == "N/A"


class TestPluralize:
    """Tests for pluralize filter."""

    def test_singular(self) -> None:
        assert pluralize(1, "week") == "1 week"

    def test_plural(self) -> None:
        assert pluralize(18, "week") == "18 weeks"
        assert pluralize(0, "engineer") == "0 engineers"

    def test_irregular_plural(self) -> None:
        assert pluralize(2, "entity", "entities") == "2 entities"


class TestMdCell:
    """Tests for md_cell filter.

    Table cells must stay on one line and must not split the row.
    """

    def test_escapes_pipes(self) -> None:
        assert md_cell("a|b") == "a\\|b"

    def test_collapses_whitespace(self) -> None:
        assert md_cell("Why: one\n\ntwo  three") == "Why: one two three"

    def test_none_and_numbers(self) -> None:
        assert md_cell(None) == ""
        assert md_cell(42) == "42"
