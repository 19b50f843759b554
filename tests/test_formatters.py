import pytest

from gst_utils.formatters import (
    capitalize,
    format_currency,
    parse_currency,
    snake_to_title,
    truncate,
)


def test_format_currency():
    assert format_currency(1234.56) == "1 234,56 kr"
    assert format_currency(1234.56, "USD") == "$1,234.56"
    assert format_currency(5, "eur") == "5,00 €"
    assert format_currency(-12.5, "SEK") == "-12,50 kr"
    assert format_currency(1234.5, "GBP") == "£1,234.50"
    assert format_currency(1234.5, "CHF") == "1,234.50 CHF"


@pytest.mark.parametrize(
    "text, expected",
    [("45,90 kr", 45.9), ("$12.50", 12.5), ("-3", -3.0), ("kr", None), ("", None), (None, None)],
)
def test_parse_currency(text, expected):
    assert parse_currency(text) == expected


def test_text_helpers():
    assert truncate("Organic Bananas", 10) == "Organic..."
    assert truncate("Milk", 10) == "Milk"
    assert capitalize("banana") == "Banana"
    assert capitalize("") == ""
    assert snake_to_title("meat_fish") == "Meat Fish"
    assert snake_to_title("fruits_vegetables") == "Fruits Vegetables"
