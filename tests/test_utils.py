from datetime import date

from webcite.models import DateTime, Year, YearMonth, YearMonthDay
from webcite.utils import (
    extract_doi,
    html_to_text,
    normalize_whitespace,
    parse_html_date,
    parse_loose_date,
    parse_partial_date,
    slugify,
)


def test_extract_doi_from_text() -> None:
    text = "Published as https://doi.org/10.1234/Some.Article-Title in 2020"
    assert extract_doi(text) == "10.1234/Some.Article-Title"
    assert extract_doi("no identifier here") is None


def test_slugify_basic() -> None:
    assert slugify("Neuro Imaging & Behavior") == "neuro-imaging-behavior"


def test_normalize_whitespace() -> None:
    assert normalize_whitespace("  A\n\t  title  ") == "A title"


def test_html_to_text_drops_scripts_and_truncates() -> None:
    raw = "<html><script>var x = 1;</script><p>Hello &amp; <b>bye</b></p></html>"
    assert html_to_text(raw) == "Hello & bye"
    assert len(html_to_text("<p>" + "a" * 5000 + "</p>")) == 4000


def test_html_to_text_ignores_markup_inside_attributes() -> None:
    assert html_to_text('<div title="a > b">Hello</div>') == "Hello"
    assert html_to_text("<noscript>Enable JS</noscript><style>p {}</style><p>Body</p>") == "Body"


def test_parse_html_date_variants() -> None:
    assert isinstance(parse_html_date("2024-01-15T10:00:00Z"), DateTime)
    assert isinstance(parse_html_date("2024-01-15T10:00:00"), DateTime)
    assert parse_html_date("2024-01-15") == YearMonthDay(date(2024, 1, 15))
    assert parse_html_date("last tuesday") is None


def test_parse_partial_date_keeps_precision() -> None:
    assert parse_partial_date("2024") == Year(2024)
    assert parse_partial_date("2024-03") == YearMonth(2024, 3)
    assert parse_partial_date("2024-13") is None


def test_parse_loose_date_long_forms() -> None:
    assert parse_loose_date("January 15, 2024") == YearMonthDay(date(2024, 1, 15))
    assert parse_loose_date("15 Jan 2024") == YearMonthDay(date(2024, 1, 15))
    assert parse_loose_date("0999") is None
