from datetime import date, datetime, timedelta, timezone

import pytest

from webcite.models import (
    AttributeType,
    Authors,
    Date,
    DateTime,
    Generic,
    Organization,
    Person,
    Title,
    TranslatedTitle,
    Translation,
    Year,
    YearMonth,
    YearMonthDay,
    attribute_to_json,
)


def test_attributes_compare_structurally() -> None:
    assert Title("A") == Title("A")
    assert Authors([Person("Jane Smith")]) == Authors((Person("Jane Smith"),))
    assert Title("A") != Title("B")


def test_each_attribute_maps_to_one_type() -> None:
    assert Title("A").attribute_type is AttributeType.TITLE
    assert TranslatedTitle(Translation("B", "en")).attribute_type is AttributeType.TITLE
    assert Authors(()).attribute_type is AttributeType.AUTHOR


def test_date_display_keeps_precision() -> None:
    assert str(Date(Year(2020))) == "2020"
    assert str(Date(YearMonth(2020, 3))) == "2020-03"
    assert str(Date(YearMonthDay(date(2020, 3, 7)))) == "2020-03-07"


def test_datetime_is_normalized_to_utc() -> None:
    offset = timezone(timedelta(hours=2))
    value = DateTime(datetime(2024, 1, 1, 1, 30, tzinfo=offset))
    assert value.value.tzinfo == timezone.utc
    assert str(value) == "2023-12-31"


def test_year_month_rejects_bad_month() -> None:
    with pytest.raises(ValueError):
        YearMonth(2020, 13)


def test_authors_display_and_json() -> None:
    authors = Authors((Person("Jane Smith"), Organization("Reuters"), Generic("staff")))
    assert str(authors) == "Jane Smith, Reuters, staff"
    assert attribute_to_json(authors) == [
        {"kind": "person", "name": "Jane Smith"},
        {"kind": "organization", "name": "Reuters"},
        {"kind": "generic", "name": "staff"},
    ]
