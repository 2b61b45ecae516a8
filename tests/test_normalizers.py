from datetime import date

import pytest

from cms_converter.normalizers import DateNormalizer, DateValidator, clean_ocr_text, clean_value, normalize_date


@pytest.mark.parametrize("raw, expected", [
    ("1/5/2024", "20240105"),
    ("12-31-1999", "19991231"),
    ("03/07/1985", "19850307"),
    (" 3/7/1985 ", "19850307"),
    ("20240105", "20240105"),
])
def test_normalize_accepted_shapes(raw, expected):
    assert normalize_date(raw) == expected


@pytest.mark.parametrize("raw", ["", "Jan 5 2024", "2024-01-05", "1/5/24", "2024010", "13/45", "١/٥/٢٠٢٤", "٢٠٢٤٠١٠٥"])
def test_normalize_unrecognised_shapes_give_empty_token(raw):
    assert normalize_date(raw) == ""


@pytest.mark.parametrize("raw", ["1/5/2024", "20240105", "12-31-1999", "garbage", ""])
def test_normalize_is_idempotent(raw):
    once = normalize_date(raw)
    assert normalize_date(once) == once


def test_from_parts_zero_pads():
    assert DateNormalizer.from_parts("3", "7", "1985") == "19850307"
    assert DateNormalizer.from_parts(11, 2, 2001) == "20011102"


def test_to_display():
    assert DateNormalizer.to_display("19850307") == "03/07/1985"
    assert DateNormalizer.to_display("not a date") == "not a date"


def test_is_normalized():
    normalizer = DateNormalizer()
    assert normalizer.is_normalized("20240105")
    assert not normalizer.is_normalized("1/5/2024")


def test_validator_year_range_and_calendar():
    validator = DateValidator(today=date(2024, 6, 1))

    assert validator.is_valid("02", "29", "2020")
    assert validator.is_valid("1", "1", "1900")
    assert not validator.is_valid("02", "30", "2020")
    assert not validator.is_valid("01", "01", "1899")
    assert not validator.is_valid("01", "01", "2025")
    assert not validator.is_valid("ab", "01", "2000")


def test_validator_messages():
    validator = DateValidator(today=date(2024, 6, 1))

    valid, message = validator.validate("01", "01", "1850")
    assert not valid
    assert "1850" in message


def test_clean_ocr_text_flattens_and_filters():
    assert clean_ocr_text("PATIENT'S  NAME |  DOE, JANE\n* 1a.") == "PATIENT'S NAME DOE, JANE 1a."
    assert clean_ocr_text("") == ""


def test_clean_value_strips_edge_punctuation():
    assert clean_value(" : DOE, JANE ,") == "DOE, JANE"
    assert clean_value("DR. ALAN SMITH") == "DR. ALAN SMITH"
    assert clean_value(" -- ") == ""


def test_validator_rejects_non_ascii_digits():
    validator = DateValidator(today=date(2024, 6, 1))
    assert not validator.is_valid("٠٤", "١٥", "١٩٨٠")


def test_clean_ocr_text_keeps_accented_letters():
    assert clean_ocr_text("PATIENT NAME: MÜLLER, JOSÉ") == "PATIENT NAME: MÜLLER, JOSÉ"
    assert clean_ocr_text("DOE____JANE") == "DOEJANE"
