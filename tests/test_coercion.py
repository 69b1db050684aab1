from datetime import date, datetime, time, timezone

from hms_records.commons.coercion import (
    age_on,
    compact,
    fixed,
    is_blank,
    to_bool,
    to_float,
    to_int,
    to_opt_datetime,
    to_opt_float,
    to_str,
    to_str_list,
    to_time_of_day,
)


def test_to_float_takes_numeric_prefix():
    assert to_float("12.5kg") == 12.5
    assert to_float(" 70 ") == 70.0
    assert to_float(3) == 3.0


def test_to_float_never_returns_nan_or_inf():
    assert to_float("abc") == 0.0
    assert to_float(float("nan")) == 0.0
    assert to_float(float("inf")) == 0.0
    assert to_float("1e999") == 0.0
    assert to_float(True) == 0.0
    assert to_float(None, default=5.0) == 5.0


def test_to_opt_float_distinguishes_absent():
    assert to_opt_float("") is None
    assert to_opt_float("n/a") is None
    assert to_opt_float("98") == 98.0


def test_to_int_like_parse_int():
    assert to_int("20 min") == 20
    assert to_int(7.9) == 7
    assert to_int("x") == 0


def test_to_str_shapes():
    assert to_str(70.0) == "70"
    assert to_str(24.25) == "24.25"
    assert to_str(True) == "true"
    assert to_str(["a", "b"]) == "a,b"
    assert to_str(None, default="-") == "-"


def test_to_bool_words():
    assert to_bool("yes") is True
    assert to_bool("off") is False
    assert to_bool("maybe", default=True) is True


def test_to_str_list_accepts_list_comma_string_and_nested():
    assert to_str_list(" a , b ,,") == ["a", "b"]
    assert to_str_list(["x", None, 3]) == ["x", "3"]
    assert to_str_list({"currentConditions": ["X"]}, sub_key="currentConditions") == ["X"]
    assert to_str_list({"other": ["X"]}, sub_key="currentConditions") == []
    assert to_str_list(5) == []


def test_to_opt_datetime_formats():
    dt = to_opt_datetime("2025-03-01T10:00:00Z")
    assert dt == datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
    assert to_opt_datetime("2025-03-01") == datetime(2025, 3, 1)
    assert to_opt_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert to_opt_datetime("garbage") is None
    assert to_opt_datetime(True) is None


def test_to_time_of_day():
    assert to_time_of_day("09:30") == time(9, 30)
    assert to_time_of_day({"hour": 14, "minute": 5}) == time(14, 5)
    assert to_time_of_day("25:00") == time(0, 0)
    assert to_time_of_day(None) == time(0, 0)


def test_fixed_rounds_half_up_on_binary_value():
    assert fixed(2.5, 0) == "3"
    assert fixed(24.25, 1) == "24.3"
    # 1.005 es 1.00499999... en binario
    assert fixed(1.005, 2) == "1.00"


def test_age_on_birthday_not_reached():
    assert age_on(date(2000, 1, 15), date(2024, 1, 10)) == 23
    assert age_on(date(2000, 1, 15), date(2024, 1, 15)) == 24


def test_compact_drops_none_and_empty():
    assert compact({"a": None, "b": "", "c": 0, "d": False}) == {"c": 0, "d": False}


def test_is_blank_only_for_none_and_empty_string():
    assert is_blank(None)
    assert is_blank("")
    assert not is_blank("  ")
    assert not is_blank(0)
    assert not is_blank([])
