import pytest

from tuffous.lib.parsing import parse_bool, parse_selection


def test_selection_numbers_and_spans():
    assert parse_selection("1 3, 5-7") == [1, 3, 5, 6, 7]


def test_selection_dedups_in_first_order():
    assert parse_selection("2 2 1-3") == [2, 1, 3]


def test_selection_ignores_junk():
    assert parse_selection("a 2 7-5 0 x-y") == [2]
    assert parse_selection("") == []


def test_parse_bool():
    assert parse_bool("true") is True
    assert parse_bool(" Yes ") is True
    assert parse_bool("0") is False
    with pytest.raises(ValueError):
        parse_bool("maybe")
