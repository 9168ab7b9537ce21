"""Tests for the PIN classifier and universe generator."""
import pytest
from pin_generator.models import PinState, PIN_FIELD, STATE_FIELD
from pin_generator.utils.pin_rules import (
    ALLOWED,
    NOT_ALLOWED,
    classify,
    classify_reasons,
    generate_universe,
    is_ascending_run,
    is_descending_run,
    is_paired_doubles,
    is_palindrome,
    is_year_or_degenerate,
)


@pytest.mark.parametrize("code, rule", [
    ("5544", "paired_doubles"),
    ("1234", "ascending_run"),
    ("4321", "descending_run"),
    ("4334", "palindrome"),
    ("1999", "year_or_degenerate"),
    ("2727", "year_or_degenerate"),
    ("0007", "year_or_degenerate"),
])
def test_known_weak_pins(code, rule):
    assert classify(code) == NOT_ALLOWED
    assert rule in classify_reasons(code)


def test_unremarkable_pin_is_allowed():
    assert classify("3759") == ALLOWED
    assert classify_reasons("3759") == []


def test_runs_do_not_wrap_past_nine():
    assert not is_ascending_run("7890")
    assert not is_ascending_run("8901")
    assert is_ascending_run("6789")
    assert not is_descending_run("2109")
    assert is_descending_run("3210")


def test_individual_rules():
    assert is_paired_doubles("0099")
    assert not is_paired_doubles("0909")
    assert is_palindrome("1221")
    assert not is_palindrome("1223")
    for year in ("1900", "1985", "2000", "2019", "2029"):
        assert is_year_or_degenerate(year)
    assert not is_year_or_degenerate("2030")
    assert not is_year_or_degenerate("1899")
    assert is_year_or_degenerate("0000")


def test_classification_is_deterministic_and_total():
    for record in generate_universe():
        code = record[PIN_FIELD]
        first = classify(code)
        assert first in (ALLOWED, NOT_ALLOWED)
        assert classify(code) == first


@pytest.mark.parametrize("bad", ["123", "12345", "12a4", "", " 123", 1234, None, "１２３４"])
def test_rejects_malformed_codes(bad):
    with pytest.raises(ValueError):
        classify(bad)


def test_universe_is_complete():
    universe = generate_universe()
    codes = [record[PIN_FIELD] for record in universe]

    assert len(universe) == 10000
    assert codes[0] == "0000"
    assert codes[-1] == "9999"
    assert codes == sorted(codes)
    assert len(set(codes)) == 10000
    assert all(len(code) == 4 and code.isdigit() for code in codes)
    assert all(record[STATE_FIELD] == PinState.UNALLOCATED for record in universe)
    assert all("id" not in record for record in universe)


@pytest.mark.parametrize("bad", ["12", "abcd", 4334])
def test_reasons_reject_malformed_codes(bad):
    with pytest.raises(ValueError):
        classify_reasons(bad)
