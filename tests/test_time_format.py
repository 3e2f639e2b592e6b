"""test suite for race time formatting."""
import math
import re
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mkwlog.utils.time_format import (
    format_seconds,
    is_valid_lenient,
    is_valid_strict,
    parse_mask,
    to_seconds,
)

MASK_SHAPE = re.compile(r"^\d{1,2}(:[0-5]\d(\.\d{3})?)?$")


class TestParseMask:
    @pytest.mark.parametrize("raw,expected", [
        ("1", "1"),
        ("12", "0:12"),
        ("132", "1:32"),
        ("1234", "0:01.234"),
        ("12345", "0:12.345"),
        ("132456", "1:32.456"),
    ])
    def test_digits_fill_from_the_right(self, raw, expected):
        assert parse_mask(raw) == expected

    def test_seconds_are_clamped(self):
        assert parse_mask("99") == "0:59"
        assert parse_mask("175") == "1:59"
        assert parse_mask("175000") == "1:59.000"

    def test_non_digits_and_leading_zeros_ignored(self):
        assert parse_mask("0:13.245") == "0:13.245"
        assert parse_mask("1:32.4567") == "13:24.567"
        assert parse_mask("abc") == ""
        assert parse_mask("") == ""
        assert parse_mask("000") == "0"

    def test_typing_onto_masked_value(self):
        value = ""
        for key in "132456":
            value = parse_mask(value + key)
        assert value == "1:32.456"

    def test_shape_for_every_length(self):
        for sample in ("1234567", "9999999", "5000001"):
            for n in range(1, 7):
                result = parse_mask(sample[:n])
                assert MASK_SHAPE.match(result), result
                assert len(result) <= 8

    def test_seven_digits_keep_two_minute_digits(self):
        result = parse_mask("1032456")
        assert result == "10:32.456"
        assert MASK_SHAPE.match(result)
        assert is_valid_strict(result)
        assert to_seconds(result) == pytest.approx(632.456)

    def test_digits_past_seven_are_ignored(self):
        assert parse_mask("10:32.4567") == "10:32.456"
        assert parse_mask("99999999") == "99:59.999"

    def test_short_mask_is_not_submittable(self):
        assert not is_valid_strict(parse_mask("1"))
        assert not is_valid_strict(parse_mask("132"))
        assert is_valid_strict(parse_mask("132456"))


class TestGrammars:
    def test_strict(self):
        assert is_valid_strict("1:32.456")
        assert is_valid_strict("12:05.000")
        assert not is_valid_strict("1:65.456")
        assert not is_valid_strict("132.456")
        assert not is_valid_strict("123:05.000")
        assert not is_valid_strict("1:32.45")
        assert not is_valid_strict("")

    def test_lenient_accepts_what_strict_rejects(self):
        assert is_valid_lenient("1:65.456")
        assert is_valid_lenient("123:05.000")
        assert not is_valid_strict("1:65.456")

    def test_lenient_still_needs_the_shape(self):
        assert not is_valid_lenient("132.456")
        assert not is_valid_lenient("1:5.456")
        assert not is_valid_lenient("")


class TestToSeconds:
    def test_minutes_and_seconds(self):
        assert to_seconds("1:32.456") == pytest.approx(92.456)

    def test_bare_seconds(self):
        assert to_seconds("45.000") == 45.0

    def test_garbage_is_nan(self):
        assert math.isnan(to_seconds("abc"))
        assert math.isnan(to_seconds("1:2:3"))
        assert math.isnan(to_seconds(""))

    def test_format_seconds(self):
        assert format_seconds(92.456) == "1:32.456"
        assert format_seconds(0.5) == "0:00.500"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
