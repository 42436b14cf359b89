import math

from coda.formatting import fixed, format_number, format_rate


def test_fixed_rounds_half_up_on_exact_value():
    assert fixed(0.125) == 0.13
    assert fixed(2.675) == 2.67  # 2.67499999... in binary
    assert fixed(-0.125) == -0.13
    assert fixed(1 / 3) == 0.33
    assert fixed(2.0) == 2.0


def test_fixed_passes_non_finite_through():
    assert math.isinf(fixed(float("inf")))
    assert math.isnan(fixed(float("nan")))


def test_format_number():
    assert format_number(None) == "N/A"
    assert format_number(float("nan")) == "N/A"
    assert format_number(0) == "0"
    assert format_number(999) == "999"
    assert format_number(1234) == "1.2K"
    assert format_number(1234567) == "1.2M"
    assert format_number(45_000_000) == "45.0M"


def test_format_rate():
    assert format_rate(2.5) == "2.5%"
