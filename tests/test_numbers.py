"""Mini README: Tests for the lenient number parser.

Every monetary field passes through ``parse_number`` so these cases pin the
"garbage in, zero out" behaviour and comma decimal handling.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from roadledger.utils import parse_number


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, 0.0),
        ("", 0.0),
        ("   ", 0.0),
        ("abc", 0.0),
        ("1,5", 1.5),
        (" 200 ", 200.0),
        ("12.5 gal", 12.5),
        ("-3.25", -3.25),
        (".75", 0.75),
        (42, 42.0),
        (Decimal("9.99"), 9.99),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        (True, 0.0),
        ([1, 2], 0.0),
        (10**400, 0.0),
        (Decimal("sNaN"), 0.0),
        ("9" * 400, 0.0),
    ],
)
def test_parse_number_coerces_inputs(raw: object, expected: float) -> None:
    assert parse_number(raw) == pytest.approx(expected)
