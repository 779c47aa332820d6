from datetime import date, datetime, time, timedelta

import pytest

from daily_care.common.datetime_utils import day_bounds, parse_clock
from daily_care.common.http import status_for
from daily_care.common.result import Err, Ok
from daily_care.core.exceptions import DomainError, NotFoundError, StoreError, ValidationError


def test_ok_and_err():
    assert Ok(2).map(lambda v: v * 3) == Ok(6)
    err = Err(NotFoundError("missing"))
    assert err.map(lambda v: v * 3) is err
    assert not err.ok
    with pytest.raises(NotFoundError):
        err.unwrap()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("9:5", time(9, 5)),
        ("09:05:59", time(9, 5)),
        (timedelta(hours=13, minutes=30), time(13, 30)),
        (datetime(2024, 3, 1, 14, 15, 40), time(14, 15)),
        ("24:00", None),
        ("noon", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_clock(raw, expected):
    assert parse_clock(raw) == expected


def test_day_bounds_are_inclusive():
    assert day_bounds(date(2024, 3, 1), datetime(2024, 3, 3, 10, 0)) == (
        datetime(2024, 3, 1, 0, 0, 0),
        datetime(2024, 3, 3, 23, 59, 59),
    )


def test_http_status_per_error_kind():
    assert status_for(ValidationError("x")) == 400
    assert status_for(NotFoundError("x")) == 404
    assert status_for(StoreError("x")) == 503
    assert status_for(DomainError("x")) == 500
