"""Tests for booking price calculation."""

import pytest

from lensbook.errors import ErrorKind, InvalidDurationError
from lensbook.scheduling.pricing import SERVICE_FEE_LABEL, apply_service_fee, calculate_price
from tests.conftest import dt


class TestCalculatePrice:
    def test_photographer_and_venue(self):
        price = calculate_price(200000, 50000, dt(17, "13:00"), dt(17, "15:00"))
        assert price.photographer_fee == 400000
        assert price.location_fee == 100000
        assert price.total_price == 500000
        assert price.duration == 2.0
        assert price.service_fee == 0
        assert price.breakdown.base_rate == 200000
        assert price.breakdown.location_rate == 50000
        assert price.breakdown.additional_fees == []

    def test_no_venue_rate(self):
        price = calculate_price(200000, None, dt(17, "13:00"), dt(17, "14:30"))
        assert price.location_fee == 0
        assert price.total_price == 300000
        assert price.breakdown.location_rate is None

    def test_linear_in_duration(self):
        two_hours = calculate_price(150000, 40000, dt(17, "09:00"), dt(17, "11:00"))
        one_hour = calculate_price(150000, 40000, dt(17, "09:00"), dt(17, "10:00"))
        assert two_hours.photographer_fee == 2 * one_hour.photographer_fee
        assert two_hours.location_fee == 2 * one_hour.location_fee

    def test_no_rounding(self):
        price = calculate_price(100, None, dt(17, "09:00"), dt(17, "09:20"))
        assert price.duration == pytest.approx(1 / 3)
        assert price.total_price == pytest.approx(100 / 3)

    @pytest.mark.parametrize("start,end", [("10:00", "10:00"), ("11:00", "10:00")])
    def test_empty_interval_rejected(self, start, end):
        with pytest.raises(InvalidDurationError) as exc_info:
            calculate_price(200000, None, dt(17, start), dt(17, end))
        assert exc_info.value.kind == ErrorKind.INVALID_DURATION

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError):
            calculate_price(-1, None, dt(17, "09:00"), dt(17, "10:00"))
        with pytest.raises(ValueError):
            calculate_price(100, -1, dt(17, "09:00"), dt(17, "10:00"))

    def test_wire_names(self):
        price = calculate_price(200000, 50000, dt(17, "13:00"), dt(17, "15:00"))
        dumped = price.model_dump(by_alias=True)
        assert dumped["totalPrice"] == 500000
        assert dumped["photographerFee"] == 400000
        assert dumped["breakdown"]["baseRate"] == 200000


class TestServiceFee:
    def test_adds_line_item_and_total(self):
        base = calculate_price(200000, 50000, dt(17, "13:00"), dt(17, "15:00"))
        with_fee = apply_service_fee(base, 0.1)
        assert with_fee.service_fee == pytest.approx(50000)
        assert with_fee.total_price == pytest.approx(550000)
        assert [f.name for f in with_fee.breakdown.additional_fees] == [SERVICE_FEE_LABEL]

    def test_original_untouched(self):
        base = calculate_price(200000, None, dt(17, "13:00"), dt(17, "15:00"))
        apply_service_fee(base, 0.1)
        assert base.total_price == 400000
        assert base.breakdown.additional_fees == []

    def test_zero_rate_is_noop(self):
        base = calculate_price(200000, None, dt(17, "13:00"), dt(17, "15:00"))
        assert apply_service_fee(base, 0.0) == base

    def test_rate_out_of_range(self):
        base = calculate_price(200000, None, dt(17, "13:00"), dt(17, "15:00"))
        with pytest.raises(ValueError):
            apply_service_fee(base, 1.5)
