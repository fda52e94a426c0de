"""Tests for santim arithmetic helpers."""

import pytest

from src.bl_common.money import (
    balance_status_percent,
    calculate_commission,
    santim_to_display,
    validate_percent,
)


class TestSantimToDisplay:
    def test_whole_birr(self) -> None:
        assert santim_to_display(150000) == "1,500.00 Br"

    def test_fraction(self) -> None:
        assert santim_to_display(1005) == "10.05 Br"

    def test_zero(self) -> None:
        assert santim_to_display(0) == "0.00 Br"

    def test_negative(self) -> None:
        assert santim_to_display(-1200) == "-12.00 Br"


class TestCalculateCommission:
    def test_exact(self) -> None:
        assert calculate_commission(5000, 20) == 1000

    def test_rounds_up(self) -> None:
        # 1001 * 20% = 200.2 → 201
        assert calculate_commission(1001, 20) == 201

    def test_zero_total(self) -> None:
        assert calculate_commission(0, 20) == 0

    def test_full_percent(self) -> None:
        assert calculate_commission(777, 100) == 777


class TestValidatePercent:
    @pytest.mark.parametrize("value", [1, 20, 100])
    def test_accepts_range(self, value: int) -> None:
        validate_percent(value)

    @pytest.mark.parametrize("value", [0, 101, -5])
    def test_rejects_out_of_range(self, value: int) -> None:
        with pytest.raises(ValueError):
            validate_percent(value)


class TestBalanceStatus:
    def test_half(self) -> None:
        assert balance_status_percent(500, 1000) == 50

    def test_clamped_high(self) -> None:
        assert balance_status_percent(3000, 1000) == 100

    def test_no_credit(self) -> None:
        assert balance_status_percent(500, 0) == 0
