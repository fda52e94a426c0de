"""Tests for stake validation and payout quotes."""

import pytest

from src.bl_common.errors import InvalidGameConfigError
from src.bl_game.domain.payout import build_config, quote, quote_for


class TestBuildConfig:
    def test_valid_config(self) -> None:
        config = build_config(2000, [5, 12, 40], 2)
        assert config.bet_amount == 2000
        assert config.selected_cards == (5, 12, 40)
        assert config.line_checker == 2

    def test_duplicates_collapse_keeping_order(self) -> None:
        config = build_config(1000, [9, 3, 9, 1, 3], 1)
        assert config.selected_cards == (9, 3, 1)

    def test_bet_below_minimum(self) -> None:
        with pytest.raises(InvalidGameConfigError):
            build_config(999, [1], 1)

    @pytest.mark.parametrize("bet", ["1000", 1000.0, True, None])
    def test_bet_must_be_int(self, bet: object) -> None:
        with pytest.raises(InvalidGameConfigError):
            build_config(bet, [1], 1)

    def test_no_cards(self) -> None:
        with pytest.raises(InvalidGameConfigError):
            build_config(1000, [], 1)

    @pytest.mark.parametrize("card", [0, -3, "7", True])
    def test_bad_card_number(self, card: object) -> None:
        with pytest.raises(InvalidGameConfigError):
            build_config(1000, [1, card], 1)

    def test_too_many_cards(self) -> None:
        with pytest.raises(InvalidGameConfigError):
            build_config(1000, range(1, 202), 1)

    @pytest.mark.parametrize("checker", [0, 6, "2", False])
    def test_line_checker_bounds(self, checker: object) -> None:
        with pytest.raises(InvalidGameConfigError):
            build_config(1000, [1], checker)


class TestQuote:
    def test_small_game_pays_full_stake(self) -> None:
        result = quote(1000, 3, 20)
        assert result.total_bet == 3000
        assert result.winning_amount == 3000
        assert result.required_balance == 0

    def test_commission_taken_above_small_game(self) -> None:
        result = quote(1000, 4, 20)
        assert result.total_bet == 4000
        assert result.required_balance == 800
        assert result.winning_amount == 3200

    def test_five_cards_at_twenty_percent(self) -> None:
        result = quote(1000, 5, 20)
        assert (result.total_bet, result.winning_amount, result.required_balance) == (
            5000,
            4000,
            1000,
        )

    def test_commission_rounds_up(self) -> None:
        # 1001 * 5 = 5005, 15% = 750.75 → 751
        result = quote(1001, 5, 15)
        assert result.required_balance == 751
        assert result.winning_amount == 5005 - 751

    def test_parts_sum_to_total(self) -> None:
        result = quote(1337, 17, 33)
        assert result.winning_amount + result.required_balance == result.total_bet

    def test_invalid_commission(self) -> None:
        with pytest.raises(ValueError):
            quote(1000, 4, 0)

    def test_quote_for_config(self) -> None:
        config = build_config(1500, [1, 2, 3, 4, 5], 1)
        assert quote_for(config, 10) == quote(1500, 5, 10)
