"""Stake validation and payout quote. Pure functions, integer santim only.

    total_bet = bet_amount * cards
    cards <= SMALL_GAME_MAX_CARDS:  winning = total_bet, required = 0
    otherwise:                      required = ceil(total_bet * commission / 100)
                                    winning  = total_bet - required
"""

from collections.abc import Iterable
from typing import Any

from config.settings import settings
from src.bl_common.errors import InvalidGameConfigError
from src.bl_common.money import calculate_commission, validate_percent
from src.bl_game.domain.models import GameConfig, Quote


def build_config(bet_amount: Any, selected_cards: Iterable[Any], line_checker: Any) -> GameConfig:
    """Validate raw inputs; duplicate cards collapse, pick order is kept."""
    if isinstance(bet_amount, bool) or not isinstance(bet_amount, int):
        raise InvalidGameConfigError("Bet amount must be a whole number of santim")
    if bet_amount < settings.MIN_BET_AMOUNT:
        raise InvalidGameConfigError(
            f"Bet amount must be at least {settings.MIN_BET_AMOUNT} santim"
        )

    cards: list[int] = []
    for card in selected_cards:
        if isinstance(card, bool) or not isinstance(card, int) or card < 1:
            raise InvalidGameConfigError(f"Invalid card number: {card!r}")
        if card not in cards:
            cards.append(card)
    if not cards:
        raise InvalidGameConfigError("Select at least one card")
    if len(cards) > settings.MAX_SELECTED_CARDS:
        raise InvalidGameConfigError(
            f"At most {settings.MAX_SELECTED_CARDS} cards may be selected"
        )

    if isinstance(line_checker, bool) or not isinstance(line_checker, int):
        raise InvalidGameConfigError("Line checker must be a whole number")
    if not settings.LINE_CHECKER_MIN <= line_checker <= settings.LINE_CHECKER_MAX:
        raise InvalidGameConfigError(
            f"Line checker must be between {settings.LINE_CHECKER_MIN} "
            f"and {settings.LINE_CHECKER_MAX}"
        )

    return GameConfig(
        bet_amount=bet_amount,
        selected_cards=tuple(cards),
        line_checker=line_checker,
    )


def quote(bet_amount: int, card_count: int, commission_percent: int) -> Quote:
    validate_percent(commission_percent)
    total_bet = bet_amount * card_count
    if card_count <= settings.SMALL_GAME_MAX_CARDS:
        return Quote(total_bet=total_bet, winning_amount=total_bet, required_balance=0)

    required = calculate_commission(total_bet, commission_percent)
    return Quote(
        total_bet=total_bet,
        winning_amount=total_bet - required,
        required_balance=required,
    )


def quote_for(config: GameConfig, commission_percent: int) -> Quote:
    return quote(config.bet_amount, len(config.selected_cards), commission_percent)
