"""Domain models for bl_game: pure dataclasses, no SQLAlchemy dependency.

A game session lives in two places:
  GameToken   the client-held, signed state (configured or in progress)
  GameRecord  the durable row written when the game starts

The token is never trusted for money: start() recomputes the quote from the
stake and cards against the account's current commission and balance.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.bl_common.enums import GamePhase
from src.bl_common.errors import GameTokenError


@dataclass(frozen=True)
class GameConfig:
    bet_amount: int                    # santim per card
    selected_cards: tuple[int, ...]    # distinct card numbers, in pick order
    line_checker: int                  # number of lines needed for bingo


@dataclass(frozen=True)
class Quote:
    total_bet: int          # bet_amount * card count
    winning_amount: int     # payout to the winner (dersh)
    required_balance: int   # house commission, debited at start


@dataclass(frozen=True)
class GameToken:
    phase: GamePhase
    config: GameConfig
    quote: Quote
    game_index: int | None = None      # set once the game is in progress

    def to_claims(self) -> dict[str, Any]:
        claims: dict[str, Any] = {
            "phase": self.phase.value,
            "bet_amount": self.config.bet_amount,
            "selected_cards": list(self.config.selected_cards),
            "line_checker": self.config.line_checker,
            "total_bet": self.quote.total_bet,
            "winning_amount": self.quote.winning_amount,
            "required_balance": self.quote.required_balance,
        }
        if self.game_index is not None:
            claims["game_index"] = self.game_index
        return claims

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "GameToken":
        """Rebuild from verified claims. Malformed payloads are GameTokenError."""
        try:
            phase = GamePhase(claims["phase"])
            cards = claims["selected_cards"]
            if not isinstance(cards, list):
                raise TypeError("selected_cards")
            config = GameConfig(
                bet_amount=_strict_int(claims["bet_amount"]),
                selected_cards=tuple(_strict_int(c) for c in cards),
                line_checker=_strict_int(claims["line_checker"]),
            )
            quote = Quote(
                total_bet=_strict_int(claims["total_bet"]),
                winning_amount=_strict_int(claims["winning_amount"]),
                required_balance=_strict_int(claims["required_balance"]),
            )
            index = claims.get("game_index")
            game_index = _strict_int(index) if index is not None else None
        except (KeyError, TypeError, ValueError) as exc:
            raise GameTokenError("Game session is malformed") from exc

        if phase == GamePhase.IN_PROGRESS and game_index is None:
            raise GameTokenError("Game session is malformed")
        return cls(phase=phase, config=config, quote=quote, game_index=game_index)


def _strict_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class CallEvent:
    """One card-calling event. `card` may be None to only advance game_end."""

    card: int | None = None
    winner: bool = False
    lucky_passed: bool = False


@dataclass
class GameRecord:
    # Fixed at creation
    user_id: str
    game_index: int
    game_start: datetime
    bet_amount: int
    picked_cards: list[int]
    dersh: int
    commission: int
    created_by: str                # username of the player at start
    shop_name: str
    time_label: str
    # Updated while the game is open
    game_end: datetime
    on_calls: list[int] = field(default_factory=list)
    winner_cards: list[int] = field(default_factory=list)
    luckypassed_cards: list[int] = field(default_factory=list)
