"""Pydantic schemas for the bingo game API."""

from pydantic import BaseModel, Field

from src.bl_common.money import santim_to_display
from src.bl_game.domain.models import GameRecord, GameToken

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ConfigureRequest(BaseModel):
    bet_amount: int = Field(..., description="Stake per card in santim")
    selected_cards: list[int] = Field(..., description="Card numbers the player bought")
    line_checker: int = Field(..., description="Lines needed for bingo")


class CallRequest(BaseModel):
    card: int | None = Field(None, description="Card being checked, if any")
    winner: bool = False
    lucky_passed: bool = False


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class GameSessionResponse(BaseModel):
    phase: str
    bet_amount: int
    selected_cards: list[int]
    line_checker: int
    total_bet: int
    total_bet_display: str
    winning_amount: int
    winning_amount_display: str
    required_balance: int
    required_balance_display: str
    game_index: int | None = None

    @classmethod
    def from_token(cls, token: GameToken) -> "GameSessionResponse":
        return cls(
            phase=token.phase.value,
            bet_amount=token.config.bet_amount,
            selected_cards=list(token.config.selected_cards),
            line_checker=token.config.line_checker,
            total_bet=token.quote.total_bet,
            total_bet_display=santim_to_display(token.quote.total_bet),
            winning_amount=token.quote.winning_amount,
            winning_amount_display=santim_to_display(token.quote.winning_amount),
            required_balance=token.quote.required_balance,
            required_balance_display=santim_to_display(token.quote.required_balance),
            game_index=token.game_index,
        )


class StartResponse(BaseModel):
    game_index: int
    balance: int
    balance_display: str
    session: GameSessionResponse


class CallResponse(BaseModel):
    game_index: int
    recorded: bool


class GameItem(BaseModel):
    game_index: int
    game_start: str
    game_end: str
    time_label: str
    bet_amount: int
    picked_cards: list[int]
    on_calls: list[int]
    winner_cards: list[int]
    luckypassed_cards: list[int]
    dersh: int
    dersh_display: str
    commission: int
    commission_display: str
    created_by: str
    shop_name: str

    @classmethod
    def from_record(cls, record: GameRecord) -> "GameItem":
        return cls(
            game_index=record.game_index,
            game_start=record.game_start.isoformat(),
            game_end=record.game_end.isoformat(),
            time_label=record.time_label,
            bet_amount=record.bet_amount,
            picked_cards=record.picked_cards,
            on_calls=record.on_calls,
            winner_cards=record.winner_cards,
            luckypassed_cards=record.luckypassed_cards,
            dersh=record.dersh,
            dersh_display=santim_to_display(record.dersh),
            commission=record.commission,
            commission_display=santim_to_display(record.commission),
            created_by=record.created_by,
            shop_name=record.shop_name,
        )


class GameListResponse(BaseModel):
    items: list[GameItem]
    total: int
    total_commission: int
    total_commission_display: str
