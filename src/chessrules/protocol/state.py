from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..engine.enums import Color
from ..engine.position import Position


class GameState(BaseModel):
    """Serializable snapshot of a game for protocol layers."""

    fen: str
    side_to_move: str = Field(..., description="'white' or 'black'")
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    result: str
    termination: Optional[str] = None
    halfmove_clock: int = Field(..., ge=0)
    fullmove_number: int = Field(..., ge=1)
    repetitions: int = Field(..., ge=0)

    @classmethod
    def from_position(cls, pos: Position) -> "GameState":
        stm: Color = pos.side_to_move
        return cls(
            fen=pos.to_fen(),
            side_to_move=str(stm),
            legal_moves=(
                [] if pos.is_game_over else [m.to_uci() for m in pos.generate_legal_moves()]
            ),
            in_check=pos.is_in_check(stm),
            checkmate=pos.is_checkmate(stm),
            stalemate=pos.is_stalemate(stm),
            result=pos.game_result.value,
            termination=pos.termination.value if pos.termination is not None else None,
            halfmove_clock=pos.halfmove_clock,
            fullmove_number=pos.fullmove_number,
            repetitions=pos.repetition_count(),
        )
