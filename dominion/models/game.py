import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from dominion.models.base import Base


class GameStatus(str, enum.Enum):
    active = "active"
    ended = "ended"


class VictoryType(str, enum.Enum):
    elimination = "elimination"
    conquest = "conquest"
    economic = "economic"
    survival = "survival"


class Game(Base):
    __tablename__ = "games"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[GameStatus] = mapped_column(
        Enum(GameStatus), nullable=False, default=GameStatus.active
    )
    # 1-based; reaches turn_limit + 1 once the last turn has been processed
    current_turn: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    turn_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=200)
    protection_turns: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    seed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    winner_empire_id: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)
    victory_type: Mapped[VictoryType | None] = mapped_column(
        Enum(VictoryType), nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
