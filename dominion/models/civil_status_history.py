from datetime import datetime

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from dominion.models.base import Base
from dominion.models.empire import CivilStatus


class CivilStatusHistory(Base):
    __tablename__ = "civil_status_history"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    empire_id: Mapped[int] = mapped_column(ForeignKey("empires.id"), nullable=False, index=True)
    turn: Mapped[int] = mapped_column(Integer, nullable=False)
    old_status: Mapped[CivilStatus] = mapped_column(Enum(CivilStatus), nullable=False)
    new_status: Mapped[CivilStatus] = mapped_column(Enum(CivilStatus), nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    income_multiplier: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
