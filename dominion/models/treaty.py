import enum

from sqlalchemy import Boolean, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from dominion.models.base import Base


class TreatyType(str, enum.Enum):
    non_aggression = "non_aggression"
    alliance = "alliance"


class Treaty(Base):
    """Written by the diplomacy layer; the turn engine only reads it."""

    __tablename__ = "treaties"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    empire_a_id: Mapped[int] = mapped_column(ForeignKey("empires.id"), nullable=False)
    empire_b_id: Mapped[int] = mapped_column(ForeignKey("empires.id"), nullable=False)
    treaty_type: Mapped[TreatyType] = mapped_column(Enum(TreatyType), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
