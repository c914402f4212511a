import enum

from sqlalchemy import JSON, Enum, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from dominion.models.base import Base


class AttackStatus(str, enum.Enum):
    pending = "pending"
    resolved = "resolved"
    rejected = "rejected"


class AttackOrder(Base):
    __tablename__ = "attack_orders"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    turn: Mapped[int] = mapped_column(Integer, nullable=False)
    attacker_id: Mapped[int] = mapped_column(ForeignKey("empires.id"), nullable=False)
    defender_id: Mapped[int] = mapped_column(ForeignKey("empires.id"), nullable=False)
    # {unit_type: count} committed by the attacker
    forces: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[AttackStatus] = mapped_column(
        Enum(AttackStatus), nullable=False, default=AttackStatus.pending
    )
    outcome: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)
