from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dominion.models.base import Base


class BuildQueueItem(Base):
    __tablename__ = "build_queue"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    empire_id: Mapped[int] = mapped_column(ForeignKey("empires.id"), nullable=False, index=True)
    unit_type: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    turns_remaining: Mapped[int] = mapped_column(Integer, nullable=False)
    total_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    queue_position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
