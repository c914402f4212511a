import enum

from sqlalchemy import Enum, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from dominion.models.base import Base


class SectorType(str, enum.Enum):
    food = "food"
    ore = "ore"
    petroleum = "petroleum"
    tourism = "tourism"
    urban = "urban"
    government = "government"
    research = "research"
    education = "education"
    supply = "supply"
    anti_pollution = "anti_pollution"


class Sector(Base):
    __tablename__ = "sectors"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    empire_id: Mapped[int] = mapped_column(ForeignKey("empires.id"), nullable=False, index=True)
    sector_type: Mapped[SectorType] = mapped_column(Enum(SectorType), nullable=False)
    acquired_turn: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
