import enum

from sqlalchemy import Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dominion.models.base import Base


class RegionType(str, enum.Enum):
    core = "core"
    inner = "inner"
    mid = "mid"
    outer = "outer"
    rim = "rim"
    void = "void"


class GalaxyRegion(Base):
    __tablename__ = "galaxy_regions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    region_type: Mapped[RegionType] = mapped_column(Enum(RegionType), nullable=False)
    # Layout coordinates on a 0-100 plane, core at (50, 50)
    position_x: Mapped[float] = mapped_column(Float, nullable=False)
    position_y: Mapped[float] = mapped_column(Float, nullable=False)
    wealth_modifier: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    danger_level: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    max_empires: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
