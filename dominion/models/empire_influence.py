from sqlalchemy import JSON, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from dominion.models.base import Base


class EmpireInfluence(Base):
    __tablename__ = "empire_influence"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    empire_id: Mapped[int] = mapped_column(ForeignKey("empires.id"), unique=True, nullable=False)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    home_region_id: Mapped[int] = mapped_column(ForeignKey("galaxy_regions.id"), nullable=False)
    primary_region_id: Mapped[int] = mapped_column(ForeignKey("galaxy_regions.id"), nullable=False)
    # Cache of the last computed sphere; influence_sphere recomputes on every query
    direct_neighbor_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    extended_neighbor_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    total_influence_radius: Mapped[int] = mapped_column(Integer, default=3, nullable=False)
