import enum

from sqlalchemy import Boolean, Enum, Float, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from dominion.models.base import Base


class ConnectionType(str, enum.Enum):
    adjacent = "adjacent"
    hazardous = "hazardous"
    contested = "contested"
    wormhole = "wormhole"
    trade_route = "trade_route"


class WormholeStatus(str, enum.Enum):
    undiscovered = "undiscovered"
    discovered = "discovered"
    constructing = "constructing"
    stabilized = "stabilized"
    collapsed = "collapsed"


class RegionConnection(Base):
    __tablename__ = "region_connections"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    from_region_id: Mapped[int] = mapped_column(ForeignKey("galaxy_regions.id"), nullable=False)
    to_region_id: Mapped[int] = mapped_column(ForeignKey("galaxy_regions.id"), nullable=False)
    connection_type: Mapped[ConnectionType] = mapped_column(Enum(ConnectionType), nullable=False)
    is_bidirectional: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    force_multiplier: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)

    # Wormholes: turn of discovery. Borders: turn the border unlocks (None = always open)
    discovered_at_turn: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)

    # Wormhole-only columns
    wormhole_status: Mapped[WormholeStatus | None] = mapped_column(
        Enum(WormholeStatus), nullable=True, default=None
    )
    discovered_by_empire_id: Mapped[int | None] = mapped_column(
        ForeignKey("empires.id"), nullable=True, default=None
    )
    collapse_chance: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    construction_completion_turn: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)
