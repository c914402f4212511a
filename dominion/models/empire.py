import enum

from sqlalchemy import Boolean, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dominion.models.base import Base


class EmpireType(str, enum.Enum):
    player = "player"
    bot = "bot"


class CivilStatus(str, enum.Enum):
    # Declaration order is the ladder order, best first
    ecstatic = "ecstatic"
    happy = "happy"
    content = "content"
    neutral = "neutral"
    unhappy = "unhappy"
    angry = "angry"
    rioting = "rioting"
    revolting = "revolting"


class DefeatType(str, enum.Enum):
    elimination = "elimination"
    bankruptcy = "bankruptcy"
    civil_collapse = "civil_collapse"


class Empire(Base):
    __tablename__ = "empires"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[EmpireType] = mapped_column(Enum(EmpireType), nullable=False, default=EmpireType.bot)

    # Resource stock, clamped at 0 after every turn
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=100000)
    food: Mapped[int] = mapped_column(Integer, nullable=False, default=1000)
    ore: Mapped[int] = mapped_column(Integer, nullable=False, default=500)
    petroleum: Mapped[int] = mapped_column(Integer, nullable=False, default=200)
    research_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    research_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    population: Mapped[int] = mapped_column(Integer, nullable=False, default=10000)
    population_cap: Mapped[int] = mapped_column(Integer, nullable=False, default=50000)

    soldiers: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    fighters: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stations: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    light_cruisers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    heavy_cruisers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    carriers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    covert_agents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    civil_status: Mapped[CivilStatus] = mapped_column(
        Enum(CivilStatus), nullable=False, default=CivilStatus.content
    )
    networth: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_eliminated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    defeat_type: Mapped[DefeatType | None] = mapped_column(Enum(DefeatType), nullable=True, default=None)

    # Streak counters consumed by civil status and revolt transitions
    food_surplus_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    food_deficit_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    victory_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Casualty ratio of the most recent lost battle; cleared once civil status has read it
    last_battle_loss_ratio: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    unrest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Fraction of next turn's production withheld by revolt (0.0 - 1.0)
    production_penalty: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
