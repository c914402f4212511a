from dominion.models.base import Base  # noqa: F401
from dominion.models.attack_order import AttackOrder, AttackStatus  # noqa: F401
from dominion.models.build_queue import BuildQueueItem  # noqa: F401
from dominion.models.civil_status_history import CivilStatusHistory  # noqa: F401
from dominion.models.empire import CivilStatus, DefeatType, Empire, EmpireType  # noqa: F401
from dominion.models.empire_influence import EmpireInfluence  # noqa: F401
from dominion.models.galaxy_region import GalaxyRegion, RegionType  # noqa: F401
from dominion.models.game import Game, GameStatus, VictoryType  # noqa: F401
from dominion.models.game_save import GameSave  # noqa: F401
from dominion.models.region_connection import ConnectionType, RegionConnection, WormholeStatus  # noqa: F401
from dominion.models.sector import Sector, SectorType  # noqa: F401
from dominion.models.treaty import Treaty, TreatyType  # noqa: F401
