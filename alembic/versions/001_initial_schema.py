"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

CIVIL_STATUSES = ("ecstatic", "happy", "content", "neutral", "unhappy", "angry", "rioting", "revolting")

# civilstatus is shared by two tables; the type is created once with empires
EXISTING_CIVIL_STATUS = sa.Enum(*CIVIL_STATUSES, name="civilstatus").with_variant(
    postgresql.ENUM(*CIVIL_STATUSES, name="civilstatus", create_type=False), "postgresql"
)


def upgrade() -> None:
    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("status", sa.Enum("active", "ended", name="gamestatus"), nullable=False),
        sa.Column("current_turn", sa.Integer(), nullable=False),
        sa.Column("turn_limit", sa.Integer(), nullable=False),
        sa.Column("protection_turns", sa.Integer(), nullable=False),
        sa.Column("seed", sa.Integer(), nullable=False),
        sa.Column("winner_empire_id", sa.Integer(), nullable=True),
        sa.Column(
            "victory_type",
            sa.Enum("elimination", "conquest", "economic", "survival", name="victorytype"),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_games_id"), "games", ["id"], unique=False)

    op.create_table(
        "empires",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.Enum("player", "bot", name="empiretype"), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False),
        sa.Column("food", sa.Integer(), nullable=False),
        sa.Column("ore", sa.Integer(), nullable=False),
        sa.Column("petroleum", sa.Integer(), nullable=False),
        sa.Column("research_points", sa.Integer(), nullable=False),
        sa.Column("research_level", sa.Integer(), nullable=False),
        sa.Column("population", sa.Integer(), nullable=False),
        sa.Column("population_cap", sa.Integer(), nullable=False),
        sa.Column("soldiers", sa.Integer(), nullable=False),
        sa.Column("fighters", sa.Integer(), nullable=False),
        sa.Column("stations", sa.Integer(), nullable=False),
        sa.Column("light_cruisers", sa.Integer(), nullable=False),
        sa.Column("heavy_cruisers", sa.Integer(), nullable=False),
        sa.Column("carriers", sa.Integer(), nullable=False),
        sa.Column("covert_agents", sa.Integer(), nullable=False),
        sa.Column("civil_status", sa.Enum(*CIVIL_STATUSES, name="civilstatus"), nullable=False),
        sa.Column("networth", sa.Float(), nullable=False),
        sa.Column("is_eliminated", sa.Boolean(), nullable=False),
        sa.Column(
            "defeat_type",
            sa.Enum("elimination", "bankruptcy", "civil_collapse", name="defeattype"),
            nullable=True,
        ),
        sa.Column("food_surplus_streak", sa.Integer(), nullable=False),
        sa.Column("food_deficit_streak", sa.Integer(), nullable=False),
        sa.Column("victory_streak", sa.Integer(), nullable=False),
        sa.Column("last_battle_loss_ratio", sa.Float(), nullable=False),
        sa.Column("unrest_streak", sa.Integer(), nullable=False),
        sa.Column("production_penalty", sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_empires_game_id"), "empires", ["game_id"], unique=False)
    op.create_index(op.f("ix_empires_id"), "empires", ["id"], unique=False)

    op.create_table(
        "sectors",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("empire_id", sa.Integer(), nullable=False),
        sa.Column(
            "sector_type",
            sa.Enum(
                "food",
                "ore",
                "petroleum",
                "tourism",
                "urban",
                "government",
                "research",
                "education",
                "supply",
                "anti_pollution",
                name="sectortype",
            ),
            nullable=False,
        ),
        sa.Column("acquired_turn", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.ForeignKeyConstraint(["empire_id"], ["empires.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sectors_empire_id"), "sectors", ["empire_id"], unique=False)
    op.create_index(op.f("ix_sectors_game_id"), "sectors", ["game_id"], unique=False)
    op.create_index(op.f("ix_sectors_id"), "sectors", ["id"], unique=False)

    op.create_table(
        "galaxy_regions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "region_type",
            sa.Enum("core", "inner", "mid", "outer", "rim", "void", name="regiontype"),
            nullable=False,
        ),
        sa.Column("position_x", sa.Float(), nullable=False),
        sa.Column("position_y", sa.Float(), nullable=False),
        sa.Column("wealth_modifier", sa.Float(), nullable=False),
        sa.Column("danger_level", sa.Integer(), nullable=False),
        sa.Column("max_empires", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_galaxy_regions_game_id"), "galaxy_regions", ["game_id"], unique=False)
    op.create_index(op.f("ix_galaxy_regions_id"), "galaxy_regions", ["id"], unique=False)

    op.create_table(
        "region_connections",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("from_region_id", sa.Integer(), nullable=False),
        sa.Column("to_region_id", sa.Integer(), nullable=False),
        sa.Column(
            "connection_type",
            sa.Enum("adjacent", "hazardous", "contested", "wormhole", "trade_route", name="connectiontype"),
            nullable=False,
        ),
        sa.Column("is_bidirectional", sa.Boolean(), nullable=False),
        sa.Column("force_multiplier", sa.Float(), nullable=False),
        sa.Column("discovered_at_turn", sa.Integer(), nullable=True),
        sa.Column(
            "wormhole_status",
            sa.Enum(
                "undiscovered", "discovered", "constructing", "stabilized", "collapsed",
                name="wormholestatus",
            ),
            nullable=True,
        ),
        sa.Column("discovered_by_empire_id", sa.Integer(), nullable=True),
        sa.Column("collapse_chance", sa.Float(), nullable=True),
        sa.Column("construction_completion_turn", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.ForeignKeyConstraint(["from_region_id"], ["galaxy_regions.id"]),
        sa.ForeignKeyConstraint(["to_region_id"], ["galaxy_regions.id"]),
        sa.ForeignKeyConstraint(["discovered_by_empire_id"], ["empires.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_region_connections_game_id"), "region_connections", ["game_id"], unique=False)
    op.create_index(op.f("ix_region_connections_id"), "region_connections", ["id"], unique=False)

    op.create_table(
        "empire_influence",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("empire_id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("home_region_id", sa.Integer(), nullable=False),
        sa.Column("primary_region_id", sa.Integer(), nullable=False),
        sa.Column("direct_neighbor_ids", sa.JSON(), nullable=False),
        sa.Column("extended_neighbor_ids", sa.JSON(), nullable=False),
        sa.Column("total_influence_radius", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["empire_id"], ["empires.id"]),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.ForeignKeyConstraint(["home_region_id"], ["galaxy_regions.id"]),
        sa.ForeignKeyConstraint(["primary_region_id"], ["galaxy_regions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("empire_id"),
    )
    op.create_index(op.f("ix_empire_influence_game_id"), "empire_influence", ["game_id"], unique=False)

    op.create_table(
        "build_queue",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("empire_id", sa.Integer(), nullable=False),
        sa.Column("unit_type", sa.String(length=50), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("turns_remaining", sa.Integer(), nullable=False),
        sa.Column("total_cost", sa.Integer(), nullable=False),
        sa.Column("queue_position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.ForeignKeyConstraint(["empire_id"], ["empires.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_build_queue_empire_id"), "build_queue", ["empire_id"], unique=False)
    op.create_index(op.f("ix_build_queue_game_id"), "build_queue", ["game_id"], unique=False)
    op.create_index(op.f("ix_build_queue_id"), "build_queue", ["id"], unique=False)

    op.create_table(
        "attack_orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("turn", sa.Integer(), nullable=False),
        sa.Column("attacker_id", sa.Integer(), nullable=False),
        sa.Column("defender_id", sa.Integer(), nullable=False),
        sa.Column("forces", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "resolved", "rejected", name="attackstatus"),
            nullable=False,
        ),
        sa.Column("outcome", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.ForeignKeyConstraint(["attacker_id"], ["empires.id"]),
        sa.ForeignKeyConstraint(["defender_id"], ["empires.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_attack_orders_game_id"), "attack_orders", ["game_id"], unique=False)
    op.create_index(op.f("ix_attack_orders_id"), "attack_orders", ["id"], unique=False)

    op.create_table(
        "treaties",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("empire_a_id", sa.Integer(), nullable=False),
        sa.Column("empire_b_id", sa.Integer(), nullable=False),
        sa.Column(
            "treaty_type",
            sa.Enum("non_aggression", "alliance", name="treatytype"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.ForeignKeyConstraint(["empire_a_id"], ["empires.id"]),
        sa.ForeignKeyConstraint(["empire_b_id"], ["empires.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_treaties_game_id"), "treaties", ["game_id"], unique=False)
    op.create_index(op.f("ix_treaties_id"), "treaties", ["id"], unique=False)

    op.create_table(
        "civil_status_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("empire_id", sa.Integer(), nullable=False),
        sa.Column("turn", sa.Integer(), nullable=False),
        sa.Column("old_status", EXISTING_CIVIL_STATUS, nullable=False),
        sa.Column("new_status", EXISTING_CIVIL_STATUS, nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=False),
        sa.Column("income_multiplier", sa.Float(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.ForeignKeyConstraint(["empire_id"], ["empires.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_civil_status_history_empire_id"), "civil_status_history", ["empire_id"], unique=False)
    op.create_index(op.f("ix_civil_status_history_game_id"), "civil_status_history", ["game_id"], unique=False)
    op.create_index(op.f("ix_civil_status_history_id"), "civil_status_history", ["id"], unique=False)

    op.create_table(
        "game_saves",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("turn", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("snapshot", sa.JSON(), nullable=False),
        sa.Column(
            "saved_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("game_id"),
    )
    op.create_index(op.f("ix_game_saves_id"), "game_saves", ["id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_game_saves_id"), table_name="game_saves")
    op.drop_table("game_saves")

    op.drop_index(op.f("ix_civil_status_history_id"), table_name="civil_status_history")
    op.drop_index(op.f("ix_civil_status_history_game_id"), table_name="civil_status_history")
    op.drop_index(op.f("ix_civil_status_history_empire_id"), table_name="civil_status_history")
    op.drop_table("civil_status_history")

    op.drop_index(op.f("ix_treaties_id"), table_name="treaties")
    op.drop_index(op.f("ix_treaties_game_id"), table_name="treaties")
    op.drop_table("treaties")

    op.drop_index(op.f("ix_attack_orders_id"), table_name="attack_orders")
    op.drop_index(op.f("ix_attack_orders_game_id"), table_name="attack_orders")
    op.drop_table("attack_orders")

    op.drop_index(op.f("ix_build_queue_id"), table_name="build_queue")
    op.drop_index(op.f("ix_build_queue_game_id"), table_name="build_queue")
    op.drop_index(op.f("ix_build_queue_empire_id"), table_name="build_queue")
    op.drop_table("build_queue")

    op.drop_index(op.f("ix_empire_influence_game_id"), table_name="empire_influence")
    op.drop_table("empire_influence")

    op.drop_index(op.f("ix_region_connections_id"), table_name="region_connections")
    op.drop_index(op.f("ix_region_connections_game_id"), table_name="region_connections")
    op.drop_table("region_connections")

    op.drop_index(op.f("ix_galaxy_regions_id"), table_name="galaxy_regions")
    op.drop_index(op.f("ix_galaxy_regions_game_id"), table_name="galaxy_regions")
    op.drop_table("galaxy_regions")

    op.drop_index(op.f("ix_sectors_id"), table_name="sectors")
    op.drop_index(op.f("ix_sectors_game_id"), table_name="sectors")
    op.drop_index(op.f("ix_sectors_empire_id"), table_name="sectors")
    op.drop_table("sectors")

    op.drop_index(op.f("ix_empires_id"), table_name="empires")
    op.drop_index(op.f("ix_empires_game_id"), table_name="empires")
    op.drop_table("empires")

    op.drop_index(op.f("ix_games_id"), table_name="games")
    op.drop_table("games")

    for enum_name in (
        "gamestatus", "victorytype", "empiretype", "civilstatus", "defeattype", "sectortype",
        "regiontype", "connectiontype", "wormholestatus", "attackstatus", "treatytype",
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
