"""Create orbital object, seismic event and alias tables.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from globesync.adapters.sqlalchemy.mappings import IdentifierSetType, UTCDateTime

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "orbital_object",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("catalog_id", sa.Integer(), nullable=False),
        sa.Column("object_name", sa.String(), nullable=False),
        sa.Column("object_type", sa.String(), nullable=True),
        sa.Column("country_code", sa.String(), nullable=True),
        sa.Column("launch_date", sa.Date(), nullable=True),
        sa.Column("decay_date", sa.Date(), nullable=True),
        sa.Column("epoch", UTCDateTime(), nullable=False),
        sa.Column("tle_line1", sa.String(length=69), nullable=False),
        sa.Column("tle_line2", sa.String(length=69), nullable=False),
        sa.Column("inclination", sa.Float(), nullable=False),
        sa.Column("eccentricity", sa.Float(), nullable=False),
        sa.Column("period", sa.Float(), nullable=False),
        sa.Column("apoapsis", sa.Float(), nullable=False),
        sa.Column("periapsis", sa.Float(), nullable=False),
        sa.Column("semimajor_axis", sa.Float(), nullable=False),
        sa.Column("last_synced_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_orbital_object"),
        sa.UniqueConstraint("catalog_id", name="uq_orbital_object_catalog_id"),
    )
    op.create_index("ix_orbital_object_epoch", "orbital_object", ["epoch"])

    op.create_table(
        "seismic_event",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_id", sa.String(), nullable=False),
        sa.Column("known_ids", IdentifierSetType(), nullable=False),
        sa.Column("feed_updated_at", UTCDateTime(), nullable=False),
        sa.Column("event_time", UTCDateTime(), nullable=False),
        sa.Column("magnitude", sa.Float(), nullable=True),
        sa.Column("place", sa.String(), nullable=True),
        sa.Column("tz_offset_minutes", sa.Integer(), nullable=True),
        sa.Column("cdi", sa.Float(), nullable=True),
        sa.Column("mmi", sa.Float(), nullable=True),
        sa.Column("alert", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("tsunami", sa.Integer(), nullable=False),
        sa.Column("significance", sa.Integer(), nullable=False),
        sa.Column("station_count", sa.Integer(), nullable=True),
        sa.Column("min_station_distance", sa.Float(), nullable=True),
        sa.Column("event_type", sa.String(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("depth_km", sa.Float(), nullable=True),
        sa.Column("last_synced_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_seismic_event"),
        sa.UniqueConstraint("event_id", name="uq_seismic_event_event_id"),
    )
    op.create_index("ix_seismic_event_event_time", "seismic_event", ["event_time"])

    op.create_table(
        "seismic_event_alias",
        sa.Column("identifier", sa.String(), nullable=False),
        sa.Column("event_pk", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["event_pk"],
            ["seismic_event.id"],
            name="fk_seismic_event_alias_event_pk_seismic_event",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("identifier", name="pk_seismic_event_alias"),
    )
    op.create_index(
        "ix_seismic_event_alias_event_pk", "seismic_event_alias", ["event_pk"]
    )


def downgrade() -> None:
    op.drop_index("ix_seismic_event_alias_event_pk", table_name="seismic_event_alias")
    op.drop_table("seismic_event_alias")
    op.drop_index("ix_seismic_event_event_time", table_name="seismic_event")
    op.drop_table("seismic_event")
    op.drop_index("ix_orbital_object_epoch", table_name="orbital_object")
    op.drop_table("orbital_object")
