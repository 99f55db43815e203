"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 001_driver_offers (Alembic Migration)

Responsibilities:
  - Crear driver_offers y driver_offer_stops.
  - Reflejar en CHECK constraints las invariantes de la oferta:
      * 0 <= seats_free <= seats_total
      * status en el conjunto cerrado de estados
      * rejection_reason presente sii status = rejected
      * reviewed_by/reviewed_at presentes juntos
  - Índices para la cola de moderación y el listado público.

Collaborators:
  - PostgreSQL 14+
  - infrastructure/repositories/postgres/offer.py (SQL explícito)

Policy:
  - Migración BASELINE. Evolución futura con migraciones aditivas (002+).
  - Convención de nombres:
      pk_<tabla>, ix_<tabla>_<col>, ck_<tabla>_<regla>,
      fk_<tabla>_<col>__<ref_tabla>
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_driver_offers"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_STATUSES = (
    "draft",
    "pending_review",
    "approved",
    "published",
    "rejected",
    "archived",
)


def upgrade() -> None:
    statuses_sql = ", ".join(f"'{s}'" for s in _STATUSES)

    op.create_table(
        "driver_offers",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("driver_id", sa.Text, nullable=False),
        sa.Column("from_text", sa.Text, nullable=False),
        sa.Column("from_lat", sa.Float, nullable=True),
        sa.Column("from_lng", sa.Float, nullable=True),
        sa.Column("to_text", sa.Text, nullable=False),
        sa.Column("to_lat", sa.Float, nullable=True),
        sa.Column("to_lng", sa.Float, nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("seats_total", sa.Integer, nullable=False),
        sa.Column("seats_free", sa.Integer, nullable=False),
        sa.Column("price_per_seat", sa.Numeric(12, 2), nullable=False),
        sa.Column("front_price_per_seat", sa.Numeric(12, 2), nullable=True),
        sa.Column(
            "currency", sa.String(8), nullable=False, server_default=sa.text("'UZS'")
        ),
        sa.Column("note", sa.Text, nullable=True),
        sa.Column(
            "status",
            sa.String(32),
            nullable=False,
            server_default=sa.text("'draft'"),
        ),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("reviewed_by", sa.Text, nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_driver_offers"),
        sa.CheckConstraint(
            "seats_total > 0", name="ck_driver_offers_seats_total_positive"
        ),
        sa.CheckConstraint(
            "seats_free >= 0 AND seats_free <= seats_total",
            name="ck_driver_offers_seats_free_range",
        ),
        sa.CheckConstraint(
            "price_per_seat >= 0", name="ck_driver_offers_price_non_negative"
        ),
        sa.CheckConstraint(
            f"status IN ({statuses_sql})", name="ck_driver_offers_status_valid"
        ),
        sa.CheckConstraint(
            "(status = 'rejected') = (rejection_reason IS NOT NULL "
            "AND length(btrim(rejection_reason)) > 0)",
            name="ck_driver_offers_rejection_reason",
        ),
        sa.CheckConstraint(
            "(reviewed_by IS NULL) = (reviewed_at IS NULL)",
            name="ck_driver_offers_review_pair",
        ),
    )

    op.create_index(
        "ix_driver_offers_status_created_at",
        "driver_offers",
        ["status", sa.text("created_at DESC")],
    )
    op.create_index(
        "ix_driver_offers_driver_id", "driver_offers", ["driver_id"]
    )
    # R: listado público (published + start_at futuro, orden start_at ASC)
    op.create_index(
        "ix_driver_offers_published_start_at",
        "driver_offers",
        ["start_at"],
        postgresql_where=sa.text("status = 'published'"),
    )

    op.create_table(
        "driver_offer_stops",
        sa.Column("offer_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("order_no", sa.Integer, nullable=False),
        sa.Column("label_text", sa.Text, nullable=False),
        sa.Column("lat", sa.Float, nullable=True),
        sa.Column("lng", sa.Float, nullable=True),
        sa.PrimaryKeyConstraint(
            "offer_id", "order_no", name="pk_driver_offer_stops"
        ),
        sa.ForeignKeyConstraint(
            ["offer_id"],
            ["driver_offers.id"],
            name="fk_driver_offer_stops_offer_id__driver_offers",
            ondelete="CASCADE",
        ),
    )


def downgrade() -> None:
    op.drop_table("driver_offer_stops")
    op.drop_index("ix_driver_offers_published_start_at", table_name="driver_offers")
    op.drop_index("ix_driver_offers_driver_id", table_name="driver_offers")
    op.drop_index("ix_driver_offers_status_created_at", table_name="driver_offers")
    op.drop_table("driver_offers")
