"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 003_offer_version (Alembic Migration)

Responsibilities:
  - driver_offers.version: contador de transiciones commiteadas por oferta
    (el UPDATE compare-and-set lo incrementa).
  - audit_events.target_version: versión de la oferta que produjo el evento;
    ordena la auditoría de una oferta por orden de commit aunque los eventos
    se escriban desde varios workers o salgan tarde del backlog.

Collaborators:
  - infrastructure/repositories/postgres/offer.py
  - infrastructure/repositories/postgres/audit_event.py
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "003_offer_version"
down_revision: Union[str, None] = "002_audit_events"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "driver_offers",
        sa.Column("version", sa.Integer, nullable=False, server_default=sa.text("1")),
    )
    op.create_check_constraint(
        "ck_driver_offers_version_positive", "driver_offers", "version >= 1"
    )

    op.add_column("audit_events", sa.Column("target_version", sa.Integer, nullable=True))
    op.create_index(
        "ix_audit_events_target_version",
        "audit_events",
        ["target_id", "target_version", "seq"],
    )


def downgrade() -> None:
    op.drop_index("ix_audit_events_target_version", table_name="audit_events")
    op.drop_column("audit_events", "target_version")
    op.drop_constraint(
        "ck_driver_offers_version_positive", "driver_offers", type_="check"
    )
    op.drop_column("driver_offers", "version")
