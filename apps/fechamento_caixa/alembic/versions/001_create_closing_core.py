"""Create units, records, envelopes, ledger and fee tables."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001_create_closing_core"
down_revision = None
branch_labels = None
depends_on = None


payment_method_enum = postgresql.ENUM(
    "cash",
    "pix",
    "card_credit",
    "card_debit",
    "unpaid",
    name="payment_method",
    create_type=False,
)
payment_status_enum = postgresql.ENUM(
    "pending",
    "receivable",
    "paid_this_closing",
    name="payment_status",
    create_type=False,
)
payment_channel_enum = postgresql.ENUM(
    "cash", "pix", "card", name="payment_channel", create_type=False
)
envelope_status_enum = postgresql.ENUM(
    "pending",
    "issued",
    "reviewed",
    "reviewed_with_difference",
    name="envelope_status",
    create_type=False,
)
correlation_origin_enum = postgresql.ENUM(
    "import", "auto", "manual", name="correlation_origin", create_type=False
)
resolution_status_enum = postgresql.ENUM(
    "pending",
    "reconciled",
    "no_match",
    "ignored",
    name="resolution_status",
    create_type=False,
)

ALL_ENUMS = (
    payment_method_enum,
    payment_status_enum,
    payment_channel_enum,
    envelope_status_enum,
    correlation_origin_enum,
    resolution_status_enum,
)


def upgrade() -> None:
    """Apply schema upgrades."""
    bind = op.get_bind()
    for enum_type in ALL_ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "units",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("code", sa.String(length=8), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("code", name="uq_units_code"),
    )

    op.create_table(
        "envelopes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("code", sa.String(length=40), nullable=False),
        sa.Column(
            "unit_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("units.id"),
            nullable=False,
        ),
        sa.Column("envelope_date", sa.Date(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("channel", payment_channel_enum, nullable=False),
        sa.Column("expected_cash", sa.Numeric(12, 2), nullable=False),
        sa.Column("counted_cash", sa.Numeric(12, 2), nullable=False),
        sa.Column("difference", sa.Numeric(12, 2), nullable=False),
        sa.Column(
            "has_difference", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("status", envelope_status_enum, nullable=False),
        sa.Column("lis_codes", postgresql.JSONB(), nullable=False),
        sa.Column("record_count", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=120), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("label_issued_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("label_issued_by", sa.String(length=120), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(length=120), nullable=True),
        sa.UniqueConstraint("code", name="uq_envelopes_code"),
        sa.CheckConstraint("sequence > 0", name="ck_envelopes_sequence_positive"),
        sa.CheckConstraint(
            "expected_cash >= 0", name="ck_envelopes_expected_cash_non_negative"
        ),
        sa.CheckConstraint(
            "counted_cash >= 0", name="ck_envelopes_counted_cash_non_negative"
        ),
        sa.CheckConstraint(
            "record_count > 0", name="ck_envelopes_record_count_positive"
        ),
        sa.CheckConstraint(
            "status NOT IN ('reviewed', 'reviewed_with_difference') "
            "OR reviewed_at IS NOT NULL",
            name="ck_envelopes_reviewed_requires_timestamp",
        ),
    )
    op.create_index(
        "uq_envelopes_unit_date_sequence",
        "envelopes",
        ["unit_id", "envelope_date", "sequence"],
        unique=True,
    )
    op.create_index(
        "ix_envelopes_status_created_at",
        "envelopes",
        ["status", "created_at"],
        unique=False,
    )

    op.create_table(
        "envelope_annotations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "envelope_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("envelopes.id"),
            nullable=False,
        ),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("created_by", sa.String(length=120), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "pos_records",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "unit_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("units.id"),
            nullable=False,
        ),
        sa.Column("external_code", sa.String(length=64), nullable=False),
        sa.Column("service_date", sa.Date(), nullable=False),
        sa.Column("patient_name", sa.String(length=200), nullable=True),
        sa.Column("payer_id", sa.String(length=120), nullable=True),
        sa.Column("payment_method", payment_method_enum, nullable=False),
        sa.Column("gross_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("net_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("cash_component", sa.Numeric(12, 2), nullable=False),
        sa.Column("receivable_component", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
        sa.Column(
            "envelope_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("envelopes.id"),
            nullable=True,
        ),
        sa.Column("imported_by", sa.String(length=120), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "gross_amount >= 0", name="ck_pos_records_gross_amount_non_negative"
        ),
        sa.CheckConstraint(
            "net_amount >= 0", name="ck_pos_records_net_amount_non_negative"
        ),
        sa.CheckConstraint(
            "cash_component >= 0 AND receivable_component >= 0",
            name="ck_pos_records_components_non_negative",
        ),
        sa.CheckConstraint(
            "(payment_status = 'paid_this_closing' AND envelope_id IS NOT NULL) "
            "OR (payment_status != 'paid_this_closing' AND envelope_id IS NULL)",
            name="ck_pos_records_paid_requires_envelope",
        ),
    )
    op.create_index(
        "uq_pos_records_unit_external_code",
        "pos_records",
        ["unit_id", "external_code"],
        unique=True,
    )
    op.create_index(
        "ix_pos_records_unit_status_method",
        "pos_records",
        ["unit_id", "payment_status", "payment_method"],
        unique=False,
    )
    op.create_index(
        "ix_pos_records_unit_service_date",
        "pos_records",
        ["unit_id", "service_date"],
        unique=False,
    )

    op.create_table(
        "ledger_transactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "unit_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("units.id"),
            nullable=False,
        ),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(length=280), nullable=True),
        sa.Column("correlation_code", sa.String(length=64), nullable=True),
        sa.Column("correlation_origin", correlation_origin_enum, nullable=True),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("linked_by", sa.String(length=120), nullable=True),
        sa.Column("linked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_ledger_transactions_unit_date",
        "ledger_transactions",
        ["unit_id", "transaction_date"],
        unique=False,
    )
    op.create_index(
        "ix_ledger_transactions_correlation_code",
        "ledger_transactions",
        ["correlation_code"],
        unique=False,
    )

    op.create_table(
        "reconciliation_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "unit_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("units.id"),
            nullable=False,
        ),
        sa.Column("correlation_code", sa.String(length=64), nullable=False),
        sa.Column("log_date", sa.Date(), nullable=False),
        sa.Column(
            "transaction_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("ledger_transactions.id"),
            nullable=True,
        ),
        sa.Column(
            "record_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pos_records.id"),
            nullable=True,
        ),
        sa.Column("status", resolution_status_enum, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("actor_id", sa.String(length=120), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_reconciliation_logs_unit_code",
        "reconciliation_logs",
        ["unit_id", "correlation_code"],
        unique=False,
    )

    op.create_table(
        "card_fee_configs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "unit_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("units.id"),
            nullable=True,
        ),
        sa.Column("payment_method", payment_method_enum, nullable=False),
        sa.Column("fee_rate", sa.Numeric(6, 4), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "fee_rate >= 0 AND fee_rate < 1",
            name="ck_card_fee_configs_fee_rate_range",
        ),
        sa.CheckConstraint(
            "payment_method IN ('card_credit', 'card_debit')",
            name="ck_card_fee_configs_card_method",
        ),
    )
    op.create_index(
        "uq_card_fee_configs_unit_method",
        "card_fee_configs",
        ["unit_id", "payment_method"],
        unique=True,
    )


def downgrade() -> None:
    """Revert schema upgrades."""
    op.drop_index("uq_card_fee_configs_unit_method", table_name="card_fee_configs")
    op.drop_table("card_fee_configs")
    op.drop_index(
        "ix_reconciliation_logs_unit_code", table_name="reconciliation_logs"
    )
    op.drop_table("reconciliation_logs")
    op.drop_index(
        "ix_ledger_transactions_correlation_code", table_name="ledger_transactions"
    )
    op.drop_index("ix_ledger_transactions_unit_date", table_name="ledger_transactions")
    op.drop_table("ledger_transactions")
    op.drop_index("ix_pos_records_unit_service_date", table_name="pos_records")
    op.drop_index("ix_pos_records_unit_status_method", table_name="pos_records")
    op.drop_index("uq_pos_records_unit_external_code", table_name="pos_records")
    op.drop_table("pos_records")
    op.drop_table("envelope_annotations")
    op.drop_index("ix_envelopes_status_created_at", table_name="envelopes")
    op.drop_index("uq_envelopes_unit_date_sequence", table_name="envelopes")
    op.drop_table("envelopes")
    op.drop_table("units")

    bind = op.get_bind()
    for enum_type in reversed(ALL_ENUMS):
        enum_type.drop(bind, checkfirst=True)
