"""initial ledger schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(20, 8)
REQUEST_STATUS = ("PENDING", "APPROVED", "REJECTED")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("USER", "ADMIN", name="userrole"), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("referral_code", sa.String(16), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role_active", "users", ["role", "is_active"], unique=False)

    op.create_table(
        "wallets",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("total_deposit", MONEY, nullable=False, server_default="0"),
        sa.Column("daily_earnings", MONEY, nullable=False, server_default="0"),
        sa.Column("total_profit", MONEY, nullable=False, server_default="0"),
        sa.Column("last_earnings_update", sa.DateTime(timezone=True), nullable=True),
        sa.Column("nft_maturity_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("last_withdrawal_date", sa.Date, nullable=True),
        sa.Column("deposit_batch_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("first_deposit_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("latest_deposit_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version_id", sa.Integer, nullable=False, server_default="1"),
        sa.CheckConstraint("daily_earnings >= 0", name="ck_wallets_daily_earnings_non_negative"),
        sa.CheckConstraint("total_profit >= 0", name="ck_wallets_total_profit_non_negative"),
        sa.CheckConstraint("total_deposit >= 0", name="ck_wallets_total_deposit_non_negative"),
        *_timestamps(),
    )
    op.create_index("ix_wallets_user_id", "wallets", ["user_id"], unique=False)
    op.create_index("ix_wallets_is_active", "wallets", ["is_active"], unique=False)

    op.create_table(
        "wallet_ledger",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("wallet_id", sa.Integer, sa.ForeignKey("wallets.id"), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("entry_type", sa.Enum("CREDIT", "DEBIT", name="ledgertype"), nullable=False),
        sa.Column(
            "category",
            sa.Enum(
                "PRINCIPAL",
                "ACCRUAL",
                "PROFIT_TRANSFER",
                "WITHDRAWAL",
                "PRINCIPAL_RELEASE",
                "REFERRAL_REWARD",
                name="ledgercategory",
            ),
            nullable=False,
        ),
        sa.Column("reference", sa.String(64), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_wallet_ledger_wallet_id_type", "wallet_ledger", ["wallet_id", "entry_type"], unique=False)
    op.create_index("ix_wallet_ledger_reference", "wallet_ledger", ["reference"], unique=False)

    op.create_table(
        "deposits",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("blockchain", sa.String(16), nullable=False),
        sa.Column("deposit_address", sa.String(128), nullable=False),
        sa.Column("transaction_screenshot", sa.String(255), nullable=True),
        sa.Column("status", sa.Enum(*REQUEST_STATUS, name="requeststatus"), nullable=False),
        sa.Column("admin_notes", sa.String(255), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_deposits_user_status", "deposits", ["user_id", "status"], unique=False)
    op.create_index("ix_deposits_status", "deposits", ["status"], unique=False)

    op.create_table(
        "nft_deposits",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("deposit_id", sa.Integer, sa.ForeignKey("deposits.id"), nullable=False, unique=True),
        sa.Column("batch_number", sa.Integer, nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("deposit_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("maturity_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_matured", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("is_withdrawn", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("released_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "batch_number", name="uq_nft_deposits_user_batch"),
        *_timestamps(),
    )
    op.create_index("ix_nft_deposits_user_open", "nft_deposits", ["user_id", "is_withdrawn"], unique=False)
    op.create_index("ix_nft_deposits_maturity", "nft_deposits", ["is_matured", "maturity_date"], unique=False)

    op.create_table(
        "withdrawals",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("wallet_address", sa.String(128), nullable=False),
        sa.Column("blockchain", sa.String(16), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*REQUEST_STATUS, name="requeststatus", create_type=False),
            nullable=False,
        ),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_withdrawals_user_status", "withdrawals", ["user_id", "status"], unique=False)
    op.create_index("ix_withdrawals_status", "withdrawals", ["status"], unique=False)

    op.create_table(
        "referrals",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("referrer_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("referred_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("referral_code", sa.String(16), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "QUALIFIED", "REWARDED", name="referralstatus"),
            nullable=False,
        ),
        sa.Column("qualification_amount", MONEY, nullable=True),
        sa.Column("qualification_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reward_amount", MONEY, nullable=True),
        sa.Column("reward_paid", sa.Boolean, nullable=False, server_default=sa.text("false")),
        *_timestamps(),
    )
    op.create_index("ix_referrals_referrer", "referrals", ["referrer_id"], unique=False)

    op.create_table(
        "admin_settings",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("setting_key", sa.String(64), nullable=False),
        sa.Column("setting_value", sa.String(512), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_admin_settings_setting_key", "admin_settings", ["setting_key"], unique=True)


def downgrade():
    op.drop_table("admin_settings")
    op.drop_table("referrals")
    op.drop_table("withdrawals")
    op.drop_table("nft_deposits")
    op.drop_table("deposits")
    op.drop_table("wallet_ledger")
    op.drop_table("wallets")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS referralstatus")
    op.execute("DROP TYPE IF EXISTS requeststatus")
    op.execute("DROP TYPE IF EXISTS ledgercategory")
    op.execute("DROP TYPE IF EXISTS ledgertype")
    op.execute("DROP TYPE IF EXISTS userrole")
