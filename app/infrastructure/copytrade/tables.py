"""
SQLAlchemy Core table definitions for the copytrade context.

Amounts use NUMERIC(20, 8) and are read back as Decimal.
Portfolio entry ids are monotonic integers so that ordering by id
is insertion order. Entries carry a version counter bumped on every
deduction, used as the optimistic guard for ledger writes.
"""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

AMOUNT = Numeric(20, 8, asdecimal=True)

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("role", String(20), nullable=False, default="user"),
    Column("account_balance", AMOUNT, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
)

copytrade_options = Table(
    "copytrade_options",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("trade_title", String(255), nullable=False),
    Column("trade_min", AMOUNT, nullable=False),
    Column("trade_max", AMOUNT, nullable=False),
    Column("trade_risk", String(20), nullable=False),
    Column("trade_roi_min", AMOUNT, nullable=False),
    Column("trade_roi_max", AMOUNT, nullable=False),
    Column("trade_duration", Integer, nullable=False),
)

portfolio_entries = Table(
    "portfolio_entries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(36), ForeignKey("users.id"), nullable=False, index=True),
    Column("token_name", String(32), nullable=False),
    Column("value", AMOUNT, nullable=False, default=0),
    Column("version", Integer, nullable=False, default=0),
    Column("updated_at", DateTime(timezone=True)),
    UniqueConstraint("user_id", "token_name", name="uq_portfolio_user_token"),
)

copytrade_purchases = Table(
    "copytrade_purchases",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id"), nullable=False, index=True),
    Column("option_id", String(36), ForeignKey("copytrade_options.id"), nullable=False),
    Column("trade_title", String(255), nullable=False),
    Column("trade_min", AMOUNT, nullable=False),
    Column("trade_max", AMOUNT, nullable=False),
    Column("trade_risk", String(20), nullable=False),
    Column("trade_roi_min", AMOUNT, nullable=False),
    Column("trade_roi_max", AMOUNT, nullable=False),
    Column("trade_duration", Integer, nullable=False),
    Column("initial_investment", AMOUNT, nullable=False),
    Column("trade_current_value", AMOUNT, nullable=False),
    Column("trade_profit_loss", AMOUNT, nullable=False, default=0),
    Column("trade_win_rate", AMOUNT),
    Column("trade_status", String(20), nullable=False, index=True),
    Column("approved_by", String(64)),
    Column("trade_approval_date", DateTime(timezone=True)),
    Column("trade_end_date", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

audit_logs = Table(
    "audit_logs",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("action", String(64), nullable=False, index=True),
    Column("resource_type", String(64), nullable=False),
    Column("resource_id", String(64)),
    Column("resource_name", String(255)),
    Column("actor_id", String(64)),
    Column("description", Text, nullable=False),
    Column("changes", JSON),
    Column("details", JSON),
    Column("created_at", DateTime(timezone=True), nullable=False),
)
