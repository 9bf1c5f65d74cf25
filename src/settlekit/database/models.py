"""SQLAlchemy models for settlekit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Cash or credit account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    type = Column(String, nullable=False, default="bank")
    owner = Column(String, nullable=False, default="self")
    opening_balance = Column(Integer, nullable=False, default=0)
    opening_date = Column(Date, nullable=True)
    current_balance = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship(
        "Transaction", back_populates="account", foreign_keys="Transaction.account_id"
    )


class Category(Base):
    """Reporting category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, default="expense")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("name", "type", name="uq_category_name_type"),)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    payment_date = Column(Date, nullable=True)
    description = Column(String, nullable=False, default="")
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    total_amount = Column(Integer, nullable=False, default=0)
    is_cash_settled = Column(Boolean, default=False, nullable=False)
    settled_amount = Column(Integer, nullable=False, default=0)
    settlement_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    settlement_date = Column(Date, nullable=True)
    paid_by_other = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    account = relationship("Account", back_populates="transactions", foreign_keys=[account_id])
    lines = relationship(
        "TransactionLine",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionLine.id",
    )


class TransactionLine(Base):
    """Transaction line model."""

    __tablename__ = "transaction_lines"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    amount = Column(Integer, nullable=False)
    line_type = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    counterparty = Column(String, nullable=True, index=True)
    is_settled = Column(Boolean, default=False, nullable=False)
    settled_amount = Column(Integer, nullable=False, default=0)
    note = Column(String, nullable=True)
    amortization_months = Column(Integer, nullable=True)
    amortization_start = Column(Date, nullable=True)
    amortization_end = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transaction = relationship("Transaction", back_populates="lines")
    category = relationship("Category")
    settlement_items = relationship(
        "SettlementItem", back_populates="transaction_line", cascade="all, delete-orphan"
    )


class SettlementBalance(Base):
    """Per-counterparty receive/pay pool model."""

    __tablename__ = "settlement_balances"

    id = Column(Integer, primary_key=True)
    counterparty = Column(String, unique=True, nullable=False)
    receive_balance = Column(Integer, nullable=False, default=0)
    pay_balance = Column(Integer, nullable=False, default=0)


class Settlement(Base):
    """Settlement history model."""

    __tablename__ = "settlements"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    counterparty = Column(String, nullable=False, index=True)
    amount = Column(Integer, nullable=False, default=0)
    note = Column(String, nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    items = relationship(
        "SettlementItem",
        back_populates="settlement",
        cascade="all, delete-orphan",
        order_by="SettlementItem.id",
    )


class SettlementItem(Base):
    """Settlement item model linking a settlement to a transaction line."""

    __tablename__ = "settlement_items"

    id = Column(Integer, primary_key=True)
    settlement_id = Column(Integer, ForeignKey("settlements.id"), nullable=False)
    transaction_line_id = Column(Integer, ForeignKey("transaction_lines.id"), nullable=False)
    amount = Column(Integer, nullable=False)

    # Relationships
    settlement = relationship("Settlement", back_populates="items")
    transaction_line = relationship("TransactionLine", back_populates="settlement_items")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
