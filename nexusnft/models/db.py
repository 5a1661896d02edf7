"""
SQLAlchemy ORM models for the token registry ledger.

Models mirror the dataclass models but add database persistence.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CollectionDB(Base):
    """
    One deployed collection.

    Holds the counter, base URI and freeze latch. The owner is set once at
    deployment and never changes.
    """

    __tablename__ = "collections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    address: Mapped[str] = mapped_column(String(42), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    symbol: Mapped[str] = mapped_column(String(64))
    owner: Mapped[str] = mapped_column(String(42), index=True)
    next_token_id: Mapped[int] = mapped_column(Integer, default=1)
    base_uri: Mapped[str] = mapped_column(Text, default="")
    frozen: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    tokens: Mapped[list["TokenDB"]] = relationship(
        back_populates="collection", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<CollectionDB(address={self.address}, name={self.name})>"


class TokenDB(Base):
    """
    A minted token.

    Rows are only ever inserted by mint and updated by transfer/approve;
    there is no burn.
    """

    __tablename__ = "tokens"
    __table_args__ = (UniqueConstraint("collection_id", "token_id", name="uq_collection_token"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collections.id", ondelete="CASCADE"), index=True
    )
    token_id: Mapped[int] = mapped_column(Integer, index=True)
    owner: Mapped[str] = mapped_column(String(42), index=True)
    approved: Mapped[str | None] = mapped_column(String(42), nullable=True)

    collection: Mapped["CollectionDB"] = relationship(back_populates="tokens")

    def __repr__(self) -> str:
        return f"<TokenDB(token_id={self.token_id}, owner={self.owner})>"


class OperatorApprovalDB(Base):
    """Operator approval granted by a holder over all of their tokens."""

    __tablename__ = "operator_approvals"
    __table_args__ = (
        UniqueConstraint("collection_id", "owner", "operator", name="uq_collection_operator"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collections.id", ondelete="CASCADE"), index=True
    )
    owner: Mapped[str] = mapped_column(String(42))
    operator: Mapped[str] = mapped_column(String(42))
    approved: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<OperatorApprovalDB(owner={self.owner}, operator={self.operator})>"


class TransactionDB(Base):
    """
    A committed registry mutation.

    The autoincrement id is the ledger sequence number and doubles as
    the block number reported in receipts.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tx_hash: Mapped[str] = mapped_column(String(66), unique=True, index=True)
    contract_address: Mapped[str] = mapped_column(String(42), index=True)
    method: Mapped[str] = mapped_column(String(64))
    sender: Mapped[str] = mapped_column(String(42))
    status: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    events: Mapped[list["EventDB"]] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="EventDB.log_index",
    )

    def __repr__(self) -> str:
        return f"<TransactionDB(tx_hash={self.tx_hash}, method={self.method})>"


class EventDB(Base):
    """A notification emitted by a registry mutation."""

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), index=True
    )
    contract_address: Mapped[str] = mapped_column(String(42), index=True)
    log_index: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(64), index=True)

    # Event arguments; large integers are stored as decimal strings
    args: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    transaction: Mapped["TransactionDB"] = relationship(back_populates="events")

    def __repr__(self) -> str:
        return f"<EventDB(name={self.name}, log_index={self.log_index})>"
