# anoma_explorer/services/models.py
# SPDX-License-Identifier: Apache-2.0
"""SQLAlchemy models for the explorer's own settings tables."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker
from sqlalchemy.pool import StaticPool


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    inserted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class Network(TimestampMixin, Base):
    __tablename__ = "networks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Slug such as "eth-mainnet"; contract addresses refer to networks by it.
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(100))
    chain_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    explorer_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rpc_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_testnet: Mapped[bool] = mapped_column(Boolean, default=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True)


class Protocol(TimestampMixin, Base):
    __tablename__ = "protocols"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    github_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    contract_addresses: Mapped[list[ContractAddress]] = relationship(
        back_populates="protocol",
        cascade="all, delete-orphan",
        order_by="ContractAddress.id",
    )


class ContractAddress(TimestampMixin, Base):
    __tablename__ = "contract_addresses"
    __table_args__ = (
        UniqueConstraint(
            "protocol_id", "category", "version", "network", name="contract_addresses_unique_idx"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    protocol_id: Mapped[int] = mapped_column(
        ForeignKey("protocols.id", ondelete="CASCADE"), index=True
    )
    category: Mapped[str] = mapped_column(String(100))
    version: Mapped[str] = mapped_column(String(50))
    network: Mapped[str] = mapped_column(String(100))
    # Always stored lower-cased.
    address: Mapped[str] = mapped_column(String(42))
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    protocol: Mapped[Protocol] = relationship(back_populates="contract_addresses")


class AppSetting(TimestampMixin, Base):
    __tablename__ = "app_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


def make_session_factory(database_url: str) -> sessionmaker:
    """Engine + session factory for `database_url`, creating tables if missing.

    Sessions keep loaded attributes after commit so rows can be handed to
    pages once the session is closed.
    """
    kwargs: dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty database.
            kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, **kwargs)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
