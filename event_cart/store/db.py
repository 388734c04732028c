from __future__ import annotations

import logging
import time
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
)
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from event_cart.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url

engine = create_engine(
    DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, future=True)
Base = declarative_base()


class PackageOrm(Base):
    __tablename__ = "packages"
    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    base_price = Column(Numeric(12, 2), nullable=False)
    per_guest_price = Column(Numeric(12, 2), nullable=False, default=0)
    deleted = Column(Boolean, nullable=False, default=False)

    add_ons = relationship(
        "AddOnOptionOrm",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="AddOnOptionOrm.id",
        lazy="selectin",
    )
    features = relationship(
        "IncludedFeatureOrm",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="IncludedFeatureOrm.id",
        lazy="selectin",
    )


class AddOnOptionOrm(Base):
    __tablename__ = "package_add_ons"
    id = Column(Integer, primary_key=True)
    package_id = Column(Integer, ForeignKey("packages.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    max_quantity = Column(Integer, nullable=False, default=1)

    package = relationship("PackageOrm", back_populates="add_ons")


class IncludedFeatureOrm(Base):
    __tablename__ = "package_features"
    id = Column(Integer, primary_key=True)
    package_id = Column(Integer, ForeignKey("packages.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    is_removable = Column(Boolean, nullable=False, default=False)

    package = relationship("PackageOrm", back_populates="features")


class ServiceOrm(Base):
    __tablename__ = "services"
    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    fixed_price = Column(Numeric(12, 2), nullable=False)
    deleted = Column(Boolean, nullable=False, default=False)


class CartItemOrm(Base):
    __tablename__ = "cart_items"
    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    item_kind = Column(String(16), nullable=False, default="package")
    package_id = Column(Integer, ForeignKey("packages.id", ondelete="SET NULL"), nullable=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="SET NULL"), nullable=True)
    guests = Column(Integer, nullable=False, default=1)
    event_date = Column(String(32), nullable=False)
    location = Column(String(255), nullable=False, default="")
    customization = Column(Text, nullable=False, default="")
    # snapshots taken when the row was written: [{"addOnId", "name", "price", "quantity"}]
    selected_add_ons = Column(JSON, nullable=False, default=list)
    # [{"name", "price"}]
    removed_features = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    package = relationship("PackageOrm", lazy="joined")
    service = relationship("ServiceOrm", lazy="joined")


def init_db(attempts: int = 30) -> None:
    for attempt in range(1, attempts + 1):
        try:
            Base.metadata.create_all(bind=engine)
            return
        except OperationalError:
            if attempt == attempts:
                raise
            logger.warning("database not ready (attempt %d/%d), retrying", attempt, attempts)
            time.sleep(1)
