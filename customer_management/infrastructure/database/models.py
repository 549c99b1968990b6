# pylint: disable=too-few-public-methods
"""
SQLAlchemy database models for the customer management service
"""

from datetime import datetime
from typing import Optional, Type

from sqlalchemy import DateTime, Index, Integer, String, text
from sqlalchemy.orm import DeclarativeMeta, Mapped, declarative_base, mapped_column

# Create declarative base with proper type annotation
_Base = declarative_base()

# Type alias for mypy
Base: Type[DeclarativeMeta] = _Base


class Customer(Base):
    """Customer model, one row per aggregate including soft-deleted ones"""
    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str] = mapped_column(String(15), nullable=False)

    # Address
    street: Mapped[str] = mapped_column(String(200), nullable=False)
    number: Mapped[str] = mapped_column(String(20), nullable=False)
    complement: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    neighborhood: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    zip_code: Mapped[str] = mapped_column(String(8), nullable=False)
    country: Mapped[str] = mapped_column(String(50), nullable=False)

    customer_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        # Email is unique among customers that are not deleted
        Index(
            "ux_customers_email_not_deleted",
            "email",
            unique=True,
            sqlite_where=text("status != 'deleted'"),
            postgresql_where=text("status != 'deleted'"),
        ),
        Index("ix_customers_name", "first_name", "last_name"),
    )

    def __repr__(self) -> str:
        return f"<CustomerModel id={self.id} email={self.email} status={self.status}>"
