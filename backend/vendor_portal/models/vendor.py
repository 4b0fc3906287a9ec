from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, DateTime, ForeignKey, CheckConstraint, func
from .authz import Base


class Vendor(Base):
    """Registered seller together with its quota counters.

    The product count is deliberately not a column; it is always recomputed
    from ``products`` (see ``VendorsService.count_products``).
    """
    __tablename__ = 'vendors'
    DEFAULT_LIMIT = 5
    # fields a vendor may change on its own profile
    PROFILE_FIELDS = ('name', 'phone_number', 'store_location', 'username', 'logo_url')
    LIMIT_FIELDS = ('product_limit', 'edit_product_limit', 'delete_product_limit')
    # denormalized onto products
    DISPLAY_FIELDS = ('name', 'logo_url', 'store_location')

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False, index=True)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)
    store_location: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    gmail_account: Mapped[str] = mapped_column(String(150), nullable=False, unique=True, index=True)
    auth_identity_ref: Mapped[int] = mapped_column(ForeignKey('users.id'), nullable=False, unique=True, index=True)
    logo_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    slug: Mapped[Optional[str]] = mapped_column(String(160), nullable=True, unique=True, index=True)

    product_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_LIMIT)
    edit_product_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_LIMIT)
    delete_product_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_LIMIT)
    edit_product_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    delete_product_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('product_limit >= 0', name='ck_vendor_product_limit'),
        CheckConstraint('edit_product_limit >= 0', name='ck_vendor_edit_limit'),
        CheckConstraint('delete_product_limit >= 0', name='ck_vendor_delete_limit'),
        CheckConstraint('edit_product_used >= 0', name='ck_vendor_edit_used'),
        CheckConstraint('delete_product_used >= 0', name='ck_vendor_delete_used'),
    )

__all__ = ["Vendor"]
