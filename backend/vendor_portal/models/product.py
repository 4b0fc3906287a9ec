from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, Numeric, Boolean, ForeignKey, DateTime, text
from typing import Optional

from .authz import Base


class Product(Base):
    __tablename__ = 'products'
    # product-specific fields writable through the catalog endpoints
    CONTENT_FIELDS = ('name', 'description', 'price', 'category', 'image_url', 'in_stock')

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    vendor_id: Mapped[int] = mapped_column(ForeignKey('vendors.id'), index=True, nullable=False)
    # snapshot of vendor display fields taken at write time
    vendor_name: Mapped[Optional[str]] = mapped_column(String(150))
    vendor_logo_url: Mapped[Optional[str]] = mapped_column(String(512))
    vendor_location: Mapped[Optional[str]] = mapped_column(String(255))

    name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    category: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(512))
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'))
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))
