from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import select, or_, cast, String
from sqlalchemy.exc import SQLAlchemyError
from vendor_portal import get_db
from vendor_portal.errors import StoreError
from vendor_portal.models.product import Product

log = logging.getLogger(__name__)

WRITABLE_FIELDS = Product.CONTENT_FIELDS + ('vendor_id', 'vendor_name', 'vendor_logo_url', 'vendor_location')


class ProductStore:
    """CRUD over ``products``. Failures surface as ``StoreError`` with a reason code."""

    def __init__(self, session_factory=get_db):
        self._session_factory = session_factory

    @property
    def session(self):
        return self._session_factory()

    def _commit(self, operation: str):
        session = self.session
        try:
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            log.error('product %s failed: %s', operation, e)
            raise StoreError('unavailable', f'product {operation} failed') from e

    def _query(self, stmt, what: str):
        try:
            return self.session.execute(stmt)
        except SQLAlchemyError as e:
            log.error('%s read failed: %s', what, e)
            raise StoreError('unavailable', f'{what} read failed') from e

    def get_product(self, product_id: int) -> Optional[Product]:
        return self._query(select(Product).where(Product.id==product_id).execution_options(populate_existing=True), f'product {product_id}').scalar_one_or_none()

    def _require(self, product_id: int) -> Product:
        product = self.get_product(product_id)
        if product is None:
            raise StoreError('not-found', f'product {product_id} not found')
        return product

    def list_products(self, vendor_id: Optional[int] = None, search: Optional[str] = None) -> List[Product]:
        q = select(Product)
        if vendor_id is not None:
            q = q.where(Product.vendor_id==vendor_id)
        if search:
            q = q.where(or_(Product.name.ilike(f'%{search}%'), cast(Product.id, String)==search))
        return list(self._query(q.order_by(Product.id.asc()), 'product list').scalars())

    def create_product(self, fields: Dict[str, Any]) -> Product:
        product = Product(**{k: v for k, v in fields.items() if k in WRITABLE_FIELDS})
        self.session.add(product)
        self._commit('create')
        return product

    def update_product(self, product_id: int, fields: Dict[str, Any]) -> Product:
        product = self._require(product_id)
        if fields.get('vendor_id', product.vendor_id) != product.vendor_id:
            raise StoreError('permission-denied', 'vendor_id cannot change after creation')
        for key, value in fields.items():
            if key in WRITABLE_FIELDS:
                setattr(product, key, value)
        self._commit('update')
        return product

    def delete_product(self, product_id: int):
        product = self._require(product_id)
        self.session.delete(product)
        self._commit('delete')


__all__ = ['ProductStore', 'WRITABLE_FIELDS']
