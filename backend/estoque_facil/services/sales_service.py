# Overview: Service-layer operations for sales; encapsulates business logic and database work.

"""
Sales Service

STOCK INVARIANT:
    0 <= available_quantity, always.
    Registering a sale decrements stock; cancelling restores it.

ATOMICITY:
    The stock decrement is a single conditional UPDATE:

        UPDATE produtos
           SET quantidade_disponivel = quantidade_disponivel - :q
         WHERE id = :id AND quantidade_disponivel >= :q

    If no row matches, the pending sale insert is rolled back and the
    request fails with InsufficientStockError. Two concurrent sales can
    never both succeed against stock that only covers one of them.

    Cancel restores stock and deletes the sale in the same transaction.
"""

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import Product, Sale
from ..validation import SaleInput, ValidationError
from .concurrency import run_in_transaction
from .tenant_service import owned_query, require_owned


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds available stock."""

    def __init__(self, message: str = "Estoque insuficiente"):
        super().__init__(message)


def _decrement_stock(product_id: str, quantity: int) -> bool:
    result = db.session.execute(
        update(Product)
        .where(Product.id == product_id, Product.available_quantity >= quantity)
        .values({Product.available_quantity: Product.available_quantity - quantity})
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _increment_stock(product_id: str, quantity: int) -> None:
    db.session.execute(
        update(Product)
        .where(Product.id == product_id)
        .values({Product.available_quantity: Product.available_quantity + quantity})
        .execution_options(synchronize_session=False)
    )


def list_sales(user_id: str) -> list[Sale]:
    """All sales of the account, newest first, product eagerly joined."""
    return (
        owned_query(Sale, user_id)
        .options(joinedload(Sale.product))
        .order_by(Sale.sold_at.desc(), Sale.id.asc())
        .all()
    )


def get_sale(user_id: str, sale_id: str) -> Sale:
    """
    Raises:
        NotFoundError: missing or owned by another account
    """
    return require_owned(Sale, sale_id, user_id)


def register_sale(user_id: str, data: SaleInput) -> Sale:
    """
    Record a sale and decrement the product's stock atomically.

    Raises:
        NotFoundError: product missing or owned by another account
        InsufficientStockError: quantity exceeds available stock
    """

    def _op() -> Sale:
        product = require_owned(Product, data.product_id, user_id, for_update=True)
        if product.available_quantity < data.quantity:
            raise InsufficientStockError()

        sale = Sale(
            user_id=user_id,
            product_id=product.id,
            product_name=product.name,
            quantity=data.quantity,
            unit_price_cents=data.unit_price_cents,
            total_cents=data.quantity * data.unit_price_cents,
            note=data.note,
        )
        db.session.add(sale)
        db.session.flush()

        if not _decrement_stock(product.id, data.quantity):
            raise InsufficientStockError()
        return sale

    sale = run_in_transaction(_op)
    db.session.expire_all()
    return sale


def cancel_sale(user_id: str, sale_id: str) -> dict:
    """
    Delete a sale and return its quantity to the product's stock.

    Returns the cancelled sale as a dict; the row no longer exists.

    Raises:
        NotFoundError: missing or owned by another account
    """

    def _op() -> dict:
        sale = require_owned(Sale, sale_id, user_id, for_update=True)
        snapshot = sale.to_dict()
        _increment_stock(sale.product_id, sale.quantity)
        db.session.delete(sale)
        return snapshot

    snapshot = run_in_transaction(_op)
    db.session.expire_all()
    return snapshot
