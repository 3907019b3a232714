# backend/estoque_facil/services/products_service.py
"""
Products Service with per-account ownership

All operations are scoped to the owning account through
tenant_service.require_owned / owned_query. A product owned by another
account is reported exactly like a missing one.

PRICING: suggested_price_cents = purchase_price_cents × (1 + margin), where
margin is the global setting at the moment of the write.
"""
from __future__ import annotations

from werkzeug.datastructures import FileStorage

from ..extensions import db
from ..models import Product
from ..validation import ProductInput, ValidationError
from . import settings_service, upload_service
from .tenant_service import owned_query, require_owned


def rescale_available(available: int, old_purchased: int, new_purchased: int) -> int:
    """
    Keep the available/purchased ratio when purchased quantity changes.

    floor(available × new / old), in exact integer arithmetic.
    """
    if old_purchased <= 0:
        return min(available, new_purchased)
    return (available * new_purchased) // old_purchased


def list_products(user_id: str) -> list[Product]:
    """All products owned by the account, most recent first."""
    return (
        owned_query(Product, user_id)
        .order_by(Product.created_at.desc(), Product.id.asc())
        .all()
    )


def get_product(user_id: str, product_id: str) -> Product:
    """
    Raises:
        NotFoundError: missing or owned by another account
    """
    return require_owned(Product, product_id, user_id)


def create_product(user_id: str, data: ProductInput, image: FileStorage | None = None) -> Product:
    """
    Create a product with available_quantity = purchased_quantity.

    Raises:
        ValidationError: nome, precoCompra or quantidadeComprada missing
    """
    if data.name is None or data.purchase_price_cents is None or data.purchased_quantity is None:
        raise ValidationError("Nome, preço de compra e quantidade são obrigatórios")

    margin = settings_service.get_margin()
    image_name = upload_service.save_image(image)

    product = Product(
        user_id=user_id,
        name=data.name,
        supplier=data.supplier,
        purchase_price_cents=data.purchase_price_cents,
        suggested_price_cents=settings_service.suggested_price_cents(data.purchase_price_cents, margin),
        purchased_quantity=data.purchased_quantity,
        available_quantity=data.purchased_quantity,
        image=image_name,
    )

    db.session.add(product)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        upload_service.remove_image(image_name)
        raise
    return product


def update_product(
    user_id: str,
    product_id: str,
    data: ProductInput,
    image: FileStorage | None = None,
) -> Product:
    """
    Partial update. Unsupplied fields keep their value.

    The suggested price is always recomputed with the current margin. A new
    image replaces the previous one, which is removed best-effort.

    Raises:
        NotFoundError: missing or owned by another account
    """
    product = require_owned(Product, product_id, user_id)
    new_image = upload_service.save_image(image)

    if data.name is not None:
        product.name = data.name

    if data.supplier_supplied:
        product.supplier = data.supplier

    if data.purchase_price_cents is not None:
        product.purchase_price_cents = data.purchase_price_cents

    if data.purchased_quantity is not None and data.purchased_quantity != product.purchased_quantity:
        product.available_quantity = rescale_available(
            product.available_quantity,
            product.purchased_quantity,
            data.purchased_quantity,
        )
        product.purchased_quantity = data.purchased_quantity

    product.suggested_price_cents = settings_service.suggested_price_cents(product.purchase_price_cents)

    old_image = None
    if new_image:
        old_image = product.image
        product.image = new_image

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        upload_service.remove_image(new_image)
        raise

    upload_service.remove_image(old_image)
    return product


def delete_product(user_id: str, product_id: str) -> None:
    """
    Delete a product; its sales go with it (ON DELETE CASCADE).

    The image file is removed best-effort after the row is gone.

    Raises:
        NotFoundError: missing or owned by another account
    """
    product = require_owned(Product, product_id, user_id)
    image = product.image

    db.session.delete(product)
    db.session.commit()

    upload_service.remove_image(image)
