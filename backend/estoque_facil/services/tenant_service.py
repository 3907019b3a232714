"""
Row-ownership helpers.

WHY: Every product and sale belongs to exactly one account. All services
resolve entities through require_owned() before reading or mutating them,
so "missing" and "owned by someone else" are the same NotFoundError and
other tenants' ids cannot be probed.

USAGE:
    from estoque_facil.services.tenant_service import require_owned

    product = require_owned(Product, product_id, g.current_user.id)
"""

from ..extensions import db
from ..models import Product, Sale
from ..validation import NotFoundError


NOT_FOUND_MESSAGES = {
    Product: "Produto não encontrado",
    Sale: "Venda não encontrada",
}


def belongs_to(entity, user_id: str) -> bool:
    """True if `entity` is owned by `user_id`."""
    return entity is not None and entity.user_id == user_id


def require_owned(model, entity_id: str, user_id: str, *, for_update: bool = False):
    """
    Load `model` by id and check ownership.

    Raises:
        NotFoundError if the row does not exist or belongs to another account
    """
    query = db.session.query(model).filter(model.id == entity_id, model.user_id == user_id)
    if for_update:
        # Honored by row-locking databases; SQLite serializes writers anyway.
        query = query.with_for_update()
    entity = query.first()

    if not belongs_to(entity, user_id):
        raise NotFoundError(NOT_FOUND_MESSAGES.get(model, "Registro não encontrado"))
    return entity


def owned_query(model, user_id: str):
    """Base query restricted to one account's rows."""
    return db.session.query(model).filter(model.user_id == user_id)
