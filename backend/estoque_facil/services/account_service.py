# Overview: Service-layer operations for account lifecycle; encapsulates business logic and database work.

"""
Account lifecycle: bootstrap admin, approval, rejection, blocking, deletion.

STATE MACHINE (per account):
    Pending --approve--> Approved
    Pending --reject---> (deleted)
    Approved --delete--> (deleted)
    Blocked flag: set/cleared independently in either state; while set,
    login is refused.

There is no transition from Approved back to Pending. Admin accounts can
be neither blocked nor deleted through this service.

All mutations are single-row updates committed immediately. Deleting an
account relies on ON DELETE CASCADE for its produtos and vendas.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product, User
from ..validation import NotFoundError, clean_optional_text
from . import upload_service
from .auth_service import ForbiddenError
from estoque_facil.time_utils import utcnow


MAX_BLOCK_REASON_LENGTH = 500


def _get_user(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("Usuário não encontrado")
    return user


def get_profile(user_id: str) -> User:
    return _get_user(user_id)


def ensure_first_admin() -> User | None:
    """
    Idempotent bootstrap: if no admin exists, promote the earliest-created
    account to admin + approved.

    Returns the promoted account, or None when an admin already exists or
    there are no accounts yet.
    """
    if db.session.query(User.id).filter(User.is_admin.is_(True)).first():
        return None

    first = db.session.query(User).order_by(User.created_at.asc(), User.id.asc()).first()
    if first is None:
        return None

    first.is_admin = True
    if not first.is_approved:
        first.is_approved = True
        first.approved_at = utcnow()
    db.session.commit()

    current_app.logger.info("Promoted first account %s to administrator", first.username)
    return first


def list_pending() -> list[User]:
    """Accounts awaiting approval, oldest first."""
    return (
        db.session.query(User)
        .filter(User.is_approved.is_(False))
        .order_by(User.created_at.asc())
        .all()
    )


def list_all() -> list[User]:
    """Every account, newest first."""
    return db.session.query(User).order_by(User.created_at.desc()).all()


def approve_user(admin_id: str, target_id: str) -> User:
    """
    Approve a pending account.

    Raises:
        NotFoundError: no such account, or it is already approved
    """
    user = db.session.get(User, target_id)
    if not user or user.is_approved:
        raise NotFoundError("Usuário não encontrado ou já aprovado")

    user.is_approved = True
    user.approved_by = admin_id
    user.approved_at = utcnow()
    db.session.commit()

    current_app.logger.info("User %s approved by %s", user.username, admin_id)
    return user


def reject_user(admin_id: str, target_id: str) -> dict:
    """
    Hard-delete a pending account.

    Already-approved accounts cannot be rejected; use delete_user.

    Raises:
        NotFoundError: no such account, or it is already approved
    """
    user = db.session.get(User, target_id)
    if not user or user.is_approved:
        raise NotFoundError("Usuário não encontrado ou já aprovado")

    summary = user.to_summary()
    _delete_with_images(user)

    current_app.logger.info("User %s rejected by %s", summary["username"], admin_id)
    return summary


def block_user(admin_id: str, target_id: str, reason: str | None = None) -> User:
    """
    Raises:
        NotFoundError: no such account
        ForbiddenError: target is an admin
        ValidationError: reason longer than MAX_BLOCK_REASON_LENGTH
    """
    user = _get_user(target_id)
    if user.is_admin:
        raise ForbiddenError("Não é possível bloquear um administrador")

    reason = clean_optional_text(reason, MAX_BLOCK_REASON_LENGTH)

    user.is_blocked = True
    user.block_reason = reason
    user.blocked_at = utcnow()
    db.session.commit()

    current_app.logger.info("User %s blocked by %s", user.username, admin_id)
    return user


def unblock_user(admin_id: str, target_id: str) -> User:
    user = _get_user(target_id)

    user.is_blocked = False
    user.block_reason = None
    user.blocked_at = None
    db.session.commit()

    current_app.logger.info("User %s unblocked by %s", user.username, admin_id)
    return user


def delete_user(admin_id: str, target_id: str) -> dict:
    """
    Hard-delete a non-admin account and, through cascades, its data.

    Raises:
        NotFoundError: no such account
        ForbiddenError: target is an admin
    """
    user = _get_user(target_id)
    if user.is_admin:
        raise ForbiddenError("Não é possível excluir um administrador")

    summary = user.to_summary()
    _delete_with_images(user)

    current_app.logger.info("User %s deleted by %s", summary["username"], admin_id)
    return summary


def _delete_with_images(user: User) -> None:
    images = [
        image for (image,) in
        db.session.query(Product.image).filter(Product.user_id == user.id, Product.image.isnot(None)).all()
    ]

    db.session.delete(user)
    db.session.commit()

    for image in images:
        upload_service.remove_image(image)
