from __future__ import annotations

import uuid

from ..extensions import db
from estoque_facil.time_utils import to_utc_z, utcnow


DOCUMENT_TYPES = ("cpf", "cnpj")


def _new_id() -> str:
    return str(uuid.uuid4())


class User(db.Model):
    """
    Registered account (tenant). Owns products and sales.

    LIFECYCLE:
    - Created pending: is_approved=False, is_admin=False, is_blocked=False
    - Approved by an admin (approved_by / approved_at stamped)
    - Blocking is orthogonal to approval and can be toggled in either state
    - Never returns from approved to pending; removal is a hard delete that
      cascades to produtos and vendas at the database level
    """
    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint("tipo_documento IN ('cpf', 'cnpj')", name="ck_users_tipo_documento"),
        db.Index("ix_users_pending", "is_approved", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_new_id)

    username = db.Column(db.String(64), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    full_name = db.Column(db.String(255), nullable=False)
    document = db.Column(db.String(14), nullable=False, unique=True)
    document_type = db.Column("tipo_documento", db.String(4), nullable=False)

    # Python-side default, microsecond precision
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    approved_by = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    is_blocked = db.Column(db.Boolean, nullable=False, default=False)
    block_reason = db.Column(db.Text, nullable=True)
    blocked_at = db.Column(db.DateTime(timezone=True), nullable=True)

    approver = db.relationship("User", remote_side=[id], foreign_keys=[approved_by])
    products = db.relationship(
        "Product",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "nomeCompleto": self.full_name,
            "documento": self.document,
            "tipoDocumento": self.document_type,
            "dataCadastro": to_utc_z(self.created_at),
            "isAdmin": bool(self.is_admin),
            "isApproved": bool(self.is_approved),
            "approvedBy": self.approved_by,
            "approvedAt": to_utc_z(self.approved_at),
            "isBlocked": bool(self.is_blocked),
            "blockReason": self.block_reason,
            "blockedAt": to_utc_z(self.blocked_at),
        }

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "nomeCompleto": self.full_name,
        }
