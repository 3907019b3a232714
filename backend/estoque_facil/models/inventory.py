from __future__ import annotations

import uuid

from ..extensions import db
from estoque_facil.time_utils import to_utc_z, utcnow
from estoque_facil.validation import from_cents


# Low-stock threshold: available at or below this share of purchased
LOW_STOCK_RATIO = 0.2


class Product(db.Model):
    """
    Inventory item owned by exactly one account.

    Prices are stored in centavos. suggested_price_cents is computed at
    write time from the global margin and is NOT re-derived when the margin
    later changes.

    available_quantity only moves through sales (down) and sale
    cancellations (up), plus the proportional rescale on purchased-quantity
    updates.
    """
    __tablename__ = "produtos"
    __table_args__ = (
        db.CheckConstraint("quantidade_disponivel >= 0", name="ck_produtos_disponivel_nonnegative"),
        db.Index("ix_produtos_user_created", "user_id", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    supplier = db.Column(db.String(255), nullable=True)

    purchase_price_cents = db.Column(db.Integer, nullable=False)
    suggested_price_cents = db.Column(db.BigInteger, nullable=False)

    purchased_quantity = db.Column(db.Integer, nullable=False)
    available_quantity = db.Column("quantidade_disponivel", db.Integer, nullable=False)

    # Generated filename under UPLOAD_FOLDER
    image = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    owner = db.relationship("User", back_populates="products")
    sales = db.relationship(
        "Sale",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_low_stock(self) -> bool:
        if not self.purchased_quantity:
            return False
        return self.available_quantity <= self.purchased_quantity * LOW_STOCK_RATIO

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "nome": self.name,
            "fornecedor": self.supplier,
            "precoCompra": from_cents(self.purchase_price_cents),
            "precoSugeridoVenda": from_cents(self.suggested_price_cents),
            "quantidadeComprada": self.purchased_quantity,
            "quantidadeDisponivel": self.available_quantity,
            "imagem": self.image,
            "dataCadastro": to_utc_z(self.created_at),
        }
