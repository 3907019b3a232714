from __future__ import annotations

import uuid

from ..extensions import db
from estoque_facil.time_utils import to_utc_z, utcnow
from estoque_facil.validation import from_cents


class Sale(db.Model):
    """
    Units of a product sold by its owner.

    product_name is a snapshot taken at sale time. Deleting the product or
    the owning account removes the sale through ON DELETE CASCADE.
    """
    __tablename__ = "vendas"
    __table_args__ = (
        db.CheckConstraint("quantidade_vendida > 0", name="ck_vendas_quantidade_positive"),
        db.Index("ix_vendas_user_sold_at", "user_id", "sold_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.String(36), db.ForeignKey("produtos.id", ondelete="CASCADE"), nullable=False, index=True)

    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column("quantidade_vendida", db.Integer, nullable=False)

    # All amounts in centavos
    unit_price_cents = db.Column(db.Integer, nullable=False)
    total_cents = db.Column(db.BigInteger, nullable=False)

    sold_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    note = db.Column(db.Text, nullable=True)

    product = db.relationship("Product", back_populates="sales")

    def to_dict(self, include_product: bool = False) -> dict:
        data = {
            "id": self.id,
            "userId": self.user_id,
            "produtoId": self.product_id,
            "produtoNome": self.product_name,
            "quantidadeVendida": self.quantity,
            "precoVenda": from_cents(self.unit_price_cents),
            "valorTotal": from_cents(self.total_cents),
            "dataVenda": to_utc_z(self.sold_at),
            "observacoes": self.note,
        }
        if include_product and self.product is not None:
            data["produto"] = {
                "id": self.product.id,
                "nome": self.product.name,
                "precoCompra": from_cents(self.product.purchase_price_cents),
                "quantidadeDisponivel": self.product.available_quantity,
                "imagem": self.product.image,
            }
        return data
