from __future__ import annotations

from ..extensions import db
from estoque_facil.time_utils import to_utc_z, utcnow


class Setting(db.Model):
    """
    Global key-value settings (one row per key).

    The only key read by the application today is `profitMargin`, stored
    as a decimal string fraction ("0.5" = 50%).
    """
    __tablename__ = "configuracoes"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column("chave", db.String(128), nullable=False, unique=True)
    value = db.Column("valor", db.Text, nullable=False)
    description = db.Column("descricao", db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "chave": self.key,
            "valor": self.value,
            "descricao": self.description,
            "updatedAt": to_utc_z(self.updated_at),
        }
