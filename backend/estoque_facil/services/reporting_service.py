# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import func

from ..extensions import db
from ..models import Product, Sale
from ..models.inventory import LOW_STOCK_RATIO
from ..validation import ValidationError, coerce_int, from_cents
from estoque_facil.time_utils import days_ago


TOP_MARGIN_LIMIT = 5
MAX_REPORT_DAYS = 3650


class ReportError(ValidationError):
    """Raised when report parameters are invalid."""
    pass


def parse_days(raw: str | None) -> int | None:
    if raw is None or str(raw).strip() == "":
        return None
    try:
        days = coerce_int(raw, "dias")
    except ValidationError:
        raise ReportError("Parâmetro dias inválido")
    if days <= 0 or days > MAX_REPORT_DAYS:
        raise ReportError("Parâmetro dias inválido")
    return days


def _margin_percent(purchase_cents: int, suggested_cents: int) -> float:
    if purchase_cents <= 0:
        return 0.0
    pct = Decimal(suggested_cents - purchase_cents) * 100 / Decimal(purchase_cents)
    return float(pct.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _products_since(query, days: int | None):
    if days:
        query = query.filter(Product.created_at >= days_ago(days))
    return query


def stock_summary(user_id: str, days: int | None = None) -> dict:
    """Valuation of the account's current stock, at cost and at suggested price."""
    query = db.session.query(
        func.count(Product.id),
        func.coalesce(func.sum(Product.available_quantity), 0),
        func.coalesce(func.sum(Product.available_quantity * Product.purchase_price_cents), 0),
        func.coalesce(func.sum(Product.available_quantity * Product.suggested_price_cents), 0),
    ).filter(Product.user_id == user_id)
    row = _products_since(query, days).one()

    count, units, cost_cents, potential_cents = (int(v or 0) for v in row)
    margin_cents = potential_cents - cost_cents

    return {
        "totalProdutos": count,
        "unidadesEmEstoque": units,
        "valorEstoqueCusto": from_cents(cost_cents),
        "valorPotencialVenda": from_cents(potential_cents),
        "margemPotencial": from_cents(margin_cents),
        "margemPotencialPercentual": _margin_percent(cost_cents, potential_cents) if cost_cents else 0.0,
    }


def top_margin_products(user_id: str, days: int | None = None, limit: int = TOP_MARGIN_LIMIT) -> list[dict]:
    query = db.session.query(Product).filter(Product.user_id == user_id)
    products = _products_since(query, days).all()
    ranked = sorted(
        products,
        key=lambda p: (-_margin_percent(p.purchase_price_cents, p.suggested_price_cents), p.name),
    )
    return [
        {
            "id": p.id,
            "nome": p.name,
            "precoCompra": from_cents(p.purchase_price_cents),
            "precoSugeridoVenda": from_cents(p.suggested_price_cents),
            "margemPercentual": _margin_percent(p.purchase_price_cents, p.suggested_price_cents),
        }
        for p in ranked[:limit]
    ]


def low_stock_products(user_id: str, days: int | None = None) -> list[dict]:
    """Products whose available stock is at or below LOW_STOCK_RATIO of purchased."""
    query = db.session.query(Product).filter(
        Product.user_id == user_id,
        Product.available_quantity <= Product.purchased_quantity * LOW_STOCK_RATIO,
    )
    products = (
        _products_since(query, days)
        .order_by(Product.available_quantity.asc(), Product.name.asc())
        .all()
    )
    return [
        {
            "id": p.id,
            "nome": p.name,
            "quantidadeComprada": p.purchased_quantity,
            "quantidadeDisponivel": p.available_quantity,
        }
        for p in products
    ]


def sales_summary(user_id: str, days: int | None = None) -> dict:
    query = db.session.query(
        func.count(Sale.id),
        func.coalesce(func.sum(Sale.quantity), 0),
        func.coalesce(func.sum(Sale.total_cents), 0),
    ).filter(Sale.user_id == user_id)

    if days:
        query = query.filter(Sale.sold_at >= days_ago(days))

    count, units, revenue_cents = (int(v or 0) for v in query.one())
    return {
        "periodoDias": days,
        "totalVendas": count,
        "unidadesVendidas": units,
        "faturamento": from_cents(revenue_cents),
    }


def summary(user_id: str, days: int | None = None) -> dict:
    """
    Dashboard summary for one account.

    With `days`, only products registered and sales made in the trailing
    window are considered.
    """
    return {
        "estoque": stock_summary(user_id, days),
        "maioresMargens": top_margin_products(user_id, days),
        "estoqueBaixo": low_stock_products(user_id, days),
        "vendas": sales_summary(user_id, days),
    }
