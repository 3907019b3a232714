from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from flask import current_app, has_app_context

from ..extensions import db
from ..models import Setting
from ..validation import ValidationError, coerce_decimal


PROFIT_MARGIN_KEY = "profitMargin"
FALLBACK_PROFIT_MARGIN = Decimal("0.5")

MAX_PROFIT_MARGIN = Decimal("100")

DEFAULT_SETTINGS = [
    {
        "key": PROFIT_MARGIN_KEY,
        "value": "0.5",
        "description": "Margem de lucro padrão (50%)",
    },
]


class SettingsError(ValueError):
    pass


class SettingsValidationError(SettingsError, ValidationError):
    pass


def _default_margin() -> Decimal:
    if not has_app_context():
        return FALLBACK_PROFIT_MARGIN
    raw = current_app.config.get("DEFAULT_PROFIT_MARGIN")
    if raw is None:
        return FALLBACK_PROFIT_MARGIN
    try:
        return Decimal(str(raw))
    except InvalidOperation:
        return FALLBACK_PROFIT_MARGIN


def ensure_default_settings() -> int:
    """Insert missing default rows. Returns how many were added."""
    existing = {key for (key,) in db.session.query(Setting.key).all()}
    added = 0
    for row in DEFAULT_SETTINGS:
        if row["key"] in existing:
            continue
        db.session.add(Setting(key=row["key"], value=row["value"], description=row["description"]))
        added += 1
    if added:
        db.session.commit()
    return added


def get_margin() -> Decimal:
    """
    Current global profit margin as a fraction.

    Falls back to DEFAULT_PROFIT_MARGIN (0.5) if the row is absent or
    unparseable.
    """
    row = db.session.query(Setting).filter_by(key=PROFIT_MARGIN_KEY).first()
    if row is None:
        return _default_margin()
    try:
        return Decimal(row.value)
    except InvalidOperation:
        current_app.logger.warning("Invalid profitMargin setting %r; using default", row.value)
        return _default_margin()


def parse_margin(value: Any) -> Decimal:
    """Validate a client-supplied margin: a JSON number, 0 <= m <= 100."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SettingsValidationError("Margem de lucro inválida")
    try:
        margin = coerce_decimal(value, "Margem de lucro")
    except ValidationError:
        raise SettingsValidationError("Margem de lucro inválida")
    if margin < 0 or margin > MAX_PROFIT_MARGIN:
        raise SettingsValidationError("Margem de lucro inválida")
    return margin


def set_margin(value: Any) -> Decimal:
    """
    Upsert the profitMargin row.

    Existing products keep their suggested price; it is only recomputed
    when a product is next written.
    """
    margin = parse_margin(value)
    row = db.session.query(Setting).filter_by(key=PROFIT_MARGIN_KEY).first()
    if row is None:
        row = Setting(key=PROFIT_MARGIN_KEY, description=DEFAULT_SETTINGS[0]["description"])
        db.session.add(row)
    row.value = str(margin)
    db.session.commit()
    return margin


def suggested_price_cents(purchase_price_cents: int, margin: Decimal | None = None) -> int:
    """purchase × (1 + margin), rounded half-up to the centavo."""
    if margin is None:
        margin = get_margin()
    amount = Decimal(purchase_price_cents) * (Decimal(1) + margin)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
