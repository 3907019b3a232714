from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Mapping


# Maximum price: R$ 9.999.999,99 (999,999,999 centavos)
MAX_PRICE_CENTS = 999_999_999
MAX_QUANTITY = 1_000_000
MAX_NOTE_LENGTH = 1000

CENT = Decimal("0.01")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level uniqueness conflict (e.g., duplicate username)."""


class NotFoundError(LookupError):
    """404-level: entity absent or owned by another account."""


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def require_object(payload: Any) -> Mapping:
    """JSON bodies must be objects; a missing body counts as empty."""
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValidationError("Corpo da requisição inválido")
    return payload


def require_fields(payload: Mapping, fields: list[str], message: str) -> None:
    """Raise ValidationError(message) when any of `fields` is missing or blank."""
    if any(_is_blank(payload.get(f)) for f in fields):
        raise ValidationError(message)


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer coercion for JSON numbers and multipart strings.

    Rejects booleans, decimals and scientific notation.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} deve ser um número inteiro")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{field} deve ser um número inteiro")
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped or "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{field} deve ser um número inteiro")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} deve ser um número inteiro")
    raise ValidationError(f"{field} deve ser um número inteiro")


def coerce_decimal(value: Any, field: str) -> Decimal:
    """Parse a JSON number or a form string ("10.50" or "10,50") into a Decimal."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} deve ser numérico")
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        raise ValidationError(f"{field} deve ser numérico")
    try:
        parsed = Decimal(value.strip().replace(",", "."))
    except InvalidOperation:
        raise ValidationError(f"{field} deve ser numérico")
    if not parsed.is_finite():
        raise ValidationError(f"{field} deve ser numérico")
    return parsed


def to_cents(amount: Decimal) -> int:
    return int((amount / CENT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int | None) -> float | None:
    if cents is None:
        return None
    return float(Decimal(cents) * CENT)


def coerce_price_cents(value: Any, field: str) -> int:
    cents = to_cents(coerce_decimal(value, field))
    if cents <= 0:
        raise ValidationError(f"{field} deve ser maior que zero")
    if cents > MAX_PRICE_CENTS:
        raise ValidationError(f"{field} excede o valor máximo permitido")
    return cents


def coerce_quantity(value: Any, field: str) -> int:
    qty = coerce_int(value, field)
    if qty <= 0:
        raise ValidationError(f"{field} deve ser maior que zero")
    if qty > MAX_QUANTITY:
        raise ValidationError(f"{field} excede o máximo permitido")
    return qty


def clean_optional_text(value: Any, max_length: int) -> str | None:
    """Trim; blank becomes None."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if len(text) > max_length:
        raise ValidationError(f"Texto excede o tamanho máximo de {max_length} caracteres")
    return text


@dataclass(frozen=True)
class ProductInput:
    """
    Validated product fields from a create/update form.

    None means "not supplied". `supplier_supplied` distinguishes an omitted
    fornecedor (keep) from a blank one (clear).
    """
    name: str | None = None
    purchase_price_cents: int | None = None
    purchased_quantity: int | None = None
    supplier: str | None = None
    supplier_supplied: bool = False


@dataclass(frozen=True)
class SaleInput:
    product_id: str
    quantity: int
    unit_price_cents: int
    note: str | None = None


def parse_product_form(form: Mapping, *, partial: bool) -> ProductInput:
    """
    Validate nome / precoCompra / quantidadeComprada / fornecedor.

    partial=False: create semantics (all three core fields required)
    partial=True: update semantics (validate only provided keys)
    """
    form = require_object(form)
    if not partial:
        require_fields(
            form,
            ["nome", "precoCompra", "quantidadeComprada"],
            "Nome, preço de compra e quantidade são obrigatórios",
        )

    name = None
    if form.get("nome") is not None:
        name = clean_optional_text(form.get("nome"), 255)
        if name is None:
            raise ValidationError("Nome não pode ficar em branco")

    price = None
    if not _is_blank(form.get("precoCompra")):
        price = coerce_price_cents(form.get("precoCompra"), "Preço de compra")

    quantity = None
    if not _is_blank(form.get("quantidadeComprada")):
        quantity = coerce_quantity(form.get("quantidadeComprada"), "Quantidade comprada")

    supplier_supplied = "fornecedor" in form
    supplier = clean_optional_text(form.get("fornecedor"), 255) if supplier_supplied else None

    return ProductInput(
        name=name,
        purchase_price_cents=price,
        purchased_quantity=quantity,
        supplier=supplier,
        supplier_supplied=supplier_supplied,
    )


def parse_sale_payload(payload: Mapping) -> SaleInput:
    payload = require_object(payload)

    require_fields(
        payload,
        ["produtoId", "quantidadeVendida", "precoVenda"],
        "Produto, quantidade e preço são obrigatórios",
    )

    return SaleInput(
        product_id=str(payload["produtoId"]).strip(),
        quantity=coerce_quantity(payload["quantidadeVendida"], "Quantidade vendida"),
        unit_price_cents=coerce_price_cents(payload["precoVenda"], "Preço de venda"),
        note=clean_optional_text(payload.get("observacoes"), MAX_NOTE_LENGTH),
    )
