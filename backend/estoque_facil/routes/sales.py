# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/estoque_facil/routes/sales.py
"""
Sales routes, scoped to the caller's account.

Registering a sale decrements the product's stock; cancelling (DELETE)
restores it. Both happen in a single transaction.
"""
from flask import Blueprint, request, jsonify, current_app, g

from ..services import sales_service
from ..services.sales_service import InsufficientStockError
from ..validation import NotFoundError, ValidationError, parse_sale_payload
from ..decorators import require_auth


sales_bp = Blueprint("sales", __name__, url_prefix="/api/vendas")


@sales_bp.get("")
@require_auth
def list_sales():
    """List the caller's sales, newest first, each with its product."""
    try:
        sales = sales_service.list_sales(g.current_user.id)
        return jsonify([s.to_dict(include_product=True) for s in sales])
    except Exception:
        current_app.logger.exception("Failed to list sales")
        return jsonify({"error": "Erro ao buscar vendas"}), 500


@sales_bp.get("/<sale_id>")
@require_auth
def get_sale(sale_id):
    try:
        sale = sales_service.get_sale(g.current_user.id, sale_id)
        return jsonify(sale.to_dict(include_product=True))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to get sale")
        return jsonify({"error": "Erro ao buscar venda"}), 500


@sales_bp.post("")
@require_auth
def register_sale():
    """
    Register a sale.

    Body: {produtoId, quantidadeVendida, precoVenda, observacoes?}
    """
    try:
        data = parse_sale_payload(request.get_json(silent=True) or {})
        sale = sales_service.register_sale(g.current_user.id, data)
        return jsonify(sale.to_dict(include_product=True)), 201
    except InsufficientStockError as e:
        return jsonify({"error": str(e)}), 400
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to register sale")
        return jsonify({"error": "Erro ao registrar venda"}), 500


@sales_bp.delete("/<sale_id>")
@require_auth
def cancel_sale(sale_id):
    """Cancel a sale and return its quantity to stock."""
    try:
        sales_service.cancel_sale(g.current_user.id, sale_id)
        return jsonify({"message": "Venda cancelada com sucesso"})
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to cancel sale")
        return jsonify({"error": "Erro ao cancelar venda"}), 500
