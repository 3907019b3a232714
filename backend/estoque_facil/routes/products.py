# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/estoque_facil/routes/products.py
"""
Product management routes, scoped to the caller's account.

Create and update take multipart/form-data (fields nome, precoCompra,
quantidadeComprada, fornecedor, file imagem). A JSON body is accepted too
when no image is sent.

SECURITY: All routes require authentication. Products of other accounts
answer 404, same as missing ones.
"""
from flask import Blueprint, request, jsonify, current_app, g

from ..services import products_service
from ..validation import NotFoundError, ValidationError, parse_product_form
from ..decorators import require_auth


products_bp = Blueprint("products", __name__, url_prefix="/api/produtos")


def _form_payload():
    if request.form or request.files:
        return request.form
    return request.get_json(silent=True)


@products_bp.get("")
@require_auth
def list_products():
    """List the caller's products, most recently registered first."""
    try:
        products = products_service.list_products(g.current_user.id)
        return jsonify([p.to_dict() for p in products])
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Erro ao buscar produtos"}), 500


@products_bp.get("/<product_id>")
@require_auth
def get_product(product_id):
    try:
        product = products_service.get_product(g.current_user.id, product_id)
        return jsonify(product.to_dict())
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to get product")
        return jsonify({"error": "Erro ao buscar produto"}), 500


@products_bp.post("")
@require_auth
def create_product():
    """
    Register a product.

    The suggested sale price is derived from the current profit margin and
    the available quantity starts equal to the purchased quantity.
    """
    # Oversized uploads raise 413 here
    payload = _form_payload()
    image = request.files.get("imagem")
    try:
        data = parse_product_form(payload, partial=False)
        product = products_service.create_product(
            g.current_user.id,
            data,
            image,
        )
        return jsonify(product.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Erro ao cadastrar produto"}), 500


@products_bp.put("/<product_id>")
@require_auth
def update_product(product_id):
    """
    Partial update. Changing quantidadeComprada rescales the available
    quantity proportionally.
    """
    # Oversized uploads raise 413 here
    payload = _form_payload()
    image = request.files.get("imagem")
    try:
        data = parse_product_form(payload, partial=True)
        product = products_service.update_product(
            g.current_user.id,
            product_id,
            data,
            image,
        )
        return jsonify(product.to_dict())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Erro ao atualizar produto"}), 500


@products_bp.delete("/<product_id>")
@require_auth
def delete_product(product_id):
    """Delete a product together with its sales."""
    try:
        products_service.delete_product(g.current_user.id, product_id)
        return jsonify({"message": "Produto deletado com sucesso"})
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Erro ao deletar produto"}), 500
