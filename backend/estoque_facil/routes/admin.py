# Overview: Flask API routes for admin operations; parses input and returns JSON responses.

# backend/estoque_facil/routes/admin.py
"""
Admin routes for account approval and moderation.

Provides endpoints for:
- Listing accounts (all, pending approval)
- Approving or rejecting pending registrations
- Blocking, unblocking and deleting accounts

All endpoints require an authenticated administrator.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import account_service
from ..services.auth_service import ForbiddenError
from ..validation import NotFoundError, ValidationError
from ..decorators import require_auth, require_admin

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def _json_error(exc: Exception, action: str):
    if isinstance(exc, NotFoundError):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, ForbiddenError):
        return jsonify({"error": str(exc)}), 403
    if isinstance(exc, ValidationError):
        return jsonify({"error": str(exc)}), 400
    current_app.logger.exception("Failed to %s", action)
    return jsonify({"error": "Erro interno do servidor"}), 500


@admin_bp.get("/users")
@require_auth
@require_admin
def list_users():
    """List every account, newest first."""
    try:
        users = account_service.list_all()
        return jsonify([u.to_dict() for u in users])
    except Exception as exc:
        return _json_error(exc, "list users")


@admin_bp.get("/users/pending")
@require_auth
@require_admin
def list_pending_users():
    """Accounts awaiting approval, oldest first."""
    try:
        users = account_service.list_pending()
        return jsonify([u.to_dict() for u in users])
    except Exception as exc:
        return _json_error(exc, "list pending users")


@admin_bp.post("/users/<user_id>/approve")
@require_auth
@require_admin
def approve_user(user_id):
    try:
        user = account_service.approve_user(g.current_user.id, user_id)
        return jsonify({
            "message": f"Usuário {user.username} aprovado com sucesso",
            "user": user.to_summary(),
        })
    except Exception as exc:
        return _json_error(exc, "approve user")


@admin_bp.post("/users/<user_id>/reject")
@require_auth
@require_admin
def reject_user(user_id):
    """Reject a pending registration; the account is removed."""
    try:
        summary = account_service.reject_user(g.current_user.id, user_id)
        return jsonify({
            "message": f"Usuário {summary['username']} rejeitado e removido do sistema",
            "user": summary,
        })
    except Exception as exc:
        return _json_error(exc, "reject user")


@admin_bp.post("/users/<user_id>/block")
@require_auth
@require_admin
def block_user(user_id):
    """
    Block an account.

    Body: {reason?}. The reason is shown to the user on login attempts.
    """
    payload = request.get_json(silent=True)
    if payload is not None and not isinstance(payload, dict):
        return jsonify({"error": "Corpo da requisição inválido"}), 400
    reason = (payload or {}).get("reason")
    if reason is not None and not isinstance(reason, str):
        return jsonify({"error": "Motivo inválido"}), 400
    try:
        user = account_service.block_user(g.current_user.id, user_id, reason)
        return jsonify({
            "message": f"Usuário {user.username} bloqueado com sucesso",
            "user": user.to_dict(),
        })
    except Exception as exc:
        return _json_error(exc, "block user")


@admin_bp.post("/users/<user_id>/unblock")
@require_auth
@require_admin
def unblock_user(user_id):
    try:
        user = account_service.unblock_user(g.current_user.id, user_id)
        return jsonify({
            "message": f"Usuário {user.username} desbloqueado com sucesso",
            "user": user.to_dict(),
        })
    except Exception as exc:
        return _json_error(exc, "unblock user")


@admin_bp.delete("/users/<user_id>")
@require_auth
@require_admin
def delete_user(user_id):
    """Delete an account with all of its products and sales."""
    try:
        summary = account_service.delete_user(g.current_user.id, user_id)
        return jsonify({
            "message": f"Usuário {summary['username']} excluído com sucesso",
            "user": summary,
        })
    except Exception as exc:
        return _json_error(exc, "delete user")
