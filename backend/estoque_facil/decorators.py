# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service


ADMIN_ONLY_MESSAGE = "Acesso negado. Apenas administradores podem acessar esta funcionalidade."


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def require_auth(f):
    """
    Require a valid bearer token from an approved, unblocked account.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.session_context: The full SessionContext object

    Returns 401 if:
    - No Authorization header
    - Invalid or expired token
    - Account no longer exists

    Returns 403 if the account was blocked or is not approved. Tokens are
    stateless, so these are re-checked on every request.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1].strip()

        context = session_service.validate_session(token)

        if not context:
            return jsonify({"error": "Token inválido ou expirado"}), 401

        user = context.user
        if user.is_blocked:
            return jsonify({
                "error": "Usuário bloqueado",
                "reason": user.block_reason,
                "blocked": True,
            }), 403

        if not user.is_approved:
            return jsonify({
                "error": "Usuário aguardando aprovação do administrador",
                "pending": True,
            }), 403

        g.current_user = user
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Require the authenticated user to be an administrator. Use under @require_auth."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Authentication required"}), 401
        if not g.current_user.is_admin:
            return jsonify({"error": ADMIN_ONLY_MESSAGE}), 403
        return f(*args, **kwargs)
    return decorated_function
