# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/estoque_facil/routes/auth.py
"""
Authentication API routes

- POST /api/register: self-registration; the account starts pending
- POST /api/login: bearer token for approved, unblocked accounts
- GET /api/users/me: profile of the caller
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import account_service, auth_service, session_service
from ..services.auth_service import (
    AccountBlockedError,
    AccountPendingError,
    AuthenticationError,
)
from ..validation import ConflictError, NotFoundError, ValidationError, require_object
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return str(value)


@auth_bp.post("/register")
def register_route():
    """Create a pending account. An administrator must approve it before login."""
    try:
        data = require_object(request.get_json(silent=True))

        user = auth_service.register_user(
            username=_text(data, "username"),
            password=_text(data, "password"),
            full_name=_text(data, "nomeCompleto"),
            document=_text(data, "documento"),
            document_type=_text(data, "tipoDocumento"),
        )

        promoted = account_service.ensure_first_admin()
        if promoted is not None and promoted.id == user.id:
            return jsonify({
                "message": "Usuário registrado com sucesso. Você é o administrador do sistema.",
                "isAdmin": True,
            }), 201

        return jsonify({
            "message": "Usuário registrado com sucesso. Aguarde aprovação do administrador para acessar o sistema."
        }), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Erro ao registrar usuário"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and issue a bearer token.

    Token must be included in the Authorization header for protected routes.
    """
    try:
        data = require_object(request.get_json(silent=True))
        username = _text(data, "username")
        password = _text(data, "password")

        if not username.strip() or not password:
            return jsonify({"error": "Usuário e senha são obrigatórios"}), 400

        user = auth_service.authenticate(username, password)
        token = session_service.create_token(user)

        return jsonify({
            "token": token,
            "userId": user.id,
            "username": user.username,
            "isAdmin": bool(user.is_admin),
        })

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except AuthenticationError as e:
        return jsonify({"error": str(e)}), 401
    except AccountBlockedError as e:
        return jsonify({"error": str(e), "reason": e.reason, "blocked": True}), 403
    except AccountPendingError as e:
        return jsonify({"error": str(e), "pending": True}), 403
    except Exception:
        current_app.logger.exception("Failed to log in")
        return jsonify({"error": "Erro ao fazer login"}), 500


@auth_bp.get("/users/me")
@require_auth
def me_route():
    try:
        user = account_service.get_profile(g.current_user.id)
        return jsonify(user.to_dict())
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to load profile")
        return jsonify({"error": "Erro ao buscar dados do usuário"}), 500
