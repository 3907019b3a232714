from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth
from ..services import settings_service
from ..services.settings_service import SettingsValidationError


settings_bp = Blueprint("settings", __name__, url_prefix="/api")


def _json_error(exc: Exception):
    if isinstance(exc, SettingsValidationError):
        return jsonify({"error": str(exc)}), 400
    current_app.logger.exception("Settings request failed")
    return jsonify({"error": "Erro ao processar configuração"}), 500


@settings_bp.get("/settings/profit-margin")
@require_auth
def get_profit_margin():
    try:
        return jsonify({"profitMargin": float(settings_service.get_margin())})
    except Exception as exc:
        return _json_error(exc)


@settings_bp.put("/settings/profit-margin")
@require_auth
def set_profit_margin():
    # Global setting; any approved account may change it
    payload = request.get_json(silent=True)
    if payload is not None and not isinstance(payload, dict):
        return jsonify({"error": "Corpo da requisição inválido"}), 400
    if not payload or "newProfitMargin" not in payload:
        return jsonify({"error": "Margem de lucro é obrigatória"}), 400
    try:
        margin = settings_service.set_margin(payload.get("newProfitMargin"))
        return jsonify({
            "message": "Margem de lucro atualizada com sucesso",
            "profitMargin": float(margin),
        })
    except Exception as exc:
        return _json_error(exc)
