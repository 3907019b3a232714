from flask import Blueprint, current_app, g, jsonify, request

from estoque_facil.decorators import require_auth
from estoque_facil.services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/relatorios")


@reports_bp.get("/resumo")
@require_auth
def summary_report():
    try:
        days = reporting_service.parse_days(request.args.get("dias"))
        report = reporting_service.summary(g.current_user.id, days)
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception:
        current_app.logger.exception("Failed to build summary report")
        return jsonify({"error": "Erro ao gerar relatório"}), 500
