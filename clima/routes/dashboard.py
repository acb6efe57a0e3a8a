# clima/routes/dashboard.py
import logging
from datetime import datetime

from flask import Blueprint, jsonify, request

from .. import stats
from ..filters import extract_filters
from ..report import build_summary
from ..report.assembler import general_satisfaction
from ..taxonomy import ENVIRONMENT, MOTIVATION, RELATIONSHIP, FILTER_FIELDS, SECTOR_FIELD

logger = logging.getLogger(__name__)

bp = Blueprint("dashboard", __name__, url_prefix="/api")

SERVER_ERROR = {"success": False, "message": "Erro interno do servidor"}


def _last_updated():
    row = stats.stored_stats()
    if row is not None and row.last_updated is not None:
        return row.last_updated.isoformat()
    return datetime.utcnow().isoformat()


@bp.get("/stats")
def get_stats():
    """Totals, location distributions and per-area rating histograms"""
    try:
        return jsonify({
            "totalResponses": stats.total_responses(),
            "setorDistribution": stats.distribution(SECTOR_FIELD),
            "alojamentoDistribution": stats.distribution(FILTER_FIELDS["alojamento"]),
            "ranchoDistribution": stats.distribution(FILTER_FIELDS["rancho"]),
            "satisfactionStats": stats.satisfaction_stats(),
            "lastUpdated": _last_updated(),
        })
    except Exception as e:
        logger.error(f"Erro ao buscar estatísticas: {str(e)}")
        return jsonify(SERVER_ERROR), 500


@bp.get("/analytics")
def get_analytics():
    """Weighted 1-5 average per satisfaction area"""
    try:
        averages = stats.satisfaction_averages()
        return jsonify({
            "satisfactionAverages": averages,
            "generalSatisfaction": round(general_satisfaction(averages), 1),
            "lastUpdated": _last_updated(),
        })
    except Exception as e:
        logger.error(f"Erro ao calcular analytics: {str(e)}")
        return jsonify(SERVER_ERROR), 500


def _section_view(section, description):
    def view():
        try:
            filters = extract_filters(request.args)
            return jsonify(stats.section_stats(section, filters))
        except Exception as e:
            logger.error(f"Erro ao buscar estatísticas de {description}: {str(e)}")
            return jsonify(SERVER_ERROR), 500
    view.__name__ = f"{section}_stats"
    view.__doc__ = f"Per-question answer counts of the {section} section"
    return view


bp.add_url_rule("/environment-stats", view_func=_section_view(ENVIRONMENT, "ambiente"))
bp.add_url_rule("/relationship-stats", view_func=_section_view(RELATIONSHIP, "relacionamento"))
bp.add_url_rule("/motivation-stats", view_func=_section_view(MOTIVATION, "motivação"))


@bp.get("/comments")
def get_comments():
    """Free-text answers under the dashboard filters"""
    try:
        filters = extract_filters(request.args)
        return jsonify({"filters": filters, "comments": stats.comments(filters)})
    except Exception as e:
        logger.error(f"Erro ao buscar comentários: {str(e)}")
        return jsonify(SERVER_ERROR), 500


@bp.get("/report")
def get_report_summary():
    """Report metrics as JSON for the dashboard panels"""
    try:
        return jsonify(build_summary(stats.report_data()))
    except Exception as e:
        logger.error(f"Erro ao montar resumo do relatório: {str(e)}")
        return jsonify(SERVER_ERROR), 500
