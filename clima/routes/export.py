# clima/routes/export.py
import logging
from datetime import datetime
from io import BytesIO

import pandas as pd
from flask import Blueprint, Response, jsonify, send_file

from .. import stats
from ..extensions import db
from ..models import SurveyResponse
from ..report import build_summary, render_report
from ..taxonomy import answer_fields

logger = logging.getLogger(__name__)

bp = Blueprint("export", __name__, url_prefix="/api/export")

REPORT_FILE_PREFIX = "Relatorio_Clima_Organizacional_PAPEM"


def report_filename(extension="html", today=None):
    today = today or datetime.now()
    return f"{REPORT_FILE_PREFIX}_{today.strftime('%Y-%m-%d')}.{extension}"


def _html_attachment(html):
    return Response(
        html,
        mimetype="text/html",
        headers={"Content-Disposition": f'attachment; filename="{report_filename()}"'},
    )


@bp.get("")
def export_report():
    """Download the report as an editable HTML document"""
    try:
        summary = build_summary(stats.report_data())
        return _html_attachment(render_report(summary, with_charts=False))
    except Exception as e:
        logger.error(f"Erro ao gerar relatório: {str(e)}")
        return jsonify({"success": False, "message": "Erro ao gerar relatório"}), 500


@bp.get("/pdf")
def export_report_pdf():
    """Download the print-ready report with embedded charts"""
    try:
        summary = build_summary(stats.report_data())
        return _html_attachment(render_report(summary, with_charts=True))
    except Exception as e:
        logger.error(f"Erro ao gerar relatório: {str(e)}")
        return jsonify({"success": False, "message": "Erro ao gerar relatório"}), 500


@bp.get("/xlsx")
def export_responses_xlsx():
    """Download every stored response as a spreadsheet (IP addresses left out)"""
    try:
        columns = ["id", "created_at"] + answer_fields()
        rows = db.session.query(SurveyResponse).order_by(SurveyResponse.id).all()
        df = pd.DataFrame(
            [{"id": r.id, "created_at": r.created_at, **r.answers()} for r in rows],
            columns=columns,
        )

        output = BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Respostas", index=False)
        output.seek(0)

        return send_file(
            output,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            as_attachment=True,
            download_name=report_filename("xlsx").replace(REPORT_FILE_PREFIX, "Respostas_Clima_PAPEM"),
        )
    except Exception as e:
        logger.error(f"Export error: {str(e)}")
        return jsonify({"success": False, "message": "Erro ao exportar respostas"}), 500
