# clima/routes/survey.py
import logging

from flask import Blueprint, jsonify, request

from ..errors import SubmissionError
from ..submission import submit_response
from ..wizard import STEP_COUNT, missing_fields

logger = logging.getLogger(__name__)

bp = Blueprint("survey", __name__, url_prefix="/api/survey")


def _client_ip():
    # first hop of X-Forwarded-For when behind a proxy
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()[:45]
    return (request.remote_addr or "")[:45] or None


@bp.post("")
def create_response():
    """Store one anonymous survey submission"""
    payload = request.get_json(silent=True)
    try:
        response = submit_response(payload, _client_ip())
    except SubmissionError as e:
        logger.warning(f"Rejected survey submission: {e.message} {e.fields}")
        body = {"success": False, "message": e.message}
        if e.fields:
            body["fields"] = e.fields
        return jsonify(body), 400
    except Exception as e:
        logger.error(f"Erro ao salvar pesquisa: {str(e)}")
        return jsonify({"success": False, "message": "Erro interno do servidor"}), 500

    return jsonify({
        "success": True,
        "message": "Pesquisa enviada com sucesso!",
        "id": response.id,
    }), 201


@bp.post("/validate")
def validate_step():
    """Missing required fields for one wizard step; nothing is stored"""
    payload = request.get_json(silent=True) or {}
    answers = payload.get("answers") or {}
    try:
        step = int(payload.get("step", 0))
    except (TypeError, ValueError):
        step = -1
    if not 0 <= step < STEP_COUNT or not isinstance(answers, dict):
        return jsonify({"success": False, "message": "Etapa inválida"}), 400

    missing = missing_fields(step, answers)
    return jsonify({
        "step": step,
        "missingFields": list(missing),
        "complete": not missing,
    })
