# clima/submission.py
import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from .errors import SubmissionError
from .extensions import db
from .models import ANSWER_COLUMNS, SurveyResponse, SurveyStats
from .taxonomy import LEGACY_ALIASES, MESS_FIELD, canonical_mess

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def clean_answers(payload) -> dict:
    """
    Validate a wizard payload and return {column: value}.
    - legacy field names are rewritten (the canonical spelling wins when both are sent)
    - keys that are not answer columns are rejected
    - values must be strings or null; blank strings are stored as null
    """
    if not isinstance(payload, dict):
        raise SubmissionError("Formato de dados inválido")

    answers = {}
    unknown, invalid = [], []
    for key, value in payload.items():
        field = LEGACY_ALIASES.get(key, key)
        if field != key:
            logger.warning(
                "Deprecated field name %s, stored as %s", key, field,
                extra={"legacy_field": key, "field": field, "event": "legacy_field_name"},
            )
            if field in payload:
                continue
        if field not in ANSWER_COLUMNS:
            unknown.append(key)
            continue
        if value is None:
            continue
        if not isinstance(value, str):
            invalid.append(key)
            continue
        value = value.strip()
        if field == MESS_FIELD:
            value = canonical_mess(value)
        if value:
            answers[field] = value

    if unknown:
        raise SubmissionError("Campos desconhecidos na pesquisa", fields=sorted(unknown))
    if invalid:
        raise SubmissionError("Respostas devem ser texto", fields=sorted(invalid))
    return answers


def _count_responses():
    return select(func.count()).select_from(SurveyResponse.__table__).scalar_subquery()


def refresh_stats():
    """
    Recount responses into the single survey_stats row.

    INSERT ... ON CONFLICT (id) DO UPDATE where the dialect supports it, so
    concurrent submissions can never create a second row.
    """
    table = SurveyStats.__table__
    now = datetime.utcnow()
    insert = _UPSERT_DIALECTS.get(db.engine.dialect.name)

    if insert is None:
        stats = db.session.get(SurveyStats, SurveyStats.SINGLETON_ID) or SurveyStats(id=SurveyStats.SINGLETON_ID)
        stats.total_responses = db.session.execute(select(_count_responses())).scalar() or 0
        stats.last_updated = now
        db.session.add(stats)
    else:
        stmt = insert(table).values(
            id=SurveyStats.SINGLETON_ID,
            total_responses=_count_responses(),
            last_updated=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.id],
            set_={
                "total_responses": stmt.excluded.total_responses,
                "last_updated": stmt.excluded.last_updated,
            },
        )
        db.session.execute(stmt)
    db.session.commit()


def submit_response(payload, ip_address=None) -> SurveyResponse:
    """Store one anonymous response, then refresh the response counter."""
    answers = clean_answers(payload)

    response = SurveyResponse(**answers, ip_address=ip_address or UNKNOWN_IP)
    db.session.add(response)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    # a stale counter heals on the next submission or refresh task
    try:
        refresh_stats()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Error updating survey stats after response %s", response.id)

    logger.info("Survey response %s stored (%d answers)", response.id, len(answers))
    return response
