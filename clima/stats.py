# clima/stats.py
"""
Aggregation queries behind the admin dashboard.

Section statistics issue one grouped COUNT per question and fan the queries
out over a small thread pool; every worker takes its own pooled connection.
There is no snapshot shared between those queries. Order among answers with
equal counts is whatever the database returns.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from zoneinfo import ZoneInfo

import pandas as pd
from flask import current_app
from sqlalchemy import func, or_, select

from .extensions import db
from .filters import filter_conditions
from .models import SurveyResponse, SurveyStats, answer_column
from .ratings import weighted_average
from .report.assembler import format_generated_at
from .taxonomy import COMMENT_FIELDS, SATISFACTION_FIELDS, SECTION_QUESTIONS, SECTOR_FIELD

logger = logging.getLogger(__name__)


def _grouped_counts_stmt(column, conditions=()):
    count = func.count().label("count")
    return (
        select(column.label("value"), count)
        .where(column.isnot(None), column != "", *conditions)
        .group_by(column)
        .order_by(count.desc())
    )


def question_stats(question, filters, conn):
    """Answer histogram of one question under a filter set."""
    column = answer_column(question.id)
    rows = conn.execute(_grouped_counts_stmt(column, filter_conditions(filters))).all()

    ratings = [{"rating": str(value), "count": int(count)} for value, count in rows]
    total = sum(r["count"] for r in ratings)
    average = None
    if question.is_likert:
        average = weighted_average((r["rating"], r["count"]) for r in ratings)

    return {
        "questionId": question.id,
        "label": question.label,
        "type": question.type,
        "totalResponses": total,
        "ratings": ratings,
        "average": average,
    }


def _question_stats_on_own_connection(engine, question, filters):
    with engine.connect() as conn:
        return question_stats(question, filters, conn)


def section_stats(section, filters):
    try:
        questions = SECTION_QUESTIONS[section]
    except KeyError:
        raise ValueError(f"unknown section: {section}") from None

    engine = db.engine
    workers = min(int(current_app.config.get("STATS_QUERY_WORKERS", 1)), len(questions))
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="section-stats") as pool:
            # list() re-raises the first failed query: no partial results
            results = list(pool.map(
                lambda q: _question_stats_on_own_connection(engine, q, filters), questions
            ))
    else:
        with engine.connect() as conn:
            results = [question_stats(q, filters, conn) for q in questions]

    return {
        "section": section,
        "filters": dict(filters),
        "questions": results,
        "totalResponses": max((q["totalResponses"] for q in results), default=0),
    }


def comments(filters):
    """Rows with at least one non-blank free-text answer, newest first."""
    text_columns = [answer_column(f) for f in COMMENT_FIELDS]
    has_text = or_(*[func.trim(c) != "" for c in text_columns])

    rows = db.session.query(
        SurveyResponse.id,
        SurveyResponse.setor_trabalho,
        *text_columns,
        SurveyResponse.created_at,
    ).filter(*filter_conditions(filters)).filter(has_text) \
        .order_by(SurveyResponse.created_at.desc(), SurveyResponse.id.desc()).all()

    result = []
    for row in rows:
        record = {"id": row.id, SECTOR_FIELD: row.setor_trabalho}
        for field in COMMENT_FIELDS:
            record[field] = getattr(row, field)
        record["created_at"] = row.created_at.isoformat() if row.created_at else None
        result.append(record)
    return result


def total_responses():
    return db.session.query(func.count(SurveyResponse.id)).scalar() or 0


def distribution(field):
    """[{category, count}] over the non-empty values of a categorical field."""
    column = answer_column(field)
    rows = db.session.execute(_grouped_counts_stmt(column)).all()
    return [{"category": value, "count": int(count)} for value, count in rows]


def rating_histogram(field):
    column = answer_column(field)
    rows = db.session.execute(_grouped_counts_stmt(column)).all()
    return [{"rating": value, "count": int(count)} for value, count in rows]


def satisfaction_stats():
    return {field: rating_histogram(field) for field in SATISFACTION_FIELDS}


def satisfaction_averages(histograms=None):
    """Weighted 1-5 average per satisfaction area, None where nobody answered."""
    if histograms is None:
        histograms = satisfaction_stats()
    return {
        field: weighted_average((r["rating"], r["count"]) for r in histograms.get(field, []))
        for field in SATISFACTION_FIELDS
    }


def submission_timeline():
    """Submissions per calendar month: [{label: 'MM/YYYY', count}]."""
    rows = db.session.query(SurveyResponse.created_at) \
        .filter(SurveyResponse.created_at.isnot(None)).all()
    if not rows:
        return []
    created = pd.to_datetime(pd.Series([r[0] for r in rows]))
    per_month = created.dt.to_period("M").value_counts().sort_index()
    return [{"label": period.strftime("%m/%Y"), "count": int(count)}
            for period, count in per_month.items()]


def stored_stats():
    return db.session.get(SurveyStats, SurveyStats.SINGLETON_ID)


def report_data():
    """Raw aggregates consumed by report.build_summary."""
    now = datetime.now(ZoneInfo(current_app.config.get("REPORT_TIMEZONE", "UTC")))
    return {
        "totalResponses": total_responses(),
        "setorDistribution": distribution(SECTOR_FIELD),
        "ranchoDistribution": distribution("localizacao_rancho"),
        "satisfactionAverages": satisfaction_averages(),
        "timeline": submission_timeline(),
        "generatedAt": format_generated_at(now),
    }
