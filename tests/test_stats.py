from datetime import datetime

import pytest

from clima import create_app, stats
from clima.extensions import db
from clima.models import SurveyResponse
from clima.taxonomy import ENVIRONMENT, ENVIRONMENT_QUESTIONS, MOTIVATION, RELATIONSHIP


def _question(section_result, question_id):
    return next(q for q in section_result["questions"] if q["questionId"] == question_id)


@pytest.fixture
def sample(add_response):
    add_response(setor_trabalho="PAPEM-10", localizacao_rancho="DAbM",
                 materiais_fornecidos="Concordo", materiais_adequados="Concordo totalmente")
    add_response(setor_trabalho="PAPEM-10", localizacao_rancho="Distrito",
                 materiais_fornecidos="Concordo", materiais_adequados="Discordo")
    add_response(setor_trabalho="PAPEM-20", localizacao_rancho="DAbM",
                 materiais_fornecidos="Discordo totalmente")
    add_response(setor_trabalho="SECOM", materiais_fornecidos="")


def test_section_stats_counts(sample):
    result = stats.section_stats(ENVIRONMENT, {})
    assert result["section"] == ENVIRONMENT
    assert result["filters"] == {}
    assert [q["questionId"] for q in result["questions"]] == [q.id for q in ENVIRONMENT_QUESTIONS]

    materiais = _question(result, "materiais_fornecidos")
    assert materiais["ratings"][0] == {"rating": "Concordo", "count": 2}
    # blank answers are not counted
    assert materiais["totalResponses"] == 3
    assert materiais["average"] == pytest.approx((4 + 4 + 1) / 3)
    assert result["totalResponses"] == 3


def test_sum_of_counts_equals_total(sample):
    for section in (ENVIRONMENT, RELATIONSHIP, MOTIVATION):
        for filters in ({}, {"setor": "PAPEM-10"}, {"rancho": "DAbM"}, {"setor": "nowhere"}):
            for q in stats.section_stats(section, filters)["questions"]:
                assert sum(r["count"] for r in q["ratings"]) == q["totalResponses"]


def test_filters_are_a_conjunction(sample):
    result = stats.section_stats(ENVIRONMENT, {"setor": "PAPEM-10", "rancho": "DAbM"})
    materiais = _question(result, "materiais_adequados")
    assert materiais["ratings"] == [{"rating": "Concordo totalmente", "count": 1}]


def test_unanswered_question_only_excludes_itself(sample):
    result = stats.section_stats(ENVIRONMENT, {"setor": "PAPEM-20"})
    assert _question(result, "materiais_fornecidos")["totalResponses"] == 1
    adequados = _question(result, "materiais_adequados")
    assert adequados["totalResponses"] == 0
    assert adequados["ratings"] == []
    assert adequados["average"] is None


def test_unknown_filter_value_matches_nothing(sample):
    result = stats.section_stats(ENVIRONMENT, {"setor": "PAPEM-99"})
    assert result["totalResponses"] == 0


def test_categorical_questions_have_no_average(sample):
    rancho = _question(stats.section_stats(ENVIRONMENT, {}), "localizacao_rancho")
    assert rancho["type"] == "categorical"
    assert rancho["average"] is None
    assert rancho["ratings"][0] == {"rating": "DAbM", "count": 2}


def test_unknown_section():
    with pytest.raises(ValueError):
        stats.section_stats("leadership", {})


def test_one_failing_question_fails_the_section(app, sample, monkeypatch):
    real = stats.question_stats

    def flaky(question, filters, conn):
        if question.id == "rancho_qualidade":
            raise RuntimeError("connection lost")
        return real(question, filters, conn)

    monkeypatch.setattr(stats, "question_stats", flaky)
    with pytest.raises(RuntimeError):
        stats.section_stats(ENVIRONMENT, {})


def test_section_stats_on_worker_threads(tmp_path):
    app = create_app("testing", {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'threads.db'}",
        "STATS_QUERY_WORKERS": 4,
    })
    with app.app_context():
        for rating in ("Concordo", "Concordo", "Discordo"):
            db.session.add(SurveyResponse(setor_trabalho="PAPEM-30", chefe_delega=rating))
        db.session.commit()

        result = stats.section_stats(RELATIONSHIP, {"setor": "PAPEM-30"})
        delega = _question(result, "chefe_delega")
        assert delega["ratings"] == [{"rating": "Concordo", "count": 2},
                                     {"rating": "Discordo", "count": 1}]
        assert len(result["questions"]) == 9
        db.session.remove()
        db.engine.dispose()


def test_comments(add_response):
    add_response(setor_trabalho="PAPEM-10", aspecto_positivo="Boa equipe",
                 created_at=datetime(2026, 1, 5))
    add_response(setor_trabalho="PAPEM-10", aspecto_negativo="   ")
    add_response(setor_trabalho="PAPEM-20", proposta_processo="Digitalizar pedidos",
                 created_at=datetime(2026, 2, 5))
    add_response(setor_trabalho="PAPEM-20")

    records = stats.comments({})
    assert [r["setor_trabalho"] for r in records] == ["PAPEM-20", "PAPEM-10"]
    assert records[0]["proposta_processo"] == "Digitalizar pedidos"
    assert records[0]["created_at"].startswith("2026-02-05")
    assert set(records[0]) == {"id", "setor_trabalho", "aspecto_positivo", "aspecto_negativo",
                               "proposta_processo", "proposta_satisfacao", "created_at"}

    only_10 = stats.comments({"setor": "PAPEM-10"})
    assert len(only_10) == 1 and only_10[0]["aspecto_positivo"] == "Boa equipe"


def test_distribution_and_histograms(sample):
    assert stats.total_responses() == 4
    sectors = stats.distribution("setor_trabalho")
    assert sectors[0] == {"category": "PAPEM-10", "count": 2}
    assert sum(s["count"] for s in sectors) == 4
    assert stats.distribution("localizacao_alojamento") == []

    histograms = stats.satisfaction_stats()
    assert histograms["materiais_fornecidos"][0] == {"rating": "Concordo", "count": 2}
    assert histograms["rancho_qualidade"] == []


def test_satisfaction_averages(sample):
    averages = stats.satisfaction_averages()
    assert averages["materiais_adequados"] == pytest.approx(3.5)
    assert averages["rancho_qualidade"] is None


def test_submission_timeline(add_response):
    assert stats.submission_timeline() == []
    add_response(created_at=datetime(2026, 9, 1, 10))
    add_response(created_at=datetime(2026, 9, 30, 23))
    add_response(created_at=datetime(2026, 10, 2, 8))
    assert stats.submission_timeline() == [
        {"label": "09/2026", "count": 2},
        {"label": "10/2026", "count": 1},
    ]


def test_report_data_with_no_responses(app):
    data = stats.report_data()
    assert data["totalResponses"] == 0
    assert data["setorDistribution"] == []
    assert all(v is None for v in data["satisfactionAverages"].values())
    assert data["generatedAt"]
