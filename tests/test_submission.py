import logging

import pytest
from sqlalchemy.exc import OperationalError

from clima import submission, wizard
from clima.errors import SubmissionError
from clima.extensions import db
from clima.models import SurveyResponse, SurveyStats
from clima.submission import clean_answers, refresh_stats, submit_response
from clima.wizard import DraftState, advance, go_back, missing_fields, required_fields, with_answers


def test_clean_answers_strips_and_drops_blanks():
    answers = clean_answers({
        "setor_trabalho": " PAPEM-10 ",
        "materiais_fornecidos": "Concordo",
        "aspecto_positivo": "   ",
        "aspecto_negativo": None,
    })
    assert answers == {"setor_trabalho": "PAPEM-10", "materiais_fornecidos": "Concordo"}


def test_clean_answers_rewrites_legacy_names(caplog):
    with caplog.at_level(logging.WARNING, logger="clima.submission"):
        answers = clean_answers({"setor_localizacao": "SECOM", "rancho_localizacao": "DAbM"})
    assert answers == {"setor_trabalho": "SECOM", "localizacao_rancho": "DAbM"}
    assert {r.legacy_field for r in caplog.records} == {"setor_localizacao", "rancho_localizacao"}


def test_canonical_name_wins_over_legacy_name():
    answers = clean_answers({"setor_localizacao": "SECOM", "setor_trabalho": "PAPEM-40"})
    assert answers == {"setor_trabalho": "PAPEM-40"}


def test_clean_answers_rejects_unknown_keys():
    with pytest.raises(SubmissionError) as exc:
        clean_answers({"materiais_fornecidos": "Concordo", "nome": "x", "ip_address": "1.2.3.4"})
    assert exc.value.fields == ["ip_address", "nome"]


def test_clean_answers_rejects_non_text_values():
    with pytest.raises(SubmissionError) as exc:
        clean_answers({"materiais_fornecidos": 4})
    assert exc.value.fields == ["materiais_fornecidos"]


@pytest.mark.parametrize("payload", [None, [], "Concordo"])
def test_clean_answers_requires_an_object(payload):
    with pytest.raises(SubmissionError):
        clean_answers(payload)


def test_partial_submission_bumps_total_by_one(app):
    submit_response({"setor_trabalho": "PAPEM-10"})
    assert db.session.get(SurveyStats, 1).total_responses == 1

    response = submit_response({"chefe_delega": "Concordo"}, ip_address="10.0.0.7")
    assert response.ip_address == "10.0.0.7"
    assert response.setor_trabalho is None
    assert db.session.query(SurveyStats).count() == 1
    assert db.session.get(SurveyStats, 1).total_responses == 2


def test_missing_ip_is_recorded_as_unknown(app):
    response = submit_response({})
    assert db.session.get(SurveyResponse, response.id).ip_address == "unknown"


def test_refresh_stats_recounts(app, add_response):
    add_response()
    add_response()
    refresh_stats()
    refresh_stats()
    rows = db.session.query(SurveyStats).all()
    assert len(rows) == 1
    assert rows[0].total_responses == 2
    assert rows[0].last_updated is not None


def test_stats_failure_keeps_the_response(app, monkeypatch, caplog):
    def broken():
        raise OperationalError("UPDATE survey_stats", {}, Exception("locked"))

    monkeypatch.setattr(submission, "refresh_stats", broken)
    with caplog.at_level(logging.ERROR, logger="clima.submission"):
        response = submit_response({"setor_trabalho": "SECOM"})
    assert db.session.get(SurveyResponse, response.id) is not None
    assert "Error updating survey stats" in caplog.text


def test_section_one_base_fields():
    fields = required_fields(0, {})
    assert fields[0] == "setor_trabalho"
    assert "alojamento_condicoes" not in fields
    assert "rancho_qualidade" not in fields
    assert "escala_atrapalha" not in fields


def test_section_one_followups():
    fields = required_fields(0, {
        "localizacao_alojamento": "CB/MN Masc.",
        "localizacao_rancho": "DAbM",
        "escala_servico": "SG",
    })
    assert {"alojamento_condicoes", "banheiros_adequados", "rancho_instalacoes",
            "rancho_qualidade", "escala_atrapalha", "tfm_instalacoes"} <= set(fields)
    assert "praca_darmas_adequada" not in fields


@pytest.mark.parametrize("mess", ["Praça d’armas", "Praça d'armas", "PRAÇA D'ARMAS "])
def test_praca_darmas_followup(mess):
    assert "praca_darmas_adequada" in required_fields(0, {"localizacao_rancho": mess})


def test_later_steps():
    assert len(required_fields(1, {})) == 9
    assert len(required_fields(2, {})) == 12
    assert required_fields(3, {})[0] == "aspecto_positivo"
    with pytest.raises(ValueError):
        required_fields(4, {})


def test_missing_fields_ignores_blank_answers():
    answers = {q: "Concordo" for q in required_fields(1, {})}
    assert missing_fields(1, answers) == ()
    answers["chefe_delega"] = "  "
    assert missing_fields(1, answers) == ("chefe_delega",)


def test_draft_state_is_immutable():
    state = DraftState()
    with pytest.raises(TypeError):
        state.answers["setor_trabalho"] = "SECOM"
    updated = with_answers(state, {"setor_trabalho": "SECOM"})
    assert dict(state.answers) == {}
    assert updated.answers["setor_trabalho"] == "SECOM"


def test_advance_stops_on_missing_fields():
    state = advance(DraftState())
    assert state.step == 0
    assert "setor_trabalho" in state.errors

    state = with_answers(state, {"setor_trabalho": "SECOM"})
    assert "setor_trabalho" not in state.errors


def test_advance_and_go_back():
    saved = []
    answers = {f: "Concordo" for f in required_fields(1, {})}
    state = DraftState(step=1, answers=answers)

    state = advance(state, persist=saved.append)
    assert state.step == 2 and state.errors == ()
    state = go_back(state, persist=saved.append)
    assert state.step == 1
    assert go_back(DraftState()).step == 0
    assert [s.step for s in saved] == [2, 1]


def test_advance_on_last_step_stays():
    answers = {f: "texto" for f in wizard.COMMENT_FIELDS}
    state = advance(DraftState(step=3, answers=answers))
    assert state.step == 3
    assert state.is_last_step


def test_draft_state_round_trip_drops_bad_input():
    state = DraftState(step=2, answers={"chefe_delega": "Concordo"})
    assert DraftState.from_dict(state.to_dict()) == state
    restored = DraftState.from_dict({"step": 9, "answers": {"a": 1, "b": "ok"}})
    assert restored.step == 0
    assert dict(restored.answers) == {"b": "ok"}


def test_mess_spelling_is_stored_canonically():
    assert clean_answers({"localizacao_rancho": " Praça D'armas"}) == {"localizacao_rancho": "Praça d’armas"}
    assert clean_answers({"localizacao_rancho": "DAbM"}) == {"localizacao_rancho": "DAbM"}


def test_draft_state_is_hashable():
    state = DraftState(step=1, answers={"chefe_delega": "Concordo"})
    assert hash(state) == hash(DraftState(step=1, answers={"chefe_delega": "Concordo"}))
    assert {state, advance(state)}
