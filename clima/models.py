from datetime import datetime

from .errors import UnknownQuestionError
from .extensions import db
from .taxonomy import answer_fields

LIKERT_LEN = 50
CATEGORY_LEN = 100


class SurveyResponse(db.Model):
    """One anonymous submission. Rows are only ever inserted."""
    __tablename__ = 'survey_responses'

    id = db.Column(db.Integer, primary_key=True)

    # Section 1: working conditions, service and TFM
    setor_trabalho = db.Column(db.String(CATEGORY_LEN), index=True)
    materiais_fornecidos = db.Column(db.String(LIKERT_LEN))
    materiais_adequados = db.Column(db.String(LIKERT_LEN))
    atendimento_apoio = db.Column(db.String(LIKERT_LEN))
    limpeza_adequada = db.Column(db.String(LIKERT_LEN))
    temperatura_adequada = db.Column(db.String(LIKERT_LEN))
    iluminacao_adequada = db.Column(db.String(LIKERT_LEN))
    localizacao_alojamento = db.Column(db.String(CATEGORY_LEN), index=True)
    alojamento_condicoes = db.Column(db.String(LIKERT_LEN))
    banheiros_adequados = db.Column(db.String(LIKERT_LEN))
    praca_darmas_adequada = db.Column(db.String(LIKERT_LEN))  # only for the Praça d'armas mess
    localizacao_rancho = db.Column(db.String(CATEGORY_LEN), index=True)
    rancho_instalacoes = db.Column(db.String(LIKERT_LEN))
    rancho_qualidade = db.Column(db.String(LIKERT_LEN))
    escala_servico = db.Column(db.String(CATEGORY_LEN), index=True)
    escala_atrapalha = db.Column(db.String(LIKERT_LEN))
    equipamentos_servico = db.Column(db.String(LIKERT_LEN))
    tfm_participa = db.Column(db.String(LIKERT_LEN))
    tfm_incentivado = db.Column(db.String(LIKERT_LEN))
    tfm_instalacoes = db.Column(db.String(LIKERT_LEN))

    # Section 2: relationships
    chefe_ouve_ideias = db.Column(db.String(LIKERT_LEN))
    chefe_se_importa = db.Column(db.String(LIKERT_LEN))
    contribuir_atividades = db.Column(db.String(LIKERT_LEN))
    chefe_delega = db.Column(db.String(LIKERT_LEN))
    pares_auxiliam = db.Column(db.String(LIKERT_LEN))
    entrosamento_setores = db.Column(db.String(LIKERT_LEN))
    entrosamento_tripulacao = db.Column(db.String(LIKERT_LEN))
    convivio_agradavel = db.Column(db.String(LIKERT_LEN))
    confianca_respeito = db.Column(db.String(LIKERT_LEN))

    # Section 3: motivation and professional development
    feedback_desempenho = db.Column(db.String(LIKERT_LEN))
    conceito_compativel = db.Column(db.String(LIKERT_LEN))
    importancia_atividade = db.Column(db.String(LIKERT_LEN))
    trabalho_reconhecido = db.Column(db.String(LIKERT_LEN))
    crescimento_estimulado = db.Column(db.String(LIKERT_LEN))
    cursos_suficientes = db.Column(db.String(LIKERT_LEN))
    programa_treinamento = db.Column(db.String(LIKERT_LEN))
    orgulho_trabalhar = db.Column(db.String(LIKERT_LEN))
    bem_aproveitado = db.Column(db.String(LIKERT_LEN))
    potencial_outra_funcao = db.Column(db.String(LIKERT_LEN))
    carga_trabalho_justa = db.Column(db.String(LIKERT_LEN))
    licenca_autorizada = db.Column(db.String(LIKERT_LEN))

    # Section 4: comments and suggestions
    aspecto_positivo = db.Column(db.Text)
    aspecto_negativo = db.Column(db.Text)
    proposta_processo = db.Column(db.Text)
    proposta_satisfacao = db.Column(db.Text)

    # Metadata
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    ip_address = db.Column(db.String(45))  # duplicate signal only, IPv4/IPv6

    def answers(self):
        return {field: getattr(self, field) for field in ANSWER_COLUMNS}


class SurveyStats(db.Model):
    """Denormalised response counter; the id is pinned so only one row can exist."""
    __tablename__ = 'survey_stats'
    __table_args__ = (
        db.CheckConstraint('id = 1', name='survey_stats_single_row'),
    )

    SINGLETON_ID = 1

    id = db.Column(db.Integer, primary_key=True, autoincrement=False, default=SINGLETON_ID)
    total_responses = db.Column(db.Integer, nullable=False, default=0)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow)


def _build_answer_columns():
    columns = {}
    missing = []
    for field in answer_fields():
        column = SurveyResponse.__table__.columns.get(field)
        if column is None:
            missing.append(field)
        else:
            columns[field] = getattr(SurveyResponse, field)
    if missing:
        raise RuntimeError(f"taxonomy fields without a survey_responses column: {missing}")
    return columns


ANSWER_COLUMNS = _build_answer_columns()


def answer_column(field):
    """Model attribute for an answer field; unknown keys raise UnknownQuestionError."""
    try:
        return ANSWER_COLUMNS[field]
    except KeyError:
        raise UnknownQuestionError(field) from None
