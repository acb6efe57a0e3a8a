# clima/taxonomy.py
"""
Question taxonomy of the climate survey.

Every id here is also a column of ``survey_responses`` (see models.py); the
model module checks that at import time.
"""
import unicodedata
from typing import NamedTuple

LIKERT = "likert"
CATEGORICAL = "categorical"

ENVIRONMENT = "environment"
RELATIONSHIP = "relationship"
MOTIVATION = "motivation"
SECTIONS = (ENVIRONMENT, RELATIONSHIP, MOTIVATION)


class Question(NamedTuple):
    id: str
    label: str
    type: str

    @property
    def is_likert(self) -> bool:
        return self.type == LIKERT


ENVIRONMENT_QUESTIONS = (
    Question("materiais_fornecidos", "Q2. Materiais fornecidos", LIKERT),
    Question("materiais_adequados", "Q3. Materiais adequados", LIKERT),
    Question("atendimento_apoio", "Q4. Atendimento do setor de apoio", LIKERT),
    Question("limpeza_adequada", "Q5. Limpeza adequada", LIKERT),
    Question("temperatura_adequada", "Q6. Temperatura adequada", LIKERT),
    Question("iluminacao_adequada", "Q7. Iluminação adequada", LIKERT),
    Question("localizacao_alojamento", "Q8. Localização do alojamento", CATEGORICAL),
    Question("alojamento_condicoes", "Q9. Condições do alojamento", LIKERT),
    Question("banheiros_adequados", "Q10. Instalações dos banheiros", LIKERT),
    Question("praca_darmas_adequada", "Q11/12. Praça d'Armas e salão de recreio", LIKERT),
    Question("localizacao_rancho", "Q12/13. Localização do rancho", CATEGORICAL),
    Question("rancho_instalacoes", "Q13/14. Instalações do rancho", LIKERT),
    Question("rancho_qualidade", "Q14/15. Qualidade da comida do rancho", LIKERT),
    Question("escala_atrapalha", "Q16. Escala de serviço impacta tarefas", LIKERT),
    Question("equipamentos_servico", "Q17. Equipamentos utilizados em serviço", LIKERT),
    Question("tfm_participa", "Q18. Participação no TFM", LIKERT),
    Question("tfm_incentivado", "Q19. TFM é incentivado", LIKERT),
    Question("tfm_instalacoes", "Q20. Instalações para TFM", LIKERT),
)

RELATIONSHIP_QUESTIONS = (
    Question("chefe_ouve_ideias", "Q21. Chefe ouve ideias", LIKERT),
    Question("chefe_se_importa", "Q22. Chefe se importa", LIKERT),
    Question("contribuir_atividades", "Q23. Interesse em contribuir", LIKERT),
    Question("chefe_delega", "Q24. Chefe delega responsabilidades", LIKERT),
    Question("pares_auxiliam", "Q25. Pares auxiliam", LIKERT),
    Question("entrosamento_setores", "Q26. Entrosamento entre setores", LIKERT),
    Question("entrosamento_tripulacao", "Q27. Entrosamento da tripulação", LIKERT),
    Question("convivio_agradavel", "Q28. Convívio agradável", LIKERT),
    Question("confianca_respeito", "Q29. Confiança e respeito", LIKERT),
)

MOTIVATION_QUESTIONS = (
    Question("feedback_desempenho", "Q30. Feedback de desempenho", LIKERT),
    Question("conceito_compativel", "Q31. Conceito compatível", LIKERT),
    Question("importancia_atividade", "Q32. Importância da atividade", LIKERT),
    Question("trabalho_reconhecido", "Q33. Trabalho reconhecido", LIKERT),
    Question("crescimento_estimulado", "Q34. Crescimento estimulado", LIKERT),
    Question("cursos_suficientes", "Q35. Cursos suficientes", LIKERT),
    Question("programa_treinamento", "Q36. Programa de treinamento", LIKERT),
    Question("orgulho_trabalhar", "Q37. Orgulho de trabalhar aqui", LIKERT),
    Question("bem_aproveitado", "Q38. Bem aproveitado na função", LIKERT),
    Question("potencial_outra_funcao", "Q39. Potencial em outra função", LIKERT),
    Question("carga_trabalho_justa", "Q40. Carga de trabalho justa", LIKERT),
    Question("licenca_autorizada", "Q41. Licenças autorizadas", LIKERT),
)

SECTION_QUESTIONS = {
    ENVIRONMENT: ENVIRONMENT_QUESTIONS,
    RELATIONSHIP: RELATIONSHIP_QUESTIONS,
    MOTIVATION: MOTIVATION_QUESTIONS,
}

# categorical answers that only drive filters, not shown as section questions
SECTOR_FIELD = "setor_trabalho"
DUTY_FIELD = "escala_servico"
MESS_FIELD = "localizacao_rancho"

COMMENT_FIELDS = (
    "aspecto_positivo",
    "aspecto_negativo",
    "proposta_processo",
    "proposta_satisfacao",
)

# filter query parameter -> answer column
FILTER_FIELDS = {
    "setor": SECTOR_FIELD,
    "alojamento": "localizacao_alojamento",
    "rancho": MESS_FIELD,
    "escala": DUTY_FIELD,
}

# Per-area satisfaction fields summarised by /api/analytics and the reports
SATISFACTION_FIELDS = {
    "materiais_fornecidos": "Materiais Fornecidos",
    "materiais_adequados": "Adequação dos Materiais",
    "atendimento_apoio": "Atendimento e Apoio",
    "limpeza_adequada": "Limpeza e Higiene",
    "temperatura_adequada": "Temperatura Ambiente",
    "iluminacao_adequada": "Iluminação Adequada",
    "rancho_instalacoes": "Instalações do Rancho",
    "rancho_qualidade": "Qualidade da Alimentação",
    "equipamentos_servico": "Equipamentos de Serviço",
}

# Options offered by the wizard; used to flag drift, never to reject values
PRACA_DARMAS = "Praça d’armas"
CATEGORY_OPTIONS = {
    SECTOR_FIELD: (
        "PAPEM-10", "PAPEM-20", "PAPEM-30", "PAPEM-40",
        "PAPEM-51", "PAPEM-52", "SECOM", "GABINETE",
    ),
    "localizacao_alojamento": (
        "CB/MN Masc.", "CB/MN Fem.", "SO/SG Masc.", "SO/SG Fem.",
        "Of. Fem.", "CT/T Masc.", "Of Sup. Masc.",
    ),
    MESS_FIELD: ("Distrito", "DAbM", PRACA_DARMAS),
    DUTY_FIELD: ("Oficiais", "SG", "CB/MN", "Não se aplica"),
}

# Field names of the previous schema generation, accepted on submission only
LEGACY_ALIASES = {
    "setor_localizacao": SECTOR_FIELD,
    "alojamento_localizacao": "localizacao_alojamento",
    "rancho_localizacao": MESS_FIELD,
    "escala_servico_tipo": DUTY_FIELD,
}


def _fold(value: str) -> str:
    # "Praça D'armas" and "Praça d’armas" name the same mess
    s = unicodedata.normalize("NFC", value).replace("’", "'")
    return s.strip().casefold()


def canonical_mess(value):
    """Spelling variants of the Praça d'armas mess map onto PRACA_DARMAS; other values pass through."""
    if isinstance(value, str) and _fold(value) == _fold(PRACA_DARMAS):
        return PRACA_DARMAS
    return value


def all_questions():
    for section in SECTIONS:
        yield from SECTION_QUESTIONS[section]


def answer_fields():
    """Every answer column, in questionnaire order."""
    fields = [SECTOR_FIELD]
    for q in ENVIRONMENT_QUESTIONS:
        # Q15 (duty schedule) opens the duty block of section 1
        if q.id == "escala_atrapalha":
            fields.append(DUTY_FIELD)
        fields.append(q.id)
    fields.extend(q.id for q in RELATIONSHIP_QUESTIONS)
    fields.extend(q.id for q in MOTIVATION_QUESTIONS)
    fields.extend(COMMENT_FIELDS)
    return fields


def question_by_id(question_id):
    for question in all_questions():
        if question.id == question_id:
            return question
    return None
