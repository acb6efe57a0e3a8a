# clima/wizard.py
"""
Step rules of the four-section survey wizard.

The draft is an immutable value; every update returns a new DraftState.
Saving drafts anywhere is left to the caller (``persist`` callbacks).
"""
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from .taxonomy import (
    COMMENT_FIELDS, DUTY_FIELD, MOTIVATION_QUESTIONS,
    PRACA_DARMAS, RELATIONSHIP_QUESTIONS, SECTOR_FIELD, canonical_mess,
)

STEP_COUNT = 4

_SECTION1_BASE = (
    SECTOR_FIELD,
    "materiais_fornecidos", "materiais_adequados", "atendimento_apoio",
    "limpeza_adequada", "temperatura_adequada", "iluminacao_adequada",
    "localizacao_alojamento", "localizacao_rancho", DUTY_FIELD,
)
_LODGING_FOLLOWUPS = ("alojamento_condicoes", "banheiros_adequados")
_MESS_FOLLOWUPS = ("rancho_instalacoes", "rancho_qualidade")
_DUTY_FOLLOWUPS = (
    "escala_atrapalha", "equipamentos_servico",
    "tfm_participa", "tfm_incentivado", "tfm_instalacoes",
)
SECTION1_FIELDS = (_SECTION1_BASE + _LODGING_FOLLOWUPS + ("praca_darmas_adequada",)
                   + _MESS_FOLLOWUPS + _DUTY_FOLLOWUPS)


def _is_praca_darmas(value) -> bool:
    return canonical_mess(value) == PRACA_DARMAS


def _answered(answers: Mapping, key: str) -> bool:
    value = answers.get(key)
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


def required_fields(step: int, answers: Mapping) -> Tuple[str, ...]:
    """Fields the wizard requires before leaving ``step`` (0-based)."""
    if step == 0:
        fields = list(_SECTION1_BASE)
        if _answered(answers, "localizacao_alojamento"):
            fields.extend(_LODGING_FOLLOWUPS)
        if _answered(answers, "localizacao_rancho"):
            if _is_praca_darmas(answers.get("localizacao_rancho")):
                fields.append("praca_darmas_adequada")
            fields.extend(_MESS_FOLLOWUPS)
        if _answered(answers, DUTY_FIELD):
            fields.extend(_DUTY_FOLLOWUPS)
        return tuple(fields)
    if step == 1:
        return tuple(q.id for q in RELATIONSHIP_QUESTIONS)
    if step == 2:
        return tuple(q.id for q in MOTIVATION_QUESTIONS)
    if step == 3:
        return COMMENT_FIELDS
    raise ValueError(f"step must be between 0 and {STEP_COUNT - 1}, got {step}")


def missing_fields(step: int, answers: Mapping) -> Tuple[str, ...]:
    return tuple(f for f in required_fields(step, answers) if not _answered(answers, f))


@dataclass(frozen=True)
class DraftState:
    step: int = 0
    # excluded from hashing: a mappingproxy is unhashable
    answers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}), hash=False)
    errors: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "answers", MappingProxyType(dict(self.answers)))

    @property
    def is_last_step(self) -> bool:
        return self.step == STEP_COUNT - 1

    def to_dict(self) -> dict:
        return {"step": self.step, "answers": dict(self.answers), "errors": list(self.errors)}

    @classmethod
    def from_dict(cls, data: Mapping) -> "DraftState":
        step = int(data.get("step", 0))
        if not 0 <= step < STEP_COUNT:
            step = 0
        answers = {k: v for k, v in (data.get("answers") or {}).items() if isinstance(v, str)}
        return cls(step=step, answers=answers)


def with_answers(state: DraftState, updates: Mapping[str, str],
                 persist: Optional[Callable[[DraftState], None]] = None) -> DraftState:
    merged = dict(state.answers)
    merged.update(updates)
    new_state = replace(state, answers=merged,
                        errors=tuple(e for e in state.errors if e not in updates))
    if persist is not None:
        persist(new_state)
    return new_state


def advance(state: DraftState,
            persist: Optional[Callable[[DraftState], None]] = None) -> DraftState:
    """Move to the next step, or stay and record the missing fields."""
    missing = missing_fields(state.step, state.answers)
    if missing:
        new_state = replace(state, errors=missing)
    elif state.is_last_step:
        new_state = replace(state, errors=())
    else:
        new_state = replace(state, step=state.step + 1, errors=())
    if persist is not None:
        persist(new_state)
    return new_state


def go_back(state: DraftState,
            persist: Optional[Callable[[DraftState], None]] = None) -> DraftState:
    new_state = replace(state, step=max(state.step - 1, 0), errors=())
    if persist is not None:
        persist(new_state)
    return new_state
