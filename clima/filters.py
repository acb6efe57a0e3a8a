# clima/filters.py
"""Dashboard filter parameters (setor / alojamento / rancho / escala)."""
import logging
from typing import Optional

from .models import answer_column
from .taxonomy import CATEGORY_OPTIONS, FILTER_FIELDS, MESS_FIELD, canonical_mess

logger = logging.getLogger(__name__)

ALL = "all"


def _normalize_one(value: object) -> Optional[str]:
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s or s.lower() == ALL:
        return None
    return s


def normalize_filter(value: object) -> Optional[str]:
    """
    '' / 'all' / 'ALL' / None / [] -> None, anything else trimmed.
    A list (repeated query parameter) resolves to its first real entry.
    """
    if isinstance(value, (list, tuple)):
        for item in value:
            s = _normalize_one(item)
            if s is not None:
                return s
        return None
    return _normalize_one(value)


def extract_filters(args) -> dict:
    """Read the four filter keys from request.args (or any mapping)."""
    filters = {}
    for key, field in FILTER_FIELDS.items():
        if hasattr(args, "getlist"):
            raw = args.getlist(key)
        else:
            raw = args.get(key)
        value = normalize_filter(raw)
        if value is None:
            continue
        if field == MESS_FIELD:
            value = canonical_mess(value)
        if value not in CATEGORY_OPTIONS.get(field, (value,)):
            # still applied: an unknown value just matches no rows
            logger.warning(
                "Unrecognised %s filter value %r",
                key, value,
                extra={"filter_key": key, "filter_value": value, "event": "unknown_filter_value"},
            )
        filters[key] = value
    return filters


def filter_conditions(filters: dict) -> list:
    """Equality predicates for a filter set, meant to be ANDed together."""
    conditions = []
    for key, value in filters.items():
        if key not in FILTER_FIELDS:
            raise KeyError(f"unknown filter: {key}")
        conditions.append(answer_column(FILTER_FIELDS[key]) == value)
    return conditions
