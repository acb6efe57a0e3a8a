import logging

import pytest
from werkzeug.datastructures import MultiDict

from clima.filters import extract_filters, filter_conditions, normalize_filter


@pytest.mark.parametrize("value", ["", "   ", "all", "ALL", " All ", None, [], ["", "all"], 42])
def test_no_filter_values(value):
    assert normalize_filter(value) is None


def test_values_are_trimmed():
    assert normalize_filter("  PAPEM-10 ") == "PAPEM-10"


def test_list_takes_first_real_entry():
    assert normalize_filter(["", "PAPEM-10"]) == "PAPEM-10"
    assert normalize_filter(["all", " SECOM ", "PAPEM-20"]) == "SECOM"


def test_extract_filters_keeps_only_resolved_keys():
    args = MultiDict([("setor", "all"), ("rancho", "DAbM"), ("escala", ""), ("other", "x")])
    assert extract_filters(args) == {"rancho": "DAbM"}


def test_extract_filters_repeated_parameter():
    args = MultiDict([("setor", ""), ("setor", "PAPEM-10")])
    assert extract_filters(args) == {"setor": "PAPEM-10"}


def test_extract_filters_plain_mapping():
    assert extract_filters({"alojamento": "CB/MN Fem.", "setor": None}) == {"alojamento": "CB/MN Fem."}


def test_unknown_filter_value_is_kept_and_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="clima.filters"):
        filters = extract_filters({"setor": "PAPEM-99"})
    assert filters == {"setor": "PAPEM-99"}
    record = next(r for r in caplog.records if r.name == "clima.filters")
    assert record.filter_key == "setor"
    assert record.filter_value == "PAPEM-99"


def test_filter_conditions_one_predicate_per_key():
    conditions = filter_conditions({"setor": "PAPEM-10", "escala": "SG"})
    assert len(conditions) == 2
    assert filter_conditions({}) == []


def test_filter_conditions_rejects_unknown_dimension():
    with pytest.raises(KeyError):
        filter_conditions({"posto": "SG"})


@pytest.mark.parametrize("spelling", ["Praça D'armas", "praça d’armas", "Praça d'armas"])
def test_mess_filter_spellings_resolve_to_one_value(spelling, caplog):
    with caplog.at_level(logging.WARNING, logger="clima.filters"):
        assert extract_filters({"rancho": spelling}) == {"rancho": "Praça d’armas"}
    assert not caplog.records
