"""Tests for loading the reference data factor tables."""

from __future__ import annotations

import pytest
from lxml import etree
from pydantic import ValidationError

from reportproc import reference
from reportproc.errors import (
    DuplicateFactorKey,
    MalformedFactorValue,
    MissingReferenceSection,
    UnknownFactorKey,
)


def test_load_factor_tables_reads_both_sections(factors):
    """Each child of a section becomes one keyed factor."""

    assert factors.value == {"High": 1.0, "Medium": 0.8, "Low": 0.5}
    assert factors.emission == {"High": 0.9, "Medium": 0.4, "Low": 0.1}


def test_lookups(factors):
    assert factors.value_factor("Low") == 0.5
    assert factors.emission_factor("High") == 0.9


def test_unknown_key_raises(factors):
    with pytest.raises(UnknownFactorKey) as exc:
        factors.value_factor("Extreme")

    assert exc.value.table == "ValueFactor"
    assert exc.value.key == "Extreme"


def test_missing_section():
    doc = etree.fromstring("<Ref><ValueFactor><Low>1</Low></ValueFactor></Ref>")

    with pytest.raises(MissingReferenceSection) as exc:
        reference.load_factor_tables(doc)

    assert exc.value.section == "EmissionsFactor"


def test_malformed_value():
    doc = etree.fromstring(
        "<Ref><ValueFactor><Low>cheap</Low></ValueFactor>"
        "<EmissionsFactor><High>1</High></EmissionsFactor></Ref>"
    )

    with pytest.raises(MalformedFactorValue) as exc:
        reference.load_factor_tables(doc)

    assert exc.value.key == "Low"


def test_duplicate_key():
    doc = etree.fromstring("<Ref><ValueFactor><Low>1</Low><Low>2</Low></ValueFactor></Ref>")

    with pytest.raises(DuplicateFactorKey):
        reference.read_section(doc, "ValueFactor")


def test_first_section_wins_and_comments_are_ignored():
    """Only the first section in document order is read; comments are not factors."""

    doc = etree.fromstring(
        "<Ref><ValueFactor><!-- cheap --><Low>0.5</Low></ValueFactor>"
        "<ValueFactor><Low>9</Low></ValueFactor></Ref>"
    )

    assert reference.read_section(doc, "ValueFactor") == {"Low": 0.5}


def test_tables_are_frozen(factors):
    """Neither the attributes nor the tables behind them can be changed."""

    with pytest.raises(ValidationError):
        factors.value = {}
    with pytest.raises(TypeError):
        factors.value["Low"] = 99.0
    with pytest.raises(TypeError):
        del factors.emission["High"]

    assert factors.value_factor("Low") == 0.5


def test_tables_copy_their_input():
    source = {"Low": 0.5}
    tables = reference.FactorTables(value=source, emission={})

    source["Low"] = 99.0

    assert tables.value_factor("Low") == 0.5


def test_load_reference_file(folders):
    _, _, path = folders

    tables = reference.load_reference_file(path)

    assert tables.value_factor("Medium") == 0.8


def test_load_reference_file_missing(tmp_path):
    with pytest.raises(OSError):
        reference.load_reference_file(tmp_path / "nope.xml")
