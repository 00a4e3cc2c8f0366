"""
reportproc/reference.py

Reference data loader: turns the reference document into the two factor
tables used by every transformation.

Responsibilities
----------------
- Locate the first `ValueFactor` and the first `EmissionsFactor` element in
  the reference document.
- Build one `{category: factor}` table per section from the section's child
  elements (tag name → numeric text).
- Provide lookups that fail with `UnknownFactorKey` instead of `KeyError`.

Notes
-----
- Tables are loaded once at startup and shared read-only across every
  input document.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from lxml import etree
from pydantic import BaseModel, ConfigDict, field_validator

from .errors import DuplicateFactorKey, MalformedFactorValue, MissingReferenceSection, UnknownFactorKey
from .validate import coerce_decimal, read_xml

LOGGER = logging.getLogger(__name__)

VALUE_SECTION = "ValueFactor"
EMISSION_SECTION = "EmissionsFactor"


class FactorTables(BaseModel):
    """Value and emission factors keyed by category name (e.g. "Low").

    Both tables are read-only: the model is frozen and each table is held
    as a `MappingProxyType` over a private copy of the loaded values.
    """

    model_config = ConfigDict(frozen=True)

    value: Mapping[str, float]
    emission: Mapping[str, float]

    @field_validator("value", "emission", mode="after")
    @classmethod
    def read_only(cls, v):
        # Copy first so the caller's dict cannot change the table later.
        return MappingProxyType(dict(v))

    def value_factor(self, key: str) -> float:
        try:
            return self.value[key]
        except KeyError:
            raise UnknownFactorKey(VALUE_SECTION, key) from None

    def emission_factor(self, key: str) -> float:
        try:
            return self.emission[key]
        except KeyError:
            raise UnknownFactorKey(EMISSION_SECTION, key) from None


def _root(doc: etree._ElementTree | etree._Element) -> etree._Element:
    return doc.getroot() if isinstance(doc, etree._ElementTree) else doc


def read_section(doc: etree._ElementTree | etree._Element, section: str) -> dict[str, float]:
    """Build the factor table for `section`.

    Args:
        doc: Reference document (tree or root element).
        section: Element name of the section, searched from the root down.

    Returns:
        dict[str, float]: Factors keyed by the local name of each child
        element, in document order.

    Raises:
        MissingReferenceSection: If no element named `section` exists.
        MalformedFactorValue: If a child's text is not a decimal number.
        DuplicateFactorKey: If two children share a name.
    """
    node = next(_root(doc).iter(section), None)
    if node is None:
        raise MissingReferenceSection(section)

    table: dict[str, float] = {}
    # iterchildren(etree.Element) skips comments and processing instructions.
    for child in node.iterchildren(etree.Element):
        key = etree.QName(child).localname
        if key in table:
            raise DuplicateFactorKey(section, key)
        text = "".join(child.itertext())
        try:
            table[key] = coerce_decimal(text)
        except ValueError:
            raise MalformedFactorValue(section, key, text) from None
    return table


def load_factor_tables(doc: etree._ElementTree | etree._Element) -> FactorTables:
    """Load both factor tables from a parsed reference document."""
    tables = FactorTables(
        value=read_section(doc, VALUE_SECTION),
        emission=read_section(doc, EMISSION_SECTION),
    )
    LOGGER.debug("Loaded value factors %s and emission factors %s", tables.value, tables.emission)
    return tables


def load_reference_file(path: str | Path) -> FactorTables:
    """Read the reference data file at `path` and load its factor tables.

    Raises:
        OSError: If the file cannot be read.
        lxml.etree.XMLSyntaxError: If the file is not well-formed.
        ReferenceDataError: If a section is missing or malformed.
    """
    tables = load_factor_tables(read_xml(path))
    LOGGER.info("Reference data loaded from %s", path)
    return tables
