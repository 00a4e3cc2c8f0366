"""
reportproc/validate.py

Validation and typing layer for generator nodes in an input document.

Responsibilities
----------------
- Read XML files with lxml (`read_xml`).
- Coerce decimal text to `float` using the XML Schema `xs:double` lexical
  rules (`coerce_decimal` / `parse_decimal`).
- Turn `WindGenerator`, `GasGenerator` and `CoalGenerator` elements into
  pydantic models, raising a typed error for the first missing or
  malformed field.

Conventions
-----------
- Child elements are matched by unqualified tag name; only direct children
  of the generator are fields, while `Day` records may sit at any depth
  below the generator.
- `Date` is kept as an opaque string and never parsed as a calendar value.
- Text fields (`Name`, `Location`, `Date`) are optional and read as None
  when absent; only numeric fields are required. A wind generator without
  `Location` is simply not offshore.

Notes
-----
- This module does no arithmetic. Factor lookups and sums happen in
  `reportproc/transform.py`.
"""

from __future__ import annotations

import re
from pathlib import Path

from lxml import etree
from pydantic import BaseModel

from .errors import MalformedNumericField, MissingField

# xs:double lexical space: decimal or scientific notation plus the special
# values. Python's float() is more permissive ("inf", "1_000"), so the text
# is checked first.
_DECIMAL_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_SPECIAL = {"INF": float("inf"), "+INF": float("inf"), "-INF": float("-inf"), "NaN": float("nan")}


class DayRecord(BaseModel):
    """One day's reading for a generator."""

    date: str | None = None
    energy: float
    price: float


class WindGenerator(BaseModel):
    name: str | None = None
    location: str | None = None
    days: list[DayRecord]


class FuelGenerator(BaseModel):
    """A gas generator, and the shared part of a coal generator.

    Attributes:
        name: Generator name, None when the element has no `Name`.
        emissions_rating: Emissions per unit of energy, set on the generator
            and applied to every day.
        days: Day records in document order.
    """

    name: str | None = None
    emissions_rating: float
    days: list[DayRecord]


class CoalGenerator(FuelGenerator):
    total_heat_input: float
    actual_net_generation: float


def read_xml(path: str | Path) -> etree._ElementTree:
    """Parse an XML file into an lxml element tree.

    Entity resolution and network access are disabled; documents are
    treated as plain data.

    Raises:
        OSError: If the file cannot be read.
        lxml.etree.XMLSyntaxError: If the file is not well-formed XML.
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    return etree.parse(str(path), parser)


def coerce_decimal(text: str | None) -> float:
    """Convert `xs:double` text to a float.

    Raises:
        ValueError: If `text` is None or outside the `xs:double` lexical space.
    """
    if text is None:
        raise ValueError("no text")
    stripped = text.strip()
    if stripped in _SPECIAL:
        return _SPECIAL[stripped]
    if not _DECIMAL_RE.fullmatch(stripped):
        raise ValueError(f"not a decimal: {text!r}")
    return float(stripped)


def parse_decimal(text: str | None, field: str) -> float:
    """Like `coerce_decimal`, raising `MalformedNumericField` for `field`."""
    try:
        return coerce_decimal(text)
    except ValueError:
        raise MalformedNumericField(field, text) from None


def child_text(node: etree._Element, tag: str) -> str | None:
    """Return the text content of the first direct child named `tag`.

    Text of nested elements is concatenated, matching how XML element values
    are usually read. Returns None when no such child exists.
    """
    child = node.find(tag)
    if child is None:
        return None
    return "".join(child.itertext())


def required_text(node: etree._Element, tag: str, field: str | None = None) -> str:
    text = child_text(node, tag)
    if text is None:
        raise MissingField(field or tag)
    return text


def required_decimal(node: etree._Element, tag: str, field: str | None = None) -> float:
    # Numeric fields are mandatory: a missing one is as fatal as bad text.
    return parse_decimal(required_text(node, tag, field), field or tag)


def iter_days(generator: etree._Element):
    """Yield every `Day` element below `generator` in document order."""
    return generator.iterdescendants("Day")


def parse_day(day: etree._Element) -> DayRecord:
    # A day without Date is kept; its date is None and it groups with the
    # other dateless days.
    return DayRecord(
        date=child_text(day, "Date"),
        energy=required_decimal(day, "Energy", "Day/Energy"),
        price=required_decimal(day, "Price", "Day/Price"),
    )


def parse_wind(node: etree._Element) -> WindGenerator:
    """Validate a `WindGenerator` element.

    Raises:
        MissingField: If a day's `Energy` or `Price` is absent.
        MalformedNumericField: If a day's `Energy` or `Price` is not a number.
    """
    return WindGenerator(
        name=child_text(node, "Name"),
        location=child_text(node, "Location"),
        days=[parse_day(day) for day in iter_days(node)],
    )


def parse_fuel(node: etree._Element) -> FuelGenerator:
    """Validate a `GasGenerator` (or the fuel part of a `CoalGenerator`).

    Raises:
        MissingField: If `EmissionsRating`, or a day's `Energy` or `Price`,
            is absent.
        MalformedNumericField: If one of those fields is not a number.
    """
    return FuelGenerator(
        name=child_text(node, "Name"),
        emissions_rating=required_decimal(node, "EmissionsRating"),
        days=[parse_day(day) for day in iter_days(node)],
    )


def parse_coal(node: etree._Element) -> CoalGenerator:
    fuel = parse_fuel(node)
    # Heat-rate inputs live on the generator itself, not on its days.
    return CoalGenerator(
        **fuel.model_dump(),
        total_heat_input=required_decimal(node, "TotalHeatInput"),
        actual_net_generation=required_decimal(node, "ActualNetGeneration"),
    )
