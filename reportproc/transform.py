"""
reportproc/transform.py

Transformation engine: one input document plus the factor tables in, one
`GenerationReport` out.

Responsibilities
----------------
- Process wind generators, then gas generators, then coal generators, each
  group in document order. That order is the order of the Totals section.
- Compute per generator:
  * total generation = sum(energy * price * value factor) over its days,
  * daily emission = energy * emissions rating * emission factor per day
    (gas and coal only),
  * heat rate = total heat input / actual net generation (coal only).
- Reduce the daily emission rows to one maximum row per date.

Conventions
-----------
- Wind uses the "Low" value factor when Location is exactly "Offshore" and
  "High" otherwise (including a missing Location).
- Fuel generators always use the "Medium" value factor. Gas uses the
  "Medium" emission factor and coal the "High" one.
- A generator whose numeric data is incomplete or malformed produces a
  `Skip` and contributes nothing to any collection. Its siblings are
  unaffected. A missing `Name` or day `Date` is not an error: the value is
  carried as None and rendered as an empty element.
- Heat rate is not guarded: a zero net generation gives inf or nan.
"""

from __future__ import annotations

import logging
import math
from typing import Literal

from lxml import etree
from pydantic import BaseModel

from .errors import GeneratorDataError
from .reference import FactorTables
from .validate import FuelGenerator, child_text, parse_coal, parse_fuel, parse_wind

LOGGER = logging.getLogger(__name__)

GeneratorKind = Literal["Wind", "Gas", "Coal"]
FuelKind = Literal["Gas", "Coal"]

OFFSHORE = "Offshore"
# Every fuel generator is valued with the "Medium" factor; only the
# emission factor depends on the fuel.
FUEL_VALUE_KEY = "Medium"
EMISSION_KEYS = {"Gas": "Medium", "Coal": "High"}


class GeneratorTotal(BaseModel):
    name: str | None
    total: float


class DailyEmission(BaseModel):
    name: str | None
    date: str | None
    emission: float


class HeatRate(BaseModel):
    name: str | None
    heat_rate: float


class Contribution(BaseModel):
    """Everything one generator adds to the report."""

    kind: GeneratorKind
    total: GeneratorTotal
    emissions: list[DailyEmission] = []
    heat_rate: HeatRate | None = None


class Skip(BaseModel):
    """A generator left out of the report, and why."""

    kind: GeneratorKind
    name: str | None
    reason: str


class GenerationReport(BaseModel):
    """Derived collections for one input document.

    Attributes:
        totals: One entry per processed generator, wind then gas then coal.
        daily_emissions: One row per (fuel generator, day), in processing order.
        max_emissions: The highest daily emission row for each date, in order
            of each date's first appearance in `daily_emissions`.
        heat_rates: One entry per processed coal generator.
        skipped: Generators left out, with the reason.
    """

    totals: list[GeneratorTotal] = []
    daily_emissions: list[DailyEmission] = []
    max_emissions: list[DailyEmission] = []
    heat_rates: list[HeatRate] = []
    skipped: list[Skip] = []


def wind_value_key(location: str | None) -> str:
    # Plain equality: a missing or differently cased location is not offshore.
    return "Low" if location == OFFSHORE else "High"


def _skip(kind: GeneratorKind, node: etree._Element, exc: GeneratorDataError) -> Skip:
    name = child_text(node, "Name")
    LOGGER.warning("Skipping %s generator %r: %s", kind, name, exc)
    return Skip(kind=kind, name=name, reason=str(exc))


def process_wind(node: etree._Element, factors: FactorTables) -> Contribution | Skip:
    """Compute the total generation of one `WindGenerator` element."""
    try:
        gen = parse_wind(node)
        value_factor = factors.value_factor(wind_value_key(gen.location))
    except GeneratorDataError as exc:
        return _skip("Wind", node, exc)

    # Wind contributes a total only; no emissions and no heat rate.
    total = sum(day.energy * day.price * value_factor for day in gen.days)
    return Contribution(kind="Wind", total=GeneratorTotal(name=gen.name, total=total))


def process_fuel(node: etree._Element, factors: FactorTables, kind: FuelKind = "Gas") -> Contribution | Skip:
    """Compute total generation and daily emissions of a fuel generator.

    Args:
        node: `GasGenerator` or `CoalGenerator` element.
        factors: Loaded factor tables.
        kind: Fuel type; selects the emission factor category
            ("Medium" for gas, "High" for coal).
    """
    try:
        gen = parse_fuel(node)
        value_factor, emission_factor = _fuel_factors(factors, kind)
    except GeneratorDataError as exc:
        return _skip(kind, node, exc)

    return _fuel_contribution(gen, kind, value_factor, emission_factor)


def _fuel_factors(factors: FactorTables, kind: FuelKind) -> tuple[float, float]:
    return factors.value_factor(FUEL_VALUE_KEY), factors.emission_factor(EMISSION_KEYS[kind])


def _fuel_contribution(
    gen: FuelGenerator,
    kind: FuelKind,
    value_factor: float,
    emission_factor: float,
) -> Contribution:
    total = sum(day.energy * day.price * value_factor for day in gen.days)
    # The emissions rating is per generator and applies to every day.
    emissions = [
        DailyEmission(
            name=gen.name,
            date=day.date,
            emission=day.energy * gen.emissions_rating * emission_factor,
        )
        for day in gen.days
    ]
    return Contribution(
        kind=kind,
        total=GeneratorTotal(name=gen.name, total=total),
        emissions=emissions,
    )


def process_coal(node: etree._Element, factors: FactorTables) -> Contribution | Skip:
    """Fuel processing with the "High" emission factor, plus the heat rate.

    The heat-rate fields are validated together with the rest of the
    generator, so a coal generator is either reported in full or skipped.
    """
    try:
        coal = parse_coal(node)
        value_factor, emission_factor = _fuel_factors(factors, "Coal")
    except GeneratorDataError as exc:
        return _skip("Coal", node, exc)

    result = _fuel_contribution(coal, "Coal", value_factor, emission_factor)
    result.heat_rate = HeatRate(
        name=coal.name,
        heat_rate=heat_rate(coal.total_heat_input, coal.actual_net_generation),
    )
    return result


def heat_rate(total_heat_input: float, actual_net_generation: float) -> float:
    """Return total heat input / actual net generation.

    Division by zero follows IEEE 754 instead of raising: x/0 is +/-inf and
    0/0 is nan.
    """
    try:
        return total_heat_input / actual_net_generation
    except ZeroDivisionError:
        if total_heat_input == 0 or math.isnan(total_heat_input):
            return math.nan
        # Sign of the infinity follows both operands, including -0.0.
        return math.copysign(math.inf, total_heat_input) * math.copysign(1.0, actual_net_generation)


def _emission_rank(row: DailyEmission) -> tuple[bool, float]:
    # nan sorts below every number, including -inf.
    return (not math.isnan(row.emission), row.emission)


def max_emission_per_day(rows: list[DailyEmission]) -> list[DailyEmission]:
    """Pick the highest emission row for each date.

    Dates come out in order of first appearance. On an exact tie the row
    encountered first is kept. Rows without a date form one group of their
    own.
    """
    # dict keeps insertion order, which is the first-appearance order of dates.
    best: dict[str | None, DailyEmission] = {}
    for row in rows:
        current = best.get(row.date)
        # Strict comparison: an equal later row never replaces the first.
        if current is None or _emission_rank(row) > _emission_rank(current):
            best[row.date] = row
    return list(best.values())


def iter_generators(doc: etree._ElementTree | etree._Element, tag: str):
    root = doc.getroot() if isinstance(doc, etree._ElementTree) else doc
    return root.iter(tag)


def build_report(doc: etree._ElementTree | etree._Element, factors: FactorTables) -> GenerationReport:
    """Transform one input document into a `GenerationReport`.

    Args:
        doc: Parsed input document (tree or root element).
        factors: Factor tables from the reference data.

    Returns:
        GenerationReport: The derived collections, plus the generators that
        were skipped. The function is pure: the same document and tables
        always give an equal report.
    """
    # Group order (wind, gas, coal) fixes the order of the Totals section.
    results: list[Contribution | Skip] = []
    results.extend(process_wind(node, factors) for node in iter_generators(doc, "WindGenerator"))
    results.extend(process_fuel(node, factors, "Gas") for node in iter_generators(doc, "GasGenerator"))
    results.extend(process_coal(node, factors) for node in iter_generators(doc, "CoalGenerator"))

    report = GenerationReport()
    for result in results:
        if isinstance(result, Skip):
            report.skipped.append(result)
            continue
        report.totals.append(result.total)
        report.daily_emissions.extend(result.emissions)
        if result.heat_rate is not None:
            report.heat_rates.append(result.heat_rate)

    report.max_emissions = max_emission_per_day(report.daily_emissions)
    LOGGER.debug(
        "Report built: %d totals, %d emission days, %d heat rates, %d skipped",
        len(report.totals),
        len(report.max_emissions),
        len(report.heat_rates),
        len(report.skipped),
    )
    return report
