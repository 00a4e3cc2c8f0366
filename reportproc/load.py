"""
reportproc/load.py

Output layer: renders a `GenerationReport` as the `GenerationOutput` XML
document and writes it beside the other results.

Responsibilities
----------------
- Build the output tree with lxml (`build_output_document`).
- Format numbers: totals and emissions to 9 decimal places, heat rates in
  the shortest round-trip form.
- Derive the result path `<input stem>-Result.xml` and write the file
  atomically (temporary sibling, then replace).

Output Shape
------------
<GenerationOutput xmlns:xsi=... xmlns:xsd=...>
  <Totals><Generator><Name/><Total/></Generator>...</Totals>
  <MaxEmissionGenerators><Day><Name/><Date/><Emission/></Day>...</MaxEmissionGenerators>
  <ActualHeatRates><ActualHeatRate><Name/><HeatRate/></ActualHeatRate>...</ActualHeatRates>
</GenerationOutput>

Notes
-----
- Serialisation is deterministic: the same report always gives the same
  bytes.
- Non-finite values use the XML Schema spellings INF, -INF and NaN.
"""

from __future__ import annotations

import logging
import math
import os
from pathlib import Path

from lxml import etree

from .transform import GenerationReport

LOGGER = logging.getLogger(__name__)

XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
XSD_NS = "http://www.w3.org/2001/XMLSchema"
RESULT_SUFFIX = "-Result.xml"
# Magnitude from which `format_default` switches to exponent notation.
SCIENTIFIC_FROM = 1e15


def _non_finite(value: float) -> str | None:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    return None


def format_fixed(value: float) -> str:
    """Fixed-point with 9 decimal places, e.g. 100.0 -> "100.000000000"."""
    return _non_finite(value) or f"{value:.9f}"


def format_default(value: float) -> str:
    """Shortest round-trip form, as a general numeric format prints it.

    Integral values drop the ".0" (2.0 -> "2"). From 1e15 upwards, and for
    magnitudes Python already writes in exponent form (below 1e-4), the
    result uses an upper-case exponent with at least two digits:
    1e15 -> "1E+15", 1e-05 -> "1E-05".
    """
    special = _non_finite(value)
    if special:
        return special
    text = repr(value)
    if "e" not in text and abs(value) < SCIENTIFIC_FROM:
        return text[:-2] if text.endswith(".0") else text

    sign = "-" if text.startswith("-") else ""
    unsigned = text.lstrip("-")
    if "e" in unsigned:
        mantissa, exp_text = unsigned.split("e")
        exponent = int(exp_text)
    else:
        # repr keeps positional form up to 1e16; move the point by hand.
        whole, _, frac = unsigned.partition(".")
        exponent = len(whole) - 1
        digits = (whole + frac).rstrip("0")
        mantissa = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
    exp_sign = "-" if exponent < 0 else "+"
    return f"{sign}{mantissa}E{exp_sign}{abs(exponent):02d}"


def _add(parent: etree._Element, tag: str, text: str | None) -> etree._Element:
    # None gives an empty element, used for a missing Name or Date.
    child = etree.SubElement(parent, tag)
    child.text = text
    return child


def build_output_document(report: GenerationReport) -> etree._ElementTree:
    """Render `report` as a `GenerationOutput` document.

    Args:
        report: Derived collections for one input document.

    Returns:
        lxml.etree._ElementTree: The output document. Empty collections
        still produce their (empty) section element.
    """
    root = etree.Element("GenerationOutput", nsmap={"xsi": XSI_NS, "xsd": XSD_NS})

    totals = etree.SubElement(root, "Totals")
    for total in report.totals:
        gen = etree.SubElement(totals, "Generator")
        _add(gen, "Name", total.name)
        _add(gen, "Total", format_fixed(total.total))

    max_emissions = etree.SubElement(root, "MaxEmissionGenerators")
    for row in report.max_emissions:
        day = etree.SubElement(max_emissions, "Day")
        _add(day, "Name", row.name)
        _add(day, "Date", row.date)
        _add(day, "Emission", format_fixed(row.emission))

    heat_rates = etree.SubElement(root, "ActualHeatRates")
    for rate in report.heat_rates:
        entry = etree.SubElement(heat_rates, "ActualHeatRate")
        _add(entry, "Name", rate.name)
        _add(entry, "HeatRate", format_default(rate.heat_rate))

    return etree.ElementTree(root)


def serialize(doc: etree._ElementTree) -> bytes:
    """Return the document as UTF-8 bytes with an XML declaration."""
    return etree.tostring(doc, xml_declaration=True, encoding="utf-8", pretty_print=True)


def output_path(input_path: str | Path, output_folder: str | Path) -> Path:
    """Return `<output_folder>/<input stem>-Result.xml`."""
    return Path(output_folder) / f"{Path(input_path).stem}{RESULT_SUFFIX}"


def write_output(doc: etree._ElementTree, path: str | Path) -> Path:
    """Write `doc` to `path`, replacing any previous result.

    The bytes go to a temporary file in the same folder first, then replace
    the target in one step.

    Raises:
        OSError: If the folder is not writable.
    """
    path = Path(path)
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        tmp.write_bytes(serialize(doc))
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()
    LOGGER.info("Output file saved to: %s", path)
    return path
