"""Pytest configuration shared across the test suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from lxml import etree

# Ensure the project root is on sys.path so ``import reportproc`` works when
# running the test suite without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from reportproc.reference import load_factor_tables  # noqa: E402

REFERENCE_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<ReferenceData xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <Factors>
    <ValueFactor>
      <High>1.0</High>
      <Medium>0.8</Medium>
      <Low>0.5</Low>
    </ValueFactor>
    <EmissionsFactor>
      <High>0.9</High>
      <Medium>0.4</Medium>
      <Low>0.1</Low>
    </EmissionsFactor>
  </Factors>
</ReferenceData>
"""

INPUT_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<GenerationReport>
  <Wind>
    <WindGenerator>
      <Name>W1</Name>
      <Generation>
        <Day><Date>2024-01-01</Date><Energy>100</Energy><Price>2</Price></Day>
      </Generation>
      <Location>Offshore</Location>
    </WindGenerator>
  </Wind>
  <Gas>
    <GasGenerator>
      <Name>G1</Name>
      <Generation>
        <Day><Date>2024-01-01</Date><Energy>10</Energy><Price>5</Price></Day>
        <Day><Date>2024-01-02</Date><Energy>20</Energy><Price>5</Price></Day>
      </Generation>
      <EmissionsRating>2</EmissionsRating>
    </GasGenerator>
  </Gas>
  <Coal>
    <CoalGenerator>
      <Name>C1</Name>
      <Generation>
        <Day><Date>2024-01-01</Date><Energy>10</Energy><Price>3</Price></Day>
      </Generation>
      <TotalHeatInput>500</TotalHeatInput>
      <ActualNetGeneration>250</ActualNetGeneration>
      <EmissionsRating>1.5</EmissionsRating>
    </CoalGenerator>
  </Coal>
</GenerationReport>
"""


@pytest.fixture
def factors():
    return load_factor_tables(etree.fromstring(REFERENCE_XML))


@pytest.fixture
def input_doc():
    return etree.fromstring(INPUT_XML)


@pytest.fixture
def folders(tmp_path):
    """Input, output and reference data laid out under `tmp_path`."""
    inbound = tmp_path / "in"
    outbound = tmp_path / "out"
    inbound.mkdir()
    outbound.mkdir()
    reference = tmp_path / "ReferenceData.xml"
    reference.write_bytes(REFERENCE_XML)
    return inbound, outbound, reference


@pytest.fixture
def input_xml():
    return INPUT_XML
