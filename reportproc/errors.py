"""
reportproc/errors.py

Exception hierarchy for the report processor.

Reference data problems abort loading of the factor tables. Generator data
problems are isolated to one generator by the transform stage, which turns
them into a skip entry and moves on to the next generator.
"""

from __future__ import annotations


class GenerationReportError(Exception):
    """Base class for all report processing errors."""


class ConfigError(GenerationReportError):
    """A required setting is not configured."""


class ReferenceDataError(GenerationReportError):
    pass


class MissingReferenceSection(ReferenceDataError):
    def __init__(self, section: str):
        super().__init__(f"Reference data has no {section} section")
        self.section = section


class MalformedFactorValue(ReferenceDataError):
    def __init__(self, section: str, key: str, text: str | None):
        super().__init__(f"{section}/{key} is not a number: {text!r}")
        self.section = section
        self.key = key
        self.text = text


class DuplicateFactorKey(ReferenceDataError):
    def __init__(self, section: str, key: str):
        super().__init__(f"{section} defines {key} more than once")
        self.section = section
        self.key = key


class GeneratorDataError(GenerationReportError):
    pass


class MissingField(GeneratorDataError):
    def __init__(self, field: str):
        super().__init__(f"Missing required field {field}")
        self.field = field


class MalformedNumericField(GeneratorDataError):
    def __init__(self, field: str, text: str | None):
        super().__init__(f"Field {field} is not a number: {text!r}")
        self.field = field
        self.text = text


class UnknownFactorKey(GeneratorDataError):
    def __init__(self, table: str, key: str):
        super().__init__(f"No {table} factor named {key}")
        self.table = table
        self.key = key
