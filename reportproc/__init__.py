"""Generation report processing: XML generator readings in, derived report out."""

from . import config, errors, load, reference, run, transform, validate, watch

__all__ = ["config", "errors", "load", "reference", "run", "transform", "validate", "watch"]
