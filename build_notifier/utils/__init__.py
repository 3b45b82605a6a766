"""Utility functions for timestamps and properties files."""

from .properties import PropertiesParseError, parse_properties
from .timestamps import (
    ensure_utc,
    parse_iso_datetime,
    to_epoch_millis,
)

__all__ = [
    # Timestamps
    "ensure_utc",
    "parse_iso_datetime",
    "to_epoch_millis",
    # Properties
    "parse_properties",
    "PropertiesParseError",
]
