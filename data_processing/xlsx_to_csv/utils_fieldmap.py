"""
Utility functions for normalizing spreadsheet headers onto pipeline column names.
"""

import re

_SEPARATORS = re.compile(r"[\s\-/\.]+")
_STRIP = re.compile(r"[^0-9a-z_]")

# Header spellings seen across logger exports -> canonical column name
TIMESTAMP_ALIASES = ["timestamp", "date_time", "datetime", "time_stamp", "date_and_time"]

DEFAULT_ALIASES = {
    "temperature": "temp",
    "air_temp": "temp",
    "co2_ppm": "co2",
    "vpd_kpa": "vpd",
}


def normalize_header(name) -> str:
    """
    ' PPFD 1 ' -> 'ppfd_1', 'Date/Time' -> 'date_time'.
    """
    text = str(name).strip().lower()
    text = _SEPARATORS.sub("_", text)
    text = _STRIP.sub("", text)
    return text.strip("_")


def get_any(columns, name_list, default=None):
    """
    Return the first name in name_list present in columns.
    """
    for n in name_list:
        if n in columns:
            return n
    return default
