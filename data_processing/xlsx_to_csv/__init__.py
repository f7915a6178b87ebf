"""
Spreadsheet-to-CSV conversion package for the greenhouse logger exports.

This package exposes three entry points:

- parse_workbook(path): parse a single workbook into a DataFrame with a ``timestamp`` column
- convert_workbook(path, output_path): parse one workbook and write it as CSV
- convert_all(root_dir, output_dir): batch-convert all workbooks under root_dir
"""

from .parser import parse_workbook
from .runner_convert_all import convert_all, convert_workbook, is_workbook

__all__ = ["parse_workbook", "convert_workbook", "convert_all", "is_workbook"]
