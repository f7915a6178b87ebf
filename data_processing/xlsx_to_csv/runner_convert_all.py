"""
Runner script to convert all logger workbooks into CSV intermediates.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from tqdm import tqdm

from .parser import parse_workbook

logger = logging.getLogger(__name__)

WORKBOOK_SUFFIXES = (".xlsx", ".xlsm")


def is_workbook(path: Union[str, Path]) -> bool:
    return Path(path).suffix.lower() in WORKBOOK_SUFFIXES


def convert_workbook(path: Union[str, Path], output_path: Union[str, Path]) -> Path:
    """
    Parse one workbook and write it as CSV. Returns the CSV path.
    """
    df = parse_workbook(path)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)

    logger.info("Converted workbook", extra={"path": str(output_path), "row_count": len(df)})
    return output_path


def convert_all(root_dir: Union[str, Path], output_dir: Union[str, Path] = "processed-data/csv") -> List[Path]:
    """
    Recursively traverse root_dir for workbooks, parse them, and write CSVs.

    Parameters
    ----------
    root_dir : str or Path
        Directory containing raw logger exports.

    output_dir : str or Path
        Directory where ``<workbook stem>.csv`` files are written.
    """
    root_dir = Path(root_dir)
    output_dir = Path(output_dir)

    workbooks = sorted(
        p for p in root_dir.rglob("*")
        if p.is_file() and is_workbook(p) and not p.name.startswith("~$")
    )
    if not workbooks:
        logger.warning("No workbooks found", extra={"path": str(root_dir)})
        return []

    written = []
    for path in tqdm(workbooks, desc="Converting workbooks"):
        written.append(convert_workbook(path, output_dir / f"{path.stem}.csv"))

    return written


if __name__ == "__main__":
    convert_all("raw-data")
