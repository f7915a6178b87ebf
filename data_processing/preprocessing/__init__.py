"""
Preprocessing package for preparing the greenhouse sensor logs
for quantum-yield modeling.

This package provides:
- Loading and schema checks for both logger CSVs
- Grid rounding, daytime filtering and timestamp alignment
- Cleaning of incomplete joined rows
- Feature engineering (calendar fields, daily light integrals, replicate means)
- Wide -> long reshape, one row per (timestamp, replicate)
"""

from .alignment import AlignmentResult, TimestampComparison, align_sources
from .build_master_dataset import PipelineResult, build_merged_dataset, run_pipeline
from .config import DaytimeWindow, PipelineConfig
from .reshape import reshape_to_long
from .schema import ReplicateSchema, SchemaError

__all__ = [
    "AlignmentResult",
    "DaytimeWindow",
    "PipelineConfig",
    "PipelineResult",
    "ReplicateSchema",
    "SchemaError",
    "TimestampComparison",
    "align_sources",
    "build_merged_dataset",
    "reshape_to_long",
    "run_pipeline",
]
