# data_processing/preprocessing/config.py
"""
Pipeline configuration for aligning the greenhouse sensor logs.

Module-level constants hold the defaults observed in the greenhouse
datasets; ``PipelineConfig`` bundles them into a validated, immutable
object that every pipeline stage receives explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Dict, Optional, Tuple

from .schema import ReplicateSchema, SchemaError

# Time grid
GRID_INTERVAL_SECONDS = 900          # 15-minute logging grid
SECONDS_PER_DAY = 86_400
MICROMOLES_PER_MOLE = 1_000_000      # µmol m-2 s-1 x s -> mol m-2

# Daytime windows (inclusive, on rounded time-of-day)
DEFAULT_DAY_START = time(7, 0)
DEFAULT_DAY_END = time(20, 45)

# Column layout
TIMESTAMP_COL = "timestamp"
DATE_COL = "date"
REPLICATE_COL = "replicate"

REPLICATES = (1, 2, 3, 4)
REPLICATE_METRICS = ("qy", "ppfd", "eppfd")   # light / yield logger (source A)
SHARED_CHANNELS = ("temp", "vpd", "co2")      # climate logger (source B)

# flux family -> daily integral family
INTEGRAL_FAMILIES = {"ppfd": "dli", "eppfd": "edli"}

AGGREGATE_FAMILIES = ("ppfd", "dli")
AGGREGATE_SUFFIX = "mean"

CALENDAR_COLUMNS = (DATE_COL, "hour", "day_of_week")

DUPLICATE_POLICIES = ("first", "last")


@dataclass(frozen=True)
class DaytimeWindow:
    """Inclusive time-of-day window; rows outside it are night-time and discarded."""
    start: time = DEFAULT_DAY_START
    end: time = DEFAULT_DAY_END

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise SchemaError(f"Daytime window start {self.start} is after end {self.end}.")

    @classmethod
    def parse(cls, text: str) -> "DaytimeWindow":
        """Parse ``"HH:MM-HH:MM"``."""
        try:
            start_txt, end_txt = text.split("-")
            start = time.fromisoformat(start_txt.strip())
            end = time.fromisoformat(end_txt.strip())
        except ValueError as exc:
            raise SchemaError(f"Invalid daytime window '{text}', expected HH:MM-HH:MM.") from exc
        return cls(start, end)

    def __str__(self) -> str:
        return f"{self.start:%H:%M}-{self.end:%H:%M}"


def default_schema() -> ReplicateSchema:
    return ReplicateSchema.from_metrics(REPLICATE_METRICS, REPLICATES)


@dataclass(frozen=True)
class PipelineConfig:
    grid_interval_seconds: int = GRID_INTERVAL_SECONDS
    window_a: DaytimeWindow = field(default_factory=DaytimeWindow)
    window_b: DaytimeWindow = field(default_factory=DaytimeWindow)
    duplicate_policy: str = "first"
    schema: ReplicateSchema = field(default_factory=default_schema)
    shared_channels: Tuple[str, ...] = SHARED_CHANNELS
    integral_families: Dict[str, str] = field(default_factory=lambda: dict(INTEGRAL_FAMILIES))
    aggregate_families: Tuple[str, ...] = AGGREGATE_FAMILIES
    aggregate_suffix: str = AGGREGATE_SUFFIX
    timestamp_column: str = TIMESTAMP_COL
    timestamp_format: Optional[str] = None

    def __post_init__(self) -> None:
        interval = self.grid_interval_seconds
        if interval <= 0 or SECONDS_PER_DAY % interval != 0:
            raise SchemaError(
                f"Grid interval must be a positive divisor of {SECONDS_PER_DAY} s, got {interval}."
            )

        if self.duplicate_policy not in DUPLICATE_POLICIES:
            raise SchemaError(
                f"Unknown duplicate policy '{self.duplicate_policy}', "
                f"expected one of {DUPLICATE_POLICIES}."
            )

        for flux, integral in self.integral_families.items():
            if flux not in self.schema.metrics:
                raise SchemaError(f"Integral source family '{flux}' is not in the replicate schema.")
            if integral in self.schema.metrics:
                raise SchemaError(f"Integral family '{integral}' clashes with an input family.")

        available = set(self.schema.metrics) | set(self.integral_families.values())
        for family in self.aggregate_families:
            if family not in available:
                raise SchemaError(f"Aggregate family '{family}' is neither an input nor an integral family.")

        clashes = set(self.shared_channels) & set(self.schema.columns)
        if clashes:
            raise SchemaError(f"Shared channels overlap replicate columns: {sorted(clashes)}")

    @property
    def dose_conversion(self) -> float:
        """Factor turning a flux sample into its share of the daily integral."""
        return self.grid_interval_seconds / MICROMOLES_PER_MOLE

    @property
    def derived_schema(self) -> ReplicateSchema:
        """Input schema plus the integral families added during feature derivation."""
        return self.schema.extend(self.integral_families.values())

    @property
    def aggregate_columns(self) -> Tuple[str, ...]:
        return tuple(f"{family}_{self.aggregate_suffix}" for family in self.aggregate_families)

    @property
    def long_shared_columns(self) -> Tuple[str, ...]:
        """Columns broadcast to every replicate row of the long table."""
        return (
            (TIMESTAMP_COL,)
            + CALENDAR_COLUMNS
            + tuple(self.shared_channels)
            + self.aggregate_columns
        )
