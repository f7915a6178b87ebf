"""
Replicate-family schema for the light/yield logger.

Replicate sensors are stored side by side in the wide table as
``{metric}_{replicate_index}`` columns (``ppfd_1`` .. ``ppfd_4``). The
schema lists those columns explicitly per metric and is validated when it
is built, so a misnamed column fails the run before any data is touched.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple


class SchemaError(ValueError):
    """Raised when input data or configuration does not match the expected layout."""


_SUFFIX_RE = re.compile(r"^(?P<metric>.+)_(?P<index>\d+)$")


def replicate_column(metric: str, replicate: int) -> str:
    return f"{metric}_{replicate}"


def parse_replicate_column(column: str) -> Tuple[str, int]:
    """
    Split ``"ppfd_3"`` into ``("ppfd", 3)``.

    Raises SchemaError when the column has no numeric replicate suffix.
    """
    match = _SUFFIX_RE.match(column)
    if match is None:
        raise SchemaError(
            f"Column '{column}' does not follow the '{{metric}}_{{replicate}}' naming convention."
        )
    return match.group("metric"), int(match.group("index"))


class ReplicateSchema:
    """
    Mapping of metric name -> replicate-indexed column names.

    Every family must cover the same replicate indices, so that reshaping
    produces exactly one long row per (timestamp, replicate).
    """

    def __init__(self, families: Mapping[str, Sequence[str]]) -> None:
        if not families:
            raise SchemaError("Replicate schema must define at least one metric family.")

        self._families: Dict[str, Tuple[str, ...]] = {}
        self._index: Dict[Tuple[str, int], str] = {}
        seen_columns = set()
        replicate_sets = {}

        for metric, columns in families.items():
            if not columns:
                raise SchemaError(f"Metric family '{metric}' lists no columns.")

            indices: List[int] = []
            for column in columns:
                prefix, replicate = parse_replicate_column(column)
                if prefix != metric:
                    raise SchemaError(
                        f"Column '{column}' does not belong to metric family '{metric}'."
                    )
                if column in seen_columns:
                    raise SchemaError(f"Column '{column}' appears more than once in the schema.")
                seen_columns.add(column)
                indices.append(replicate)
                self._index[(metric, replicate)] = column

            self._families[metric] = tuple(columns)
            replicate_sets[metric] = frozenset(indices)

        reference_metric, reference = next(iter(replicate_sets.items()))
        for metric, replicates in replicate_sets.items():
            if replicates != reference:
                raise SchemaError(
                    f"Metric family '{metric}' has replicates {sorted(replicates)}, "
                    f"but '{reference_metric}' has {sorted(reference)}."
                )

        self._replicates: Tuple[int, ...] = tuple(sorted(reference))

    @classmethod
    def from_metrics(cls, metrics: Iterable[str], replicates: Iterable[int]) -> "ReplicateSchema":
        replicates = list(replicates)
        return cls({m: [replicate_column(m, r) for r in replicates] for m in metrics})

    @property
    def metrics(self) -> Tuple[str, ...]:
        return tuple(self._families)

    @property
    def replicates(self) -> Tuple[int, ...]:
        return self._replicates

    @property
    def columns(self) -> List[str]:
        return [c for cols in self._families.values() for c in cols]

    def family(self, metric: str) -> Tuple[str, ...]:
        try:
            return self._families[metric]
        except KeyError:
            raise SchemaError(f"Unknown metric family '{metric}'.") from None

    def column(self, metric: str, replicate: int) -> str:
        try:
            return self._index[(metric, replicate)]
        except KeyError:
            raise SchemaError(f"No column for metric '{metric}' replicate {replicate}.") from None

    def extend(self, metrics: Iterable[str]) -> "ReplicateSchema":
        """Return a new schema with extra families over the same replicates."""
        families = {m: list(cols) for m, cols in self._families.items()}
        for metric in metrics:
            families[metric] = [replicate_column(metric, r) for r in self._replicates]
        return ReplicateSchema(families)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReplicateSchema):
            return NotImplemented
        return self._families == other._families

    def __repr__(self) -> str:
        return f"ReplicateSchema(metrics={list(self.metrics)}, replicates={list(self.replicates)})"
