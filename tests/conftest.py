from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np
import pandas as pd
import pytest

from data_processing.preprocessing.config import REPLICATES


def make_light_frame(timestamps: Iterable[str], flux: Sequence[float] | None = None) -> pd.DataFrame:
    """Light/yield logger rows: qy, ppfd and eppfd for replicates 1..4."""
    ts = pd.to_datetime(list(timestamps))
    n = len(ts)
    base = np.asarray(flux, dtype=float) if flux is not None else np.linspace(100.0, 400.0, n)

    data = {"timestamp": ts}
    for r in REPLICATES:
        ppfd = base * r
        data[f"qy_{r}"] = 0.8 - ppfd / 10_000.0
        data[f"ppfd_{r}"] = ppfd
        data[f"eppfd_{r}"] = ppfd * 0.9
    return pd.DataFrame(data)


def make_climate_frame(timestamps: Iterable[str]) -> pd.DataFrame:
    """Climate logger rows: temp, vpd, co2."""
    ts = pd.to_datetime(list(timestamps))
    n = len(ts)
    return pd.DataFrame({
        "timestamp": ts,
        "temp": 20.0 + np.arange(n, dtype=float),
        "vpd": np.full(n, 1.2),
        "co2": np.full(n, 420.0),
    })


def day_slots(day: str, start: str = "07:00", end: str = "08:00") -> list:
    return [str(t) for t in pd.date_range(f"{day} {start}", f"{day} {end}", freq="15min")]


@pytest.fixture()
def light_factory():
    return make_light_frame


@pytest.fixture()
def climate_factory():
    return make_climate_frame


@pytest.fixture()
def slots():
    return day_slots


@pytest.fixture()
def synthetic_long() -> pd.DataFrame:
    """Long table with a known linear qy relationship."""
    rng = np.random.default_rng(7)
    n = 240
    ppfd = rng.uniform(50, 900, n)
    temp = rng.uniform(15, 32, n)
    vpd = rng.uniform(0.4, 2.5, n)
    co2 = rng.uniform(380, 900, n)
    qy = 0.85 - 0.0003 * ppfd - 0.004 * temp - 0.02 * vpd + 0.00005 * co2 + rng.normal(0, 0.002, n)
    return pd.DataFrame({
        "timestamp": pd.date_range("2024-05-01 07:00", periods=n, freq="15min"),
        "replicate": np.tile([1, 2, 3, 4], n // 4),
        "day_of_week": rng.integers(0, 7, n),
        "hour": rng.integers(7, 21, n),
        "qy": qy,
        "ppfd": ppfd,
        "eppfd": ppfd * 0.9 + rng.normal(0, 5, n),
        "dli": rng.uniform(0, 20, n),
        "edli": rng.uniform(0, 18, n),
        "temp": temp,
        "vpd": vpd,
        "co2": co2,
    })
