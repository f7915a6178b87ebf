# models/config.py

from pathlib import Path

# Paths
PROJECT_ROOT = Path(__file__).resolve().parents[1]
LONG_DATA_PATH = PROJECT_ROOT / "processed-data" / "merged_long.csv"
RESULTS_DIR = PROJECT_ROOT / "artifacts" / "results"

# Response: quantum yield per replicate
TARGET_COL = "qy"

# Numeric predictors (long-table column names)
PREDICTORS = [
    "ppfd",
    "eppfd",
    "dli",
    "edli",
    "temp",
    "vpd",
    "co2",
]

# Low-cardinality indicators, one-hot encoded
CATEGORICAL = [
    "replicate",
    "day_of_week",
    "hour",
]

# Train/test split
TEST_FRACTION = 0.2
RANDOM_SEED = 42
CV_FOLDS = 5

# Elastic net
ELASTIC_NET_MAX_ITER = 10_000
ELASTIC_NET_GRID = {
    "model__alpha": [1e-4, 1e-3, 1e-2, 1e-1, 1.0],
    "model__l1_ratio": [0.1, 0.3, 0.5, 0.7, 0.9, 1.0],
}

# Bayesian search bounds: (low, high, prior)
ELASTIC_NET_BAYES_SPACE = {
    "model__alpha": (1e-5, 10.0, "log-uniform"),
    "model__l1_ratio": (0.01, 1.0, "uniform"),
}
BAYES_N_ITER = 25
