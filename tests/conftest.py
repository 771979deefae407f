import json
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))


@pytest.fixture
def imbalanced_train() -> pd.DataFrame:
    """10 minority (Y=1) and 40 majority (Y=0) records with distinct covariates."""
    rng = np.random.default_rng(7)
    n_min, n_maj = 10, 40
    x1 = np.concatenate([rng.exponential(1.0, n_min) + 2.0, rng.exponential(1.0, n_maj)])
    x2 = x1 + rng.normal(0.0, 1.0, n_min + n_maj)
    y = np.concatenate([np.ones(n_min, dtype=int), np.zeros(n_maj, dtype=int)])
    # Interleave classes so row order does not match class order.
    order = rng.permutation(n_min + n_maj)
    return pd.DataFrame({"X1": x1[order], "X2": x2[order], "Y": y[order]})


@pytest.fixture
def mini_parameters() -> dict:
    return {
        "reps": 2,
        "n": 1000,
        "test_set_pct": 20.0,
        "k_neighbors": 5,
        "seed": 11,
        "output_dir": "output",
        "generative_parameters": {
            "intercept": -7.0,
            "slope_x1": 1.0,
            "slope_x2": 1.0,
            "rate_x1": 1.0,
            "sd_x2": 1.0,
        },
        "oversampling_arms": [
            {"name": "smote_0.1", "target_ratio": 0.1, "under_pct": 1800.0},
            {"name": "smote_0.5", "target_ratio": 0.5, "under_pct": 106.0},
        ],
    }


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture
def write_json():
    def _write(path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    return _write
