from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from logistic_fit import FittedLogit

METRIC_COLUMNS: List[str] = [
    "mean_x1",
    "mean_x2",
    "var_x1",
    "var_x2",
    "corr_x1_x2",
    "beta0",
    "beta1",
    "beta2",
    "f1",
]


@dataclass
class MetricRow:
    mean_x1: float
    mean_x2: float
    var_x1: float
    var_x2: float
    corr_x1_x2: float
    beta0: float
    beta1: float
    beta2: float
    f1: float              # NaN when precision or recall is undefined

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

    def as_list(self) -> List[float]:
        return [getattr(self, col) for col in METRIC_COLUMNS]


def correlation(a, b) -> float:
    """
    (mean(a*b) - mean(a)*mean(b)) / (sd(a) * sd(b)).

    The standard deviations use ddof=0 to match the population covariance in
    the numerator, so corr(a, a) == 1 for any non-constant vector.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    sd_a = np.std(a)
    sd_b = np.std(b)
    if sd_a == 0 or sd_b == 0:
        return float("nan")
    return float((np.mean(a * b) - np.mean(a) * np.mean(b)) / (sd_a * sd_b))


def f1_or_undefined(y_true, y_pred) -> float:
    _, fp, fn, tp = confusion_matrix(
        np.asarray(y_true, dtype=int),
        np.asarray(y_pred, dtype=int),
        labels=[0, 1],
    ).ravel()

    if tp + fp == 0 or tp + fn == 0:
        return float("nan")
    precision = tp / (tp + fp)
    recall = tp / (tp + fn)
    if precision + recall == 0:
        return float("nan")
    return float(2 * precision * recall / (precision + recall))


def compute_metric_row(reference: pd.DataFrame, model: FittedLogit, test: pd.DataFrame) -> MetricRow:
    """Covariate moments of `reference`, coefficients of `model`, F1 of `model` on `test`."""
    x1 = reference["X1"].to_numpy(dtype=float)
    x2 = reference["X2"].to_numpy(dtype=float)

    preds = model.predict(test["X1"], test["X2"])
    f1 = f1_or_undefined(test["Y"], preds)

    return MetricRow(
        mean_x1=float(np.mean(x1)),
        mean_x2=float(np.mean(x2)),
        var_x1=float(np.var(x1, ddof=1)),
        var_x2=float(np.var(x2, ddof=1)),
        corr_x1_x2=correlation(x1, x2),
        beta0=model.intercept,
        beta1=model.slope_x1,
        beta2=model.slope_x2,
        f1=f1,
    )
