from __future__ import annotations

from typing import Mapping

import numpy as np
import pandas as pd

from errors import InvalidArgumentError
from metrics import METRIC_COLUMNS


def summarize(table: pd.DataFrame) -> pd.Series:
    """Column means of a result table; undefined (NaN) F1 entries are skipped."""
    return table[METRIC_COLUMNS].mean(axis=0, skipna=True)


def summarize_arms(tables: Mapping[str, pd.DataFrame]) -> pd.DataFrame:
    summary = pd.DataFrame({name: summarize(table) for name, table in tables.items()}).T
    summary.index.name = "arm"
    return summary


def undefined_f1_count(table: pd.DataFrame) -> int:
    return int(table["f1"].isna().sum())


def percentage_relative_bias(true_value, estimated):
    """
    100 * (estimated - true) / true. Works on scalars and arrays.

    The denominator keeps the sign of the true value, so an estimate of -1
    for a true value of -2 gives -50, not +50.
    """
    true_arr = np.asarray(true_value, dtype=float)
    if np.any(true_arr == 0):
        raise InvalidArgumentError("Percentage relative bias is undefined for a true value of 0.")
    prb = 100.0 * (np.asarray(estimated, dtype=float) - true_arr) / true_arr
    return float(prb) if np.ndim(prb) == 0 else prb


def bias_table(tables: Mapping[str, pd.DataFrame], truth: Mapping[str, float]) -> pd.DataFrame:
    """
    Percentage relative bias of each arm's mean estimate for every metric
    column with a known true value. Columns with a true value of 0 are
    skipped.
    """
    columns = [c for c in METRIC_COLUMNS if c in truth and truth[c] != 0]
    summary = summarize_arms(tables)
    out = pd.DataFrame(index=summary.index, columns=columns, dtype=float)
    for col in columns:
        out[col] = percentage_relative_bias(truth[col], summary[col].to_numpy())
    return out


def distribution_summary(table: pd.DataFrame) -> pd.DataFrame:
    """
    Per-column distribution across repetitions: mean, standard deviation,
    2.5% / 50% / 97.5% quantiles and the number of defined values.
    """
    values = table[METRIC_COLUMNS]
    return pd.DataFrame(
        {
            "mean": values.mean(),
            "std": values.std(ddof=1),
            "q025": values.quantile(0.025),
            "median": values.quantile(0.5),
            "q975": values.quantile(0.975),
            "n_defined": values.notna().sum(),
        }
    )


def long_format(tables: Mapping[str, pd.DataFrame]) -> pd.DataFrame:
    """Stack the per-arm tables into one (arm, rep, metrics...) table for hypothesis testing."""
    frames = []
    for name, table in tables.items():
        frame = table[METRIC_COLUMNS].copy()
        frame.insert(0, "rep", table.index.to_numpy())
        frame.insert(0, "arm", name)
        frames.append(frame)
    return pd.concat(frames, ignore_index=True)
