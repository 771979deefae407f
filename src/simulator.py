from __future__ import annotations

from typing import Dict, Tuple

import numpy as np
import pandas as pd
from scipy.special import expit
from tqdm import tqdm

from config import GenerativeParams, SimConfig
from errors import InvalidArgumentError, SimulationError
from logging_utils import logger
from logistic_fit import fit_logistic
from metrics import METRIC_COLUMNS, MetricRow, compute_metric_row
from smote import required_oversample_percentage, smote_augment


def generate_dataset(
    n: int,
    params: GenerativeParams,
    rng: np.random.Generator,
) -> pd.DataFrame:
    """
    Simulate one labelled dataset.

    Steps:
      1) X1 ~ Exponential(rate_x1).
      2) X2 ~ Normal(X1, sd_x2), so X2 depends on X1.
      3) Y ~ Bernoulli(sigmoid(intercept + slope_x1*X1 + slope_x2*X2)).

    Parameters
    ----------
    n : int
        Number of records; must be positive.
    params : GenerativeParams
        Generative coefficients and covariate distribution parameters.
    rng : np.random.Generator
        RNG for reproducibility.

    Returns
    -------
    pd.DataFrame
        Columns X1, X2 (float) and Y (int 0/1).
    """
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n <= 0:
        raise InvalidArgumentError(f"n must be a positive integer, got {n!r}.")
    if params.rate_x1 <= 0:
        raise InvalidArgumentError("rate_x1 must be > 0.")
    if params.sd_x2 < 0:
        raise InvalidArgumentError("sd_x2 must be >= 0.")

    x1 = rng.exponential(scale=1.0 / params.rate_x1, size=n)
    x2 = rng.normal(loc=x1, scale=params.sd_x2, size=n)

    logit = params.intercept + params.slope_x1 * x1 + params.slope_x2 * x2
    y = rng.binomial(1, expit(logit), size=n).astype(int)

    return pd.DataFrame({"X1": x1, "X2": x2, "Y": y})


def split_train_test(data: pd.DataFrame, test_fraction: float = 0.2) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Deterministic split: the first int(n * test_fraction) rows are the test
    set, the remainder is the training set. Returns (train, test) with the
    original index kept.
    """
    if not (0 < test_fraction < 1):
        raise InvalidArgumentError("test_fraction must be in (0,1).")
    n_test = int(len(data) * test_fraction)
    return data.iloc[n_test:], data.iloc[:n_test]


def run_repetition(rep: int, config: SimConfig) -> Dict[str, MetricRow]:
    """
    One independent repetition on its own RNG stream (seed + rep).

    Returns a MetricRow per arm, keyed by arm name.
    """
    rng = np.random.default_rng(config.seed + rep)
    data = generate_dataset(config.n, config.params, rng)
    train, test = split_train_test(data, config.test_fraction)

    arms = [None] + list(config.arms)
    rows: Dict[str, MetricRow] = {}

    for name, arm in zip(config.arm_names, arms):
        try:
            if arm is None:
                reference = train
            else:
                over_pct = required_oversample_percentage(train["Y"], arm.target_ratio)
                reference = smote_augment(
                    train,
                    over_pct=over_pct,
                    under_pct=arm.under_pct,
                    k=config.k_neighbors,
                    rng=rng,
                    replace_beyond_pool=config.replace_beyond_pool,
                )
            rows[name] = compute_metric_row(reference, fit_logistic(reference), test)
        except SimulationError as exc:
            logger.error("Repetition %d, arm '%s' failed: %s", rep, name, exc)
            raise

    return rows


def empty_result_tables(config: SimConfig) -> Dict[str, pd.DataFrame]:
    index = pd.RangeIndex(config.reps, name="rep")
    return {
        name: pd.DataFrame(np.nan, index=index, columns=METRIC_COLUMNS)
        for name in config.arm_names
    }


def run_simulation(config: SimConfig, progress: bool = True) -> Dict[str, pd.DataFrame]:
    """
    Run config.reps repetitions and collect one result table per arm.

    Tables are pre-sized (reps x 9) and written by repetition index, so the
    outcome does not depend on the order in which repetitions finish. An
    undefined F1 stays NaN; any other failure propagates.
    """
    tables = empty_result_tables(config)
    logger.info(
        "Running %d repetitions (n=%d, arms=%s, seed=%d).",
        config.reps,
        config.n,
        ", ".join(config.arm_names),
        config.seed,
    )

    for rep in tqdm(range(config.reps), desc="Repetitions", disable=not progress):
        try:
            rows = run_repetition(rep, config)
        except SimulationError:
            logger.error("Aborting simulation at repetition %d.", rep)
            raise
        for name, row in rows.items():
            tables[name].loc[rep] = row.as_list()

    for name, table in tables.items():
        n_undefined = int(table["f1"].isna().sum())
        if n_undefined:
            logger.warning("Arm '%s': F1 undefined in %d of %d repetitions.", name, n_undefined, config.reps)

    logger.info("Simulation finished.")
    return tables
