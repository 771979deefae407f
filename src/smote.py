from __future__ import annotations

from typing import Tuple

import numpy as np
import pandas as pd
from sklearn.neighbors import NearestNeighbors

from errors import InsufficientDataError, InvalidArgumentError

FEATURES = ["X1", "X2"]
TARGET = "Y"


def class_counts(y) -> Tuple[int, int, int, int]:
    """
    Return (minority_label, n_minority, majority_label, n_majority) from the
    observed labels. Ties resolve to label 1 as the minority.
    """
    y = np.asarray(y).astype(int)
    n_pos = int((y == 1).sum())
    n_neg = int((y == 0).sum())
    if n_pos <= n_neg:
        return 1, n_pos, 0, n_neg
    return 0, n_neg, 1, n_pos


def required_oversample_percentage(y, desired_ratio: float) -> float:
    """
    Over-sampling percentage that brings the minority fraction to
    desired_ratio before any under-sampling:

        100 * r * n_majority / (n_minority * (1 - r))
    """
    if not (0 < desired_ratio < 1):
        raise InvalidArgumentError("desired_ratio must be in (0,1).")
    _, n_min, _, n_maj = class_counts(y)
    if n_min == 0:
        raise InvalidArgumentError("Minority class is empty; cannot compute over-sampling percentage.")
    return 100.0 * desired_ratio * n_maj / (n_min * (1.0 - desired_ratio))


def _split_percentage(over_pct: float) -> Tuple[int, float]:
    whole = int(np.floor(over_pct / 100.0))
    # Round away float noise such as 2.0000000000000004.
    frac = round(over_pct / 100.0 - whole, 10)
    return whole, frac


def _n_synthetic(n_minority: int, over_pct: float) -> int:
    whole, frac = _split_percentage(over_pct)
    return whole * n_minority + int(np.ceil(frac * n_minority))


def _nearest_neighbours(X_min: np.ndarray, k: int) -> np.ndarray:
    """Indices of the k nearest minority neighbours of each minority row, self excluded."""
    nn = NearestNeighbors(n_neighbors=k + 1).fit(X_min)
    _, idx = nn.kneighbors(X_min)
    # Duplicated points can push a row's own index out of position 0.
    return np.vstack([row[row != i][:k] for i, row in enumerate(idx)])


def _synthesize(
    X_min: np.ndarray,
    over_pct: float,
    k: int,
    rng: np.random.Generator,
) -> np.ndarray:
    n_min = len(X_min)
    whole, frac = _split_percentage(over_pct)

    base = np.repeat(np.arange(n_min), whole)
    if frac > 0:
        extra = rng.choice(n_min, size=int(np.ceil(frac * n_min)), replace=False)
        base = np.concatenate([base, extra])
    if len(base) == 0:
        return np.empty((0, X_min.shape[1]))

    neighbours = _nearest_neighbours(X_min, k)
    picked = neighbours[base, rng.integers(0, k, size=len(base))]
    gap = rng.random(len(base))[:, None]
    return X_min[base] + gap * (X_min[picked] - X_min[base])


def _sample_majority(
    n_pool: int,
    n_requested: int,
    rng: np.random.Generator,
    replace_beyond_pool: bool,
) -> np.ndarray:
    if n_requested <= n_pool:
        return rng.choice(n_pool, size=n_requested, replace=False)
    if not replace_beyond_pool:
        return rng.permutation(n_pool)
    extra = rng.choice(n_pool, size=n_requested - n_pool, replace=True)
    return np.concatenate([rng.permutation(n_pool), extra])


def smote_augment(
    train: pd.DataFrame,
    over_pct: float,
    under_pct: float,
    k: int,
    rng: np.random.Generator,
    replace_beyond_pool: bool = False,
) -> pd.DataFrame:
    """
    SMOTE over-sampling of the minority class plus under-sampling of the
    majority class.

    Parameters
    ----------
    train : pd.DataFrame
        Dataset with columns X1, X2 and binary Y.
    over_pct : float
        Synthetic minority records to create, as a percentage of the
        minority count. The integer part of over_pct/100 gives that many
        synthetic points per minority record; the fractional part is served
        by ceil(frac * n_minority) minority records drawn without
        replacement, one synthetic point each.
    under_pct : float
        Majority records to keep, as a percentage of the minority count
        after over-sampling (original + synthetic).
    k : int
        Neighbour count; capped to n_minority - 1.
    rng : np.random.Generator
        RNG for reproducibility.
    replace_beyond_pool : bool
        When the requested majority sample exceeds the majority pool, keep
        the whole pool and draw the shortfall with replacement. By default
        the sample is capped at the pool size.

    Returns
    -------
    pd.DataFrame
        Original minority, synthetic minority and sampled majority rows, in
        that order, with a fresh index.
    """
    if over_pct < 0 or under_pct < 0:
        raise InvalidArgumentError("over_pct and under_pct must be >= 0.")
    if k < 1:
        raise InvalidArgumentError("k must be >= 1.")

    y = train[TARGET].to_numpy().astype(int)
    min_label, n_min, maj_label, n_maj = class_counts(y)
    if n_min < 2:
        raise InsufficientDataError(
            f"SMOTE needs at least 2 minority records, found {n_min}."
        )
    k = min(k, n_min - 1)

    minority = train.loc[y == min_label, FEATURES + [TARGET]]
    majority = train.loc[y == maj_label, FEATURES + [TARGET]]

    X_min = minority[FEATURES].to_numpy(dtype=float)
    X_syn = _synthesize(X_min, over_pct, k, rng) if over_pct > 0 else np.empty((0, len(FEATURES)))
    synthetic = pd.DataFrame(X_syn, columns=FEATURES)
    synthetic[TARGET] = min_label

    n_requested = int(under_pct / 100.0 * (n_min + len(synthetic)))
    maj_idx = _sample_majority(n_maj, n_requested, rng, replace_beyond_pool)
    sampled_majority = majority.iloc[maj_idx]

    out = pd.concat([minority, synthetic, sampled_majority], ignore_index=True)
    out[TARGET] = out[TARGET].astype(int)
    return out
