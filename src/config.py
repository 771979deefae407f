from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

import numpy as np

from errors import InvalidArgumentError


@dataclass(frozen=True)
class GenerativeParams:
    intercept: float = -7.0   # roughly 5% positives with the default slopes
    slope_x1: float = 1.0
    slope_x2: float = 1.0
    rate_x1: float = 1.0
    sd_x2: float = 1.0


@dataclass(frozen=True)
class OversamplingArm:
    name: str
    target_ratio: float
    # Fixed experimental constant, not derived from the achieved minority count.
    under_pct: float


DEFAULT_ARMS: Tuple[OversamplingArm, ...] = (
    OversamplingArm(name="smote_0.1", target_ratio=0.1, under_pct=1800.0),
    OversamplingArm(name="smote_0.5", target_ratio=0.5, under_pct=106.0),
)


@dataclass(frozen=True)
class SimConfig:
    reps: int = 1000
    n: int = 1000
    test_fraction: float = 0.2
    k_neighbors: int = 5
    seed: int = 42
    output_dir: str = "output"
    # If True, SMOTE tops up the majority sample with replacement when the
    # requested size exceeds the majority pool; otherwise it is capped.
    replace_beyond_pool: bool = False
    params: GenerativeParams = field(default_factory=GenerativeParams)
    arms: Tuple[OversamplingArm, ...] = DEFAULT_ARMS

    def __post_init__(self) -> None:
        if self.reps <= 0:
            raise InvalidArgumentError("reps must be > 0.")
        if self.n <= 0:
            raise InvalidArgumentError("n must be > 0.")
        if not (0 < self.test_fraction < 1):
            raise InvalidArgumentError("test_fraction must be in (0,1).")
        if self.k_neighbors < 1:
            raise InvalidArgumentError("k_neighbors must be >= 1.")
        names = [arm.name for arm in self.arms]
        if "baseline" in names or len(names) != len(set(names)):
            raise InvalidArgumentError("Arm names must be unique and must not be 'baseline'.")
        for arm in self.arms:
            if not (0 < arm.target_ratio < 1):
                raise InvalidArgumentError(f"Arm '{arm.name}': target_ratio must be in (0,1).")
            if arm.under_pct < 0:
                raise InvalidArgumentError(f"Arm '{arm.name}': under_pct must be >= 0.")

    @property
    def arm_names(self) -> Tuple[str, ...]:
        return ("baseline",) + tuple(arm.name for arm in self.arms)


def true_parameters(params: GenerativeParams) -> Dict[str, float]:
    """
    Population values of the metric columns under the generative model.

    X1 ~ Exp(rate) gives E[X1] = 1/rate and Var[X1] = 1/rate^2. X2 | X1 is
    normal around X1, so E[X2] = E[X1], Var[X2] = Var[X1] + sd^2 and
    Cov(X1, X2) = Var[X1]. F1 has no population counterpart.
    """
    mean_x1 = 1.0 / params.rate_x1
    var_x1 = mean_x1 ** 2
    var_x2 = var_x1 + params.sd_x2 ** 2
    return {
        "mean_x1": mean_x1,
        "mean_x2": mean_x1,
        "var_x1": var_x1,
        "var_x2": var_x2,
        "corr_x1_x2": float(var_x1 / np.sqrt(var_x1 * var_x2)),
        "beta0": params.intercept,
        "beta1": params.slope_x1,
        "beta2": params.slope_x2,
    }
