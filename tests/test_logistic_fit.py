import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from config import GenerativeParams
from errors import InsufficientDataError, InvalidArgumentError, NonConvergenceError
from logistic_fit import FittedLogit, fit_logistic
from simulator import generate_dataset


@pytest.fixture
def large_sample() -> pd.DataFrame:
    params = GenerativeParams(intercept=-3.0, slope_x1=1.0, slope_x2=1.0)
    return generate_dataset(20000, params, np.random.default_rng(123))


def test_fit_recovers_generative_coefficients(large_sample):
    model = fit_logistic(large_sample)
    assert model.converged
    assert model.intercept == pytest.approx(-3.0, abs=0.2)
    assert model.slope_x1 == pytest.approx(1.0, abs=0.15)
    assert model.slope_x2 == pytest.approx(1.0, abs=0.15)


def test_fit_solves_score_equations(large_sample):
    model = fit_logistic(large_sample)
    X = np.column_stack([np.ones(len(large_sample)), large_sample["X1"], large_sample["X2"]])
    mu = model.predict_proba(large_sample["X1"], large_sample["X2"])
    score = X.T @ (large_sample["Y"].to_numpy() - mu)
    assert np.abs(score).max() / len(large_sample) < 1e-5
    assert 1 <= model.n_iter <= 25
    assert np.isfinite(model.deviance)


def test_predict_proba_is_a_probability_and_predict_thresholds():
    model = FittedLogit(coef=np.array([0.0, 1.0, -1.0]), converged=True, n_iter=1, deviance=0.0)
    x1 = np.array([0.0, 5.0, -5.0, 100.0])
    x2 = np.array([0.0, 0.0, 0.0, -100.0])
    probs = model.predict_proba(x1, x2)
    assert np.all((probs >= 0) & (probs <= 1))
    assert probs[0] == pytest.approx(0.5)
    assert model.predict(x1, x2).tolist() == [1, 1, 0, 1]


def test_iteration_bound_raises_non_convergence(large_sample):
    with pytest.raises(NonConvergenceError) as excinfo:
        fit_logistic(large_sample, max_iter=1)
    assert excinfo.value.n_iter == 1
    assert np.isfinite(excinfo.value.deviance)


def test_single_class_is_insufficient():
    df = pd.DataFrame({"X1": [0.1, 0.5, 1.0], "X2": [0.3, 0.2, 1.5], "Y": [0, 0, 0]})
    with pytest.raises(InsufficientDataError):
        fit_logistic(df)


def test_empty_dataset_is_rejected():
    df = pd.DataFrame({"X1": [], "X2": [], "Y": []})
    with pytest.raises(InvalidArgumentError):
        fit_logistic(df)
